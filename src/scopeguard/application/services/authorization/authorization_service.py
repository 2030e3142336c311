"""Authorization service - one assertion per action type."""

import logging
from typing import Any

from scopeguard.application.ports import (
    PermissionDirectory,
    RecordsCounter,
    SignedParametersVerifier,
)
from scopeguard.application.services.authorization.condition_groups import (
    group_roles_by_condition,
)
from scopeguard.application.services.authorization.conditional_action import (
    ConditionalActionEvaluator,
)
from scopeguard.domain.entities import Actor, RecordsCounterParams
from scopeguard.domain.exceptions import (
    ApprovalNotAllowedError,
    BadRequestError,
    ChainedSQLQueryError,
    CustomActionRequiresApprovalError,
    CustomActionTriggerForbiddenError,
    EmptySQLQueryError,
    ForbiddenError,
    NonSelectSQLQueryError,
)
from scopeguard.domain.value_objects import (
    CollectionActionEvent,
    FilterTree,
    filter_tree_from_plain,
)

logger = logging.getLogger(__name__)

CHART_QUERY_ERROR_MESSAGES: dict[type[Exception], str] = {
    EmptySQLQueryError: "You cannot execute an empty SQL query.",
    ChainedSQLQueryError: "You cannot chain SQL queries.",
    NonSelectSQLQueryError: "Only SELECT queries are allowed.",
}


class AuthorizationService:
    """Asserts an actor's rights; each ``assert_can_*`` returns None or raises."""

    def __init__(
        self,
        permission_directory: PermissionDirectory,
        records_counter: RecordsCounter,
        signed_parameters_verifier: SignedParametersVerifier,
    ) -> None:
        self._directory = permission_directory
        self._verifier = signed_parameters_verifier
        self._evaluator = ConditionalActionEvaluator(records_counter)

    async def assert_can_browse(
        self, actor: Actor, collection_name: str, segment_query: str | None = None
    ) -> None:
        """Browse permission, plus the segment query permission when one is given."""
        await self._assert_can_on_collection(actor, collection_name, CollectionActionEvent.BROWSE)

        if segment_query:
            can_execute = await self._directory.can_execute_segment_query(
                user_id=actor.id,
                collection_name=collection_name,
                rendering_id=actor.rendering_id,
                segment_query=segment_query,
            )
            if not can_execute:
                logger.info(
                    "Actor %s denied segment query on %s", actor.id, collection_name
                )
                raise ForbiddenError()

    async def assert_can_read(self, actor: Actor, collection_name: str) -> None:
        await self._assert_can_on_collection(actor, collection_name, CollectionActionEvent.READ)

    async def assert_can_add(self, actor: Actor, collection_name: str) -> None:
        await self._assert_can_on_collection(actor, collection_name, CollectionActionEvent.ADD)

    async def assert_can_edit(self, actor: Actor, collection_name: str) -> None:
        await self._assert_can_on_collection(actor, collection_name, CollectionActionEvent.EDIT)

    async def assert_can_delete(self, actor: Actor, collection_name: str) -> None:
        await self._assert_can_on_collection(actor, collection_name, CollectionActionEvent.DELETE)

    async def assert_can_export(self, actor: Actor, collection_name: str) -> None:
        await self._assert_can_on_collection(actor, collection_name, CollectionActionEvent.EXPORT)

    async def assert_can_retrieve_chart(
        self, *, actor: Actor, chart_request: dict[str, Any]
    ) -> None:
        """Chart permission. SQL validation failures become ``BadRequestError``."""
        try:
            can_execute = await self._directory.can_execute_chart(
                user_id=actor.id,
                rendering_id=actor.rendering_id,
                chart_request=chart_request,
            )
        except (EmptySQLQueryError, ChainedSQLQueryError, NonSelectSQLQueryError) as e:
            raise BadRequestError(CHART_QUERY_ERROR_MESSAGES[type(e)]) from e

        if not can_execute:
            logger.info("Actor %s denied chart on rendering %s", actor.id, actor.rendering_id)
            raise ForbiddenError()

    async def assert_can_trigger_custom_action(
        self,
        *,
        actor: Actor,
        collection_name: str,
        custom_action_name: str,
        records_counter_params: RecordsCounterParams,
        request_filter: FilterTree | dict[str, Any] | None,
    ) -> None:
        """Trigger permission, trigger condition, then the approval requirement.

        Raises ``CustomActionRequiresApprovalError`` when the actor may trigger
        but the targeted records need an approval first.
        """
        request_filter = filter_tree_from_plain(request_filter)
        action = {
            "user_id": actor.id,
            "collection_name": collection_name,
            "custom_action_name": custom_action_name,
        }

        if not await self._directory.can_trigger_custom_action(**action):
            logger.info(
                "Actor %s cannot trigger %s on %s", actor.id, custom_action_name, collection_name
            )
            raise CustomActionTriggerForbiddenError()

        condition = await self._directory.get_conditional_trigger_condition(**action)
        if not await self._evaluator.satisfies_condition(
            records_counter_params, request_filter, condition
        ):
            logger.info(
                "Actor %s trigger condition on %s not met for %s",
                actor.id,
                collection_name,
                custom_action_name,
            )
            raise CustomActionTriggerForbiddenError()

        if not await self._directory.does_trigger_require_approval(**action):
            return

        requires_approval_condition = (
            await self._directory.get_conditional_requires_approval_condition(**action)
        )
        if await self._evaluator.satisfies_condition(
            records_counter_params, request_filter, requires_approval_condition
        ):
            groups = group_roles_by_condition(
                await self._directory.get_conditional_approve_conditions(
                    collection_name=collection_name, custom_action_name=custom_action_name
                )
            )
            approvers = await self._evaluator.roles_covering(
                records_counter_params, request_filter, groups
            )
            raise CustomActionRequiresApprovalError(approvers)

    async def assert_can_approve_custom_action(
        self,
        *,
        actor: Actor,
        collection_name: str,
        custom_action_name: str,
        records_counter_params: RecordsCounterParams,
        request_filter: FilterTree | dict[str, Any] | None,
        requester_id: int | str | None,
    ) -> None:
        """Approve permission for the actor, else every role condition must cover the request."""
        request_filter = filter_tree_from_plain(request_filter)
        can_approve = await self._directory.can_approve_custom_action(
            user_id=actor.id,
            collection_name=collection_name,
            custom_action_name=custom_action_name,
            requester_id=requester_id,
        )
        if can_approve:
            condition = await self._directory.get_conditional_approve_condition(
                user_id=actor.id,
                collection_name=collection_name,
                custom_action_name=custom_action_name,
            )
            if await self._evaluator.satisfies_condition(
                records_counter_params, request_filter, condition
            ):
                return

        conditions_by_role_id = await self._directory.get_conditional_approve_conditions(
            collection_name=collection_name, custom_action_name=custom_action_name
        )
        groups = group_roles_by_condition(conditions_by_role_id)
        authorized, approvers = await self._evaluator.approval_across_groups(
            records_counter_params, request_filter, groups
        )
        if authorized:
            return

        logger.info(
            "Actor %s cannot approve %s on %s", actor.id, custom_action_name, collection_name
        )
        raise ApprovalNotAllowedError(approvers)

    def verify_signed_action_parameters(self, signed_parameters: str) -> dict[str, Any]:
        """Decode signed approval parameters."""
        return self._verifier.verify(signed_parameters)

    async def _assert_can_on_collection(
        self, actor: Actor, collection_name: str, event: CollectionActionEvent
    ) -> None:
        allowed = await self._directory.can_on_collection(
            user_id=actor.id, collection_name=collection_name, event=event
        )
        if not allowed:
            logger.info("Actor %s cannot %s %s", actor.id, event.value, collection_name)
            raise ForbiddenError()
