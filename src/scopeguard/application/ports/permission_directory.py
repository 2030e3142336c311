"""Permission directory port - role permissions and conditions."""

from typing import Any, Protocol

from scopeguard.domain.value_objects import CollectionActionEvent, FilterTree


class PermissionDirectory(Protocol):
    """Port for looking up permissions and role conditions.

    Condition lookups return ``None`` when no condition restricts the action.
    ``can_execute_chart`` may raise a ``ChartQueryError`` for raw SQL charts.
    """

    async def can_on_collection(
        self, *, user_id: int | str, collection_name: str, event: CollectionActionEvent
    ) -> bool: ...

    async def can_execute_segment_query(
        self,
        *,
        user_id: int | str,
        collection_name: str,
        rendering_id: int | str,
        segment_query: str,
    ) -> bool: ...

    async def can_execute_chart(
        self, *, user_id: int | str, rendering_id: int | str, chart_request: dict[str, Any]
    ) -> bool: ...

    async def can_trigger_custom_action(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> bool: ...

    async def does_trigger_require_approval(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> bool: ...

    async def can_approve_custom_action(
        self,
        *,
        user_id: int | str,
        collection_name: str,
        custom_action_name: str,
        requester_id: int | str | None,
    ) -> bool: ...

    async def get_conditional_trigger_condition(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> FilterTree | None: ...

    async def get_conditional_requires_approval_condition(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> FilterTree | None: ...

    async def get_conditional_approve_condition(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> FilterTree | None: ...

    async def get_conditional_approve_conditions(
        self, *, collection_name: str, custom_action_name: str
    ) -> dict[int | str, FilterTree | None]: ...

    async def get_scope(
        self, *, user_id: int | str, collection_name: str, rendering_id: int | str
    ) -> FilterTree | None: ...
