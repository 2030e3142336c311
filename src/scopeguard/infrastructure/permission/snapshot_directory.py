"""Permission directory backed by a read-only snapshot."""

import re
from typing import Any

from scopeguard.domain.value_objects import (
    CollectionActionEvent,
    FilterTree,
    filter_tree_from_plain,
)
from scopeguard.infrastructure.permission.chart_query_validator import validate_chart_query
from scopeguard.infrastructure.permission.snapshot import (
    CustomActionSnapshot,
    PermissionSnapshot,
    UserSnapshot,
)

_CURRENT_USER = re.compile(r"^\{\{currentUser\.(id|email|tags\.[^}]+)\}\}$")


def _normalize_chart(chart: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in chart.items() if v is not None}


class SnapshotPermissionDirectory:
    """Answers permission questions from a ``PermissionSnapshot``.

    Scope values of the form ``{{currentUser.id}}``, ``{{currentUser.email}}``
    or ``{{currentUser.tags.<name>}}`` are replaced with the user's data.
    """

    def __init__(self, snapshot: PermissionSnapshot) -> None:
        self._snapshot = snapshot

    def _user(self, user_id: int | str) -> UserSnapshot | None:
        return self._snapshot.users.get(str(user_id))

    def _role(self, user_id: int | str) -> str | None:
        user = self._user(user_id)
        return user.role_id if user else None

    def _action(self, collection_name: str, custom_action_name: str) -> CustomActionSnapshot:
        collection = self._snapshot.collections.get(collection_name)
        if collection is None:
            return CustomActionSnapshot()
        return collection.actions.get(custom_action_name) or CustomActionSnapshot()

    async def can_on_collection(
        self, *, user_id: int | str, collection_name: str, event: CollectionActionEvent
    ) -> bool:
        collection = self._snapshot.collections.get(collection_name)
        role = self._role(user_id)
        if collection is None or role is None:
            return False
        return role in collection.events.get(CollectionActionEvent(event), [])

    async def can_execute_segment_query(
        self,
        *,
        user_id: int | str,
        collection_name: str,
        rendering_id: int | str,
        segment_query: str,
    ) -> bool:
        if self._role(user_id) is None:
            return False
        rendering = self._snapshot.renderings.get(str(rendering_id))
        if rendering is None:
            return False
        allowed = rendering.segments.get(collection_name, [])
        return segment_query.strip() in (q.strip() for q in allowed)

    async def can_execute_chart(
        self, *, user_id: int | str, rendering_id: int | str, chart_request: dict[str, Any]
    ) -> bool:
        """Allowed when the chart is saved on the rendering. Raw SQL is validated first."""
        if "query" in chart_request:
            validate_chart_query(chart_request.get("query"))
        if self._role(user_id) is None:
            return False
        rendering = self._snapshot.renderings.get(str(rendering_id))
        if rendering is None:
            return False
        requested = _normalize_chart(chart_request)
        return any(_normalize_chart(chart) == requested for chart in rendering.charts)

    async def can_trigger_custom_action(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> bool:
        role = self._role(user_id)
        return role is not None and role in self._action(
            collection_name, custom_action_name
        ).trigger_roles

    async def does_trigger_require_approval(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> bool:
        role = self._role(user_id)
        return role is not None and role in self._action(
            collection_name, custom_action_name
        ).requires_approval_roles

    async def can_approve_custom_action(
        self,
        *,
        user_id: int | str,
        collection_name: str,
        custom_action_name: str,
        requester_id: int | str | None,
    ) -> bool:
        """Approving one's own request needs a self-approve role."""
        role = self._role(user_id)
        if role is None:
            return False
        action = self._action(collection_name, custom_action_name)
        if requester_id is not None and str(requester_id) == str(user_id):
            return role in action.self_approve_roles
        return role in action.approve_roles

    async def get_conditional_trigger_condition(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> FilterTree | None:
        action = self._action(collection_name, custom_action_name)
        return filter_tree_from_plain(action.trigger_conditions.get(self._role(user_id) or ""))

    async def get_conditional_requires_approval_condition(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> FilterTree | None:
        action = self._action(collection_name, custom_action_name)
        return filter_tree_from_plain(
            action.requires_approval_conditions.get(self._role(user_id) or "")
        )

    async def get_conditional_approve_condition(
        self, *, user_id: int | str, collection_name: str, custom_action_name: str
    ) -> FilterTree | None:
        action = self._action(collection_name, custom_action_name)
        return filter_tree_from_plain(action.approve_conditions.get(self._role(user_id) or ""))

    async def get_conditional_approve_conditions(
        self, *, collection_name: str, custom_action_name: str
    ) -> dict[int | str, FilterTree | None]:
        """Condition of every role allowed to approve; ``None`` when unrestricted."""
        action = self._action(collection_name, custom_action_name)
        return {
            role_id: filter_tree_from_plain(action.approve_conditions.get(role_id))
            for role_id in action.approve_roles
        }

    async def get_scope(
        self, *, user_id: int | str, collection_name: str, rendering_id: int | str
    ) -> FilterTree | None:
        rendering = self._snapshot.renderings.get(str(rendering_id))
        if rendering is None or collection_name not in rendering.scopes:
            return None
        user = self._user(user_id)
        return filter_tree_from_plain(
            self._render_user_values(rendering.scopes[collection_name], user_id, user)
        )

    def _render_user_values(
        self, node: Any, user_id: int | str, user: UserSnapshot | None
    ) -> Any:
        if isinstance(node, dict):
            return {k: self._render_user_values(v, user_id, user) for k, v in node.items()}
        if isinstance(node, list):
            return [self._render_user_values(v, user_id, user) for v in node]
        if not isinstance(node, str):
            return node

        match = _CURRENT_USER.match(node)
        if not match:
            return node
        key = match.group(1)
        if key == "id":
            return user_id
        if user is None:
            return None
        if key == "email":
            return user.email
        return user.tags.get(key.removeprefix("tags."))
