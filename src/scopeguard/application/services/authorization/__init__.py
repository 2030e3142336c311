"""Authorization services."""

from scopeguard.application.services.authorization.authorization_service import (
    AuthorizationService,
)
from scopeguard.application.services.authorization.condition_groups import (
    group_roles_by_condition,
)
from scopeguard.application.services.authorization.conditional_action import (
    ConditionalActionEvaluator,
)
from scopeguard.application.services.authorization.scope_enforcer import (
    ScopeEnforcer,
    build_ids_filter,
    build_selection_filter,
)

__all__ = [
    "AuthorizationService",
    "ConditionalActionEvaluator",
    "ScopeEnforcer",
    "build_ids_filter",
    "build_selection_filter",
    "group_roles_by_condition",
]
