"""Group roles sharing a structurally equal condition."""

from collections.abc import Mapping

from scopeguard.domain.entities import ConditionGroup
from scopeguard.domain.value_objects import FilterTree, filter_tree_from_plain


def group_roles_by_condition(
    conditions_by_role_id: Mapping[int | str, FilterTree | dict | None],
) -> list[ConditionGroup]:
    """Merge roles with equal condition trees into one group each.

    Groups keep the order in which their condition first appears. Roles with
    no condition share the single unconditional group.
    """
    groups: dict[FilterTree | None, ConditionGroup] = {}
    for role_id, condition in conditions_by_role_id.items():
        tree = filter_tree_from_plain(condition)
        group = groups.get(tree)
        if group is None:
            groups[tree] = ConditionGroup(role_ids=[role_id], condition=tree)
        else:
            group.role_ids.append(role_id)
    return list(groups.values())
