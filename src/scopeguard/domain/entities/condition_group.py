"""Condition group - roles sharing one condition."""

from dataclasses import dataclass

from scopeguard.domain.value_objects import FilterTree


@dataclass
class ConditionGroup:
    """Roles whose condition trees are structurally equal.

    ``condition`` is ``None`` for roles with no restriction.
    """

    role_ids: list[int | str]
    condition: FilterTree | None = None
