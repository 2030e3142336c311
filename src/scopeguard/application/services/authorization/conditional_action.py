"""Conditional custom-action evaluation by record counts.

A condition covers a request when every record matching the request filter
also matches the condition, i.e. both counts are equal.
"""

import asyncio
import logging

from scopeguard.application.ports import RecordsCounter
from scopeguard.domain.entities import ConditionGroup, RecordsCounterParams
from scopeguard.domain.value_objects import FilterTree, conjunction

logger = logging.getLogger(__name__)


class ConditionalActionEvaluator:
    """Decides whether conditions cover the records targeted by a request."""

    def __init__(self, records_counter: RecordsCounter) -> None:
        self._counter = records_counter

    async def intersect_count(
        self,
        params: RecordsCounterParams,
        request_filter: FilterTree | None,
        condition: FilterTree | None,
    ) -> int:
        """Count records matching both the request filter and the condition."""
        count = await self._counter.count(params, conjunction(request_filter, condition))
        logger.debug("Intersect count on %s: %d", params.model.name, count)
        return count

    async def satisfies_condition(
        self,
        params: RecordsCounterParams,
        request_filter: FilterTree | None,
        condition: FilterTree | None,
    ) -> bool:
        """All-or-nothing: every targeted record must match ``condition``."""
        if condition is None:
            return True
        total = await self._counter.count(params, request_filter)
        matching = await self.intersect_count(params, request_filter, condition)
        return matching == total

    async def is_approval_authorized_across_groups(
        self,
        params: RecordsCounterParams,
        request_filter: FilterTree | None,
        groups: list[ConditionGroup],
    ) -> bool:
        """Every group's condition must cover the whole request."""
        authorized, _ = await self.approval_across_groups(params, request_filter, groups)
        return authorized

    async def approval_across_groups(
        self,
        params: RecordsCounterParams,
        request_filter: FilterTree | None,
        groups: list[ConditionGroup],
    ) -> tuple[bool, list[int | str]]:
        """Unanimous approval verdict and the covering role ids, from one pass of counts."""
        covered = await self._coverage(params, request_filter, groups)
        return bool(groups) and all(covered), _covering_role_ids(groups, covered)

    async def roles_covering(
        self,
        params: RecordsCounterParams,
        request_filter: FilterTree | None,
        groups: list[ConditionGroup],
    ) -> list[int | str]:
        """Role ids of the groups whose condition covers the whole request."""
        covered = await self._coverage(params, request_filter, groups)
        return _covering_role_ids(groups, covered)

    async def _coverage(
        self,
        params: RecordsCounterParams,
        request_filter: FilterTree | None,
        groups: list[ConditionGroup],
    ) -> list[bool]:
        conditional = [g for g in groups if g.condition is not None]
        if not conditional:
            return [True] * len(groups)

        total = await self._counter.count(params, request_filter)
        counts = await asyncio.gather(
            *(self.intersect_count(params, request_filter, g.condition) for g in conditional)
        )
        remaining = iter(counts)
        return [g.condition is None or next(remaining) == total for g in groups]


def _covering_role_ids(groups: list[ConditionGroup], covered: list[bool]) -> list[int | str]:
    return [role_id for group, ok in zip(groups, covered) if ok for role_id in group.role_ids]
