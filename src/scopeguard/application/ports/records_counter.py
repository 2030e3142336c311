"""Records counter port - counts records matching a filter."""

from typing import Protocol

from scopeguard.domain.entities import RecordsCounterParams
from scopeguard.domain.value_objects import FilterTree


class RecordsCounter(Protocol):
    """Port for counting records of a collection. ``None`` filter counts everything."""

    async def count(self, params: RecordsCounterParams, filter_tree: FilterTree | None) -> int: ...
