"""Domain value objects."""

from scopeguard.domain.value_objects.collection_action_event import CollectionActionEvent
from scopeguard.domain.value_objects.filter_tree import (
    Aggregator,
    ConditionBranch,
    ConditionLeaf,
    FilterTree,
    conjunction,
    disjunction,
    filter_tree_from_plain,
)

__all__ = [
    "Aggregator",
    "CollectionActionEvent",
    "ConditionBranch",
    "ConditionLeaf",
    "FilterTree",
    "conjunction",
    "disjunction",
    "filter_tree_from_plain",
]
