"""Scope enforcement for explicitly selected record ids."""

import logging

from scopeguard.application.dto.custom_action_dto import RecordSelection
from scopeguard.application.ports import RecordsCounter
from scopeguard.domain.entities import CollectionDescriptor, RecordsCounterParams
from scopeguard.domain.exceptions import RecordsOutOfScopeError
from scopeguard.domain.value_objects import (
    Aggregator,
    ConditionBranch,
    ConditionLeaf,
    FilterTree,
    conjunction,
    disjunction,
)

logger = logging.getLogger(__name__)


def build_ids_filter(collection: CollectionDescriptor, ids: list[str]) -> FilterTree | None:
    """Filter matching exactly the given record ids.

    Composite ids are split on ``|`` and zipped with the primary keys.
    """
    if not ids:
        return None
    if not collection.is_composite_primary:
        return ConditionLeaf(field=collection.primary_keys[0], operator="in", value=list(ids))

    return disjunction(
        ConditionBranch(
            aggregator=Aggregator.AND,
            conditions=tuple(
                ConditionLeaf(field=key, operator="equal", value=part)
                for key, part in zip(collection.primary_keys, collection.split_id(record_id))
            ),
        )
        for record_id in ids
    )


def build_selection_filter(
    collection: CollectionDescriptor, selection: RecordSelection
) -> FilterTree | None:
    """Filter for the records a selection targets, before any scope is applied."""
    if not selection.all_records:
        return build_ids_filter(collection, selection.ids)
    excluded = build_ids_filter(collection, selection.all_records_ids_excluded)
    if excluded is None:
        return None
    if not collection.is_composite_primary:
        return ConditionLeaf(
            field=collection.primary_keys[0],
            operator="not_in",
            value=list(selection.all_records_ids_excluded),
        )
    return _negate(excluded)


def _negate(tree: FilterTree) -> FilterTree:
    if isinstance(tree, ConditionLeaf):
        negated = {"equal": "not_equal", "in": "not_in"}[tree.operator]
        return ConditionLeaf(field=tree.field, operator=negated, value=tree.value)
    aggregator = Aggregator.AND if tree.aggregator == Aggregator.OR else Aggregator.OR
    return ConditionBranch(
        aggregator=aggregator, conditions=tuple(_negate(c) for c in tree.conditions)
    )


class ScopeEnforcer:
    """Checks that selected record ids are all visible under the actor's scope."""

    def __init__(self, records_counter: RecordsCounter) -> None:
        self._counter = records_counter

    async def ensure_record_ids_in_scope(
        self,
        params: RecordsCounterParams,
        selection: RecordSelection,
        scope_filter: FilterTree | None,
    ) -> None:
        """Raise ``RecordsOutOfScopeError`` unless every selected id is in scope.

        ``params.model`` is the target collection. Selecting all records skips
        the check; the scope is merged into the executing query instead.
        """
        collection = params.model
        if collection.is_virtual or selection.all_records:
            return

        ids = list(dict.fromkeys(selection.ids))
        if not ids:
            return

        count = await self._counter.count(
            params, conjunction(build_ids_filter(collection, ids), scope_filter)
        )
        if count != len(ids):
            logger.info(
                "Actor %s selected %d records on %s, %d in scope",
                params.actor.id,
                len(ids),
                collection.name,
                count,
            )
            raise RecordsOutOfScopeError()
