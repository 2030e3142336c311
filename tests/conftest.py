"""Pytest fixtures for ScopeGuard tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from scopeguard.domain.entities import Actor, CollectionDescriptor, RecordsCounterParams
from scopeguard.domain.value_objects import ConditionLeaf, FilterTree


# --- In-memory records counter ---


def matches(row: dict[str, Any], tree: FilterTree | None) -> bool:
    """Evaluate a filter tree against one row. Ids compare as strings."""
    if tree is None:
        return True
    if not isinstance(tree, ConditionLeaf):
        results = [matches(row, c) for c in tree.conditions]
        return all(results) if tree.aggregator == "and" else any(results)

    value = row.get(tree.field)
    op = tree.operator
    if op == "equal":
        return str(value) == str(tree.value)
    if op == "not_equal":
        return str(value) != str(tree.value)
    if op == "in":
        return str(value) in {str(v) for v in tree.value}
    if op == "not_in":
        return str(value) not in {str(v) for v in tree.value}
    if op == "greater_than":
        return value is not None and value > tree.value
    if op == "less_than":
        return value is not None and value < tree.value
    if op == "present":
        return value is not None
    if op == "blank":
        return value is None
    raise AssertionError(f"Unexpected operator in test: {op}")


class InMemoryRecordsCounter:
    """Counts rows of in-memory tables; records each filter it receives."""

    def __init__(self, rows_by_collection: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._rows = rows_by_collection or {}
        self.calls: list[FilterTree | None] = []

    def add_rows(self, collection_name: str, rows: list[dict[str, Any]]) -> None:
        """Helper to seed rows for tests."""
        self._rows.setdefault(collection_name, []).extend(rows)

    async def count(self, params: RecordsCounterParams, filter_tree: FilterTree | None) -> int:
        self.calls.append(filter_tree)
        return sum(1 for row in self._rows.get(params.model.name, []) if matches(row, filter_tree))


# --- Fixtures ---


@pytest.fixture
def actor() -> Actor:
    """Actor with id 16 on rendering 42."""
    return Actor(id=16, rendering_id=42, email="user@email.com", tags={"team": "ops"})


@pytest.fixture
def books() -> CollectionDescriptor:
    """Collection with a single primary key."""
    return CollectionDescriptor(name="books", id_field="id", primary_keys=("id",))


@pytest.fixture
def book_authors() -> CollectionDescriptor:
    """Collection with a composite primary key."""
    return CollectionDescriptor(
        name="book_authors",
        id_field="bookId|authorId",
        primary_keys=("bookId", "authorId"),
        is_composite_primary=True,
    )


@pytest.fixture
def records_counter() -> InMemoryRecordsCounter:
    """Counter seeded with five books and four book/author links."""
    return InMemoryRecordsCounter(
        {
            "books": [
                {"id": 1, "title": "Dune", "price": 10, "genre": "scifi"},
                {"id": 2, "title": "Emma", "price": 25, "genre": "classic"},
                {"id": 3, "title": "Solaris", "price": 40, "genre": "scifi"},
                {"id": 4, "title": "Ulysses", "price": 55, "genre": "classic"},
                {"id": 5, "title": "Hyperion", "price": 15, "genre": "scifi"},
            ],
            "book_authors": [
                {"bookId": 1, "authorId": 1},
                {"bookId": 2, "authorId": 1},
                {"bookId": 3, "authorId": 1},
                {"bookId": 1, "authorId": 2},
            ],
        }
    )


@pytest.fixture
def books_params(actor: Actor, books: CollectionDescriptor) -> RecordsCounterParams:
    return RecordsCounterParams(actor=actor, model=books, timezone="Europe/Paris")


@pytest.fixture
def mock_permission_directory():
    """AsyncMock for PermissionDirectory - allows everything unconditionally by default."""
    mock = AsyncMock()
    mock.can_on_collection.return_value = True
    mock.can_execute_segment_query.return_value = True
    mock.can_execute_chart.return_value = True
    mock.can_trigger_custom_action.return_value = True
    mock.does_trigger_require_approval.return_value = False
    mock.can_approve_custom_action.return_value = True
    mock.get_conditional_trigger_condition.return_value = None
    mock.get_conditional_requires_approval_condition.return_value = None
    mock.get_conditional_approve_condition.return_value = None
    mock.get_conditional_approve_conditions.return_value = {}
    mock.get_scope.return_value = None
    return mock


@pytest.fixture
def mock_verifier():
    """Mock SignedParametersVerifier returning a fixed payload."""
    from unittest.mock import Mock

    mock = Mock()
    mock.verify.return_value = {"foo": "bar"}
    return mock
