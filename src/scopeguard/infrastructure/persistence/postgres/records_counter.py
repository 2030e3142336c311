"""PostgreSQL records counter - COUNT(*) over a filter tree."""

import logging
import re

from psycopg_pool import AsyncConnectionPool

from scopeguard.domain.entities import RecordsCounterParams
from scopeguard.domain.exceptions import ValidationError
from scopeguard.domain.value_objects import Aggregator, ConditionLeaf, FilterTree

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COMPARISONS = {
    "equal": "=",
    "not_equal": "<>",
    "less_than": "<",
    "greater_than": ">",
    "less_than_or_equal": "<=",
    "greater_than_or_equal": ">=",
}

_PATTERNS = {
    "contains": ("LIKE", "%{}%"),
    "not_contains": ("NOT LIKE", "%{}%"),
    "i_contains": ("ILIKE", "%{}%"),
    "starts_with": ("LIKE", "{}%"),
    "ends_with": ("LIKE", "%{}"),
}


def quote_identifier(name: str) -> str:
    """Double-quote a column or table name after validating it."""
    if not _IDENTIFIER.match(name):
        raise ValidationError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


def _escape_like(value: object) -> str:
    return str(value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _build_leaf(leaf: ConditionLeaf) -> tuple[str, list[object]]:
    column = quote_identifier(leaf.field)
    op = leaf.operator
    if op in _COMPARISONS:
        if leaf.value is None:
            null_check = "IS NULL" if op == "equal" else "IS NOT NULL"
            return f"{column} {null_check}", []
        return f"{column} {_COMPARISONS[op]} %s", [leaf.value]
    if op in ("in", "not_in"):
        values = list(leaf.value) if isinstance(leaf.value, tuple) else [leaf.value]
        if not values:
            return ("FALSE" if op == "in" else "TRUE"), []
        if op == "in":
            return f"{column} = ANY(%s)", [values]
        return f"NOT ({column} = ANY(%s))", [values]
    if op == "present":
        return f"{column} IS NOT NULL", []
    if op == "blank":
        return f"{column} IS NULL", []
    if op in _PATTERNS:
        sql_op, template = _PATTERNS[op]
        return f"{column}::text {sql_op} %s", [template.format(_escape_like(leaf.value))]
    raise ValidationError(f"Unsupported operator: {op}")


def build_filter_clause(tree: FilterTree | None) -> tuple[str, list[object]]:
    """Build a SQL boolean expression and its params. Returns (sql, params)."""
    if tree is None:
        return "TRUE", []
    if isinstance(tree, ConditionLeaf):
        return _build_leaf(tree)

    if not tree.conditions:
        return ("TRUE" if tree.aggregator == Aggregator.AND else "FALSE"), []
    parts: list[str] = []
    params: list[object] = []
    for child in tree.conditions:
        clause, child_params = build_filter_clause(child)
        parts.append(f"({clause})")
        params.extend(child_params)
    joiner = " AND " if tree.aggregator == Aggregator.AND else " OR "
    return joiner.join(parts), params


class PostgresRecordsCounter:
    """Counts rows of the collection's table matching a filter tree."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def count(self, params: RecordsCounterParams, filter_tree: FilterTree | None) -> int:
        """Count records in ``params.model`` matching ``filter_tree``."""
        table = quote_identifier(params.model.name)
        clause, values = build_filter_clause(filter_tree)
        async with self._pool.connection() as conn:
            async with conn.transaction():
                await conn.execute(
                    "SELECT set_config('TimeZone', %s, true)", (params.timezone,)
                )
                cur = await conn.execute(
                    f"SELECT COUNT(*) FROM {table} WHERE {clause}", values
                )
                row = await cur.fetchone()
        count = int(row[0]) if row else 0
        logger.debug("Counted %d records in %s", count, params.model.name)
        return count
