"""Raw SQL chart query validation."""

import re

from scopeguard.domain.exceptions import (
    ChainedSQLQueryError,
    EmptySQLQueryError,
    NonSelectSQLQueryError,
)

_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")
_SELECT = re.compile(r"^select\s.*\sfrom\s", re.IGNORECASE | re.DOTALL)


def validate_chart_query(query: str | None) -> None:
    """Raise if the query is empty, chains statements or is not a SELECT."""
    if not query or not query.strip():
        raise EmptySQLQueryError("Chart query is empty")

    statement = query.strip().rstrip(";").strip()
    if ";" in _STRING_LITERAL.sub("''", statement):
        raise ChainedSQLQueryError("Chart query chains several statements")

    if not _SELECT.match(statement):
        raise NonSelectSQLQueryError("Chart query is not a SELECT")
