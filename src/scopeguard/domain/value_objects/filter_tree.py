"""Filter tree - boolean expression over record fields.

Leaves compare one field against a value, branches combine children with
``and``/``or``. Trees are immutable and compare structurally, so two trees
built from equal plain objects are ``==`` and hash the same. Children order
is significant.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Union

from scopeguard.domain.exceptions import ValidationError


class Aggregator(StrEnum):
    """Boolean combinator of a branch."""

    AND = "and"
    OR = "or"


class _FrozenMapping(tuple):
    """Mapping value frozen into ``(key, value)`` pairs."""


def _freeze(value: Any) -> Any:
    if isinstance(value, _FrozenMapping):
        return value
    if isinstance(value, Mapping):
        return _FrozenMapping((k, _freeze(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, _FrozenMapping):
        return {k: _thaw(v) for k, v in value}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


def _typed(value: Any) -> Any:
    """Comparison key telling apart values Python holds equal, like ``True``, ``1`` and ``1.0``."""
    if isinstance(value, _FrozenMapping):
        return (_FrozenMapping, tuple((_typed(k), _typed(v)) for k, v in value))
    if isinstance(value, tuple):
        return (tuple, tuple(_typed(v) for v in value))
    return (type(value), value)


@dataclass(frozen=True, eq=False)
class ConditionLeaf:
    """Single ``field operator value`` comparison.

    Equality is type-strict on the value: ``equal true`` and ``equal 1`` are
    different conditions.
    """

    field: str
    operator: str
    value: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _freeze(self.value))

    def _key(self) -> tuple[Any, ...]:
        return (self.field, self.operator, _typed(self.value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConditionLeaf):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def to_plain(self) -> dict[str, Any]:
        return {"field": self.field, "operator": self.operator, "value": _thaw(self.value)}


@dataclass(frozen=True)
class ConditionBranch:
    """Children combined with an aggregator."""

    aggregator: Aggregator
    conditions: tuple["FilterTree", ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "aggregator", Aggregator(self.aggregator))
        object.__setattr__(self, "conditions", tuple(self.conditions))

    def to_plain(self) -> dict[str, Any]:
        return {
            "aggregator": self.aggregator.value,
            "conditions": [c.to_plain() for c in self.conditions],
        }


FilterTree = Union[ConditionLeaf, ConditionBranch]


def filter_tree_from_plain(obj: Mapping[str, Any] | None) -> FilterTree | None:
    """Parse the plain wire form of a filter tree. ``None`` stays ``None``."""
    if obj is None:
        return None
    if isinstance(obj, (ConditionLeaf, ConditionBranch)):
        return obj
    if not isinstance(obj, Mapping):
        raise ValidationError(f"Filter tree must be an object, got {type(obj).__name__}")

    if "aggregator" in obj:
        children = obj.get("conditions")
        if not isinstance(children, list):
            raise ValidationError("Filter branch requires a 'conditions' list")
        try:
            aggregator = Aggregator(str(obj["aggregator"]).lower())
        except ValueError as e:
            raise ValidationError(f"Unknown aggregator: {obj['aggregator']}") from e
        return ConditionBranch(
            aggregator=aggregator,
            conditions=tuple(filter_tree_from_plain(c) for c in children),
        )

    field = obj.get("field")
    operator = obj.get("operator")
    if not isinstance(field, str) or not field or not isinstance(operator, str) or not operator:
        raise ValidationError("Filter leaf requires 'field' and 'operator'")
    return ConditionLeaf(field=field, operator=operator.lower(), value=obj.get("value"))


def conjunction(*trees: FilterTree | None) -> FilterTree | None:
    """AND the given trees together, ignoring ``None`` operands."""
    present = [t for t in trees if t is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return ConditionBranch(aggregator=Aggregator.AND, conditions=tuple(present))


def disjunction(trees: Iterable[FilterTree]) -> FilterTree | None:
    """OR the given trees together."""
    present = list(trees)
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return ConditionBranch(aggregator=Aggregator.OR, conditions=tuple(present))
