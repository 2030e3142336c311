"""Collection descriptor - schema metadata needed for scope checks."""

from dataclasses import dataclass

from scopeguard.domain.exceptions import ValidationError

COMPOSITE_ID_SEPARATOR = "|"


@dataclass(frozen=True)
class CollectionDescriptor:
    """Collection schema metadata: id field, primary keys, virtual flag."""

    name: str
    id_field: str
    primary_keys: tuple[str, ...]
    is_composite_primary: bool = False
    is_virtual: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "primary_keys", tuple(self.primary_keys))
        if not self.primary_keys:
            raise ValidationError(f"Collection {self.name} has no primary key")
        if self.is_composite_primary != (len(self.primary_keys) > 1):
            raise ValidationError(
                f"Collection {self.name}: composite flag does not match primary keys"
            )

    def split_id(self, record_id: str) -> tuple[str, ...]:
        """Split a record id into its primary-key parts, in declared key order."""
        if not self.is_composite_primary:
            return (record_id,)
        parts = tuple(str(record_id).split(COMPOSITE_ID_SEPARATOR))
        if len(parts) != len(self.primary_keys):
            raise ValidationError(
                f"Record id {record_id!r} does not match primary keys {list(self.primary_keys)}"
            )
        return parts
