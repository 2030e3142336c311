"""Custom action DTOs."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class RecordSelection:
    """Records explicitly targeted by a request."""

    ids: list[str] = field(default_factory=list)
    all_records: bool = False
    all_records_ids_excluded: list[str] = field(default_factory=list)


class CustomActionPayload(BaseModel):
    """Attributes of a custom action request body."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    collection_name: str | None = None
    ids: list[str] = Field(default_factory=list)
    all_records: bool = False
    all_records_ids_excluded: list[str] = Field(default_factory=list)
    requester_id: int | str | None = None
    signed_approval_request: str | None = None
    values: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_body(cls, body: dict[str, Any] | None) -> "CustomActionPayload":
        """Read attributes from ``{"data": {"attributes": {...}}}``."""
        attributes = ((body or {}).get("data") or {}).get("attributes") or {}
        return cls.model_validate(attributes)

    def selection(self) -> RecordSelection:
        return RecordSelection(
            ids=[str(i) for i in self.ids],
            all_records=self.all_records,
            all_records_ids_excluded=[str(i) for i in self.all_records_ids_excluded],
        )
