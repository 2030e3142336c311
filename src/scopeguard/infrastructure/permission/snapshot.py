"""Permission snapshot - read-only roles, permissions and renderings."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from scopeguard.domain.value_objects import CollectionActionEvent


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)


class UserSnapshot(_SnapshotModel):
    """User account and its role."""

    role_id: str
    email: str | None = None
    tags: dict[str, Any] = Field(default_factory=dict)


class CustomActionSnapshot(_SnapshotModel):
    """Roles and role conditions for one custom action."""

    trigger_roles: list[str] = Field(default_factory=list)
    approve_roles: list[str] = Field(default_factory=list)
    self_approve_roles: list[str] = Field(default_factory=list)
    requires_approval_roles: list[str] = Field(default_factory=list)
    trigger_conditions: dict[str, dict[str, Any] | None] = Field(default_factory=dict)
    approve_conditions: dict[str, dict[str, Any] | None] = Field(default_factory=dict)
    requires_approval_conditions: dict[str, dict[str, Any] | None] = Field(default_factory=dict)


class CollectionPermissionsSnapshot(_SnapshotModel):
    """Roles allowed per collection event, plus custom actions."""

    events: dict[CollectionActionEvent, list[str]] = Field(default_factory=dict)
    actions: dict[str, CustomActionSnapshot] = Field(default_factory=dict)


class RenderingSnapshot(_SnapshotModel):
    """UI rendering: allowed segments and charts, row scopes."""

    segments: dict[str, list[str]] = Field(default_factory=dict)
    charts: list[dict[str, Any]] = Field(default_factory=list)
    scopes: dict[str, dict[str, Any]] = Field(default_factory=dict)


class CollectionSchemaSnapshot(_SnapshotModel):
    """Collection schema metadata."""

    name: str
    id_field: str | None = None
    primary_keys: list[str]
    is_virtual: bool = False


class PermissionSnapshot(_SnapshotModel):
    """Whole permission snapshot, loaded once and never mutated."""

    users: dict[str, UserSnapshot] = Field(default_factory=dict)
    collections: dict[str, CollectionPermissionsSnapshot] = Field(default_factory=dict)
    renderings: dict[str, RenderingSnapshot] = Field(default_factory=dict)
    schemas: list[CollectionSchemaSnapshot] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: str | Path) -> "PermissionSnapshot":
        """Load snapshot from a JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
