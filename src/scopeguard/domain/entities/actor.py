"""Actor entity - authenticated caller."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Actor:
    """Human or service account performing the request."""

    id: int | str
    rendering_id: int | str
    email: str | None = None
    tags: dict[str, Any] = field(default_factory=dict, hash=False)
