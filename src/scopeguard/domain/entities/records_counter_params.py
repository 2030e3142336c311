"""Context handed to the records counter."""

from dataclasses import dataclass

from scopeguard.domain.entities.actor import Actor
from scopeguard.domain.entities.collection import CollectionDescriptor


@dataclass(frozen=True)
class RecordsCounterParams:
    """Actor, target collection and timezone for a count query."""

    actor: Actor
    model: CollectionDescriptor
    timezone: str = "UTC"
