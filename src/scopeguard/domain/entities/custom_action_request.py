"""Custom action request entity."""

from dataclasses import dataclass

from scopeguard.domain.entities.actor import Actor
from scopeguard.domain.value_objects import FilterTree


@dataclass(frozen=True)
class CustomActionRequest:
    """Custom action invocation on a set of records.

    ``requester_id`` is only set for approvals and names who asked for the
    execution, not the approving actor.
    """

    collection_name: str
    custom_action_name: str
    actor: Actor
    request_filter: FilterTree | None
    requester_id: int | str | None = None
