"""Domain entities."""

from scopeguard.domain.entities.actor import Actor
from scopeguard.domain.entities.collection import COMPOSITE_ID_SEPARATOR, CollectionDescriptor
from scopeguard.domain.entities.condition_group import ConditionGroup
from scopeguard.domain.entities.custom_action_request import CustomActionRequest
from scopeguard.domain.entities.records_counter_params import RecordsCounterParams

__all__ = [
    "COMPOSITE_ID_SEPARATOR",
    "Actor",
    "CollectionDescriptor",
    "ConditionGroup",
    "CustomActionRequest",
    "RecordsCounterParams",
]
