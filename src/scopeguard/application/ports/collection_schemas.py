"""Collection schemas port."""

from typing import Protocol

from scopeguard.domain.entities import CollectionDescriptor


class CollectionSchemas(Protocol):
    """Port for collection metadata lookup."""

    def get(self, collection_name: str) -> CollectionDescriptor | None: ...
