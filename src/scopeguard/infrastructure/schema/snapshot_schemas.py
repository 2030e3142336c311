"""Collection schemas from the permission snapshot."""

from scopeguard.domain.entities import CollectionDescriptor
from scopeguard.infrastructure.permission.snapshot import PermissionSnapshot


class SnapshotCollectionSchemas:
    """Collection descriptors keyed by collection name."""

    def __init__(self, snapshot: PermissionSnapshot) -> None:
        self._descriptors = {
            s.name: CollectionDescriptor(
                name=s.name,
                id_field=s.id_field or "|".join(s.primary_keys),
                primary_keys=tuple(s.primary_keys),
                is_composite_primary=len(s.primary_keys) > 1,
                is_virtual=s.is_virtual,
            )
            for s in snapshot.schemas
        }

    def get(self, collection_name: str) -> CollectionDescriptor | None:
        return self._descriptors.get(collection_name)
