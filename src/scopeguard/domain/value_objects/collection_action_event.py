"""Collection-level action events."""

from enum import StrEnum


class CollectionActionEvent(StrEnum):
    """Coarse actions an actor can perform on a collection."""

    BROWSE = "browse"
    READ = "read"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    EXPORT = "export"
