"""Application ports - interfaces for external adapters."""

from scopeguard.application.ports.collection_schemas import CollectionSchemas
from scopeguard.application.ports.permission_directory import PermissionDirectory
from scopeguard.application.ports.records_counter import RecordsCounter
from scopeguard.application.ports.signed_parameters_verifier import SignedParametersVerifier

__all__ = [
    "CollectionSchemas",
    "PermissionDirectory",
    "RecordsCounter",
    "SignedParametersVerifier",
]
