"""Application entry point and composition root."""

from dataclasses import dataclass

from falcon.asgi import App
from psycopg_pool import AsyncConnectionPool

from scopeguard import __version__
from scopeguard.application.services.authorization import AuthorizationService, ScopeEnforcer
from scopeguard.config import Settings, get_settings
from scopeguard.infrastructure.auth.keycloak_provider import KeycloakProvider
from scopeguard.infrastructure.permission.snapshot import PermissionSnapshot
from scopeguard.infrastructure.permission.snapshot_directory import SnapshotPermissionDirectory
from scopeguard.infrastructure.persistence.postgres.connection import create_pool
from scopeguard.infrastructure.persistence.postgres.records_counter import (
    PostgresRecordsCounter,
)
from scopeguard.infrastructure.schema.snapshot_schemas import SnapshotCollectionSchemas
from scopeguard.infrastructure.signing.jose_verifier import JoseSignedParametersVerifier
from scopeguard.interfaces.api.app import create_app
from scopeguard.interfaces.api.middleware.auth import AuthMiddleware
from scopeguard.interfaces.api.middleware.lifespan import LifespanMiddleware
from scopeguard.interfaces.api.permissions import CollectionPermissions
from scopeguard.interfaces.api.resources.health import HealthResource
from scopeguard.log_config import configure_logging


def main() -> None:
    """CLI entry point."""
    print(f"ScopeGuard v{__version__}")


@dataclass
class Services:
    """Wired services shared by every request."""

    pool: AsyncConnectionPool
    authorization: AuthorizationService
    scope_enforcer: ScopeEnforcer
    directory: SnapshotPermissionDirectory
    schemas: SnapshotCollectionSchemas

    def collection_permissions(self, collection_name: str) -> CollectionPermissions:
        """Falcon hooks for one collection."""
        return CollectionPermissions(
            collection_name,
            authorization=self.authorization,
            scope_enforcer=self.scope_enforcer,
            schemas=self.schemas,
            permission_directory=self.directory,
        )


def build_services(settings: Settings) -> Services:
    """Wire adapters into the authorization services."""
    pool = create_pool(settings.database_url)
    counter = PostgresRecordsCounter(pool)
    snapshot = PermissionSnapshot.from_file(settings.permissions_snapshot_path)
    directory = SnapshotPermissionDirectory(snapshot)
    verifier = JoseSignedParametersVerifier(
        secret=settings.signing_secret, algorithm=settings.signing_algorithm
    )
    return Services(
        pool=pool,
        authorization=AuthorizationService(
            permission_directory=directory,
            records_counter=counter,
            signed_parameters_verifier=verifier,
        ),
        scope_enforcer=ScopeEnforcer(counter),
        directory=directory,
        schemas=SnapshotCollectionSchemas(snapshot),
    )


def create_scopeguard_app(services: Services | None = None) -> App:
    """Composition root - build Falcon app with all dependencies.

    Host resources decorate their responders with
    ``services.collection_permissions(name)`` hooks; the app itself only
    serves health routes.
    """
    settings = get_settings()
    configure_logging(settings)
    services = services or build_services(settings)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )

    return create_app(
        HealthResource(services.pool),
        middleware=[
            LifespanMiddleware(services.pool),
            AuthMiddleware(keycloak),
        ],
    )


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    uvicorn.run(create_scopeguard_app(), host="0.0.0.0", port=8000)
