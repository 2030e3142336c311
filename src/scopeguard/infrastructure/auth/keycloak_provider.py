"""Keycloak OIDC provider for JWT validation."""

from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

from scopeguard.domain.entities import Actor


class KeycloakProvider:
    """Keycloak OIDC - validates JWT and builds the actor.

    The rendering id and tags come from the ``rendering_id`` and ``tags``
    token claims.
    """

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
    ) -> None:
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )

    def decode_token(self, token: str) -> Actor | None:
        """Introspect JWT, return the actor or None when inactive/invalid."""
        try:
            token_info = self._keycloak.introspect(token)
        except KeycloakError:
            return None
        if not token_info.get("active") or "rendering_id" not in token_info:
            return None
        return Actor(
            id=token_info.get("sub", ""),
            rendering_id=token_info["rendering_id"],
            email=token_info.get("email"),
            tags=token_info.get("tags") or {},
        )
