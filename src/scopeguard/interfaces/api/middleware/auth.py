"""Auth middleware - extracts the actor from the JWT."""

import falcon.asgi


class AuthMiddleware:
    """Middleware that validates JWT and sets req.context.actor."""

    def __init__(self, keycloak_provider=None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Extract actor from Authorization header; None when missing or invalid."""
        req.context.actor = None
        auth = req.get_header("Authorization")
        if auth and auth.startswith("Bearer ") and self._keycloak:
            req.context.actor = self._keycloak.decode_token(auth[7:])
