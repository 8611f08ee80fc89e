"""Auth middleware - resolves the bearer token to the calling user."""

from dataclasses import dataclass

import falcon.asgi


@dataclass
class RequestUser:
    """User from request context."""

    user_id: str
    email: str | None = None
    username: str | None = None


class AuthMiddleware:
    """Middleware that validates the bearer token and sets req.context.user.

    Requests without a valid token get ``req.context.user = None``; resources
    answer 401 for those. Health endpoints do not look at the user.
    """

    def __init__(self, keycloak_provider=None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Extract user from Authorization header."""
        req.context.user = None
        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer ") or not self._keycloak:
            return
        identity = self._keycloak.verify_token(auth[7:])
        if identity:
            req.context.user = RequestUser(
                user_id=identity.user_id,
                email=identity.email,
                username=identity.username,
            )
