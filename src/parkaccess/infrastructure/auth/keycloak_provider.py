"""Keycloak OIDC provider - resolves bearer tokens to the caller's user id."""

import logging
from dataclasses import dataclass

from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

logger = logging.getLogger(__name__)


@dataclass
class TokenIdentity:
    """Subject of an active access token."""

    user_id: str
    email: str | None
    username: str | None


class KeycloakProvider:
    """Keycloak OIDC - introspects access tokens.

    Only authentication happens here; user type and operator are looked up
    in the user store when the authorization context is built.
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

    def verify_token(self, token: str) -> TokenIdentity | None:
        """Introspect token; None when inactive or the provider rejects it."""
        try:
            token_info = self._keycloak.introspect(token)
        except KeycloakError as e:
            logger.warning("Token introspection failed: %s", e)
            return None
        if not token_info.get("active") or not token_info.get("sub"):
            return None
        return TokenIdentity(
            user_id=token_info["sub"],
            email=token_info.get("email"),
            username=token_info.get("preferred_username"),
        )
