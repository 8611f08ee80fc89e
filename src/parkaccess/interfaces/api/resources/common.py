"""Helpers shared by API resources."""

import logging

import falcon.asgi

from parkaccess.application.services.authorization_service import AuthorizationService
from parkaccess.domain.entities import AuthorizationContext
from parkaccess.domain.exceptions import NotFound, ValidationError

logger = logging.getLogger(__name__)


async def caller_context(
    authorization: AuthorizationService,
    req: falcon.asgi.Request,
    resp: falcon.asgi.Response,
) -> AuthorizationContext | None:
    """Authorization context of the caller; sets 401/403 and returns None if unusable."""
    user = getattr(req.context, "user", None)
    if not user:
        resp.status = falcon.HTTP_401
        resp.media = {"error": "Unauthorized"}
        return None
    try:
        return await authorization.create_authorization_context(user.user_id)
    except (NotFound, ValidationError) as e:
        logger.info("Rejecting caller %s: %s", user.user_id, e)
        resp.status = falcon.HTTP_403
        resp.media = {"error": "Permission denied"}
        return None


def deny(resp: falcon.asgi.Response) -> None:
    resp.status = falcon.HTTP_403
    resp.media = {"error": "Permission denied"}


def bad_request(resp: falcon.asgi.Response, message: str, errors: list[str] | None = None) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": message}
    if errors:
        resp.media["errors"] = errors
