"""Falcon ASGI application."""

import logging
from collections.abc import Sequence

import falcon
import falcon.asgi
from falcon.asgi import App

from parkaccess.application.services.authorization_service import AuthorizationService
from parkaccess.application.services.user_group_manager import UserGroupManager
from parkaccess.domain.exceptions import NotFound, PermissionDenied
from parkaccess.interfaces.api.resources.authorization import (
    AuthorizationCheckResource,
    AvailablePermissionsResource,
    RLSConditionResource,
    UserPermissionsResource,
)
from parkaccess.interfaces.api.resources.health import HealthResource
from parkaccess.interfaces.api.resources.user_groups import (
    UserGroupMembersResource,
    UserGroupPermissionsResource,
    UserGroupResource,
    UserGroupsResource,
)

logger = logging.getLogger(__name__)


async def _handle_denied(req, resp, ex, params) -> None:
    logger.info("Denied %s %s: %s", req.method, req.path, ex)
    resp.status = falcon.HTTP_403
    resp.media = {"error": "Permission denied"}


async def _handle_not_found(req, resp, ex, params) -> None:
    resp.status = falcon.HTTP_404
    resp.media = {"error": str(ex)}


async def _handle_unexpected(req, resp, ex, params) -> None:
    logger.error("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def create_app(
    authorization: AuthorizationService,
    groups: UserGroupManager,
    health_resource: HealthResource | None = None,
    middleware: Sequence[object] = (),
) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=list(middleware))
    # HTTPError keeps its own, more specific, default handler
    app.add_error_handler(Exception, _handle_unexpected)
    app.add_error_handler(PermissionDenied, _handle_denied)
    app.add_error_handler(NotFound, _handle_not_found)

    health = health_resource or HealthResource()
    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")

    app.add_route("/v1/permissions/available", AvailablePermissionsResource())
    app.add_route("/v1/authorization/check", AuthorizationCheckResource(authorization))
    app.add_route("/v1/authorization/rls", RLSConditionResource(authorization))
    app.add_route("/v1/users/{user_id}/permissions", UserPermissionsResource(authorization))

    app.add_route("/v1/user-groups", UserGroupsResource(authorization, groups))
    app.add_route("/v1/user-groups/{group_id}", UserGroupResource(authorization, groups))
    permissions = UserGroupPermissionsResource(authorization, groups)
    app.add_route("/v1/user-groups/{group_id}/permissions", permissions)
    app.add_route(
        "/v1/user-groups/{group_id}/permissions/{resource}", permissions, suffix="resource"
    )
    members = UserGroupMembersResource(authorization, groups)
    app.add_route("/v1/user-groups/{group_id}/members", members)
    app.add_route("/v1/user-groups/{group_id}/members/{user_id}", members, suffix="member")
    return app
