"""Authorization API resources - permission checks, RLS predicates, grants."""

import falcon.asgi

from parkaccess.application.dto.authorization_dto import PermissionCheck
from parkaccess.application.services.authorization_service import AuthorizationService
from parkaccess.domain.authorization import ASSIGNABLE_PERMISSIONS
from parkaccess.domain.exceptions import NotFound
from parkaccess.domain.value_objects import PermissionAction, UserType
from parkaccess.interfaces.api.resources.common import bad_request, caller_context, deny

_ACTIONS = {a.value for a in PermissionAction}


def _parse_check(item: object) -> PermissionCheck:
    """Raise ValueError unless item is {resource, action[, resource_data]}."""
    if not isinstance(item, dict):
        raise ValueError("Each check must be an object")
    resource = item.get("resource")
    action = item.get("action")
    if not isinstance(resource, str) or not resource:
        raise ValueError("Missing required field: resource")
    if action not in _ACTIONS:
        raise ValueError(f"Invalid action: {action}")
    return PermissionCheck(
        resource=resource,
        action=PermissionAction(action),
        resource_data=item.get("resource_data"),
    )


class AuthorizationCheckResource:
    """POST /v1/authorization/check - can the caller do this?"""

    def __init__(self, authorization: AuthorizationService) -> None:
        self._authorization = authorization

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Single check ``{resource, action, resource_data?}`` or batch ``{checks: [...]}``."""
        context = await caller_context(self._authorization, req, resp)
        if context is None:
            return

        body = await req.get_media()
        if not isinstance(body, dict):
            bad_request(resp, "Expected a JSON object")
            return

        try:
            if "checks" in body:
                if not isinstance(body["checks"], list):
                    raise ValueError("checks must be a list")
                checks = [_parse_check(c) for c in body["checks"]]
            else:
                checks = [_parse_check(body)]
        except ValueError as e:
            bad_request(resp, str(e))
            return

        if "checks" in body:
            results = await self._authorization.check_multiple_permissions(context, checks)
            resp.media = {"results": results}
        else:
            check = checks[0]
            allowed = await self._authorization.has_permission(
                context, check.resource, check.action, check.resource_data
            )
            resp.media = {
                "resource": check.resource,
                "action": str(check.action),
                "allowed": allowed,
            }
        resp.status = falcon.HTTP_200


class RLSConditionResource:
    """GET /v1/authorization/rls?resource=...&action=... - predicate for the caller."""

    def __init__(self, authorization: AuthorizationService) -> None:
        self._authorization = authorization

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        context = await caller_context(self._authorization, req, resp)
        if context is None:
            return

        resource = req.get_param("resource")
        action = req.get_param("action")
        if not resource:
            bad_request(resp, "Missing required parameter: resource")
            return
        if action not in _ACTIONS:
            bad_request(resp, f"Invalid action: {action}")
            return

        predicate = self._authorization.generate_rls_condition(
            context.user_type,
            context.user_id,
            resource,
            action,
            operator_id=context.operator_id,
        )
        resp.media = {"resource": resource, "action": action, "predicate": predicate}
        resp.status = falcon.HTTP_200


class UserPermissionsResource:
    """GET /v1/users/{user_id}/permissions - defaults plus group grants."""

    def __init__(self, authorization: AuthorizationService) -> None:
        self._authorization = authorization

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        context = await caller_context(self._authorization, req, resp)
        if context is None:
            return
        if context.user_type != UserType.ADMIN and context.user_id != user_id:
            deny(resp)
            return

        try:
            permissions = await self._authorization.get_user_permissions(user_id)
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}
            return

        resp.media = {"items": [p.to_dict() for p in permissions]}
        resp.status = falcon.HTTP_200


class AvailablePermissionsResource:
    """GET /v1/permissions/available - what administrators can grant via groups."""

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        resp.media = {
            "items": [
                {
                    "resource": p.resource,
                    "actions": [a.value for a in p.actions],
                    "description": p.description,
                }
                for p in ASSIGNABLE_PERMISSIONS
            ]
        }
        resp.status = falcon.HTTP_200
