"""User group API resources."""

from typing import Any

import falcon.asgi

from parkaccess.application.dto.user_group_dto import UpdateUserGroupInput
from parkaccess.application.ports import PermissionChecker
from parkaccess.application.services.authorization_service import AuthorizationService
from parkaccess.application.services.user_group_manager import UserGroupManager
from parkaccess.domain.entities import AuthorizationContext, GroupMembership, Permission, UserGroup
from parkaccess.domain.exceptions import AlreadyMember
from parkaccess.domain.value_objects import PermissionAction
from parkaccess.interfaces.api.resources.common import bad_request, caller_context, deny

RESOURCE = "user_groups"


def _parse_permissions(raw: Any, resp: falcon.asgi.Response) -> list[Permission] | None:
    """Validate and convert a permissions payload; writes 400 and returns None if invalid."""
    if not isinstance(raw, list):
        bad_request(resp, "permissions must be a list")
        return None
    result = UserGroupManager.validate_permissions(raw)
    if not result.is_valid:
        bad_request(resp, "Invalid permissions", result.errors)
        return None
    try:
        return [Permission.from_dict(p) for p in raw]
    except ValueError as e:
        bad_request(resp, "Invalid permissions", [str(e)])
        return None


def _membership_media(m: GroupMembership) -> dict[str, Any]:
    return {"user_id": m.user_id, "group_id": m.group_id, "joined_at": m.joined_at.isoformat()}


async def _authorized(
    authorization: PermissionChecker,
    context: AuthorizationContext,
    action: PermissionAction,
    group: UserGroup | dict[str, Any],
) -> bool:
    data = group.snapshot() if isinstance(group, UserGroup) else group
    return await authorization.has_permission(context, RESOURCE, action, data)


async def _load_group(
    authorization: AuthorizationService,
    groups: UserGroupManager,
    req: falcon.asgi.Request,
    resp: falcon.asgi.Response,
    group_id: str,
    action: PermissionAction,
) -> tuple[AuthorizationContext, UserGroup] | None:
    """Caller context and group if the caller may perform action on it; else writes the error."""
    context = await caller_context(authorization, req, resp)
    if context is None:
        return None
    group = await groups.get_group(group_id)
    if not group:
        resp.status = falcon.HTTP_404
        resp.media = {"error": "User group not found"}
        return None
    if not await _authorized(authorization, context, action, group):
        deny(resp)
        return None
    return context, group


class UserGroupsResource:
    """GET/POST /v1/user-groups - list and create groups."""

    def __init__(self, authorization: AuthorizationService, groups: UserGroupManager) -> None:
        self._authorization = authorization
        self._groups = groups

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """List groups visible to the caller (optional ?operator_id=)."""
        context = await caller_context(self._authorization, req, resp)
        if context is None:
            return

        groups = await self._groups.list_groups(req.get_param("operator_id"))
        visible = await self._authorization.get_filtered_resources(
            context,
            RESOURCE,
            PermissionAction.READ,
            [g.snapshot() for g in groups],
        )
        resp.media = {"items": visible}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Create group from {name, description, permissions, operator_id?}."""
        context = await caller_context(self._authorization, req, resp)
        if context is None:
            return

        body = await req.get_media()
        try:
            name = body["name"]
        except (KeyError, TypeError) as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        operator_id = body.get("operator_id")
        await self._authorization.require_permission(
            context, RESOURCE, PermissionAction.CREATE, {"operator_id": operator_id}
        )

        permissions = _parse_permissions(body.get("permissions", []), resp)
        if permissions is None:
            return

        group = await self._groups.create_group(
            name=name,
            description=body.get("description", ""),
            permissions=permissions,
            operator_id=operator_id,
            actor_id=context.user_id,
        )
        resp.media = group.snapshot()
        resp.status = falcon.HTTP_201


class UserGroupResource:
    """GET/PATCH/DELETE /v1/user-groups/{group_id}."""

    def __init__(self, authorization: AuthorizationService, groups: UserGroupManager) -> None:
        self._authorization = authorization
        self._groups = groups

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, group_id: str
    ) -> None:
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.READ
        )
        if loaded is None:
            return
        _, group = loaded
        resp.media = group.snapshot()
        resp.status = falcon.HTTP_200

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, group_id: str
    ) -> None:
        """Update name, description and/or replace permissions."""
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.UPDATE
        )
        if loaded is None:
            return
        context, _ = loaded

        body = await req.get_media()
        if not isinstance(body, dict):
            bad_request(resp, "Expected a JSON object")
            return
        changes = UpdateUserGroupInput(
            name=body.get("name"),
            description=body.get("description"),
        )
        if "permissions" in body:
            changes.permissions = _parse_permissions(body["permissions"], resp)
            if changes.permissions is None:
                return
        if changes.is_empty():
            bad_request(resp, "Nothing to update")
            return

        group = await self._groups.update_group(group_id, changes, actor_id=context.user_id)
        resp.media = group.snapshot()
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, group_id: str
    ) -> None:
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.DELETE
        )
        if loaded is None:
            return
        context, _ = loaded
        await self._groups.delete_group(group_id, actor_id=context.user_id)
        resp.status = falcon.HTTP_204


class UserGroupPermissionsResource:
    """POST /v1/user-groups/{group_id}/permissions and DELETE .../{resource}."""

    def __init__(self, authorization: AuthorizationService, groups: UserGroupManager) -> None:
        self._authorization = authorization
        self._groups = groups

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, group_id: str
    ) -> None:
        """Grant one permission; replaces an existing entry for the same resource."""
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.UPDATE
        )
        if loaded is None:
            return
        context, _ = loaded
        body = await req.get_media()
        permissions = _parse_permissions([body], resp)
        if permissions is None:
            return
        group = await self._groups.add_permission(group_id, permissions[0], actor_id=context.user_id)
        resp.media = group.snapshot()
        resp.status = falcon.HTTP_200

    async def on_delete_resource(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        group_id: str,
        resource: str,
    ) -> None:
        """Revoke the group's permission on resource."""
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.UPDATE
        )
        if loaded is None:
            return
        context, _ = loaded
        group = await self._groups.remove_permission(group_id, resource, actor_id=context.user_id)
        resp.media = group.snapshot()
        resp.status = falcon.HTTP_200


class UserGroupMembersResource:
    """GET/POST /v1/user-groups/{group_id}/members and DELETE .../{user_id}."""

    def __init__(self, authorization: AuthorizationService, groups: UserGroupManager) -> None:
        self._authorization = authorization
        self._groups = groups

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, group_id: str
    ) -> None:
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.READ
        )
        if loaded is None:
            return
        members = await self._groups.list_members(group_id)
        resp.media = {"items": [_membership_media(m) for m in members]}
        resp.status = falcon.HTTP_200

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, group_id: str
    ) -> None:
        """Add {user_id} to the group."""
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.UPDATE
        )
        if loaded is None:
            return
        context, _ = loaded
        body = await req.get_media()
        try:
            user_id = body["user_id"]
        except (KeyError, TypeError) as e:
            bad_request(resp, f"Missing required field: {e}")
            return
        try:
            membership = await self._groups.add_user_to_group(
                user_id, group_id, actor_id=context.user_id
            )
        except AlreadyMember as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}
            return
        resp.media = _membership_media(membership)
        resp.status = falcon.HTTP_201

    async def on_delete_member(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        group_id: str,
        user_id: str,
    ) -> None:
        loaded = await _load_group(
            self._authorization, self._groups, req, resp, group_id, PermissionAction.UPDATE
        )
        if loaded is None:
            return
        context, _ = loaded
        await self._groups.remove_user_from_group(user_id, group_id, actor_id=context.user_id)
        resp.status = falcon.HTTP_204
