"""Fixtures for API tests."""

import pytest

from parkaccess.application.services.authorization_service import AuthorizationService
from parkaccess.application.services.user_group_manager import UserGroupManager
from parkaccess.interfaces.api.app import create_app


class _TestUser:
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id


class AuthBypassMiddleware:
    """Middleware that sets context.user from the X-Test-User header."""

    async def process_request(self, req, resp):
        user_id = req.get_header("X-Test-User")
        req.context.user = _TestUser(user_id) if user_id else None


@pytest.fixture
def groups(uow_factory) -> UserGroupManager:
    return UserGroupManager(unit_of_work_factory=uow_factory)


@pytest.fixture
def app(uow_factory, groups):
    """Falcon ASGI app with API resources for testing."""
    authorization = AuthorizationService(unit_of_work_factory=uow_factory)
    return create_app(authorization, groups, middleware=[AuthBypassMiddleware()])


@pytest.fixture
def client(app):
    """Falcon ASGI test client."""
    from falcon.testing import TestClient
    return TestClient(app)
