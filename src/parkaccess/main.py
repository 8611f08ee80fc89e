"""Application entry point and composition root."""

import logging

import uvicorn

from parkaccess import __version__
from parkaccess.application.services.authorization_service import AuthorizationService
from parkaccess.application.services.group_permission_resolver import (
    GroupPermissionResolver,
)
from parkaccess.application.services.user_group_manager import UserGroupManager
from parkaccess.config import get_settings
from parkaccess.domain.authorization import build_default_catalog
from parkaccess.infrastructure.auth.keycloak_provider import KeycloakProvider
from parkaccess.infrastructure.persistence.postgres.connection import create_pool
from parkaccess.infrastructure.persistence.postgres.unit_of_work import (
    create_uow_factory,
)
from parkaccess.interfaces.api.app import create_app
from parkaccess.interfaces.api.middleware.auth import AuthMiddleware
from parkaccess.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from parkaccess.interfaces.api.resources.health import HealthResource
from parkaccess.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_parkaccess_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    pool = create_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    uow_factory = create_uow_factory(pool)

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
    if keycloak is None:
        logger.warning("KEYCLOAK_CLIENT_SECRET not set, every request is unauthenticated")

    # Built once; the engine never mutates it
    catalog = build_default_catalog()
    authorization = AuthorizationService(
        unit_of_work_factory=uow_factory,
        catalog=catalog,
        group_permissions=GroupPermissionResolver(uow_factory),
    )
    groups = UserGroupManager(unit_of_work_factory=uow_factory)

    return create_app(
        authorization,
        groups,
        health_resource=HealthResource(pool),
        middleware=[
            PoolLifespanMiddleware(pool),
            AuthMiddleware(keycloak),
        ],
    )


def main() -> None:
    """CLI entry point - run the API with uvicorn."""
    settings = get_settings()
    print(f"ParkAccess v{__version__}")
    uvicorn.run(
        "parkaccess.main:create_parkaccess_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
