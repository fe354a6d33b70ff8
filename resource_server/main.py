from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from resource_server.introspection import RemoteResourceServer, VerificationError
from resource_server.logging_config import configure_app_logging
from resource_server.routers import health, resources
from resource_server.security.config import load_security_config
from resource_server.security.dependencies import enforce_token
from resource_server.security.responses import verification_error_handler
from resource_server.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        s = settings or get_settings()
        configure_app_logging(s.log_level)
        logger.info("App startup beginning")

        app.state.security_config = load_security_config(s.resolved_security_config_path())
        logger.info("Loaded security config: %s", s.resolved_security_config_path())

        rs_config = s.resource_server_config()
        if not rs_config.introspection_endpoint:
            # Not fatal: every protected request will answer 500 until configured.
            logger.warning("RS_INTROSPECTION_ENDPOINT is not set")
        app.state.resource_server = RemoteResourceServer(rs_config)
        app.state.realm = rs_config.realm

        yield
        # Shutdown (nothing to clean up: no cache, no pooled session)

    # Global dependency: applies security with zero changes to route handlers.
    app = FastAPI(dependencies=[Depends(enforce_token)], lifespan=lifespan)
    app.add_exception_handler(VerificationError, verification_error_handler)

    app.include_router(health.router)
    app.include_router(resources.router)

    return app


app = create_app()
