"""
Rules Gateway - FastAPI Application

Main entry point for the service.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router as api_router
from .api import rules_engine_error_handler
from .auth import KeycloakIdentityClient
from .config import Settings, get_settings
from .errors import RulesEngineError
from .kuiper import KuiperClient
from .service import RulesEngineService
from .things import ThingsClient

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_service(settings: Settings) -> RulesEngineService:
    return RulesEngineService(
        identity_client=KeycloakIdentityClient(settings),
        channel_client=ThingsClient(settings),
        kuiper=KuiperClient(settings),
        settings=settings,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = app.state.settings
    logger.info("%s v%s starting: prefix=%s kuiper=%s",
                settings.app_name, settings.app_version,
                settings.api_prefix, settings.kuiper_url)
    yield
    logger.info("%s shutting down", settings.app_name)


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[RulesEngineService] = None,
) -> FastAPI:
    """Application factory."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Authorized, per-user namespaced access to Kuiper streams and rules",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service or build_service(settings)

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (at root for k8s probes)
    @app.get("/health")
    async def health_check():
        """Health check endpoint for Kubernetes probes."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    app.add_exception_handler(RulesEngineError, rules_engine_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


def main() -> None:
    uvicorn.run(
        "rules_gateway.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8080,
        reload=False,
    )


if __name__ == "__main__":
    main()
