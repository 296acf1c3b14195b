from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lunchbox.api.api_v1.api import api_router
from lunchbox.api.api_v1.endpoints.auth import callbacks_router
from lunchbox.core.config import Settings, get_settings
from lunchbox.services import ServiceContainer, build_services
from lunchbox.utils.logging import setup_logger

logger = setup_logger(__name__)

def create_app(settings: Optional[Settings] = None, services: Optional[ServiceContainer] = None) -> FastAPI:
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for the FastAPI application."""
        # Startup
        owns_services = getattr(app.state, "services", None) is None
        if owns_services:
            logger.info(f"Building services (storage backend: {settings.STORAGE_BACKEND})")
            app.state.services = build_services(settings)
            logger.info("Services ready")

        yield

        # Shutdown
        if owns_services:
            logger.info("Closing service connections...")
            await app.state.services.aclose()
            logger.info("Service connections closed successfully")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.APP_VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings
    if services is not None:
        app.state.services = services

    # Set up CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(callbacks_router, tags=["auth"])
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app

app = create_app()
