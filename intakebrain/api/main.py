"""
FastAPI Application
HTTP API for the hiring intake assistant
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from intakebrain import __version__
from intakebrain.api.dependencies import ServiceContainer, build_services
from intakebrain.api.routes import intake as intake_router
from intakebrain.api.routes import speech as speech_router
from intakebrain.config import Settings, get_settings
from intakebrain.exceptions import ProviderUnavailableError
from intakebrain.logging_config import configure_logging

logger = logging.getLogger(__name__)


# ==========================================
# Lifespan Events
# ==========================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events
    Builds the services on startup unless they were injected
    """
    settings: Settings = app.state.settings
    logger.info(f"🚀 Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")

    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
    logger.info("✅ Services initialized")

    yield

    logger.info("🛑 Shutting down application...")
    logger.info(f"✅ Cleanup complete ({len(app.state.services.sessions)} sessions discarded)")


# ==========================================
# Error Handlers
# ==========================================

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]
    logger.warning(f"Invalid request to {request.url.path}: {len(details)} error(s)")
    return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})


async def provider_unavailable_handler(request: Request, exc: ProviderUnavailableError):
    logger.error(f"❌ Provider unavailable: {exc}")
    return JSONResponse(status_code=503, content={"error": "Service unavailable", "message": str(exc)})


def _global_exception_handler(settings: Settings):
    async def handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    return handler


# ==========================================
# Create FastAPI App
# ==========================================

def create_app(
    services: Optional[ServiceContainer] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or (services.settings if services else get_settings())
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Conversational hiring intake with structured requirements extraction",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.services = services

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ProviderUnavailableError, provider_unavailable_handler)
    app.add_exception_handler(Exception, _global_exception_handler(settings))

    app.include_router(intake_router.router, prefix="/api/v1", tags=["intake"])
    app.include_router(speech_router.router, prefix="/api/v1", tags=["speech"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": settings.app_name,
            "version": __version__,
            "status": "running",
            "environment": settings.app_env,
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint"""
        services = request.app.state.services
        return {
            "status": "healthy",
            "openai": "configured" if settings.has_openai else "missing",
            "cache": type(services.cache).__name__ if services else "not initialized",
        }

    return app
