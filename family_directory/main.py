"""
Family Directory API - Main Entry Point

This is the FastAPI application entry point.
Uses core/ for configuration, exceptions, and logging.
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

# Core imports
from family_directory.core.config import settings, VERSION
from family_directory.core.exceptions import AppException
from family_directory.core.responses import ApiResponse
from family_directory.core.logging import setup_logging, get_logger

# Setup logging first
setup_logging(level="INFO" if not settings.debug else "DEBUG")
logger = get_logger(__name__)

# Service imports
from family_directory.services.container import ServiceContainer

# Router imports
from family_directory.routers import people, families, quiz


def create_app(container: ServiceContainer = None) -> FastAPI:
    """
    Build the application around one service container.

    Args:
        container: Service graph; built from settings when omitted
    """
    app = FastAPI(
        title="Family Directory API",
        description="Family directory for seniors: people, photos and the home screen",
        version=VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        redirect_slashes=False,  # Don't redirect /api/families to /api/families/
    )

    # ============================================================
    # CORS Configuration
    # ============================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
        expose_headers=["ETag"],
        max_age=3600,
    )

    # ============================================================
    # Global Exception Handlers
    # ============================================================

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """
        Handle all custom AppException and subclasses.
        Returns unified ApiResponse format.
        """
        logger.warning(f"AppException: {exc.code} - {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=ApiResponse.from_exception(exc).model_dump()
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """
        Handle unexpected exceptions.
        Logs full traceback and returns generic error.
        """
        logger.error(f"Unhandled exception: {type(exc).__name__}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ApiResponse.fail(
                message="Internal server error",
                code="INTERNAL_ERROR"
            ).model_dump()
        )

    # ============================================================
    # Service Initialization (Dependency Injection)
    # ============================================================

    if container is None:
        container = ServiceContainer.from_settings()
    app.state.services = container

    people.set_services(container.directory, container.person_cache, container.gallery)
    families.set_services(
        container.families,
        container.directory,
        container.home_views,
        container.category_settings,
    )
    quiz.set_services(container.quiz)
    logger.info("✓ Service instances injected into all routers")

    @app.on_event("shutdown")
    async def flush_icon_signals():
        await container.gallery.wait_for_icon_signals()

    # ============================================================
    # Root Endpoints
    # ============================================================

    @app.get("/api/health")
    async def health_check():
        """
        Health check endpoint.
        Returns service status and person cache state.
        """
        return ApiResponse.ok({
            "status": "healthy",
            "service": "family-directory",
            "version": VERSION,
            "person_cache_loaded": container.person_cache.is_loaded,
            "person_cache_generation": container.person_cache.generation,
        }).model_dump()

    # ============================================================
    # Router Registration
    # ============================================================

    app.include_router(families.router, prefix="/api/families", tags=["families"])
    app.include_router(people.router, prefix="/api/families/{family_id}/people", tags=["people"])
    app.include_router(quiz.router, prefix="/api/families/{family_id}/quiz", tags=["quiz"])

    return app


logger.info(f"Starting Family Directory API v{VERSION}")
app = create_app()
logger.info(f"Application startup complete. Running on {settings.server_host}:{settings.server_port}")

# ============================================================
# Entry Point
# ============================================================

if __name__ == "__main__":
    uvicorn.run(
        "family_directory.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug
    )
