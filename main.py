import os
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.errors import BMSError
from core.logging_config import logger
from core.mongo_client import ensure_indexes

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers import api_router
from routers.health import router as health_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Building Management System API: properties, leases, billing and operations",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup / shutdown
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info("🚀 Starting BMS API")
        validate_config_on_startup()

        try:
            ensure_indexes()
        except PyMongoError as e:
            logger.error(f"Index creation failed (continuing): {e}")

        if settings.SCHEDULER_ENABLED:
            from core.scheduler import start_scheduler
            start_scheduler()

        logger.info(f"Registered {len(app.routes)} routes")

    @app.on_event("shutdown")
    async def on_shutdown():
        if settings.SCHEDULER_ENABLED:
            from core.scheduler import shutdown_scheduler
            shutdown_scheduler()

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(BMSError)
    async def handle_domain(request: Request, exc: BMSError):
        if exc.status_code >= 500:
            logger.error(f"{exc.status_code} at {request.url}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url}: {exc.detail}"
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------
    app.include_router(api_router, prefix="/api")

    # Health (unprefixed for uptime monitors)
    app.include_router(health_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"service": settings.PROJECT_NAME, "docs": "/docs"}

    return app


# Create the global FastAPI instance
app = create_app()
