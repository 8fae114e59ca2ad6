"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from buildsmart import __version__
from buildsmart.core.config import settings
from buildsmart.core.exceptions import BuildSmartError, ValidationError, error_response
from buildsmart.core.middleware import setup_middleware

from buildsmart.api.auth import router as auth_router
from buildsmart.api.users import router as users_router
from buildsmart.api.roles import router as roles_router
from buildsmart.api.resources import routers as resource_routers

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("buildsmart")


def bootstrap_storage() -> None:
    """Create tables for the SQL backend and provision demo users if enabled."""
    from buildsmart.repositories import open_store

    if settings.STORAGE_BACKEND == "sql":
        from buildsmart.db.session import init_db
        init_db()

    if settings.DEMO_LOGIN_ENABLED:
        from buildsmart.db.seeds.seed_demo_users import seed_demo_users

        store = open_store()
        try:
            seed_demo_users(store)
        finally:
            store.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("🚀 Starting BuildSmart AI API (%s storage)", settings.STORAGE_BACKEND)
    bootstrap_storage()
    if settings.DEMO_LOGIN_ENABLED:
        logger.warning("⚠️  Demo login is enabled; disable DEMO_LOGIN_ENABLED for real deployments")

    yield

    logger.info("🔻 Shutting down BuildSmart AI API")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "body"
    return f"{field}: {first.get('msg', 'invalid value')}"


def create_app() -> FastAPI:
    app = FastAPI(
        title="BuildSmart AI API",
        description="Role-based construction site management",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    setup_middleware(app)

    @app.exception_handler(BuildSmartError)
    async def buildsmart_exception_handler(request: Request, exc: BuildSmartError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(ValidationError(_validation_message(exc)))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR"},
        )

    # Register routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(roles_router, prefix="/api")
    for router in resource_routers:
        app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/api/health")
    async def health():
        """Quick health check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()
