"""
Storefront API
Public catalog, checkout and the admin back office in one FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import subprocess
import os

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from storefront.core_settings import get_settings
from storefront.infrastructure.db import get_engine, get_session_factory, init_models
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.application.auth_service import AuthService
from storefront.application.product_service import configure_category_cache
from storefront.api.errors import register_exception_handlers
from storefront.api.routes import products_router, orders_router, admin_router, users_router

SERVICE_NAME = "storefront-api"
SERVICE_DESCRIPTION = "Storefront catalog, checkout and back office API"

logger = get_logger(__name__)

def cors_options(origins: list[str]) -> dict:
    # Browsers reject credentialed responses that carry a wildcard origin
    return {
        "allow_origins": origins,
        "allow_credentials": "*" not in origins,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
    }

def run_migrations():
    logger.info("Running database migrations")
    result = subprocess.run(
        ["alembic", "upgrade", "head"],
        cwd=os.path.join(os.path.dirname(__file__), ".."),
        capture_output=True,
        text=True,
        check=False
    )
    if result.returncode != 0:
        logger.warning(f"Migration output: {result.stderr}")
    else:
        logger.info("Database migrations completed")

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(f"Starting {SERVICE_NAME} version {settings.SERVICE_VERSION}")

    if settings.RUN_MIGRATIONS:
        run_migrations()

    try:
        init_models()
        logger.info("Database models initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database models: {e}")
        raise

    AuthService(UnitOfWork(get_session_factory()), settings).ensure_admin(
        settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD
    )

    logger.info(f"{SERVICE_NAME} started successfully")
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")

def create_app() -> FastAPI:
    settings = get_settings()
    os.environ.setdefault("SERVICE_VERSION", settings.SERVICE_VERSION)
    os.environ.setdefault("ENVIRONMENT", settings.ENVIRONMENT)
    setup_logging(service_name=SERVICE_NAME, level=settings.LOG_LEVEL)
    configure_category_cache(settings.CATEGORY_CACHE_TTL)

    app = FastAPI(
        title=SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )

    app.add_middleware(CORSMiddleware, **cors_options(settings.CORS_ORIGINS))
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    health_service = ServiceHealth(SERVICE_NAME, settings.SERVICE_VERSION, get_engine)
    app.include_router(health_service.create_health_router())

    app.include_router(products_router)
    app.include_router(orders_router)
    app.include_router(admin_router)
    app.include_router(users_router)

    @app.get("/")
    def root():
        return {
            "service": SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "status": "running",
            "docs": "/api/docs"
        }

    return app

app = create_app()
