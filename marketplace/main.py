"""
FastAPI application factory and configuration.
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from marketplace.api import auth, categories, health, listings, messages, search, users
from marketplace.api.errors import register_error_handlers
from marketplace.core.config import get_settings
from marketplace.core.database import get_db_context, init_db
from marketplace.core.logging import get_logger, setup_logging
from marketplace.services.category_service import seed_categories


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed categories on startup."""
    logger = get_logger(__name__)
    logger.info("Starting application...")

    init_db()
    if get_settings().seed_categories:
        with get_db_context() as db:
            seed_categories(db)

    yield

    logger.info("Shutting down application...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    setup_logging()
    logger = get_logger(__name__)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Marketplace API: listings, search, categories, profiles and direct messaging",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(listings.router)
    app.include_router(categories.router)
    app.include_router(search.router)
    app.include_router(messages.router)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    @app.get("/api", tags=["Health"], summary="API banner")
    async def banner() -> dict:
        return {"message": "Welcome to Marketplace API", "version": settings.app_version}

    logger.info(
        "Application created",
        extra={
            "extra_data": {
                "app_name": settings.app_name,
                "version": settings.app_version,
                "debug": settings.debug,
            }
        }
    )

    return app


# Create the application instance
app = create_app()
