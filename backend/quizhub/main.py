"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from quizhub.api.v1.router import api_router
from quizhub.common.request_id import RequestIDMiddleware
from quizhub.core.config import settings
from quizhub.core.dependencies import build_dispatcher
from quizhub.core.errors import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from quizhub.core.logging import setup_logging
from quizhub.core.permissions import DEFAULT_PERMISSION_HIERARCHY, PermissionHierarchy
from quizhub.core.seed_auth import seed_root_user
from quizhub.db.base import Base
from quizhub.db.engine import engine
from quizhub.graphql.schema import graphql_router

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    # Create tables (in production, use migrations)
    if settings.ENV == "dev":
        Base.metadata.create_all(bind=engine)
    seed_root_user()
    yield


def create_app(permission_hierarchy: PermissionHierarchy | None = None) -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=VERSION,
        description="Quiz platform API: categories, questions, exams and ratings",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )

    # One dispatcher per application; services receive it per request
    app.state.dispatcher = build_dispatcher()
    app.state.permission_hierarchy = permission_hierarchy or DEFAULT_PERMISSION_HIERARCHY

    # Add middleware (order matters - first added is outermost)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add exception handlers
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include API routers
    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(graphql_router, prefix=settings.GRAPHQL_PATH, tags=["GraphQL"])

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint - API information."""
        return {
            "message": settings.PROJECT_NAME,
            "version": VERSION,
            "graphql_url": settings.GRAPHQL_PATH,
            "docs_url": "/docs" if settings.ENV != "prod" else None,
        }

    return app


# Create app instance
app = create_app()
