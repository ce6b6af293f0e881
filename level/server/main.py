"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers exception handlers and mounts the REST routers and
the GraphQL endpoint. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from level.core.database.session import engine, init_db
from level.core.logging_config import get_logger, setup_logging
from level.core.monitoring import initialize_logfire

from .api.v1 import health, tokens, users
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .graphql import create_graphql_router
from .middleware import RequestLoggingMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the schema for SQLite deployments on startup and disposes of the
    database engine on shutdown.
    """
    try:
        logger.info("Starting up Level Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Level Server...")
    await engine.dispose()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Level Server API

    Backend of Level, a team communication app organized around spaces, groups,
    posts and an inbox. The product API is GraphQL at /graphql (queries,
    mutations, and subscriptions over WebSocket); REST endpoints cover sign up,
    log in and health checks.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users", tags=["users"])
app.include_router(tokens.router, prefix=f"{constant.API_V1_STR}/tokens", tags=["tokens"])
app.include_router(create_graphql_router(), prefix=constant.GRAPHQL_PATH, tags=["graphql"])


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    uvicorn.run(
        "level.server.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )
