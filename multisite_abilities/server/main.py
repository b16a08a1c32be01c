"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
and includes all API routers. It serves as the root of the web server.

Run locally with::

    uvicorn multisite_abilities.server.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from multisite_abilities.core.logging_config import get_logger, setup_logging

from .api.v1 import abilities, health
from .core import constant
from .exception_handlers import setup_exception_handlers
from .services.deps import get_runtime

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Builds the runtime and makes sure the tables and the main site exist
    before the first request is served.
    """
    # Startup
    try:
        logger.info("Starting up Multisite Abilities Server...")
        runtime = get_runtime()
        await run_in_threadpool(runtime.create_all)
        logger.info(f"Database initialized successfully ({len(runtime.registry)} abilities registered)")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Multisite Abilities Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Multisite Abilities API

    This API exposes a catalogue of named, schema-validated abilities that inspect and
    manage a multisite content network: sites, users, themes, plugins, content, site
    options, templates and patterns.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(abilities.router, prefix=f"{constant.API_V1_STR}/abilities", tags=["abilities"])
