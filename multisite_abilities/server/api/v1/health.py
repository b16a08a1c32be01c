"""
Health Check Endpoints.

``/health`` reports whether the network database answers and how many
abilities are registered. ``/version`` reports the API version.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from multisite_abilities.core.logging_config import get_logger
from multisite_abilities.server.core import constant
from multisite_abilities.server.services.deps import RuntimeDep

router = APIRouter()
logger = get_logger(__name__)


@router.get(
    "/health",
    summary="Health Check",
    description="Check that the network database is reachable and the main site exists.",
    response_description="Status object.",
)
async def health_check(runtime: RuntimeDep):
    main_site_id = runtime.settings.main_site_id
    try:
        main_site = await run_in_threadpool(runtime.directory.site_exists, main_site_id)
    except SQLAlchemyError as exc:
        logger.warning(f"Health check could not reach the network database: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "abilities": len(runtime.registry), "main_site": False},
        )
    return {
        "status": "ok" if main_site else "degraded",
        "abilities": len(runtime.registry),
        "main_site": main_site,
    }


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    return {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}
