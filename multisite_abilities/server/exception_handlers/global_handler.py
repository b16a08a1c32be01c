"""
Global Exception Handler.

Ability failures never reach this handler: the executor turns them into
result envelopes. What arrives here is a failure of the HTTP layer itself,
such as the runtime failing to build. The response keeps the envelope shape
so clients can read every error the same way.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from multisite_abilities.core.logging_config import get_logger

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure with an error ID and answer with a failed envelope."""
    error_id = f"{id(exc):x}"
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={"error_id": error_id, "path": request.url.path},
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": f"Internal server error ({error_id})"},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(Exception, global_exception_handler)
