"""
Abilities API Endpoints.

This module exposes the ability catalogue: discovery of the registered
abilities and categories, and execution of a single ability on behalf of the
caller identified by the request's bearer token.

Execution always answers with the flattened result envelope
``{success, ...fields, message}``. Business outcomes, successful or not,
are returned with status 200; protocol failures additionally carry an
``error`` code and map to an HTTP error status.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from multisite_abilities.abilities.executor import AbilityExecutor
from multisite_abilities.abilities.identity import Caller, acting_as
from multisite_abilities.abilities.schemas.domain import AbilityResult, ProtocolErrorCode
from multisite_abilities.core.logging_config import get_logger
from multisite_abilities.server.schemas import AbilityCategoryRead, AbilityRead, AbilityRunRequest
from multisite_abilities.server.services.deps import CallerDep, RuntimeDep

logger = get_logger(__name__)

router = APIRouter()

PROTOCOL_ERROR_STATUS = {
    ProtocolErrorCode.unknown_ability: 404,
    ProtocolErrorCode.validation_failed: 400,
    ProtocolErrorCode.tenant_not_found: 400,
    ProtocolErrorCode.permission_denied: 403,
    ProtocolErrorCode.execution_failed: 500,
}


def _run_as(executor: AbilityExecutor, caller: Caller, name: str, payload: Any) -> AbilityResult:
    with acting_as(caller):
        return executor.execute(name, payload)


@router.get(
    "",
    response_model=List[AbilityRead],
    summary="List Abilities",
    description="Retrieve every registered ability, optionally restricted to one category.",
    response_description="A list of ability descriptions.",
)
async def list_abilities(
    runtime: RuntimeDep,
    category: Optional[str] = Query(default=None, description="Only list abilities of this category."),
) -> List[AbilityRead]:
    return [AbilityRead(**ability.describe()) for ability in runtime.registry.list(category)]


@router.get(
    "/categories",
    response_model=List[AbilityCategoryRead],
    summary="List Ability Categories",
    description="Retrieve the registered categories and the abilities listed under each.",
)
async def list_categories(runtime: RuntimeDep) -> List[AbilityCategoryRead]:
    grouped = runtime.registry.grouped()
    return [
        AbilityCategoryRead(
            slug=category.slug,
            label=category.label,
            description=category.description,
            abilities=[ability.name for ability in grouped.get(category.slug, [])],
        )
        for category in runtime.registry.categories()
    ]


@router.get(
    "/{category}/{ability}",
    response_model=AbilityRead,
    summary="Get Ability",
    description="Retrieve the description and schemas of a single ability.",
    responses={404: {"description": "Ability not found"}},
)
async def get_ability(category: str, ability: str, runtime: RuntimeDep) -> AbilityRead:
    name = f"{category}/{ability}"
    if not runtime.registry.has(name):
        raise HTTPException(status_code=404, detail=f"Ability '{name}' is not registered.")
    return AbilityRead(**runtime.registry.get(name).describe())


@router.post(
    "/{category}/{ability}/run",
    summary="Run Ability",
    description=(
        "Execute an ability. The request must carry the API token as a bearer token for abilities "
        "that require network administration rights."
    ),
    responses={
        200: {"description": "The ability ran; see `success` for its outcome"},
        400: {"description": "Invalid input or unknown site"},
        403: {"description": "The caller may not run this ability"},
        404: {"description": "Ability not found"},
        500: {"description": "The ability failed unexpectedly"},
    },
)
async def run_ability(
    category: str,
    ability: str,
    body: AbilityRunRequest,
    runtime: RuntimeDep,
    caller: CallerDep,
) -> JSONResponse:
    """
    Run an ability.

    The executor validates ``input`` against the ability's input schema,
    checks the caller's permission and, for site-scoped abilities, runs the
    ability inside the context of the site named by ``site_id``.
    """
    name = f"{category}/{ability}"
    result = await run_in_threadpool(_run_as, runtime.executor, caller, name, body.input)

    payload = result.to_payload()
    status_code = 200
    if result.error is not None:
        payload["error"] = result.error.value
        status_code = PROTOCOL_ERROR_STATUS[result.error]
        logger.info(f"Ability '{name}' refused with {result.error.value} (HTTP {status_code})")
    return JSONResponse(status_code=status_code, content=payload)
