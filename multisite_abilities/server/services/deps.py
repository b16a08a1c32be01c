"""
Server Dependencies.

Provides the process-wide ``Runtime`` and the caller identity resolved from
the request for API endpoints.
"""

import hmac
from typing import Annotated, Optional

from fastapi import Depends, Header

from multisite_abilities.abilities.identity import Caller
from multisite_abilities.factory import Runtime, build_runtime

# Global singleton
_runtime: Optional[Runtime] = None


def get_runtime() -> Runtime:
    global _runtime
    if _runtime is None:
        _runtime = build_runtime()
    return _runtime


def reset_runtime() -> None:
    """Drop the cached runtime so the next request builds a fresh one."""
    global _runtime
    _runtime = None


RuntimeDep = Annotated[Runtime, Depends(get_runtime)]


def get_caller(
    runtime: RuntimeDep,
    authorization: Annotated[Optional[str], Header()] = None,
) -> Caller:
    """
    Resolve the caller from the ``Authorization`` header.

    A bearer token equal to the configured API token identifies a network
    super admin. Anything else, including a missing header or an unset
    token, is the anonymous caller.
    """
    expected = runtime.settings.api_token
    if not expected or not authorization:
        return Caller.anonymous()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip(), expected):
        return Caller.anonymous()
    return Caller.super_admin()


CallerDep = Annotated[Caller, Depends(get_caller)]
