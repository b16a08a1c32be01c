"""Ability executor.

``AbilityExecutor`` runs one invocation through a fixed sequence of states::

    START -> VALIDATED -> AUTHORIZED -> (CONTEXT_ENTERED) -> EXECUTED
          -> (CONTEXT_EXITED) -> DONE

with ``FAILED`` reachable from every step.

Protocol failures
-----------------

An unknown ability, input that fails validation, a denied permission or an
unknown tenant stop the invocation before the body runs. They are returned as
a failed ``AbilityResult`` carrying the protocol error code, the generic
message of the error and the zero value of every declared output field.

Domain failures
---------------

Whatever the body returns, successful or not, is handed back unchanged. A body
that raises instead is logged and reported as ``execution_failed``, after the
tenant context it ran in has been exited.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .base import AbilityContext, BaseAbility
from .errors import AbilityProtocolError, PermissionDenied
from .registry import AbilityRegistry
from .schemas.domain import AbilityResult, InvocationState, ProtocolErrorCode
from .validation import validate

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class AbilityExecutor:
    """Validate, authorize and run abilities inside their tenant context."""

    def __init__(self, registry: AbilityRegistry, context: AbilityContext) -> None:
        """
        Initialize the executor.

        Args:
            registry: The registry abilities are looked up in.
            context: Collaborators passed to every ability body.
        """
        self._registry = registry
        self._ctx = context

    @property
    def registry(self) -> AbilityRegistry:
        return self._registry

    @property
    def context(self) -> AbilityContext:
        return self._ctx

    def execute(self, name: str, raw_input: Optional[Dict[str, Any]] = None) -> AbilityResult:
        """
        Run one ability invocation.

        Args:
            name: Registered ability name, e.g. ``vip-multisite/get-site``.
            raw_input: Caller-supplied input object.

        Returns:
            The body's result, or a failed result for a protocol error or a
            body that raised.
        """
        state = InvocationState.start
        ability: Optional[BaseAbility] = None
        handle = None
        try:
            ability = self._registry.get(name)
            args = validate(ability.input_model, raw_input)
            state = self._advance(name, state, InvocationState.validated)

            if not ability.authorize():
                raise PermissionDenied()
            state = self._advance(name, state, InvocationState.authorized)

            if ability.tenant_field is not None:
                handle = self._ctx.tenants.enter(args[ability.tenant_field])
                state = self._advance(name, state, InvocationState.context_entered)
            try:
                result = ability.execute(self._ctx, args=args)
                state = self._advance(name, state, InvocationState.executed)
            finally:
                if handle is not None:
                    self._ctx.tenants.exit(handle)
                    logger.debug(f"{name}: context exited (tenant {handle.tenant_id})")
        except AbilityProtocolError as exc:
            logger.info(f"{name}: failed in state '{state.value}' with {exc.code.value}: {exc.message}")
            return self._protocol_failure(ability, exc.code, exc.message)
        except Exception:
            logger.exception(f"{name}: ability body raised in state '{state.value}'")
            return self._protocol_failure(ability, ProtocolErrorCode.execution_failed, UNEXPECTED_ERROR_MESSAGE)

        self._advance(name, state, InvocationState.done)
        logger.debug(f"{name}: success={result.success} message={result.message!r}")
        return result

    @staticmethod
    def _advance(name: str, current: InvocationState, target: InvocationState) -> InvocationState:
        logger.debug(f"{name}: {current.value} -> {target.value}")
        return target

    @staticmethod
    def _protocol_failure(
        ability: Optional[BaseAbility], code: ProtocolErrorCode, message: str
    ) -> AbilityResult:
        data = ability.zero_output() if ability is not None else {}
        return AbilityResult(success=False, message=message, data=data, error=code)
