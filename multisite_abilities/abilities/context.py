"""Tenant context switching.

The ``TenantContextManager`` owns the stack of active tenants. The innermost
frame decides which site every ``ContentStore`` call resolves against; with
no frame active the main site is used.

Callers should use the scoped guard::

    with tenants.switch_to(site_id):
        store.update_option("blogname", "Docs")

which restores the previous frame on every exit path. ``enter``/``exit`` are
available for callers that manage the pairing themselves (the executor).
``exit`` is safe to call twice with the same handle, and it unwinds any
frame a caller left active above the handle being exited.

The stack is shared by the whole process. A re-entrant lock is taken by the
outermost ``enter`` and released by the matching ``exit``, so one thread's
enter..exit pair never interleaves with another's.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List

from multisite_abilities.store.interfaces import SiteDirectory

from .errors import TenantContextError, TenantNotFound

logger = logging.getLogger(__name__)


class TenantHandle:
    """Proof of one ``enter``; pass it back to ``exit``."""

    __slots__ = ("tenant_id", "depth", "released")

    def __init__(self, tenant_id: int, depth: int) -> None:
        self.tenant_id = tenant_id
        self.depth = depth
        self.released = False

    def __repr__(self) -> str:
        return f"TenantHandle(tenant_id={self.tenant_id}, depth={self.depth}, released={self.released})"


class TenantContextManager:
    """Stack of active tenants with guaranteed restoration."""

    def __init__(self, directory: SiteDirectory, default_tenant_id: int = 1) -> None:
        self._directory = directory
        self._default_tenant_id = default_tenant_id
        self._stack: List[TenantHandle] = []
        self._lock = threading.RLock()

    @property
    def current_tenant_id(self) -> int:
        """The innermost active tenant, or the main site when none is active."""
        if self._stack:
            return self._stack[-1].tenant_id
        return self._default_tenant_id

    @property
    def depth(self) -> int:
        return len(self._stack)

    def enter(self, tenant_id: int) -> TenantHandle:
        """Push ``tenant_id`` onto the stack.

        Raises:
            TenantNotFound: No site with this id exists. The stack is unchanged.
        """
        self._lock.acquire()
        try:
            if not self._directory.site_exists(tenant_id):
                raise TenantNotFound(tenant_id)
        except BaseException:
            self._lock.release()
            raise
        handle = TenantHandle(tenant_id, len(self._stack))
        self._stack.append(handle)
        logger.debug(f"Entered tenant {tenant_id} (depth {len(self._stack)})")
        return handle

    def exit(self, handle: TenantHandle) -> None:
        """Pop the frame pushed by ``handle``. No-op for an already released handle.

        Frames entered above ``handle`` and never exited are unwound first,
        so the stack and the lock are back to where they were before the
        matching ``enter``.

        Raises:
            TenantContextError: ``handle`` is not on the stack.
        """
        if handle.released:
            return
        if not any(frame is handle for frame in self._stack):
            raise TenantContextError(f"Tenant handle for site {handle.tenant_id} is not on the stack")
        while self._stack[-1] is not handle:
            leaked = self._stack[-1]
            logger.warning(f"Unwinding tenant {leaked.tenant_id} left active above tenant {handle.tenant_id}")
            self._pop(leaked)
        self._pop(handle)

    def _pop(self, handle: TenantHandle) -> None:
        self._stack.pop()
        handle.released = True
        self._lock.release()
        logger.debug(f"Exited tenant {handle.tenant_id} (depth {len(self._stack)})")

    @contextmanager
    def switch_to(self, tenant_id: int) -> Iterator[TenantHandle]:
        """Scoped guard around ``enter``/``exit``."""
        handle = self.enter(tenant_id)
        try:
            yield handle
        finally:
            self.exit(handle)
