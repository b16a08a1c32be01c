"""Field policy for site option reads and writes.

``FieldPolicy`` is the only path abilities use to touch site options. It
decides, per key, whether a write may happen and how it turned out, and
whether a read may return the stored value.

Write classification
--------------------

1. Canonicalise the key. An empty key is skipped.
2. Keys outside the write allowlist are skipped.
3. Keys with a value domain reject values outside it.
4. Page-reference keys accept a page id or the exact title of a page and
   store the page id.
5. The store reports "nothing written" both for an unchanged value and for a
   rejected write. The stored value is re-read to tell the two apart.

Reads of blocklisted keys return the redaction marker without touching the
store.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Dict, Iterable, Mapping, Optional

from multisite_abilities.store.base import is_row_id
from multisite_abilities.store.interfaces import ContentStore
from multisite_abilities.utils.formatting import sanitize_key, sanitize_text_field

from .models import (
    REASON_INVALID_KEY,
    REASON_INVALID_VALUE,
    REASON_NOT_ALLOWLISTED,
    REASON_NOT_FOUND,
    REASON_UNCHANGED,
    REASON_WRITE_FAILED,
    BatchWriteResult,
    OptionPolicyConfig,
    OptionResolver,
    WriteOutcome,
)

logger = logging.getLogger(__name__)

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_numeric(value: Any) -> bool:
    """Numbers and numeric strings. Booleans are not numeric."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and bool(_NUMERIC_RE.match(value))


def _as_row_id(value: Any) -> Optional[int]:
    """Integer id of a numeric value, ``None`` when it is not finite or no row can have it."""
    if isinstance(value, str):
        value = value.strip()
        try:
            value = int(value)
        except ValueError:
            value = float(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = int(value)
    return value if is_row_id(value) else None


class FieldPolicy:
    """Allowlist/blocklist enforcement over a tenant-scoped ``ContentStore``."""

    def __init__(self, config: OptionPolicyConfig, store: ContentStore) -> None:
        self._cfg = config
        self._store = store

    @property
    def config(self) -> OptionPolicyConfig:
        """Return the underlying configuration object."""
        return self._cfg

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def authorize_write(self, key: Any, value: Any) -> WriteOutcome:
        """
        Classify and, when allowed, perform one option write.

        Args:
            key: Requested option key, canonicalised before use.
            value: Proposed value.

        Returns:
            A ``WriteOutcome`` keyed by the canonical key.
        """
        key = sanitize_key(key)
        if not key:
            return WriteOutcome.skipped(key, REASON_INVALID_KEY)
        if key not in self._cfg.write_allowlist:
            return WriteOutcome.skipped(key, REASON_NOT_ALLOWLISTED)

        domain = self._cfg.value_domains.get(key)
        if domain is not None and not any(type(value) is type(item) and value == item for item in domain):
            return WriteOutcome.errored(key, REASON_INVALID_VALUE)

        if self._cfg.resolvers.get(key) is OptionResolver.page_reference:
            page_id = self._resolve_page(value)
            if page_id is None:
                return WriteOutcome.errored(key, REASON_NOT_FOUND)
            value = page_id

        if self._store.update_option(key, value):
            return WriteOutcome.updated(key, value)

        if self._unchanged(self._store.get_option(key), value):
            return WriteOutcome.skipped(key, REASON_UNCHANGED)
        logger.warning(f"Option '{key}' on site {self._store.tenant_id} was not written")
        return WriteOutcome.errored(key, REASON_WRITE_FAILED)

    def write_batch(self, options: Mapping[Any, Any]) -> BatchWriteResult:
        """Apply up to ``max_batch`` writes in input order; the rest is dropped."""
        result = BatchWriteResult()
        for index, (key, value) in enumerate(options.items()):
            if index >= self._cfg.max_batch:
                logger.debug(f"Dropping {len(options) - index} option write(s) over the batch limit")
                break
            outcome = self.authorize_write(key, value)
            logger.debug(f"Option write '{outcome.key}': {outcome.status.value} {outcome.reason or ''}".rstrip())
            result.add(outcome)
        return result

    def _resolve_page(self, value: Any) -> Optional[int]:
        if is_numeric(value):
            page_id = _as_row_id(value)
            if page_id is None:
                return None
            page = self._store.get_post(page_id)
            if page is None or page.post_type != "page":
                return None
            return page_id
        if not isinstance(value, str):
            return None
        page = self._store.find_page_by_title(sanitize_text_field(value), self._cfg.page_reference_statuses)
        return page.id if page is not None else None

    def _unchanged(self, current: Any, proposed: Any) -> bool:
        if self._cfg.loose_unchanged_comparison:
            return current == proposed or str(current) == str(proposed)
        return type(current) is type(proposed) and current == proposed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def authorize_read(self, key: Any) -> Any:
        """
        Read one option through the blocklist.

        Returns:
            The redaction marker for blocklisted keys, booleans unchanged,
            other scalars as strings, containers unchanged and ``None`` for
            a missing option.
        """
        key = sanitize_key(key)
        if key in self._cfg.read_blocklist:
            return self._cfg.redaction_marker
        value = self._store.get_option(key)
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, (int, float, str)):
            return str(value)
        return value

    def read_batch(self, keys: Iterable[Any]) -> Dict[str, Any]:
        """Read up to ``max_batch`` keys; empty keys are ignored."""
        result: Dict[str, Any] = {}
        for index, raw_key in enumerate(keys):
            if index >= self._cfg.max_batch:
                break
            key = sanitize_key(raw_key)
            if key:
                result[key] = self.authorize_read(key)
        return result
