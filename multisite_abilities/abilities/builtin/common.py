"""Helpers shared by the builtin abilities."""

import math
from typing import Annotated, Any, Dict, Tuple

from pydantic import Field

from multisite_abilities.store.base import MAX_ROW_ID
from multisite_abilities.utils.formatting import sanitize_content

from ..identity import UNFILTERED_HTML, current_user_can
from ..schemas.domain import AbilityCategory
from ..schemas.io import Integer, clamped_int

CATEGORY = AbilityCategory(
    slug="vip-multisite",
    label="VIP Multisite",
    description="WordPress multisite network management abilities.",
)

SiteId = Annotated[Integer, Field(description="The ID of the sub-site.")]
PerPage = clamped_int(1, 100)
PageNumber = Annotated[clamped_int(1), Field(description="Page number for pagination (default 1).")]


def page_window(args: Dict[str, Any]) -> Tuple[int, int]:
    """``(limit, offset)`` for the validated ``per_page``/``page`` pair.

    The offset is capped at the largest row id, past which every page is empty.
    """
    per_page = args["per_page"]
    return per_page, min((args["page"] - 1) * per_page, MAX_ROW_ID)


def total_pages(total: int, per_page: int) -> int:
    return int(math.ceil(total / per_page))


def sanitize_body(content: Any) -> str:
    """Store markup raw for ``unfiltered_html`` callers, filtered otherwise."""
    return sanitize_content(content, unfiltered=current_user_can(UNFILTERED_HTML))
