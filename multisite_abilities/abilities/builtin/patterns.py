"""Synced pattern (``wp_block``) abilities.

The sync status is stored in post meta: ``"unsynced"`` for a standard
pattern, empty or absent for a fully synced one.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import Field

from multisite_abilities.store.entities import Post
from multisite_abilities.store.errors import DuplicateEntryError, StoreError
from multisite_abilities.utils.formatting import (
    format_datetime,
    sanitize_text_field,
    sanitize_title,
    strip_all_tags,
    ucwords_from_slug,
)

from ..base import AbilityContext, BaseAbility
from ..schemas.domain import AbilityResult, SyncStatus
from ..schemas.io import (
    AbilityInput,
    Integer,
    PagedOutput,
    PostIdOutput,
    choice,
    truncated_list,
)
from .common import (
    CATEGORY,
    PageNumber,
    PerPage,
    SiteId,
    page_window,
    sanitize_body,
    total_pages,
)

logger = logging.getLogger(__name__)

WP_BLOCK = "wp_block"
PATTERN_CATEGORY_TAXONOMY = "wp_pattern_category"
SYNC_STATUS_META = "wp_pattern_sync_status"
MAX_CATEGORIES = 20

SyncStatusChoice = choice(status.value for status in SyncStatus)
CategorySlugs = truncated_list(str, max_items=MAX_CATEGORIES)


class ListPatternsInput(AbilityInput):
    site_id: SiteId
    category: Optional[str] = Field(None, description="Optional: filter by wp_pattern_category slug.")
    sync_status: Optional[SyncStatusChoice] = Field(
        None,
        description='Optional: filter by sync status. "synced" for fully synced, "unsynced" for standard patterns.',
    )
    search: Optional[str] = Field(None, description="Optional keyword to search pattern titles.")
    per_page: PerPage = 50
    page: PageNumber = 1


class ListPatternsOutput(PagedOutput):
    patterns: List[Dict[str, Any]] = Field(default_factory=list)


class GetPatternInput(AbilityInput):
    site_id: SiteId
    post_id: Integer = Field(description="The post ID of the synced pattern.")


class GetPatternOutput(PostIdOutput):
    title: str = ""
    content: str = ""
    slug: str = ""
    sync_status: str = ""
    categories: List[str] = Field(default_factory=list)
    date: str = ""
    modified: str = ""


class CreatePatternInput(AbilityInput):
    site_id: SiteId
    title: str = Field(description="The title of the pattern.")
    content: str = Field(description="Block markup content for the pattern.")
    sync_status: SyncStatusChoice = Field(
        SyncStatus.synced.value,
        description=(
            'Sync behaviour. "synced" (default) means changes propagate to all instances; '
            '"unsynced" makes it a standard pattern.'
        ),
    )
    categories: Optional[CategorySlugs] = Field(
        None,
        description=(
            f"Optional array of wp_pattern_category slugs to assign (max {MAX_CATEGORIES}). "
            "Categories are created if they do not exist."
        ),
    )


class UpdatePatternInput(AbilityInput):
    site_id: SiteId
    post_id: Integer = Field(description="The post ID of the pattern to update.")
    title: Optional[str] = Field(None, description="New title.")
    content: Optional[str] = Field(None, description="New block markup content.")
    sync_status: Optional[SyncStatusChoice] = Field(None, description='New sync status: "synced" or "unsynced".')
    categories: Optional[CategorySlugs] = Field(
        None,
        description=(
            f"Replace all categories with this list of wp_pattern_category slugs (max {MAX_CATEGORIES}). "
            "Missing categories will be created."
        ),
    )


def _sync_meta(sync_status: str) -> str:
    return SyncStatus.unsynced.value if sync_status == SyncStatus.unsynced.value else ""


def resolve_pattern_categories(ctx: AbilityContext, slugs: Iterable[Any]) -> List[int]:
    """Term ids for category slugs, creating the missing categories.

    At most ``MAX_CATEGORIES`` slugs are considered. Slugs that sanitize to
    nothing are dropped, and a category that cannot be created is skipped.
    """
    term_ids: List[int] = []
    for raw_slug in list(slugs)[:MAX_CATEGORIES]:
        slug = sanitize_title(raw_slug)
        if not slug:
            continue
        term = ctx.content.get_term_by_slug(PATTERN_CATEGORY_TAXONOMY, slug)
        if term is None:
            try:
                term = ctx.content.insert_term(PATTERN_CATEGORY_TAXONOMY, name=ucwords_from_slug(slug), slug=slug)
            except DuplicateEntryError:
                logger.warning(f"Could not create pattern category '{slug}'")
                continue
        term_ids.append(term.id)
    return term_ids


def _is_unsynced(value: Any) -> bool:
    return value == SyncStatus.unsynced.value


def _is_synced(value: Any) -> bool:
    return value in (None, "")


_SYNC_MATCHERS: Dict[str, Callable[[Any], bool]] = {
    SyncStatus.synced.value: _is_synced,
    SyncStatus.unsynced.value: _is_unsynced,
}


def _pattern_fields(ctx: AbilityContext, post: Post) -> Dict[str, Any]:
    return {
        "post_id": post.id,
        "title": post.post_title,
        "slug": post.post_name,
        "sync_status": ctx.content.get_post_meta(post.id, SYNC_STATUS_META) or SyncStatus.synced.value,
        "categories": [term.slug for term in ctx.content.get_post_terms(post.id, PATTERN_CATEGORY_TAXONOMY)],
        "date": format_datetime(post.post_date),
        "modified": format_datetime(post.post_modified),
    }


def _get_pattern(ctx: AbilityContext, post_id: int) -> Optional[Post]:
    post = ctx.content.get_post(post_id)
    if post is None or post.post_type != WP_BLOCK:
        return None
    return post


def _not_found(post_id: int, site_id: int) -> str:
    return f"Pattern (wp_block) with ID {post_id} not found on site {site_id}."


class ListPatternsAbility(BaseAbility):
    name = "vip-multisite/list-patterns"
    label = "List Synced Patterns"
    description = (
        "Returns all synced patterns (wp_block posts) on a specific sub-site, with optional filtering by "
        "category or sync status."
    )
    category = CATEGORY.slug
    input_model = ListPatternsInput
    output_model = ListPatternsOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        limit, offset = page_window(args)

        search = sanitize_text_field(args["search"]) if args.get("search") else None
        term = None
        if args.get("category"):
            term = (PATTERN_CATEGORY_TAXONOMY, sanitize_text_field(args["category"]))

        meta_match = _SYNC_MATCHERS.get(args.get("sync_status") or "")

        posts, total = ctx.content.query_posts(
            post_types=[WP_BLOCK],
            statuses=["publish"],
            search=search or None,
            term=term,
            meta_key=SYNC_STATUS_META if meta_match is not None else None,
            meta_match=meta_match,
            order_by="title",
            limit=limit,
            offset=offset,
        )
        rows = [_pattern_fields(ctx, post) for post in posts]
        return AbilityResult.ok(
            f"Retrieved {len(rows)} pattern(s) from site {site_id}.",
            patterns=rows,
            total=total,
            total_pages=total_pages(total, limit),
        )


class GetPatternAbility(BaseAbility):
    name = "vip-multisite/get-pattern"
    label = "Get Synced Pattern"
    description = (
        "Retrieves a synced pattern (wp_block) from a sub-site by its post ID, including full block markup "
        "content, categories, and sync status."
    )
    category = CATEGORY.slug
    input_model = GetPatternInput
    output_model = GetPatternOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id, post_id = args["site_id"], args["post_id"]
        post = _get_pattern(ctx, post_id)
        if post is None:
            return AbilityResult.fail(_not_found(post_id, site_id))

        fields = _pattern_fields(ctx, post)
        fields["content"] = post.post_content
        return AbilityResult.ok("Pattern retrieved successfully.", **fields)


class CreatePatternAbility(BaseAbility):
    name = "vip-multisite/create-pattern"
    label = "Create Synced Pattern"
    description = (
        "Creates a new synced pattern (wp_block) on a sub-site. The pattern can be fully synced (edits "
        "propagate everywhere it is used) or unsynced (a standard reusable pattern)."
    )
    category = CATEGORY.slug
    input_model = CreatePatternInput
    output_model = PostIdOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        try:
            post = ctx.content.insert_post(
                post_type=WP_BLOCK,
                post_title=strip_all_tags(args["title"]),
                post_content=sanitize_body(args["content"]),
                post_status="publish",
            )
        except StoreError as exc:
            return AbilityResult.fail(str(exc), post_id=0)

        ctx.content.update_post_meta(post.id, SYNC_STATUS_META, _sync_meta(args["sync_status"]))
        if args.get("categories"):
            term_ids = resolve_pattern_categories(ctx, args["categories"])
            if term_ids:
                ctx.content.set_post_terms(post.id, PATTERN_CATEGORY_TAXONOMY, term_ids)

        return AbilityResult.ok(
            f'Pattern "{args["title"]}" created on site {site_id} (ID: {post.id}).',
            post_id=post.id,
        )


class UpdatePatternAbility(BaseAbility):
    """Update the title, content, sync status or categories of a pattern.

    ``categories`` replaces the whole set; an empty list clears it.
    """

    name = "vip-multisite/update-pattern"
    label = "Update Synced Pattern"
    description = (
        "Updates an existing synced pattern (wp_block) on a sub-site. You can change its title, content, sync "
        "status, or categories. Only include fields you want to change."
    )
    category = CATEGORY.slug
    input_model = UpdatePatternInput
    output_model = PostIdOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id, post_id = args["site_id"], args["post_id"]
        if _get_pattern(ctx, post_id) is None:
            return AbilityResult.fail(_not_found(post_id, site_id), post_id=post_id)

        fields: Dict[str, Any] = {}
        updated: List[str] = []
        if "title" in args:
            fields["post_title"] = strip_all_tags(args["title"])
            updated.append("title")
        if "content" in args:
            fields["post_content"] = sanitize_body(args["content"])
            updated.append("content")

        if fields:
            try:
                ctx.content.update_post(post_id, **fields)
            except StoreError as exc:
                return AbilityResult.fail(str(exc), post_id=post_id)

        if "sync_status" in args:
            ctx.content.update_post_meta(post_id, SYNC_STATUS_META, _sync_meta(args["sync_status"]))
            updated.append("sync_status")
        if "categories" in args:
            term_ids = resolve_pattern_categories(ctx, args["categories"])
            ctx.content.set_post_terms(post_id, PATTERN_CATEGORY_TAXONOMY, term_ids)
            updated.append("categories")

        if not updated:
            return AbilityResult.fail("No fields provided to update.", post_id=post_id)

        return AbilityResult.ok(
            f"Pattern {post_id} on site {site_id} updated. Fields changed: {', '.join(updated)}.",
            post_id=post_id,
        )
