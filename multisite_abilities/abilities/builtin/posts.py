"""Content abilities: create, read, update and list posts and pages on a site.

All four run inside the tenant context of ``site_id``; the content store
resolves every call against that site.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from multisite_abilities.store.errors import EntryNotFoundError
from multisite_abilities.store.entities import Post
from multisite_abilities.utils.formatting import (
    format_datetime,
    sanitize_text_field,
    sanitize_textarea_field,
    sanitize_title,
    strip_all_tags,
)

from ..base import AbilityContext, BaseAbility
from ..identity import current_caller
from ..schemas.domain import AbilityResult, PostStatus, PostType
from ..schemas.io import (
    AbilityInput,
    Integer,
    PagedOutput,
    PostIdOutput,
    choice,
    coerced_choice,
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

PAGE_TEMPLATE_META = "_wp_page_template"

# Statuses matched by "any": everything except trash.
ANY_STATUSES = ("publish", "draft", "pending", "private", "future")

_POST_TYPES = [post_type.value for post_type in PostType]
_STATUSES = [status.value for status in PostStatus]
_WRITABLE_STATUSES = ["draft", "publish", "pending", "private"]

PostTypeChoice = coerced_choice(_POST_TYPES, PostType.page.value)
WritableStatus = coerced_choice(_WRITABLE_STATUSES, PostStatus.draft.value)
StatusFilter = coerced_choice(["any"] + _STATUSES, "any")


class CreatePostInput(AbilityInput):
    site_id: Integer = Field(description="The ID of the sub-site to create the content on.")
    title: str = Field(description="The title of the post or page.")
    content: str = Field(
        "",
        description="The body content. Accepts raw HTML or Gutenberg block markup. Leave empty for a blank post.",
    )
    post_type: PostTypeChoice = Field(PostType.page.value, description='The post type to create (default: "page").')
    status: WritableStatus = Field(PostStatus.draft.value, description='The publishing status (default: "draft").')
    excerpt: Optional[str] = Field(None, description="Optional short excerpt / summary for the post.")
    slug: Optional[str] = Field(None, description="Optional URL slug. Auto-generated from title if omitted.")
    template: Optional[str] = Field(
        None,
        description='Optional page template filename (e.g. "templates/full-width.html"). Only applicable to pages.',
    )
    author_id: Optional[Integer] = Field(
        None,
        description="Optional user ID to set as the post author. Defaults to the currently authenticated user.",
    )


class PostLinkOutput(PostIdOutput):
    url: str = Field("", description="The public permalink.")
    edit_url: str = Field("", description="The wp-admin edit URL.")


class GetPostInput(AbilityInput):
    site_id: SiteId
    post_id: Integer = Field(description="The ID of the post or page to retrieve.")


class GetPostOutput(PostLinkOutput):
    title: str = ""
    content: str = ""
    excerpt: str = ""
    status: str = ""
    post_type: str = ""
    slug: str = ""
    template: str = ""
    date: str = ""
    modified: str = ""


class UpdatePostInput(AbilityInput):
    site_id: SiteId
    post_id: Integer = Field(description="The ID of the post or page to update.")
    title: Optional[str] = Field(None, description="New title.")
    content: Optional[str] = Field(
        None, description="New body content. Accepts raw HTML or Gutenberg block markup."
    )
    excerpt: Optional[str] = Field(None, description="New excerpt / summary.")
    status: Optional[choice(_STATUSES)] = Field(None, description="New publishing status.")
    slug: Optional[str] = Field(None, description="New URL slug.")
    template: Optional[str] = Field(
        None, description="New page template filename. Pass an empty string to reset to the default template."
    )


class ListPostsInput(AbilityInput):
    site_id: Integer = Field(description="The ID of the sub-site to query.")
    post_type: PostTypeChoice = Field(PostType.page.value, description='Post type to list (default: "page").')
    status: StatusFilter = Field(
        "any", description='Filter by publishing status. Use "any" for all statuses (default: "any").'
    )
    search: Optional[str] = Field(None, description="Optional keyword to search in post titles and content.")
    per_page: PerPage = 20
    page: PageNumber = 1


class ListPostsOutput(PagedOutput):
    posts: List[Dict[str, Any]] = Field(default_factory=list)


class CreatePostAbility(BaseAbility):
    name = "vip-multisite/create-post"
    label = "Create Post or Page on Site"
    description = (
        "Creates a post or page on a specific network sub-site. Supports setting title, content "
        "(raw HTML/blocks), status, and post type."
    )
    category = CATEGORY.slug
    input_model = CreatePostInput
    output_model = PostLinkOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        post_type, status = args["post_type"], args["status"]

        fields: Dict[str, Any] = {
            "post_title": strip_all_tags(args["title"]),
            "post_content": sanitize_body(args["content"]),
            "post_status": status,
            "post_type": post_type,
            "post_author": current_caller().user_id,
        }
        if args.get("excerpt"):
            fields["post_excerpt"] = sanitize_textarea_field(args["excerpt"])
        if args.get("slug"):
            fields["post_name"] = sanitize_title(args["slug"])

        author_id = args.get("author_id")
        if author_id:
            if not ctx.directory.is_user_member_of_site(author_id, site_id):
                return AbilityResult.fail(
                    f"User ID {author_id} is not a member of site {site_id}.", **self.zero_output()
                )
            fields["post_author"] = author_id

        post = ctx.content.insert_post(**fields)
        if post_type == PostType.page.value and args.get("template"):
            ctx.content.update_post_meta(post.id, PAGE_TEMPLATE_META, sanitize_text_field(args["template"]))

        return AbilityResult.ok(
            f'{post_type.capitalize()} "{args["title"]}" created on site {site_id} '
            f"(ID: {post.id}, status: {status}).",
            post_id=post.id,
            url=ctx.content.permalink(post),
            edit_url=ctx.content.edit_url(post.id),
        )


class GetPostAbility(BaseAbility):
    name = "vip-multisite/get-post"
    label = "Get Post or Page from Site"
    description = (
        "Retrieves a post or page from a specific network sub-site by ID, including its content, status, "
        "and edit URL."
    )
    category = CATEGORY.slug
    input_model = GetPostInput
    output_model = GetPostOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id, post_id = args["site_id"], args["post_id"]
        post = ctx.content.get_post(post_id)
        if post is None:
            return AbilityResult.fail(f"Post ID {post_id} not found on site {site_id}.")

        return AbilityResult.ok(
            "Post retrieved successfully.",
            post_id=post.id,
            title=post.post_title,
            content=post.post_content,
            excerpt=post.post_excerpt,
            status=post.post_status,
            post_type=post.post_type,
            slug=post.post_name,
            url=ctx.content.permalink(post),
            edit_url=ctx.content.edit_url(post.id),
            template=ctx.content.get_post_meta(post.id, PAGE_TEMPLATE_META) or "",
            date=format_datetime(post.post_date),
            modified=format_datetime(post.post_modified),
        )


class UpdatePostAbility(BaseAbility):
    """Update the given fields of a post or page.

    Only fields present in the input are written. ``template`` is stored in
    post meta and is ignored for anything but pages.
    """

    name = "vip-multisite/update-post"
    label = "Update Post or Page on Site"
    description = (
        "Updates the title, content, status, or other fields of an existing post or page on a specific "
        "network sub-site. Only include fields you want to change."
    )
    category = CATEGORY.slug
    input_model = UpdatePostInput
    output_model = PostLinkOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id, post_id = args["site_id"], args["post_id"]

        def failure(message: str) -> AbilityResult:
            return AbilityResult.fail(message, post_id=post_id, url="", edit_url="")

        post = ctx.content.get_post(post_id)
        if post is None:
            return failure(f"Post ID {post_id} not found on site {site_id}.")

        fields: Dict[str, Any] = {}
        updated = []
        if "title" in args:
            fields["post_title"] = strip_all_tags(args["title"])
            updated.append("title")
        if "content" in args:
            fields["post_content"] = sanitize_body(args["content"])
            updated.append("content")
        if "excerpt" in args:
            fields["post_excerpt"] = sanitize_textarea_field(args["excerpt"])
            updated.append("excerpt")
        if "status" in args:
            fields["post_status"] = args["status"]
            updated.append("status")
        if "slug" in args:
            fields["post_name"] = sanitize_title(args["slug"])
            updated.append("slug")

        if not updated and "template" not in args:
            return failure("No fields provided to update.")

        if fields:
            try:
                post = ctx.content.update_post(post_id, **fields)
            except EntryNotFoundError as exc:
                return failure(str(exc))

        if "template" in args and post.post_type == PostType.page.value:
            ctx.content.update_post_meta(post_id, PAGE_TEMPLATE_META, sanitize_text_field(args["template"]))
            updated.append("template")

        return AbilityResult.ok(
            f"Post {post_id} on site {site_id} updated. Fields changed: {', '.join(updated)}.",
            post_id=post_id,
            url=ctx.content.permalink(post),
            edit_url=ctx.content.edit_url(post_id),
        )


class ListPostsAbility(BaseAbility):
    name = "vip-multisite/list-posts"
    label = "List Posts or Pages on Site"
    description = (
        "Returns a paginated list of posts or pages on a specific network sub-site, with optional filtering "
        "by status or search term."
    )
    category = CATEGORY.slug
    input_model = ListPostsInput
    output_model = ListPostsOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        limit, offset = page_window(args)
        status = args["status"]
        search = sanitize_text_field(args["search"]) if args.get("search") else None

        posts, total = ctx.content.query_posts(
            post_types=[args["post_type"]],
            statuses=ANY_STATUSES if status == "any" else [status],
            search=search or None,
            order_by="date",
            limit=limit,
            offset=offset,
        )
        rows = [_post_row(ctx, post) for post in posts]
        return AbilityResult.ok(
            f"Retrieved {len(rows)} post(s) from site {site_id}.",
            posts=rows,
            total=total,
            total_pages=total_pages(total, limit),
        )


def _post_row(ctx: AbilityContext, post: Post) -> Dict[str, Any]:
    return {
        "post_id": post.id,
        "title": post.post_title,
        "status": post.post_status,
        "slug": post.post_name,
        "date": format_datetime(post.post_date),
        "modified": format_datetime(post.post_modified),
        "url": ctx.content.permalink(post),
        "edit_url": ctx.content.edit_url(post.id),
    }
