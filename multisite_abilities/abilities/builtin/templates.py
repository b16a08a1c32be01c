"""Site editor abilities for block templates and template parts.

Templates are addressed by ``theme//slug``. A template shipped as a theme
file has no post until it is first edited: the first update stores a
"custom" override post tagged with the theme, every later update edits
that post.
"""

import logging
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import Field

from multisite_abilities.store.errors import StoreError
from multisite_abilities.store.interfaces import BlockTemplate
from multisite_abilities.store.sql import TEMPLATE_PART_AREA_META, THEME_TAXONOMY
from multisite_abilities.utils.formatting import (
    format_datetime,
    sanitize_text_field,
    sanitize_textarea_field,
    strip_all_tags,
)

from ..base import AbilityContext, BaseAbility
from ..schemas.domain import AbilityResult, TemplatePartArea
from ..schemas.io import AbilityInput, AbilityOutput, PostIdOutput
from .common import CATEGORY, SiteId, sanitize_body

logger = logging.getLogger(__name__)

WP_TEMPLATE = "wp_template"
WP_TEMPLATE_PART = "wp_template_part"

_AREA_HELP = '"header", "footer", "sidebar", or "uncategorized"'


class ListTemplatesInput(AbilityInput):
    site_id: SiteId


class ListTemplatesOutput(AbilityOutput):
    templates: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = 0


class GetTemplateInput(AbilityInput):
    site_id: SiteId
    template_id: str = Field(
        description='The template ID in theme-slug//slug format (e.g. "twentytwentyfour//index").'
    )


class GetTemplateOutput(AbilityOutput):
    id: str = ""
    slug: str = ""
    title: str = ""
    description: str = ""
    content: str = ""
    theme: str = ""
    source: str = ""
    has_post: bool = False
    post_id: int = 0


class UpdateTemplateInput(AbilityInput):
    site_id: SiteId
    template_id: str = Field(description="The template ID in theme-slug//slug format.")
    content: Optional[str] = Field(None, description="New block markup content for the template.")
    title: Optional[str] = Field(None, description="Optional new title for the template.")
    description: Optional[str] = Field(None, description="Optional new description.")


class ListTemplatePartsInput(AbilityInput):
    site_id: SiteId
    area: Optional[str] = Field(None, description=f"Optional area filter: {_AREA_HELP}.")


class ListTemplatePartsOutput(AbilityOutput):
    template_parts: List[Dict[str, Any]] = Field(default_factory=list)
    total: int = 0


class GetTemplatePartInput(AbilityInput):
    site_id: SiteId
    part_id: str = Field(
        description='The template part ID in theme-slug//slug format (e.g. "twentytwentyfour//header").'
    )


class GetTemplatePartOutput(GetTemplateOutput):
    area: str = ""


class UpdateTemplatePartInput(AbilityInput):
    site_id: SiteId
    part_id: str = Field(description="The template part ID in theme-slug//slug format.")
    content: Optional[str] = Field(None, description="New block markup content.")
    title: Optional[str] = Field(None, description="Optional new title.")
    description: Optional[str] = Field(None, description="Optional new description.")
    area: Optional[str] = Field(None, description=f"Optional new area: {_AREA_HELP}.")


def _collect_changes(args: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """Post fields for the provided ``content``/``title``/``description`` inputs."""
    changes: Dict[str, Any] = {}
    updated: List[str] = []
    if "content" in args:
        changes["post_content"] = sanitize_body(args["content"])
        updated.append("content")
    if "title" in args:
        changes["post_title"] = strip_all_tags(args["title"])
        updated.append("title")
    if "description" in args:
        changes["post_excerpt"] = sanitize_textarea_field(args["description"])
        updated.append("description")
    return changes, updated


def save_template_override(ctx: AbilityContext, template: BlockTemplate, changes: Dict[str, Any]) -> int:
    """Write ``changes`` to the override post of ``template``, creating it if needed.

    A new override starts from the theme file: title, content and
    description are copied unless ``changes`` replaces them, and the post is
    tagged with the template's theme.

    Returns:
        The id of the override post.

    Raises:
        StoreError: The override post could not be written.
    """
    if template.has_post:
        if changes:
            ctx.content.update_post(template.wp_id, **changes)
        return template.wp_id

    fields = dict(changes)
    fields["post_type"] = template.type
    fields["post_status"] = "publish"
    fields["post_name"] = template.slug
    fields.setdefault("post_title", template.title or template.slug)
    fields.setdefault("post_content", template.content)
    if "post_excerpt" not in fields and template.description:
        fields["post_excerpt"] = template.description

    post = ctx.content.insert_post(**fields)
    theme_term = ctx.content.get_term_by_slug(THEME_TAXONOMY, template.theme)
    if theme_term is None:
        theme_term = ctx.content.insert_term(THEME_TAXONOMY, name=template.theme, slug=template.theme)
    ctx.content.set_post_terms(post.id, THEME_TAXONOMY, [theme_term.id])
    logger.info(f"Created {template.type} override {post.id} for '{template.id}' on site {ctx.content.tenant_id}")
    return post.id


class _TemplateAbilityMixin:
    """Wording and template type shared by the template and template part abilities."""

    template_type: ClassVar[str] = WP_TEMPLATE
    noun: ClassVar[str] = "Template"
    id_field: ClassVar[str] = "template_id"

    def _not_found(self, template_id: str, site_id: int) -> str:
        return f"{self.noun} '{template_id}' not found on site {site_id}."


class _ListTemplatesBase(_TemplateAbilityMixin, BaseAbility):
    result_field: ClassVar[str] = "templates"
    plural: ClassVar[str] = "template(s)"

    def _row(self, template: BlockTemplate) -> Dict[str, Any]:
        return {
            "id": template.id,
            "slug": template.slug,
            "title": template.title or template.slug,
            "description": template.description or "",
            "theme": template.theme,
            "source": template.source,
            "type": template.type,
            "has_post": template.has_post,
            "post_id": template.wp_id or None,
            "modified": format_datetime(template.modified) if template.modified else None,
        }

    def _area_filter(self, args: Dict[str, Any]) -> Optional[str]:
        return None

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        templates = ctx.content.get_block_templates(self.template_type, area=self._area_filter(args))
        rows = [self._row(template) for template in templates]
        return AbilityResult.ok(
            f"Retrieved {len(rows)} {self.plural} from site {site_id}.",
            **{self.result_field: rows, "total": len(rows)},
        )


class _GetTemplateBase(_TemplateAbilityMixin, BaseAbility):
    def _fields(self, template: BlockTemplate) -> Dict[str, Any]:
        return {
            "id": template.id,
            "slug": template.slug,
            "title": template.title or template.slug,
            "description": template.description or "",
            "content": template.content,
            "theme": template.theme,
            "source": template.source,
            "has_post": template.has_post,
            "post_id": template.wp_id or 0,
        }

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        template_id = sanitize_text_field(args[self.id_field])
        template = ctx.content.get_block_template(template_id, self.template_type)
        if template is None:
            return AbilityResult.fail(self._not_found(template_id, site_id))
        return AbilityResult.ok(f"{self.noun} retrieved successfully.", **self._fields(template))


class ListTemplatesAbility(_ListTemplatesBase):
    name = "vip-multisite/list-templates"
    label = "List Site Editor Templates"
    description = (
        "Returns all templates (wp_template) for a specific network sub-site. Includes both theme-supplied "
        "and user-customised templates."
    )
    category = CATEGORY.slug
    input_model = ListTemplatesInput
    output_model = ListTemplatesOutput


class GetTemplateAbility(_GetTemplateBase):
    name = "vip-multisite/get-template"
    label = "Get Site Editor Template"
    description = (
        "Retrieves a single template by its ID (theme-slug//slug format), including its block markup content."
    )
    category = CATEGORY.slug
    input_model = GetTemplateInput
    output_model = GetTemplateOutput


class UpdateTemplateAbility(_TemplateAbilityMixin, BaseAbility):
    name = "vip-multisite/update-template"
    label = "Update Site Editor Template"
    description = (
        "Updates a template on a sub-site. Only include fields you want to change. If the template has not "
        "been customised yet, this creates the custom override post. Accepts the template ID in "
        "theme-slug//slug format."
    )
    category = CATEGORY.slug
    input_model = UpdateTemplateInput
    output_model = PostIdOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        template_id = sanitize_text_field(args["template_id"])
        template = ctx.content.get_block_template(template_id, self.template_type)
        if template is None:
            return AbilityResult.fail(self._not_found(template_id, site_id), post_id=0)

        changes, updated = _collect_changes(args)
        if not changes:
            return AbilityResult.fail("No fields provided to update.", post_id=0)

        try:
            post_id = save_template_override(ctx, template, changes)
        except StoreError as exc:
            return AbilityResult.fail(str(exc), post_id=0)

        return AbilityResult.ok(
            f'Template "{template_id}" updated on site {site_id} (post ID: {post_id}). '
            f"Fields changed: {', '.join(updated)}.",
            post_id=post_id,
        )


class ListTemplatePartsAbility(_ListTemplatesBase):
    name = "vip-multisite/list-template-parts"
    label = "List Site Editor Template Parts"
    description = (
        "Returns all template parts (wp_template_part) for a specific network sub-site, such as headers, "
        "footers, and sidebars."
    )
    category = CATEGORY.slug
    template_type = WP_TEMPLATE_PART
    noun = "Template part"
    id_field = "part_id"
    result_field = "template_parts"
    plural = "template part(s)"
    input_model = ListTemplatePartsInput
    output_model = ListTemplatePartsOutput

    def _row(self, template: BlockTemplate) -> Dict[str, Any]:
        row = super()._row(template)
        row.pop("type")
        row["area"] = template.area
        return row

    def _area_filter(self, args: Dict[str, Any]) -> Optional[str]:
        if not args.get("area"):
            return None
        return sanitize_text_field(args["area"]) or None


class GetTemplatePartAbility(_GetTemplateBase):
    name = "vip-multisite/get-template-part"
    label = "Get Site Editor Template Part"
    description = "Retrieves a single template part by its ID (theme-slug//slug format), including its block markup."
    category = CATEGORY.slug
    template_type = WP_TEMPLATE_PART
    noun = "Template part"
    id_field = "part_id"
    input_model = GetTemplatePartInput
    output_model = GetTemplatePartOutput

    def _fields(self, template: BlockTemplate) -> Dict[str, Any]:
        fields = super()._fields(template)
        fields["area"] = template.area
        return fields


class UpdateTemplatePartAbility(_TemplateAbilityMixin, BaseAbility):
    """Update a template part, creating its override post on first edit.

    ``area`` lives in post meta rather than on the post, so an area-only
    update of an existing override writes no post fields at all. A freshly
    created override keeps the area of the theme file unless a new one was
    given.
    """

    name = "vip-multisite/update-template-part"
    label = "Update Site Editor Template Part"
    description = (
        "Updates a template part (header, footer, etc.) on a sub-site. Only include fields you want to change. "
        "Creates the custom override post if the part has not been customised yet."
    )
    category = CATEGORY.slug
    template_type = WP_TEMPLATE_PART
    noun = "Template part"
    id_field = "part_id"
    input_model = UpdateTemplatePartInput
    output_model = PostIdOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        part_id = sanitize_text_field(args["part_id"])
        part = ctx.content.get_block_template(part_id, self.template_type)
        if part is None:
            return AbilityResult.fail(self._not_found(part_id, site_id), post_id=0)

        changes, updated = _collect_changes(args)

        area: Optional[str] = None
        if "area" in args:
            area = sanitize_text_field(args["area"])
            allowed = [value.value for value in TemplatePartArea]
            if area not in allowed:
                return AbilityResult.fail(
                    f"Invalid area '{area}'. Must be one of: {', '.join(allowed)}.", post_id=0
                )
            updated.append("area")

        if not changes and area is None:
            return AbilityResult.fail("No fields provided to update.", post_id=0)

        created = not part.has_post
        try:
            post_id = save_template_override(ctx, part, changes)
        except StoreError as exc:
            return AbilityResult.fail(str(exc), post_id=0)

        if area is not None:
            ctx.content.update_post_meta(post_id, TEMPLATE_PART_AREA_META, area)
        elif created and part.area:
            ctx.content.update_post_meta(post_id, TEMPLATE_PART_AREA_META, part.area)

        return AbilityResult.ok(
            f'Template part "{part_id}" updated on site {site_id} (post ID: {post_id}). '
            f"Fields changed: {', '.join(updated)}.",
            post_id=post_id,
        )
