"""Theme abilities: list installed themes and activate one on a site."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from multisite_abilities.utils.formatting import sanitize_text_field, strip_all_tags

from ..base import AbilityContext, BaseAbility
from ..schemas.domain import AbilityResult
from ..schemas.io import AbilityInput, AbilityOutput, Integer
from .common import CATEGORY

logger = logging.getLogger(__name__)

ALLOWED_THEMES_OPTION = "allowedthemes"


class ListThemesInput(AbilityInput):
    site_id: Optional[Integer] = Field(
        None, description="Optional site ID to check which theme is active on that site."
    )


class ListThemesOutput(AbilityOutput):
    themes: List[Dict[str, Any]] = Field(default_factory=list)


class ActivateThemeInput(AbilityInput):
    site_id: Integer = Field(description="The ID of the site to activate the theme on.")
    theme_slug: str = Field(description="The theme stylesheet slug (directory name) to activate.")
    network_enable: bool = Field(
        True, description="Whether to also network-enable the theme if not already (default true)."
    )


class ActivateThemeOutput(AbilityOutput):
    theme_name: str = ""
    site_url: str = ""


class ListThemesAbility(BaseAbility):
    name = "vip-multisite/list-themes"
    label = "List Network Themes"
    description = "Returns all themes installed on the network, including which are network-enabled."
    category = CATEGORY.slug
    tenant_field = None
    input_model = ListThemesInput
    output_model = ListThemesOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        allowed = ctx.directory.get_network_option(ALLOWED_THEMES_OPTION) or {}
        site_id = args.get("site_id")
        site_active = ctx.directory.get_blog_option(site_id, "stylesheet") if site_id else None

        themes = [
            {
                "slug": theme.slug,
                "name": theme.name,
                "version": theme.version,
                "author": strip_all_tags(theme.author),
                "description": strip_all_tags(theme.description),
                "network_enabled": theme.slug in allowed,
                "active_on_site": site_active == theme.slug,
            }
            for theme in ctx.directory.list_themes()
        ]
        return AbilityResult.ok(f"Retrieved {len(themes)} theme(s).", themes=themes)


class ActivateThemeAbility(BaseAbility):
    """Activate an installed theme on one site.

    The theme is network-enabled first unless ``network_enable`` is false.
    The site's ``stylesheet`` and ``template`` options are written inside a
    tenant switch to the target site.
    """

    name = "vip-multisite/activate-theme"
    label = "Activate Theme on Site"
    description = "Activates a theme on a specific network site, network-enabling it first if necessary."
    category = CATEGORY.slug
    tenant_field = None
    input_model = ActivateThemeInput
    output_model = ActivateThemeOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        theme_slug = sanitize_text_field(args["theme_slug"])

        if not ctx.directory.site_exists(site_id):
            return AbilityResult.fail(f"Site ID {site_id} does not exist.", theme_name="", site_url="")

        theme = ctx.directory.get_theme(theme_slug)
        if theme is None:
            return AbilityResult.fail(
                f"Theme '{theme_slug}' is not installed.",
                theme_name="",
                site_url=ctx.directory.site_url(site_id),
            )

        if args["network_enable"]:
            allowed = dict(ctx.directory.get_network_option(ALLOWED_THEMES_OPTION) or {})
            if theme.slug not in allowed:
                allowed[theme.slug] = True
                ctx.directory.update_network_option(ALLOWED_THEMES_OPTION, allowed)
                logger.info(f"Network-enabled theme '{theme.slug}'")

        with ctx.tenants.switch_to(site_id):
            ctx.content.update_option("stylesheet", theme.slug)
            ctx.content.update_option("template", theme.template or theme.slug)

        return AbilityResult.ok(
            f'Theme "{theme.name}" activated on site '
            f'"{ctx.directory.get_blog_option(site_id, "blogname")}" (ID: {site_id}).',
            theme_name=theme.name,
            site_url=ctx.directory.site_url(site_id),
        )
