"""Network plugin abilities."""

from typing import Any, Dict, List

from pydantic import Field

from multisite_abilities.utils.formatting import strip_all_tags

from ..base import AbilityContext, BaseAbility
from ..schemas.domain import AbilityResult
from ..schemas.io import AbilityOutput
from .common import CATEGORY

ACTIVE_SITEWIDE_PLUGINS_OPTION = "active_sitewide_plugins"


class ListNetworkPluginsOutput(AbilityOutput):
    plugins: List[Dict[str, Any]] = Field(default_factory=list)


class ListNetworkPluginsAbility(BaseAbility):
    """List network-activated plugins, in activation order.

    A plugin that is activated but no longer installed is still listed, under
    its file name and with empty metadata.
    """

    name = "vip-multisite/list-network-plugins"
    label = "List Network Plugins"
    description = "Returns all plugins that are network-activated across the multisite."
    category = CATEGORY.slug
    tenant_field = None
    output_model = ListNetworkPluginsOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        network_active = ctx.directory.get_network_option(ACTIVE_SITEWIDE_PLUGINS_OPTION) or {}
        installed = {plugin.file: plugin for plugin in ctx.directory.list_plugins()}

        plugins = []
        for plugin_file in network_active:
            plugin = installed.get(plugin_file)
            plugins.append(
                {
                    "file": plugin_file,
                    "name": plugin.name if plugin is not None else plugin_file,
                    "version": plugin.version if plugin is not None else "",
                    "author": plugin.author if plugin is not None else "",
                    "description": strip_all_tags(plugin.description) if plugin is not None else "",
                }
            )
        return AbilityResult.ok(f"Retrieved {len(plugins)} network-active plugin(s).", plugins=plugins)
