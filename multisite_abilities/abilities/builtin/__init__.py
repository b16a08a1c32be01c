"""The builtin ``vip-multisite`` abilities.

``register_builtin_abilities`` must be called while the registry's
registration window is open::

    with registry.registration_window():
        register_builtin_abilities(registry)
"""

from __future__ import annotations

from typing import List, Type

from ..base import BaseAbility
from ..registry import AbilityRegistry
from .common import CATEGORY
from .options import GetSiteOptionAbility, UpdateSiteOptionAbility
from .patterns import CreatePatternAbility, GetPatternAbility, ListPatternsAbility, UpdatePatternAbility
from .plugins import ListNetworkPluginsAbility
from .posts import CreatePostAbility, GetPostAbility, ListPostsAbility, UpdatePostAbility
from .sites import CreateSiteAbility, GetSiteAbility, ListSitesAbility, UpdateSiteAbility
from .templates import (
    GetTemplateAbility,
    GetTemplatePartAbility,
    ListTemplatePartsAbility,
    ListTemplatesAbility,
    UpdateTemplateAbility,
    UpdateTemplatePartAbility,
)
from .themes import ActivateThemeAbility, ListThemesAbility
from .users import AddUserToSiteAbility, CreateNetworkUserAbility, ListNetworkUsersAbility

BUILTIN_ABILITIES: List[Type[BaseAbility]] = [
    # Network
    ListSitesAbility,
    CreateSiteAbility,
    GetSiteAbility,
    UpdateSiteAbility,
    ListThemesAbility,
    ActivateThemeAbility,
    ListNetworkUsersAbility,
    AddUserToSiteAbility,
    CreateNetworkUserAbility,
    ListNetworkPluginsAbility,
    # Content
    CreatePostAbility,
    GetPostAbility,
    UpdatePostAbility,
    ListPostsAbility,
    GetSiteOptionAbility,
    UpdateSiteOptionAbility,
    # Site editor
    ListTemplatesAbility,
    GetTemplateAbility,
    UpdateTemplateAbility,
    ListTemplatePartsAbility,
    GetTemplatePartAbility,
    UpdateTemplatePartAbility,
    ListPatternsAbility,
    GetPatternAbility,
    CreatePatternAbility,
    UpdatePatternAbility,
]


def register_builtin_abilities(registry: AbilityRegistry) -> None:
    registry.register_category(CATEGORY)
    for ability_cls in BUILTIN_ABILITIES:
        registry.register(ability_cls())


__all__ = ["BUILTIN_ABILITIES", "CATEGORY", "register_builtin_abilities"]
