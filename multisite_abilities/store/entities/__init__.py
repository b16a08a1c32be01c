"""
Database entity models.

This package contains all database entity models organized by business domain.

Modules:
- sites: Sites of the network and user memberships
- users: Network users
- posts: Site documents and their metadata
- terms: Taxonomy terms and their assignment to posts
- options: Per-site and network-wide options
- themes: Installed themes and their file-backed templates
- plugins: Installed plugins
"""

from .options import NetworkOption, Option
from .plugins import Plugin
from .posts import Post, PostMeta
from .sites import Site, SiteMembership
from .terms import Term, TermRelationship
from .themes import Theme, ThemeTemplate
from .users import User

__all__ = [
    "NetworkOption",
    "Option",
    "Plugin",
    "Post",
    "PostMeta",
    "Site",
    "SiteMembership",
    "Term",
    "TermRelationship",
    "Theme",
    "ThemeTemplate",
    "User",
]
