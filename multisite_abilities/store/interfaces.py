"""Data-access collaborators consumed by the abilities.

Two protocols split the store along the tenant boundary:

- ``SiteDirectory`` is network scoped. It answers questions about sites,
  users, memberships, installed themes and plugins, and network options,
  and can read or write the options of an explicitly named site.
- ``ContentStore`` is tenant scoped. Every call resolves against the tenant
  that is currently active in the tenant context (or the main site when no
  context is active): posts, post meta, terms, options and block templates.

Entities are returned detached from their session, so callers may read their
attributes freely after the call returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from .entities import Plugin, Post, Site, Term, Theme, User


@dataclass(frozen=True)
class BlockTemplate:
    """A template or template part as resolved for a site.

    ``source`` is ``"theme"`` for the file shipped by the theme and
    ``"custom"`` once the site saved an override post, whose id is ``wp_id``.
    """

    id: str
    theme: str
    slug: str
    type: str
    title: str
    description: str
    content: str
    source: str
    wp_id: Optional[int] = None
    modified: Optional[datetime] = None
    area: Optional[str] = None
    has_theme_file: bool = False

    @property
    def has_post(self) -> bool:
        return bool(self.wp_id)


class SiteDirectory(Protocol):
    """Network-scoped data access."""

    # Sites
    def get_site(self, site_id: int) -> Optional[Site]: ...

    def site_exists(self, site_id: int) -> bool: ...

    def list_sites(self, *, search: Optional[str], limit: int, offset: int) -> Tuple[List[Site], int]: ...

    def create_site(self, *, domain: str, path: str, title: str, user_id: int, public: bool) -> Site: ...

    def update_site_status(self, site_id: int, **flags: bool) -> None: ...

    def site_url(self, site_id: int) -> str: ...

    def admin_url(self, site_id: int, path: str = "") -> str: ...

    def get_blog_option(self, site_id: int, name: str, default: Any = None) -> Any: ...

    def update_blog_option(self, site_id: int, name: str, value: Any) -> bool: ...

    # Users
    def get_user(self, user_id: int) -> Optional[User]: ...

    def get_user_by_email(self, email: str) -> Optional[User]: ...

    def get_user_by_login(self, login: str) -> Optional[User]: ...

    def list_users(
        self, *, search: Optional[str], site_id: Optional[int], limit: int, offset: int
    ) -> Tuple[List[User], int]: ...

    def create_user(self, *, login: str, email: str, first_name: str = "", last_name: str = "") -> User: ...

    def add_user_to_site(self, site_id: int, user_id: int, role: str) -> None: ...

    def is_user_member_of_site(self, user_id: int, site_id: int) -> bool: ...

    def list_site_users(self, site_id: int, *, limit: int) -> List[User]: ...

    # Themes, plugins and network options
    def list_themes(self) -> List[Theme]: ...

    def get_theme(self, slug: str) -> Optional[Theme]: ...

    def list_plugins(self) -> List[Plugin]: ...

    def get_network_option(self, name: str, default: Any = None) -> Any: ...

    def update_network_option(self, name: str, value: Any) -> bool: ...


class ContentStore(Protocol):
    """Tenant-scoped data access. The tenant is resolved on every call."""

    @property
    def tenant_id(self) -> int: ...

    # Options
    def get_option(self, name: str, default: Any = None) -> Any: ...

    def update_option(self, name: str, value: Any) -> bool:
        """Write an option.

        Returns ``False`` both when the stored value already equals ``value``
        and when the write was rejected by the storage layer.
        """

    # Posts
    def get_post(self, post_id: int) -> Optional[Post]: ...

    def insert_post(self, **fields: Any) -> Post: ...

    def update_post(self, post_id: int, **fields: Any) -> Post: ...

    def query_posts(
        self,
        *,
        post_types: Sequence[str],
        statuses: Sequence[str],
        search: Optional[str] = None,
        term: Optional[Tuple[str, str]] = None,
        meta_key: Optional[str] = None,
        meta_match: Optional[Callable[[Any], bool]] = None,
        order_by: str = "date",
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Post], int]: ...

    def find_page_by_title(self, title: str, statuses: Sequence[str]) -> Optional[Post]: ...

    def permalink(self, post: Post) -> str: ...

    def edit_url(self, post_id: int) -> str: ...

    # Post meta
    def get_post_meta(self, post_id: int, key: str, default: Any = "") -> Any: ...

    def update_post_meta(self, post_id: int, key: str, value: Any) -> None: ...

    # Terms
    def get_term_by_slug(self, taxonomy: str, slug: str) -> Optional[Term]: ...

    def insert_term(self, taxonomy: str, *, name: str, slug: str) -> Term: ...

    def get_post_terms(self, post_id: int, taxonomy: str) -> List[Term]: ...

    def set_post_terms(self, post_id: int, taxonomy: str, term_ids: Sequence[int]) -> None: ...

    # Block templates
    def get_block_templates(self, template_type: str, *, area: Optional[str] = None) -> List[BlockTemplate]: ...

    def get_block_template(self, template_id: str, template_type: str) -> Optional[BlockTemplate]: ...
