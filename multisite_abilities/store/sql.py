"""
SQLModel implementations of the data-access collaborators.

``SqlSiteDirectory`` serves the network scope and ``SqlContentStore`` the
tenant scope. Both open one session per call from an injected session
factory and return entities detached from it (the factory is built with
``expire_on_commit=False``).

The content store never stores the tenant it works on: it asks the injected
``tenant_resolver`` on every call, so switching the tenant context switches
the data every subsequent call resolves against.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session, col, select

from multisite_abilities.core.config import NetworkConfig
from multisite_abilities.utils.formatting import sanitize_title

from .base import is_row_id, utc_now
from .entities import (
    NetworkOption,
    Option,
    Plugin,
    Post,
    PostMeta,
    Site,
    SiteMembership,
    Term,
    TermRelationship,
    Theme,
    ThemeTemplate,
    User,
)
from .errors import DuplicateEntryError, EntryNotFoundError
from .interfaces import BlockTemplate

logger = logging.getLogger(__name__)

TEMPLATE_PART_AREA_META = "wp_template_part_area"
THEME_TAXONOMY = "wp_theme"

DEFAULT_SITE_OPTIONS: Dict[str, Any] = {
    "blogdescription": "",
    "show_on_front": "posts",
    "page_on_front": 0,
    "page_for_posts": 0,
    "posts_per_page": 10,
}


def _same_value(old: Any, new: Any) -> bool:
    return type(old) is type(new) and old == new


def _option_row(session: Session, site_id: int, name: str) -> Optional[Option]:
    return session.exec(select(Option).where(Option.site_id == site_id, Option.option_name == name)).first()


def _read_option(session_factory: sessionmaker[Session], site_id: int, name: str, default: Any) -> Any:
    if not is_row_id(site_id):
        return default
    with session_factory() as session:
        row = _option_row(session, site_id, name)
        return default if row is None else row.option_value


def _write_option(session_factory: sessionmaker[Session], site_id: int, name: str, value: Any) -> bool:
    """Insert or update a site option.

    Returns:
        ``False`` when the stored value is already identical or the database
        rejected the write, ``True`` otherwise.
    """
    with session_factory() as session:
        row = _option_row(session, site_id, name)
        if row is not None and _same_value(row.option_value, value):
            return False
        if row is None:
            row = Option(site_id=site_id, option_name=name, option_value=value)
        else:
            row.option_value = value
        session.add(row)
        try:
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception(f"Failed to write option '{name}' on site {site_id}")
            return False
    return True


def _site_url(site: Site, scheme: str) -> str:
    return f"{scheme}://{site.domain}{site.path}".rstrip("/")


class SqlSiteDirectory:
    """Network-scoped store backed by SQLModel tables."""

    def __init__(self, session_factory: sessionmaker[Session], network: NetworkConfig) -> None:
        self._session_factory = session_factory
        self._network = network

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    def get_site(self, site_id: int) -> Optional[Site]:
        if not is_row_id(site_id):
            return None
        with self._session_factory() as session:
            return session.get(Site, site_id)

    def site_exists(self, site_id: int) -> bool:
        return self.get_site(site_id) is not None

    def list_sites(self, *, search: Optional[str], limit: int, offset: int) -> Tuple[List[Site], int]:
        with self._session_factory() as session:
            conditions = []
            if search:
                conditions.append(or_(col(Site.domain).contains(search), col(Site.path).contains(search)))
            total = session.exec(select(func.count()).select_from(Site).where(*conditions)).one()
            sites = session.exec(select(Site).where(*conditions).order_by(col(Site.id)).offset(offset).limit(limit)).all()
            return list(sites), int(total)

    def create_site(self, *, domain: str, path: str, title: str, user_id: int, public: bool) -> Site:
        """Create a site with its default options and make ``user_id`` its administrator.

        Raises:
            DuplicateEntryError: A site already lives at ``domain`` + ``path``.
            EntryNotFoundError: The admin user does not exist.
        """
        with self._session_factory() as session:
            existing = session.exec(select(Site).where(Site.domain == domain, Site.path == path)).first()
            if existing is not None:
                raise DuplicateEntryError("Sorry, that site already exists!")
            admin = session.get(User, user_id)
            if admin is None:
                raise EntryNotFoundError(f"User ID {user_id} not found.")

            site = Site(domain=domain, path=path, public=public)
            session.add(site)
            session.flush()

            options: Dict[str, Any] = {
                "blogname": title,
                "admin_email": admin.user_email,
                "blog_public": int(public),
                **DEFAULT_SITE_OPTIONS,
            }
            default_theme = self._network_option(session, "default_theme")
            if default_theme:
                theme = session.get(Theme, default_theme)
                options["stylesheet"] = default_theme
                options["template"] = (theme.template if theme is not None else None) or default_theme
            for name, value in options.items():
                session.add(Option(site_id=site.id, option_name=name, option_value=value))
            session.add(SiteMembership(site_id=site.id, user_id=user_id, role="administrator"))
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateEntryError("Sorry, that site already exists!") from exc
            session.refresh(site)

        logger.info(f"Created site {site.id} at {domain}{path} for user {user_id}")
        return site

    def ensure_main_site(self, site_id: int) -> Site:
        """Create the main site row when the network has none yet."""
        with self._session_factory() as session:
            site = session.get(Site, site_id)
            if site is not None:
                return site
            site = Site(id=site_id, domain=self._network.domain, path=self._network.path)
            session.add(site)
            session.add(Option(site_id=site_id, option_name="blogname", option_value=self._network.domain))
            session.commit()
            session.refresh(site)
        logger.info(f"Bootstrapped main site {site_id} at {self._network.domain}{self._network.path}")
        return site

    def update_site_status(self, site_id: int, **flags: bool) -> None:
        with self._session_factory() as session:
            site = session.get(Site, site_id)
            if site is None:
                raise EntryNotFoundError(f"Site ID {site_id} not found.")
            for flag, value in flags.items():
                if flag not in ("public", "archived", "deleted", "spam", "mature"):
                    raise ValueError(f"Unknown site status flag: {flag}")
                setattr(site, flag, bool(value))
            site.last_updated = utc_now()
            session.add(site)
            session.commit()

    def site_url(self, site_id: int) -> str:
        site = self.get_site(site_id)
        return _site_url(site, self._network.scheme) if site is not None else ""

    def admin_url(self, site_id: int, path: str = "") -> str:
        base = self.site_url(site_id)
        return f"{base}/wp-admin/{path.lstrip('/')}" if base else ""

    def get_blog_option(self, site_id: int, name: str, default: Any = None) -> Any:
        return _read_option(self._session_factory, site_id, name, default)

    def update_blog_option(self, site_id: int, name: str, value: Any) -> bool:
        return _write_option(self._session_factory, site_id, name, value)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> Optional[User]:
        if not is_row_id(user_id):
            return None
        with self._session_factory() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._session_factory() as session:
            stmt = select(User).where(func.lower(User.user_email) == email.lower()).order_by(col(User.id))
            return session.exec(stmt).first()

    def get_user_by_login(self, login: str) -> Optional[User]:
        with self._session_factory() as session:
            return session.exec(select(User).where(func.lower(User.user_login) == login.lower())).first()

    def list_users(
        self, *, search: Optional[str], site_id: Optional[int], limit: int, offset: int
    ) -> Tuple[List[User], int]:
        if site_id and not is_row_id(site_id):
            return [], 0
        stmt = select(User)
        if site_id:
            stmt = stmt.join(SiteMembership, col(SiteMembership.user_id) == col(User.id)).where(
                SiteMembership.site_id == site_id
            )
        if search:
            stmt = stmt.where(
                or_(
                    col(User.user_login).contains(search),
                    col(User.user_email).contains(search),
                    col(User.display_name).contains(search),
                )
            )
        with self._session_factory() as session:
            total = session.exec(select(func.count()).select_from(stmt.subquery())).one()
            users = session.exec(stmt.order_by(col(User.user_login)).offset(offset).limit(limit)).all()
            return list(users), int(total)

    def create_user(self, *, login: str, email: str, first_name: str = "", last_name: str = "") -> User:
        """Create a network user.

        Raises:
            DuplicateEntryError: The login is already taken.
        """
        user = User(
            user_login=login,
            user_email=email,
            display_name=login,
            first_name=first_name,
            last_name=last_name,
        )
        with self._session_factory() as session:
            session.add(user)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateEntryError(f"Username '{login}' is already taken.") from exc
            session.refresh(user)
        logger.info(f"Created network user {user.id} ({login})")
        return user

    def add_user_to_site(self, site_id: int, user_id: int, role: str) -> None:
        with self._session_factory() as session:
            membership = session.exec(
                select(SiteMembership).where(SiteMembership.site_id == site_id, SiteMembership.user_id == user_id)
            ).first()
            if membership is None:
                membership = SiteMembership(site_id=site_id, user_id=user_id, role=role)
            else:
                membership.role = role
            session.add(membership)
            session.commit()

    def is_user_member_of_site(self, user_id: int, site_id: int) -> bool:
        if not (is_row_id(user_id) and is_row_id(site_id)):
            return False
        with self._session_factory() as session:
            membership = session.exec(
                select(SiteMembership).where(SiteMembership.site_id == site_id, SiteMembership.user_id == user_id)
            ).first()
            return membership is not None

    def list_site_users(self, site_id: int, *, limit: int) -> List[User]:
        users, _ = self.list_users(search=None, site_id=site_id, limit=limit, offset=0)
        return users

    # ------------------------------------------------------------------
    # Themes, plugins and network options
    # ------------------------------------------------------------------

    def list_themes(self) -> List[Theme]:
        with self._session_factory() as session:
            return list(session.exec(select(Theme).order_by(col(Theme.slug))).all())

    def get_theme(self, slug: str) -> Optional[Theme]:
        with self._session_factory() as session:
            return session.get(Theme, slug)

    def list_plugins(self) -> List[Plugin]:
        with self._session_factory() as session:
            return list(session.exec(select(Plugin).order_by(col(Plugin.file))).all())

    @staticmethod
    def _network_option(session: Session, name: str, default: Any = None) -> Any:
        row = session.exec(select(NetworkOption).where(NetworkOption.option_name == name)).first()
        return default if row is None else row.option_value

    def get_network_option(self, name: str, default: Any = None) -> Any:
        with self._session_factory() as session:
            return self._network_option(session, name, default)

    def update_network_option(self, name: str, value: Any) -> bool:
        with self._session_factory() as session:
            row = session.exec(select(NetworkOption).where(NetworkOption.option_name == name)).first()
            if row is not None and _same_value(row.option_value, value):
                return False
            if row is None:
                row = NetworkOption(option_name=name, option_value=value)
            else:
                row.option_value = value
            session.add(row)
            session.commit()
        return True


class SqlContentStore:
    """Tenant-scoped store backed by SQLModel tables."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        network: NetworkConfig,
        tenant_resolver: Callable[[], int],
    ) -> None:
        self._session_factory = session_factory
        self._network = network
        self._tenant_resolver = tenant_resolver

    @property
    def tenant_id(self) -> int:
        return self._tenant_resolver()

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    def get_option(self, name: str, default: Any = None) -> Any:
        return _read_option(self._session_factory, self.tenant_id, name, default)

    def update_option(self, name: str, value: Any) -> bool:
        return _write_option(self._session_factory, self.tenant_id, name, value)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def _own_post(self, session: Session, post_id: int) -> Optional[Post]:
        if not is_row_id(post_id):
            return None
        post = session.get(Post, post_id)
        if post is None or post.site_id != self.tenant_id:
            return None
        return post

    def _unique_slug(self, session: Session, post_type: str, slug: str, exclude_id: Optional[int] = None) -> str:
        candidate, suffix = slug, 2
        while True:
            stmt = select(Post.id).where(
                Post.site_id == self.tenant_id, Post.post_type == post_type, Post.post_name == candidate
            )
            if exclude_id is not None:
                stmt = stmt.where(Post.id != exclude_id)
            if session.exec(stmt).first() is None:
                return candidate
            candidate = f"{slug}-{suffix}"
            suffix += 1

    def get_post(self, post_id: int) -> Optional[Post]:
        with self._session_factory() as session:
            return self._own_post(session, post_id)

    def insert_post(self, **fields: Any) -> Post:
        now = utc_now()
        fields.setdefault("post_date", now)
        fields.setdefault("post_modified", now)
        post = Post(site_id=self.tenant_id, **fields)
        with self._session_factory() as session:
            slug = post.post_name or sanitize_title(post.post_title)
            if slug:
                post.post_name = self._unique_slug(session, post.post_type, slug)
            session.add(post)
            session.commit()
            session.refresh(post)
        logger.debug(f"Inserted {post.post_type} {post.id} on site {post.site_id}")
        return post

    def update_post(self, post_id: int, **fields: Any) -> Post:
        """Update the given columns of a post and bump its modification time.

        Raises:
            EntryNotFoundError: The post does not belong to the current tenant.
        """
        with self._session_factory() as session:
            post = self._own_post(session, post_id)
            if post is None:
                raise EntryNotFoundError("Invalid post ID.")
            if fields.get("post_name"):
                fields["post_name"] = self._unique_slug(session, post.post_type, fields["post_name"], post.id)
            for name, value in fields.items():
                setattr(post, name, value)
            post.post_modified = utc_now()
            session.add(post)
            session.commit()
            session.refresh(post)
            return post

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
    ) -> Tuple[List[Post], int]:
        """Page through the posts of the current tenant.

        ``term`` restricts to posts tagged with ``(taxonomy, slug)``.
        ``meta_match`` is called with the value stored under ``meta_key``
        (``None`` when absent) and filters after the SQL query, before paging.
        """
        site_id = self.tenant_id
        conditions = [
            Post.site_id == site_id,
            col(Post.post_type).in_(list(post_types)),
            col(Post.post_status).in_(list(statuses)),
        ]
        if search:
            conditions.append(
                or_(
                    col(Post.post_title).contains(search),
                    col(Post.post_excerpt).contains(search),
                    col(Post.post_content).contains(search),
                )
            )
        if term is not None:
            taxonomy, slug = term
            term_ids = select(Term.id).where(Term.site_id == site_id, Term.taxonomy == taxonomy, Term.slug == slug)
            tagged = select(TermRelationship.post_id).where(col(TermRelationship.term_id).in_(term_ids))
            conditions.append(col(Post.id).in_(tagged))

        if order_by == "title":
            ordering = (col(Post.post_title).asc(), col(Post.id).asc())
        else:
            ordering = (col(Post.post_date).desc(), col(Post.id).desc())
        stmt = select(Post).where(*conditions).order_by(*ordering)

        with self._session_factory() as session:
            if meta_key is None or meta_match is None:
                total = session.exec(select(func.count()).select_from(Post).where(*conditions)).one()
                posts = session.exec(stmt.offset(offset).limit(limit)).all()
                return list(posts), int(total)

            candidates = list(session.exec(stmt).all())
            values = self._meta_values(session, [post.id for post in candidates], meta_key)
            matched = [post for post in candidates if meta_match(values.get(post.id))]
            return matched[offset : offset + limit], len(matched)

    def find_page_by_title(self, title: str, statuses: Sequence[str]) -> Optional[Post]:
        with self._session_factory() as session:
            stmt = (
                select(Post)
                .where(
                    Post.site_id == self.tenant_id,
                    Post.post_type == "page",
                    Post.post_title == title,
                    col(Post.post_status).in_(list(statuses)),
                )
                .order_by(col(Post.id))
            )
            return session.exec(stmt).first()

    def _home_url(self) -> str:
        with self._session_factory() as session:
            site = session.get(Site, self.tenant_id)
        return _site_url(site, self._network.scheme) if site is not None else ""

    def permalink(self, post: Post) -> str:
        home = self._home_url()
        if post.post_status == "publish" and post.post_name:
            return f"{home}/{post.post_name}/"
        query = "page_id" if post.post_type == "page" else "p"
        return f"{home}/?{query}={post.id}"

    def edit_url(self, post_id: int) -> str:
        return f"{self._home_url()}/wp-admin/post.php?post={post_id}&action=edit"

    # ------------------------------------------------------------------
    # Post meta
    # ------------------------------------------------------------------

    @staticmethod
    def _meta_row(session: Session, site_id: int, post_id: int, key: str) -> Optional[PostMeta]:
        stmt = select(PostMeta).where(
            PostMeta.site_id == site_id, PostMeta.post_id == post_id, PostMeta.meta_key == key
        )
        return session.exec(stmt).first()

    def _meta_values(self, session: Session, post_ids: List[int], key: str) -> Dict[int, Any]:
        if not post_ids:
            return {}
        rows = session.exec(
            select(PostMeta).where(
                PostMeta.site_id == self.tenant_id,
                PostMeta.meta_key == key,
                col(PostMeta.post_id).in_(post_ids),
            )
        ).all()
        return {row.post_id: row.meta_value for row in rows}

    def get_post_meta(self, post_id: int, key: str, default: Any = "") -> Any:
        with self._session_factory() as session:
            row = self._meta_row(session, self.tenant_id, post_id, key)
            return default if row is None else row.meta_value

    def update_post_meta(self, post_id: int, key: str, value: Any) -> None:
        site_id = self.tenant_id
        with self._session_factory() as session:
            row = self._meta_row(session, site_id, post_id, key)
            if row is None:
                row = PostMeta(site_id=site_id, post_id=post_id, meta_key=key, meta_value=value)
            else:
                row.meta_value = value
            session.add(row)
            session.commit()

    # ------------------------------------------------------------------
    # Terms
    # ------------------------------------------------------------------

    def get_term_by_slug(self, taxonomy: str, slug: str) -> Optional[Term]:
        with self._session_factory() as session:
            stmt = select(Term).where(Term.site_id == self.tenant_id, Term.taxonomy == taxonomy, Term.slug == slug)
            return session.exec(stmt).first()

    def insert_term(self, taxonomy: str, *, name: str, slug: str) -> Term:
        term = Term(site_id=self.tenant_id, taxonomy=taxonomy, name=name, slug=slug)
        with self._session_factory() as session:
            session.add(term)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateEntryError(f"A term with the slug '{slug}' already exists in {taxonomy}.") from exc
            session.refresh(term)
            return term

    def get_post_terms(self, post_id: int, taxonomy: str) -> List[Term]:
        with self._session_factory() as session:
            stmt = (
                select(Term)
                .join(TermRelationship, col(TermRelationship.term_id) == col(Term.id))
                .where(
                    TermRelationship.site_id == self.tenant_id,
                    TermRelationship.post_id == post_id,
                    Term.taxonomy == taxonomy,
                )
                .order_by(col(Term.name))
            )
            return list(session.exec(stmt).all())

    def set_post_terms(self, post_id: int, taxonomy: str, term_ids: Sequence[int]) -> None:
        """Replace the terms of ``taxonomy`` assigned to a post."""
        site_id = self.tenant_id
        with self._session_factory() as session:
            taxonomy_ids = select(Term.id).where(Term.site_id == site_id, Term.taxonomy == taxonomy)
            current = session.exec(
                select(TermRelationship).where(
                    TermRelationship.site_id == site_id,
                    TermRelationship.post_id == post_id,
                    col(TermRelationship.term_id).in_(taxonomy_ids),
                )
            ).all()
            for relationship in current:
                session.delete(relationship)
            for term_id in dict.fromkeys(term_ids):
                session.add(TermRelationship(site_id=site_id, post_id=post_id, term_id=term_id))
            session.commit()

    # ------------------------------------------------------------------
    # Block templates
    # ------------------------------------------------------------------

    def _custom_templates(
        self, session: Session, template_type: str, theme: str, slug: Optional[str] = None
    ) -> List[Post]:
        site_id = self.tenant_id
        theme_terms = select(Term.id).where(Term.site_id == site_id, Term.taxonomy == THEME_TAXONOMY, Term.slug == theme)
        themed = select(TermRelationship.post_id).where(col(TermRelationship.term_id).in_(theme_terms))
        stmt = select(Post).where(
            Post.site_id == site_id,
            Post.post_type == template_type,
            Post.post_status != "trash",
            col(Post.id).in_(themed),
        )
        if slug is not None:
            stmt = stmt.where(Post.post_name == slug)
        return list(session.exec(stmt.order_by(col(Post.id))).all())

    def _from_post(
        self, session: Session, post: Post, theme: str, template_file: Optional[ThemeTemplate]
    ) -> BlockTemplate:
        area = None
        if post.post_type == "wp_template_part":
            meta = self._meta_row(session, self.tenant_id, post.id, TEMPLATE_PART_AREA_META)
            area = (meta.meta_value if meta is not None else None) or (
                template_file.area if template_file is not None else None
            ) or "uncategorized"
        return BlockTemplate(
            id=f"{theme}//{post.post_name}",
            theme=theme,
            slug=post.post_name,
            type=post.post_type,
            title=post.post_title or post.post_name,
            description=post.post_excerpt,
            content=post.post_content,
            source="custom",
            wp_id=post.id,
            modified=post.post_modified,
            area=area,
            has_theme_file=template_file is not None,
        )

    @staticmethod
    def _from_file(template_file: ThemeTemplate) -> BlockTemplate:
        area = None
        if template_file.template_type == "wp_template_part":
            area = template_file.area or "uncategorized"
        return BlockTemplate(
            id=f"{template_file.theme}//{template_file.slug}",
            theme=template_file.theme,
            slug=template_file.slug,
            type=template_file.template_type,
            title=template_file.title or template_file.slug,
            description=template_file.description,
            content=template_file.content,
            source="theme",
            area=area,
            has_theme_file=True,
        )

    def get_block_templates(self, template_type: str, *, area: Optional[str] = None) -> List[BlockTemplate]:
        """Templates of the active theme, customised copies replacing their file."""
        theme = self.get_option("stylesheet") or ""
        templates: List[BlockTemplate] = []
        with self._session_factory() as session:
            files = session.exec(
                select(ThemeTemplate)
                .where(ThemeTemplate.theme == theme, ThemeTemplate.template_type == template_type)
                .order_by(col(ThemeTemplate.slug))
            ).all()
            customised: Dict[str, Post] = {}
            for post in self._custom_templates(session, template_type, theme):
                customised.setdefault(post.post_name, post)
            for template_file in files:
                post = customised.pop(template_file.slug, None)
                if post is None:
                    templates.append(self._from_file(template_file))
                else:
                    templates.append(self._from_post(session, post, theme, template_file))
            for post in customised.values():
                templates.append(self._from_post(session, post, theme, None))

        if area:
            templates = [template for template in templates if template.area == area]
        return templates

    def get_block_template(self, template_id: str, template_type: str) -> Optional[BlockTemplate]:
        """Resolve ``theme//slug``. Theme files are only found for the active theme."""
        theme, separator, slug = template_id.partition("//")
        if not separator or not theme or not slug:
            return None
        active_theme = self.get_option("stylesheet")
        with self._session_factory() as session:
            template_file = session.exec(
                select(ThemeTemplate).where(
                    ThemeTemplate.theme == theme,
                    ThemeTemplate.template_type == template_type,
                    ThemeTemplate.slug == slug,
                )
            ).first()
            customised = self._custom_templates(session, template_type, theme, slug=slug)
            if customised:
                return self._from_post(session, customised[0], theme, template_file)
            if template_file is not None and theme == active_theme:
                return self._from_file(template_file)
        return None
