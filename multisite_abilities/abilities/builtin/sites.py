"""Network site abilities: list, create, inspect and update sites."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from multisite_abilities.store.errors import DuplicateEntryError, EntryNotFoundError, StoreError
from multisite_abilities.utils.formatting import (
    format_datetime,
    sanitize_email,
    sanitize_text_field,
    sanitize_title,
    sanitize_user,
    strip_all_tags,
)

from ..base import AbilityContext, BaseAbility
from ..schemas.domain import AbilityResult
from ..schemas.io import AbilityInput, AbilityOutput, Integer, PagedOutput
from .common import CATEGORY, PageNumber, PerPage, page_window, total_pages

logger = logging.getLogger(__name__)

MAX_USERNAME_ATTEMPTS = 100


class ListSitesInput(AbilityInput):
    per_page: PerPage = Field(50, description="Number of sites to return per page (default 50, max 100).")
    page: PageNumber = 1
    search: Optional[str] = Field(None, description="Optional search term to filter sites by domain or path.")
    include_options: bool = Field(
        True,
        description=(
            "Include blogname, description, and active_theme in results. Each requires a per-site "
            "lookup. Set false for lightweight listing on large networks. Default true."
        ),
    )


class ListSitesOutput(PagedOutput):
    sites: List[Dict[str, Any]] = Field(default_factory=list)


class CreateSiteInput(AbilityInput):
    domain: str = Field(
        description=(
            'The slug for the new site (e.g. "newsroom"). Used as subdomain or subdirectory '
            "depending on network config."
        )
    )
    title: str = Field(description="The display name / title of the new site.")
    admin_email: str = Field(
        description=(
            "Email address of the site administrator. Must match an existing network user unless "
            "create_user_if_missing is set to true."
        )
    )
    public: bool = Field(True, description="Whether the site is publicly visible (default true).")
    create_user_if_missing: bool = Field(
        False,
        description=(
            "If true and admin_email does not match an existing user, a new network user will be "
            "created automatically. Defaults to false."
        ),
    )


class CreateSiteOutput(AbilityOutput):
    site_id: int = 0
    id: int = 0
    url: str = ""


class GetSiteInput(AbilityInput):
    site_id: Integer = Field(description="The ID of the site to retrieve.")


class GetSiteOutput(AbilityOutput):
    id: int = 0
    domain: str = ""
    path: str = ""
    url: str = ""
    admin_url: str = ""
    name: str = ""
    description: str = ""
    registered: str = ""
    last_updated: str = ""
    public: bool = False
    archived: bool = False
    deleted: bool = False
    spam: bool = False
    active_theme: str = ""
    admin_email: str = ""
    users: List[Dict[str, Any]] = Field(default_factory=list)


class UpdateSiteInput(AbilityInput):
    site_id: Integer = Field(description="The ID of the site to update.")
    name: Optional[str] = Field(None, description="New display name for the site.")
    description: Optional[str] = Field(None, description="New tagline / description.")
    public: Optional[bool] = Field(None, description="Set whether the site is publicly visible.")
    admin_email: Optional[str] = Field(None, description="New admin email address.")


class ListSitesAbility(BaseAbility):
    name = "vip-multisite/list-sites"
    label = "List Network Sites"
    description = "Returns all sites registered in the WordPress multisite network."
    category = CATEGORY.slug
    tenant_field = None
    input_model = ListSitesInput
    output_model = ListSitesOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        limit, offset = page_window(args)
        search = sanitize_text_field(args["search"]) if args.get("search") else None
        sites, total = ctx.directory.list_sites(search=search, limit=limit, offset=offset)

        rows = []
        for site in sites:
            row: Dict[str, Any] = {
                "id": site.id,
                "domain": site.domain,
                "path": site.path,
                "url": ctx.directory.site_url(site.id),
                "registered": format_datetime(site.registered),
                "last_updated": format_datetime(site.last_updated),
                "public": bool(site.public),
                "archived": bool(site.archived),
                "deleted": bool(site.deleted),
                "spam": bool(site.spam),
            }
            if args["include_options"]:
                row["name"] = ctx.directory.get_blog_option(site.id, "blogname")
                row["description"] = ctx.directory.get_blog_option(site.id, "blogdescription")
                row["active_theme"] = ctx.directory.get_blog_option(site.id, "stylesheet")
            rows.append(row)

        return AbilityResult.ok(
            f"Retrieved {len(rows)} site(s).",
            sites=rows,
            total=total,
            total_pages=total_pages(total, limit),
        )


class CreateSiteAbility(BaseAbility):
    """Create a sub-site, optionally creating its administrator first.

    The ``domain`` input is a slug: it becomes a subdomain of the network
    domain or a sub-directory of the network path depending on the install.
    """

    name = "vip-multisite/create-site"
    label = "Create Network Site"
    description = "Creates a new site in the WordPress multisite network."
    category = CATEGORY.slug
    tenant_field = None
    input_model = CreateSiteInput
    output_model = CreateSiteOutput

    def _failure(self, message: str) -> AbilityResult:
        return AbilityResult.fail(message, **self.zero_output())

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        network = ctx.settings.network
        slug = sanitize_title(args["domain"])
        if not slug:
            return self._failure("Invalid site slug: the domain value produced an empty slug after sanitization.")

        if network.subdomain_install:
            domain, path = f"{slug}.{network.domain}", "/"
        else:
            domain, path = network.domain, f"{network.path}{slug}/"

        admin_email = sanitize_email(args["admin_email"])
        if not admin_email:
            return self._failure("Invalid email address.")

        user = ctx.directory.get_user_by_email(admin_email)
        if user is not None:
            user_id = user.id
        elif not args["create_user_if_missing"]:
            return self._failure(
                f"No network user found for '{admin_email}'. "
                "Set create_user_if_missing to true to auto-create a user."
            )
        else:
            username = self._unique_username(ctx, admin_email)
            if username is None:
                return self._failure(
                    f"Could not generate a unique username for '{admin_email}'. Too many collisions."
                )
            try:
                user_id = ctx.directory.create_user(login=username, email=admin_email).id
            except StoreError:
                logger.exception(f"Failed to create administrator for '{admin_email}'")
                return self._failure(f"Failed to create user for '{admin_email}'.")
            logger.info(f"New user notification queued for user {user_id} ({admin_email})")

        title = args["title"]
        try:
            site = ctx.directory.create_site(
                domain=domain,
                path=path,
                title=strip_all_tags(title),
                user_id=user_id,
                public=args["public"],
            )
        except (DuplicateEntryError, EntryNotFoundError) as exc:
            return self._failure(str(exc))

        return AbilityResult.ok(
            f'Site "{title}" created successfully (ID: {site.id}).',
            site_id=site.id,
            id=site.id,
            url=ctx.directory.site_url(site.id),
        )

    @staticmethod
    def _unique_username(ctx: AbilityContext, email: str) -> Optional[str]:
        base = sanitize_user(email.split("@", 1)[0], strict=True)
        if not base:
            return None
        username, suffix = base, 1
        while ctx.directory.get_user_by_login(username) is not None and suffix <= MAX_USERNAME_ATTEMPTS:
            username = f"{base}{suffix}"
            suffix += 1
        if ctx.directory.get_user_by_login(username) is not None:
            return None
        return username


class GetSiteAbility(BaseAbility):
    name = "vip-multisite/get-site"
    label = "Get Site Details"
    description = "Returns detailed information about a specific site in the network."
    category = CATEGORY.slug
    tenant_field = None
    input_model = GetSiteInput
    output_model = GetSiteOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        site = ctx.directory.get_site(site_id)
        if site is None:
            return AbilityResult.fail(f"Site ID {site_id} not found.")

        users = [
            {"id": user.id, "username": user.user_login, "email": user.user_email}
            for user in ctx.directory.list_site_users(site_id, limit=20)
        ]
        option = ctx.directory.get_blog_option
        return AbilityResult.ok(
            "Site retrieved successfully.",
            id=site.id,
            domain=site.domain,
            path=site.path,
            url=ctx.directory.site_url(site_id),
            admin_url=ctx.directory.admin_url(site_id),
            name=option(site_id, "blogname"),
            description=option(site_id, "blogdescription"),
            registered=format_datetime(site.registered),
            last_updated=format_datetime(site.last_updated),
            public=bool(site.public),
            archived=bool(site.archived),
            deleted=bool(site.deleted),
            spam=bool(site.spam),
            active_theme=option(site_id, "stylesheet"),
            admin_email=option(site_id, "admin_email"),
            users=users,
        )


class UpdateSiteAbility(BaseAbility):
    """Update the name, tagline, visibility or admin e-mail of a site.

    Every input is validated before the first write, so a rejected admin
    e-mail leaves the site untouched.
    """

    name = "vip-multisite/update-site"
    label = "Update Site Settings"
    description = "Updates settings (name, description, public visibility) for a network site."
    category = CATEGORY.slug
    tenant_field = None
    input_model = UpdateSiteInput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        if not ctx.directory.site_exists(site_id):
            return AbilityResult.fail(f"Site ID {site_id} not found.")

        if not any(field in args for field in ("name", "description", "public", "admin_email")):
            return AbilityResult.fail("No fields provided to update.")

        admin_email = None
        if "admin_email" in args:
            admin_email = sanitize_email(args["admin_email"])
            if not admin_email:
                return AbilityResult.fail("Invalid admin email address.")
            if ctx.directory.get_user_by_email(admin_email) is None:
                return AbilityResult.fail(
                    "Admin email must belong to an existing network user. "
                    f"No user found for '{admin_email}'."
                )

        updated = []
        if "name" in args:
            ctx.directory.update_blog_option(site_id, "blogname", sanitize_text_field(args["name"]))
            updated.append("name")
        if "description" in args:
            ctx.directory.update_blog_option(site_id, "blogdescription", sanitize_text_field(args["description"]))
            updated.append("description")
        if "public" in args:
            ctx.directory.update_blog_option(site_id, "blog_public", int(args["public"]))
            ctx.directory.update_site_status(site_id, public=args["public"])
            updated.append("public")
        if admin_email is not None:
            ctx.directory.update_blog_option(site_id, "admin_email", admin_email)
            updated.append("admin_email")

        return AbilityResult.ok(f"Updated fields for site {site_id}: {', '.join(updated)}.")
