"""Network user abilities."""

import logging
from typing import Any, Dict, List, Optional

from pydantic import Field

from multisite_abilities.store.errors import StoreError
from multisite_abilities.utils.formatting import (
    format_datetime,
    sanitize_email,
    sanitize_text_field,
    sanitize_user,
)

from ..base import AbilityContext, BaseAbility
from ..schemas.domain import AbilityResult, SiteRole
from ..schemas.io import AbilityInput, AbilityOutput, Integer, PagedOutput, choice
from .common import CATEGORY, PageNumber, PerPage, page_window, total_pages

logger = logging.getLogger(__name__)

SiteRoleChoice = choice(role.value for role in SiteRole)


class ListNetworkUsersInput(AbilityInput):
    per_page: PerPage = 50
    page: PageNumber = 1
    search: Optional[str] = Field(None, description="Search by username, email, or display name.")
    site_id: Optional[Integer] = Field(None, description="Filter to users belonging to a specific site.")


class ListNetworkUsersOutput(PagedOutput):
    users: List[Dict[str, Any]] = Field(default_factory=list)


class AddUserToSiteInput(AbilityInput):
    site_id: Integer = Field(description="The ID of the site.")
    user_id: Integer = Field(description="The ID of the user to add.")
    role: SiteRoleChoice = Field(description="The role to assign.")


class CreateNetworkUserInput(AbilityInput):
    username: str = Field(description="Login username.")
    email: str = Field(description="Email address.")
    first_name: Optional[str] = Field(None, description="Optional first name.")
    last_name: Optional[str] = Field(None, description="Optional last name.")
    send_notification: bool = Field(True, description="Send welcome email (default true).")


class CreateNetworkUserOutput(AbilityOutput):
    user_id: int = 0


class ListNetworkUsersAbility(BaseAbility):
    name = "vip-multisite/list-network-users"
    label = "List Network Users"
    description = "Returns all users registered in the WordPress multisite network."
    category = CATEGORY.slug
    tenant_field = None
    input_model = ListNetworkUsersInput
    output_model = ListNetworkUsersOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        limit, offset = page_window(args)
        search = sanitize_text_field(args["search"]) if args.get("search") else None
        users, total = ctx.directory.list_users(
            search=search or None,
            site_id=args.get("site_id") or None,
            limit=limit,
            offset=offset,
        )
        rows = [
            {
                "id": user.id,
                "username": user.user_login,
                "display_name": user.display_name,
                "email": user.user_email,
                "registered": format_datetime(user.user_registered),
                "super_admin": user.is_super_admin,
            }
            for user in users
        ]
        return AbilityResult.ok(
            f"Retrieved {len(rows)} user(s).",
            users=rows,
            total=total,
            total_pages=total_pages(total, limit),
        )


class AddUserToSiteAbility(BaseAbility):
    name = "vip-multisite/add-user-to-site"
    label = "Add User to Site"
    description = "Adds an existing network user to a specific site with a given role."
    category = CATEGORY.slug
    tenant_field = None
    input_model = AddUserToSiteInput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id, user_id, role = args["site_id"], args["user_id"], args["role"]

        if not ctx.directory.site_exists(site_id):
            return AbilityResult.fail(f"Site ID {site_id} not found.")
        user = ctx.directory.get_user(user_id)
        if user is None:
            return AbilityResult.fail(f"User ID {user_id} not found.")

        ctx.directory.add_user_to_site(site_id, user_id, role)
        blogname = ctx.directory.get_blog_option(site_id, "blogname")
        return AbilityResult.ok(f'User "{user.user_login}" added to site "{blogname}" with role "{role}".')


class CreateNetworkUserAbility(BaseAbility):
    name = "vip-multisite/create-network-user"
    label = "Create Network User"
    description = "Creates a new user account on the WordPress multisite network."
    category = CATEGORY.slug
    tenant_field = None
    input_model = CreateNetworkUserInput
    output_model = CreateNetworkUserOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        username = sanitize_user(args["username"], strict=True)
        email = sanitize_email(args["email"])

        if not username:
            return AbilityResult.fail("Invalid username after sanitization.", user_id=0)
        if not email:
            return AbilityResult.fail("Invalid email address.", user_id=0)
        if ctx.directory.get_user_by_login(username) is not None:
            return AbilityResult.fail(f"Username '{username}' is already taken.", user_id=0)
        if ctx.directory.get_user_by_email(email) is not None:
            return AbilityResult.fail(f"Email '{email}' is already registered.", user_id=0)

        try:
            user = ctx.directory.create_user(
                login=username,
                email=email,
                first_name=sanitize_text_field(args["first_name"]) if args.get("first_name") else "",
                last_name=sanitize_text_field(args["last_name"]) if args.get("last_name") else "",
            )
        except StoreError:
            logger.exception(f"Failed to create network user '{username}'")
            return AbilityResult.fail(f"Failed to create user '{username}'.", user_id=0)

        if args["send_notification"]:
            logger.info(f"New user notification queued for user {user.id} ({email})")

        return AbilityResult.ok(f"User '{username}' created successfully (ID: {user.id}).", user_id=user.id)
