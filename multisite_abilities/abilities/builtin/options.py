"""Site option abilities.

Both go through the field policy on the context: reads redact blocklisted
keys, writes are limited to the allowlist and classified per key.
"""

from typing import Any, Dict, List

from pydantic import Field

from ..base import AbilityContext, BaseAbility
from ..schemas.domain import AbilityResult
from ..schemas.io import AbilityInput, AbilityOutput, truncated_list
from .common import CATEGORY, SiteId

MAX_OPTIONS_PER_CALL = 20


class GetSiteOptionInput(AbilityInput):
    site_id: SiteId
    option_names: truncated_list(str, min_items=1, max_items=MAX_OPTIONS_PER_CALL) = Field(
        description=f"Option names to read (max {MAX_OPTIONS_PER_CALL})."
    )


class GetSiteOptionOutput(AbilityOutput):
    site_id: int = 0
    options: Dict[str, Any] = Field(default_factory=dict)


class UpdateSiteOptionInput(AbilityInput):
    site_id: SiteId
    options: Dict[str, Any] = Field(
        description=f"Key/value map of options to write (max {MAX_OPTIONS_PER_CALL} keys)."
    )


class UpdateSiteOptionOutput(AbilityOutput):
    site_id: int = 0
    updated: List[str] = Field(default_factory=list)
    skipped: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class GetSiteOptionAbility(BaseAbility):
    name = "vip-multisite/get-site-option"
    label = "Get Site Options"
    description = (
        "Reads one or more options from a specific network sub-site. Sensitive options are redacted."
    )
    category = CATEGORY.slug
    input_model = GetSiteOptionInput
    output_model = GetSiteOptionOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        options = ctx.options.read_batch(args["option_names"])
        return AbilityResult.ok(
            f"Retrieved {len(options)} option(s) from site {site_id}.",
            site_id=site_id,
            options=options,
        )


class UpdateSiteOptionAbility(BaseAbility):
    """Write a batch of site options.

    Each key is classified independently as updated, skipped or errored; a
    rejected key never prevents the others from being written. The call
    succeeds only when no key errored.
    """

    name = "vip-multisite/update-site-option"
    label = "Update Site Options"
    description = (
        "Updates one or more allowlisted options on a specific network sub-site. Keys outside the allowlist "
        "are skipped. page_on_front and page_for_posts accept a page ID or an exact page title."
    )
    category = CATEGORY.slug
    input_model = UpdateSiteOptionInput
    output_model = UpdateSiteOptionOutput

    def execute(self, ctx: AbilityContext, *, args: Dict[str, Any]) -> AbilityResult:
        site_id = args["site_id"]
        options = args["options"]
        if not options:
            return AbilityResult.fail(
                "options must be a non-empty key/value object.",
                site_id=site_id,
                updated=[],
                skipped=[],
                errors=[],
            )

        batch = ctx.options.write_batch(options)
        return AbilityResult(
            success=batch.success,
            message=(
                f"Site {site_id} options: {len(batch.updated)} updated, "
                f"{len(batch.skipped)} skipped, {len(batch.errors)} failed."
            ),
            data={
                "site_id": site_id,
                "updated": batch.updated,
                "skipped": batch.skipped,
                "errors": batch.errors,
            },
        )
