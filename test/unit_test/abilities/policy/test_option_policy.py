"""Unit tests for the site option field policy."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence

import pytest

from multisite_abilities.abilities.policy import FieldPolicy, OptionPolicyConfig, WriteStatus
from multisite_abilities.abilities.policy.option_policy import is_numeric


class FakeContentStore:
    """Option and page storage for a single tenant, held in dicts."""

    tenant_id = 2

    def __init__(self, options: Optional[Dict[str, Any]] = None, pages: Optional[List[Any]] = None) -> None:
        self.options: Dict[str, Any] = dict(options or {})
        self.pages = list(pages or [])
        self.rejected: set = set()
        self.writes: List[str] = []

    def get_option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    def update_option(self, name: str, value: Any) -> bool:
        current = self.options.get(name)
        if name in self.rejected:
            return False
        if type(current) is type(value) and current == value:
            return False
        self.options[name] = value
        self.writes.append(name)
        return True

    def get_post(self, post_id: int):
        return next((page for page in self.pages if page.id == post_id), None)

    def find_page_by_title(self, title: str, statuses: Sequence[str]):
        matches = [page for page in self.pages if page.post_title == title and page.post_status in statuses]
        return min(matches, key=lambda page: page.id) if matches else None


def _page(page_id: int, title: str, status: str = "publish", post_type: str = "page"):
    return SimpleNamespace(id=page_id, post_title=title, post_status=status, post_type=post_type)


@pytest.fixture
def store() -> FakeContentStore:
    return FakeContentStore(
        options={"blogname": "News", "show_on_front": "posts", "page_on_front": 0, "auth_key": "s3cr3t"},
        pages=[
            _page(10, "Home"),
            _page(11, "Home", status="draft"),
            _page(12, "Trashed", status="trash"),
            _page(20, "Hello", post_type="post"),
        ],
    )


@pytest.fixture
def policy(store) -> FieldPolicy:
    return FieldPolicy(OptionPolicyConfig(), store)


class TestAuthorizeWrite:
    def test_allowlisted_key_is_written(self, policy, store):
        outcome = policy.authorize_write("blogname", "Newsroom")
        assert outcome.status is WriteStatus.updated
        assert store.options["blogname"] == "Newsroom"

    def test_key_outside_allowlist_is_skipped(self, policy, store):
        outcome = policy.authorize_write("siteurl", "https://evil.example")
        assert outcome.status is WriteStatus.skipped
        assert outcome.reason == "not allowlisted"
        assert "siteurl" not in store.writes

    def test_key_is_canonicalised(self, policy, store):
        outcome = policy.authorize_write("BlogName", "Newsroom")
        assert outcome.key == "blogname"
        assert outcome.status is WriteStatus.updated

    def test_empty_key_is_skipped(self, policy):
        outcome = policy.authorize_write("!!!", "value")
        assert outcome.status is WriteStatus.skipped
        assert outcome.reason == "Invalid option key."

    def test_unchanged_value_is_skipped(self, policy):
        outcome = policy.authorize_write("blogname", "News")
        assert outcome.status is WriteStatus.skipped
        assert outcome.reason == "value unchanged"

    def test_rejected_write_is_an_error(self, policy, store):
        store.rejected.add("blogdescription")
        outcome = policy.authorize_write("blogdescription", "Latest stories")
        assert outcome.status is WriteStatus.errored
        assert outcome.reason == "write failed"

    def test_same_string_form_is_not_unchanged_by_default(self, store):
        store.options["posts_per_page"] = 10
        store.rejected.add("posts_per_page")
        outcome = FieldPolicy(OptionPolicyConfig(), store).authorize_write("posts_per_page", "10")
        assert outcome.status is WriteStatus.errored

    def test_loose_comparison_treats_string_form_as_unchanged(self, store):
        store.options["posts_per_page"] = 10
        store.rejected.add("posts_per_page")
        config = OptionPolicyConfig(loose_unchanged_comparison=True)
        outcome = FieldPolicy(config, store).authorize_write("posts_per_page", "10")
        assert outcome.status is WriteStatus.skipped
        assert outcome.reason == "value unchanged"

    @pytest.mark.parametrize("value", ["invalid", "Page", 1, None, ["page"]])
    def test_value_outside_domain_is_an_error(self, policy, store, value):
        outcome = policy.authorize_write("show_on_front", value)
        assert outcome.status is WriteStatus.errored
        assert outcome.reason == "invalid value"
        assert store.options["show_on_front"] == "posts"

    def test_value_inside_domain_is_written(self, policy, store):
        assert policy.authorize_write("show_on_front", "page").status is WriteStatus.updated
        assert store.options["show_on_front"] == "page"


class TestPageReference:
    def test_numeric_id_is_stored(self, policy, store):
        outcome = policy.authorize_write("page_on_front", 10)
        assert outcome.status is WriteStatus.updated
        assert store.options["page_on_front"] == 10

    def test_numeric_string_is_stored_as_id(self, policy, store):
        outcome = policy.authorize_write("page_on_front", "10")
        assert outcome.value == 10
        assert store.options["page_on_front"] == 10

    def test_title_resolves_to_lowest_id(self, policy, store):
        outcome = policy.authorize_write("page_for_posts", "Home")
        assert outcome.status is WriteStatus.updated
        assert store.options["page_for_posts"] == 10

    def test_title_outside_statuses_is_not_found(self, policy):
        outcome = policy.authorize_write("page_on_front", "Trashed")
        assert outcome.status is WriteStatus.errored
        assert outcome.reason == "not found"

    def test_id_of_a_post_is_not_found(self, policy):
        outcome = policy.authorize_write("page_on_front", 20)
        assert outcome.status is WriteStatus.errored
        assert outcome.reason == "not found"

    def test_unknown_id_is_not_found(self, policy):
        assert policy.authorize_write("page_on_front", 999).reason == "not found"

    def test_float_string_is_truncated_to_an_id(self, policy, store):
        outcome = policy.authorize_write("page_on_front", " 10.0 ")
        assert outcome.status is WriteStatus.updated
        assert store.options["page_on_front"] == 10

    @pytest.mark.parametrize("value", ["1e400", "-1e400", float("inf"), float("nan"), 2**63, "99999999999999999999"])
    def test_id_no_row_can_have_is_not_found(self, policy, store, value):
        outcome = policy.authorize_write("page_on_front", value)
        assert outcome.status is WriteStatus.errored
        assert outcome.reason == "not found"
        assert store.options["page_on_front"] == 0


class TestWriteBatch:
    def test_outcomes_are_classified_per_key(self, policy, store):
        result = policy.write_batch(
            {
                "blogname": "Newsroom",
                "show_on_front": "invalid",
                "admin_email": "x@example.com",
                "page_on_front": "Home",
            }
        )
        assert result.updated == ["blogname", "page_on_front"]
        assert result.skipped == [{"key": "admin_email", "reason": "not allowlisted"}]
        assert result.errors == [{"key": "show_on_front", "reason": "invalid value"}]
        assert result.success is False
        assert store.options["page_on_front"] == 10

    def test_batch_without_errors_succeeds(self, policy):
        result = policy.write_batch({"blogname": "News", "blogdescription": "Stories"})
        assert result.success is True
        assert result.updated == ["blogdescription"]
        assert result.skipped == [{"key": "blogname", "reason": "value unchanged"}]

    def test_entries_over_the_limit_are_dropped(self, policy):
        options = {f"custom_{index}": index for index in range(25)}
        result = policy.write_batch(options)
        assert len(result.skipped) == 20
        assert result.skipped[-1]["key"] == "custom_19"

    def test_configured_limit(self, store):
        policy = FieldPolicy(OptionPolicyConfig(max_batch=2), store)
        result = policy.write_batch({"blogname": "A", "blogdescription": "B", "posts_per_page": 5})
        assert result.updated == ["blogname", "blogdescription"]
        assert "posts_per_page" not in store.writes


class TestReads:
    def test_blocklisted_key_is_redacted(self, policy):
        assert policy.authorize_read("auth_key") == "[redacted]"

    def test_blocklist_wins_over_allowlist(self, store):
        config = OptionPolicyConfig(write_allowlist={"blogname", "auth_key"})
        assert FieldPolicy(config, store).authorize_read("auth_key") == "[redacted]"

    def test_scalars_are_returned_as_strings(self, policy):
        assert policy.authorize_read("page_on_front") == "0"
        assert policy.authorize_read("blogname") == "News"

    def test_missing_option_reads_as_none(self, policy):
        assert policy.authorize_read("does_not_exist") is None

    def test_booleans_and_containers_are_unchanged(self, policy, store):
        store.options["flag"] = True
        store.options["sidebars"] = {"main": ["search"]}
        assert policy.authorize_read("flag") is True
        assert policy.authorize_read("sidebars") == {"main": ["search"]}

    def test_read_batch_canonicalises_and_caps(self, policy):
        keys = ["BlogName", "", "auth_key"] + [f"opt_{index}" for index in range(30)]
        result = policy.read_batch(keys)
        assert result["blogname"] == "News"
        assert result["auth_key"] == "[redacted]"
        assert "" not in result
        assert len(result) == 19


@pytest.mark.parametrize(
    "value,expected",
    [(5, True), (2.5, True), ("42", True), (" 7 ", True), ("1e3", True), ("abc", False), ("", False), (True, False)],
)
def test_is_numeric(value, expected) -> None:
    assert is_numeric(value) is expected
