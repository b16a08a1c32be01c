"""Unit tests for the SQLModel store implementations."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from multisite_abilities.store.base import MAX_ROW_ID, is_row_id, utc_now
from multisite_abilities.store.entities import Post, Site, User
from multisite_abilities.store.errors import DuplicateEntryError, EntryNotFoundError
from multisite_abilities.store.sql import SqlContentStore
from multisite_abilities.store.utils import create_engine
from multisite_abilities.utils.formatting import format_datetime


class TestCreateEngine:
    def test_in_memory_sqlite_shares_one_connection(self):
        engine = create_engine("sqlite:///:memory:")
        try:
            assert type(engine.pool).__name__ == "StaticPool"
        finally:
            engine.dispose()

    def test_file_sqlite_uses_the_default_pool(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'network.db'}")
        try:
            assert type(engine.pool).__name__ != "StaticPool"
        finally:
            engine.dispose()


class TestSiteDirectory:
    def test_main_site_is_bootstrapped_once(self, runtime):
        directory = runtime.directory
        first = directory.ensure_main_site(1)
        again = directory.ensure_main_site(1)

        assert first.id == again.id == 1
        assert directory.get_blog_option(1, "blogname") == "example.com"

    def test_create_site_seeds_options_and_membership(self, runtime, network):
        directory = runtime.directory
        site_id = network.news_site_id

        assert directory.get_blog_option(site_id, "blogname") == "News"
        assert directory.get_blog_option(site_id, "show_on_front") == "posts"
        assert directory.get_blog_option(site_id, "template") == "twentytwentyfour"
        assert directory.is_user_member_of_site(network.admin_id, site_id)
        assert not directory.is_user_member_of_site(network.editor_id, site_id)

    def test_create_site_rejects_duplicates_and_unknown_users(self, runtime, network):
        directory = runtime.directory
        with pytest.raises(DuplicateEntryError):
            directory.create_site(domain="example.com", path="/news/", title="Dup", user_id=network.admin_id, public=True)
        with pytest.raises(EntryNotFoundError):
            directory.create_site(domain="example.com", path="/other/", title="X", user_id=999, public=True)

    def test_create_user_rejects_taken_login(self, runtime, network):
        with pytest.raises(DuplicateEntryError):
            runtime.directory.create_user(login="admin", email="other@example.com")

    def test_update_option_reports_no_change(self, runtime, network):
        directory = runtime.directory
        site_id = network.news_site_id

        assert directory.update_blog_option(site_id, "posts_per_page", 10) is False
        assert directory.update_blog_option(site_id, "posts_per_page", "10") is True
        assert directory.get_blog_option(site_id, "posts_per_page") == "10"

    def test_update_site_status_rejects_unknown_flags(self, runtime, network):
        with pytest.raises(ValueError):
            runtime.directory.update_site_status(network.news_site_id, hidden=True)

    def test_urls(self, runtime, network):
        assert runtime.directory.site_url(network.news_site_id) == "https://example.com/news"
        assert runtime.directory.admin_url(network.news_site_id, "/users.php") == (
            "https://example.com/news/wp-admin/users.php"
        )
        assert runtime.directory.site_url(404) == ""


class TestContentStore:
    def test_calls_follow_the_active_tenant(self, runtime, network):
        content = runtime.content

        assert content.tenant_id == network.main_site_id
        with runtime.tenants.switch_to(network.news_site_id):
            assert content.tenant_id == network.news_site_id
            assert content.get_option("blogname") == "News"
        assert content.get_option("blogname") == "example.com"

    def test_detached_store_resolves_through_its_resolver(self, runtime, network, test_settings):
        store = SqlContentStore(runtime.session_factory, test_settings.network, lambda: network.news_site_id)

        assert store.get_post(network.about_page_id).post_title == "About"

    def test_slugs_are_unique_per_type(self, runtime, network):
        with runtime.tenants.switch_to(network.news_site_id):
            page = runtime.content.insert_post(post_type="page", post_title="About")
            post = runtime.content.insert_post(post_type="post", post_title="About")

        assert page.post_name == "about-2"
        assert post.post_name == "about"

    def test_update_post_of_another_site_fails(self, runtime, network):
        with pytest.raises(EntryNotFoundError):
            runtime.content.update_post(network.about_page_id, post_title="Nope")

    def test_find_page_by_title_prefers_lowest_id(self, runtime, network):
        with runtime.tenants.switch_to(network.news_site_id):
            runtime.content.insert_post(post_type="page", post_title="About", post_status="publish")
            page = runtime.content.find_page_by_title("About", ["publish"])
            missing = runtime.content.find_page_by_title("Blog", ["publish"])

        assert page.id == network.about_page_id
        assert missing is None

    def test_post_meta_round_trip(self, runtime, network):
        with runtime.tenants.switch_to(network.news_site_id):
            runtime.content.update_post_meta(network.about_page_id, "layout", {"columns": 2})
            runtime.content.update_post_meta(network.about_page_id, "layout", {"columns": 3})
            value = runtime.content.get_post_meta(network.about_page_id, "layout")
            missing = runtime.content.get_post_meta(network.about_page_id, "nothing")

        assert value == {"columns": 3}
        assert missing == ""

    def test_terms(self, runtime, network):
        with runtime.tenants.switch_to(network.news_site_id):
            content = runtime.content
            news = content.insert_term("category", name="News", slug="news")
            sport = content.insert_term("category", name="Sport", slug="sport")
            with pytest.raises(DuplicateEntryError):
                content.insert_term("category", name="News again", slug="news")

            content.set_post_terms(network.about_page_id, "category", [news.id, sport.id, news.id])
            assert [term.slug for term in content.get_post_terms(network.about_page_id, "category")] == [
                "news",
                "sport",
            ]
            content.set_post_terms(network.about_page_id, "category", [sport.id])
            assert [term.slug for term in content.get_post_terms(network.about_page_id, "category")] == ["sport"]

    def test_block_templates_follow_the_active_theme(self, runtime, network):
        with runtime.tenants.switch_to(network.news_site_id):
            runtime.content.update_option("stylesheet", "classic")
            assert runtime.content.get_block_templates("wp_template") == []
            assert runtime.content.get_block_template("twentytwentyfour//index", "wp_template") is None


class TestRowIds:
    @pytest.mark.parametrize("row_id", [2**63, -(2**63) - 1, 10**20])
    def test_ids_outside_the_key_range_match_nothing(self, runtime, network, row_id):
        directory = runtime.directory

        assert directory.get_site(row_id) is None
        assert directory.site_exists(row_id) is False
        assert directory.get_user(row_id) is None
        assert directory.is_user_member_of_site(network.admin_id, row_id) is False
        assert directory.get_blog_option(row_id, "blogname", "fallback") == "fallback"
        assert directory.list_users(search=None, site_id=row_id, limit=10, offset=0) == ([], 0)
        with runtime.tenants.switch_to(network.news_site_id):
            assert runtime.content.get_post(row_id) is None

    def test_largest_key_is_still_looked_up(self, runtime):
        assert is_row_id(MAX_ROW_ID) is True
        assert is_row_id(True) is False
        assert runtime.directory.get_site(MAX_ROW_ID) is None


class TestTimestamps:
    def test_utc_now_is_timezone_aware(self):
        now = utc_now()

        assert now.tzinfo is timezone.utc
        assert now.microsecond == 0

    def test_timestamp_columns_are_timezone_aware(self):
        columns = [
            Post.__table__.c.post_date,
            Post.__table__.c.post_modified,
            Site.__table__.c.registered,
            Site.__table__.c.last_updated,
            User.__table__.c.user_registered,
        ]
        for column in columns:
            assert column.type.timezone is True

    def test_new_rows_are_stamped_and_formatted(self, runtime, network):
        with runtime.tenants.switch_to(network.news_site_id):
            post = runtime.content.insert_post(post_type="page", post_title="Stamped")
            stored = runtime.content.get_post(post.id)

        assert stored.post_date is not None
        assert len(format_datetime(stored.post_date)) == len("2024-05-01 09:03:07")
        assert format_datetime(datetime(2024, 5, 1, 9, 3, 7, tzinfo=timezone.utc)) == "2024-05-01 09:03:07"
