"""Tests for the content abilities."""

from __future__ import annotations

from multisite_abilities.abilities.identity import Caller, acting_as
from multisite_abilities.abilities.schemas.domain import ProtocolErrorCode


class TestCreatePost:
    def test_creates_a_draft_page_by_default(self, run, network, runtime):
        site_id = network.news_site_id
        result = run("vip-multisite/create-post", {"site_id": site_id, "title": "Contact"})

        assert result.success is True
        post_id = result.data["post_id"]
        assert result.message == f'Page "Contact" created on site {site_id} (ID: {post_id}, status: draft).'
        assert result.data["url"] == f"https://example.com/news/?page_id={post_id}"
        assert result.data["edit_url"] == f"https://example.com/news/wp-admin/post.php?post={post_id}&action=edit"

        with runtime.tenants.switch_to(site_id):
            post = runtime.content.get_post(post_id)
        assert post.post_type == "page"
        assert post.post_status == "draft"
        assert post.post_name == "contact"
        assert post.post_author == 1

    def test_published_post_gets_a_pretty_permalink(self, run, network):
        result = run(
            "vip-multisite/create-post",
            {"site_id": network.news_site_id, "title": "Launch", "post_type": "post", "status": "publish"},
        )

        assert result.data["url"] == "https://example.com/news/launch/"
        assert result.message.startswith('Post "Launch" created')

    def test_out_of_set_type_and_status_fall_back_to_defaults(self, run, network):
        result = run(
            "vip-multisite/create-post",
            {"site_id": network.news_site_id, "title": "Odd", "post_type": "product", "status": "trash"},
        )

        assert result.success is True
        assert "Page \"Odd\"" in result.message
        assert "status: draft" in result.message

    def test_post_lands_on_the_requested_site_only(self, run, network, runtime):
        result = run("vip-multisite/create-post", {"site_id": network.news_site_id, "title": "Scoped"})

        with runtime.tenants.switch_to(network.main_site_id):
            assert runtime.content.get_post(result.data["post_id"]) is None

    def test_template_is_stored_for_pages(self, run, network):
        created = run(
            "vip-multisite/create-post",
            {"site_id": network.news_site_id, "title": "Wide", "template": "templates/full-width.html"},
        )
        fetched = run("vip-multisite/get-post", {"site_id": network.news_site_id, "post_id": created.data["post_id"]})

        assert fetched.data["template"] == "templates/full-width.html"

    def test_author_must_be_a_site_member(self, run, network):
        result = run(
            "vip-multisite/create-post",
            {"site_id": network.news_site_id, "title": "Ghost", "author_id": network.editor_id},
        )

        assert result.success is False
        assert result.message == f"User ID {network.editor_id} is not a member of site {network.news_site_id}."
        assert result.data == {"post_id": 0, "url": "", "edit_url": ""}

    def test_content_is_filtered_without_unfiltered_html(self, runtime, network):
        caller = Caller(user_id=1, capabilities=frozenset({"manage_network_options"}))
        payload = {
            "site_id": network.news_site_id,
            "title": "Filtered",
            "content": '<p onclick="steal()">Hi</p><script>alert(1)</script>',
        }
        with acting_as(caller):
            result = runtime.executor.execute("vip-multisite/create-post", payload)
        with runtime.tenants.switch_to(network.news_site_id):
            post = runtime.content.get_post(result.data["post_id"])

        assert post.post_content == "<p>Hi</p>"

    def test_content_is_kept_for_super_admins(self, run, network, runtime):
        markup = "<!-- wp:html --><script>track()</script><!-- /wp:html -->"
        result = run("vip-multisite/create-post", {"site_id": network.news_site_id, "title": "Raw", "content": markup})

        with runtime.tenants.switch_to(network.news_site_id):
            assert runtime.content.get_post(result.data["post_id"]).post_content == markup

    def test_unknown_site_is_a_protocol_error(self, run, network):
        result = run("vip-multisite/create-post", {"site_id": 404, "title": "Nowhere"})

        assert result.error is ProtocolErrorCode.tenant_not_found
        assert result.data == {"post_id": 0, "url": "", "edit_url": ""}


class TestGetPost:
    def test_returns_the_post(self, run, network):
        result = run("vip-multisite/get-post", {"site_id": network.news_site_id, "post_id": network.about_page_id})

        assert result.success is True
        assert result.message == "Post retrieved successfully."
        assert result.data["title"] == "About"
        assert result.data["status"] == "publish"
        assert result.data["slug"] == "about"
        assert result.data["url"] == "https://example.com/news/about/"
        assert result.data["template"] == ""

    def test_post_of_another_site_is_not_found(self, run, network):
        result = run("vip-multisite/get-post", {"site_id": network.main_site_id, "post_id": network.about_page_id})

        assert result.success is False
        assert result.message == f"Post ID {network.about_page_id} not found on site {network.main_site_id}."

    def test_huge_post_id_is_not_found(self, run, network):
        result = run("vip-multisite/get-post", {"site_id": network.news_site_id, "post_id": 10**20})

        assert result.success is False
        assert result.error is None
        assert result.message == f"Post ID {10**20} not found on site {network.news_site_id}."


class TestUpdatePost:
    def test_updates_only_given_fields(self, run, network, runtime):
        site_id, post_id = network.news_site_id, network.blog_page_id
        result = run(
            "vip-multisite/update-post",
            {"site_id": site_id, "post_id": post_id, "title": "Journal", "status": "publish", "slug": "journal"},
        )

        assert result.success is True
        assert result.message == f"Post {post_id} on site {site_id} updated. Fields changed: title, status, slug."
        assert result.data["url"] == "https://example.com/news/journal/"
        with runtime.tenants.switch_to(site_id):
            post = runtime.content.get_post(post_id)
        assert post.post_title == "Journal"
        assert post.post_content == ""

    def test_template_only_update(self, run, network):
        site_id, post_id = network.news_site_id, network.about_page_id
        result = run("vip-multisite/update-post", {"site_id": site_id, "post_id": post_id, "template": "wide.html"})

        assert result.success is True
        assert result.message.endswith("Fields changed: template.")

    def test_nothing_to_update(self, run, network):
        result = run("vip-multisite/update-post", {"site_id": network.news_site_id, "post_id": network.about_page_id})

        assert result.success is False
        assert result.message == "No fields provided to update."
        assert result.data == {"post_id": network.about_page_id, "url": "", "edit_url": ""}

    def test_unknown_post(self, run, network):
        result = run("vip-multisite/update-post", {"site_id": network.news_site_id, "post_id": 999, "title": "X"})

        assert result.success is False
        assert result.message == f"Post ID 999 not found on site {network.news_site_id}."

    def test_slug_collision_gets_a_suffix(self, run, network):
        result = run(
            "vip-multisite/update-post",
            {"site_id": network.news_site_id, "post_id": network.blog_page_id, "slug": "about", "status": "publish"},
        )

        assert result.data["url"] == "https://example.com/news/about-2/"


class TestListPosts:
    def test_lists_pages_of_any_status(self, run, network):
        result = run("vip-multisite/list-posts", {"site_id": network.news_site_id})

        assert result.success is True
        assert result.message == f"Retrieved 2 post(s) from site {network.news_site_id}."
        assert result.data["total"] == 2
        assert {row["title"] for row in result.data["posts"]} == {"About", "Blog"}

    def test_filters_by_status_and_search(self, run, network):
        drafts = run("vip-multisite/list-posts", {"site_id": network.news_site_id, "status": "draft"})
        assert [row["post_id"] for row in drafts.data["posts"]] == [network.blog_page_id]

        found = run("vip-multisite/list-posts", {"site_id": network.news_site_id, "search": "Abo"})
        assert [row["post_id"] for row in found.data["posts"]] == [network.about_page_id]

    def test_posts_and_pages_are_separate(self, run, network):
        run(
            "vip-multisite/create-post",
            {"site_id": network.news_site_id, "title": "Hello", "post_type": "post", "status": "publish"},
        )

        posts = run("vip-multisite/list-posts", {"site_id": network.news_site_id, "post_type": "post"})
        assert [row["title"] for row in posts.data["posts"]] == ["Hello"]

    def test_paging(self, run, network):
        result = run("vip-multisite/list-posts", {"site_id": network.news_site_id, "per_page": 1, "page": 2})

        assert len(result.data["posts"]) == 1
        assert result.data["total_pages"] == 2

    def test_empty_site(self, run, network):
        result = run("vip-multisite/list-posts", {"site_id": network.main_site_id})

        assert result.data == {"posts": [], "total": 0, "total_pages": 0}

    def test_page_past_any_row_is_empty(self, run, network):
        result = run("vip-multisite/list-posts", {"site_id": network.news_site_id, "page": 10**20})

        assert result.success is True
        assert result.data["posts"] == []
        assert result.data["total"] == 2
