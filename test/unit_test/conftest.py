"""Shared fixtures for the unit tests.

Every test gets its own in-memory SQLite database with a small seeded
network:

- site 1, the main site (``example.com/``), and site 2 (``example.com/news/``)
- users ``admin`` (super admin, administrator of both sites) and ``editor``
  (no site membership)
- block theme ``twentytwentyfour`` with two templates and two template parts,
  plus the classic theme ``classic``
- two installed plugins, one network-activated plugin that is not installed
- pages "About" (published) and "Blog" (draft) on site 2
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

import pytest

from multisite_abilities.abilities.identity import Caller, acting_as
from multisite_abilities.abilities.schemas.domain import AbilityResult
from multisite_abilities.core.config import Settings
from multisite_abilities.factory import Runtime, build_runtime
from multisite_abilities.store.entities import Plugin, Theme, ThemeTemplate, User

BLOCK_THEME = "twentytwentyfour"


@dataclass
class SeededNetwork:
    main_site_id: int
    news_site_id: int
    admin_id: int
    editor_id: int
    about_page_id: int
    blog_page_id: int


@pytest.fixture
def runtime(test_settings: Settings) -> Iterator[Runtime]:
    runtime = build_runtime(test_settings)
    runtime.create_all()
    yield runtime
    runtime.engine.dispose()


def _seed_catalogue(runtime: Runtime) -> None:
    with runtime.session_factory() as session:
        session.add(
            Theme(
                slug=BLOCK_THEME,
                name="Twenty Twenty-Four",
                version="1.2",
                author="<a href='https://wordpress.org'>the WordPress team</a>",
                description="A <b>block</b> theme.",
            )
        )
        session.add(Theme(slug="classic", name="Classic", version="2.0", author="Someone", description="Old school."))
        session.add_all(
            [
                ThemeTemplate(
                    theme=BLOCK_THEME,
                    template_type="wp_template",
                    slug="index",
                    title="Index",
                    description="Displays posts.",
                    content="<!-- wp:query /-->",
                ),
                ThemeTemplate(
                    theme=BLOCK_THEME,
                    template_type="wp_template",
                    slug="single",
                    title="Single Posts",
                    content="<!-- wp:post-content /-->",
                ),
                ThemeTemplate(
                    theme=BLOCK_THEME,
                    template_type="wp_template_part",
                    slug="header",
                    title="Header",
                    content="<!-- wp:site-title /-->",
                    area="header",
                ),
                ThemeTemplate(
                    theme=BLOCK_THEME,
                    template_type="wp_template_part",
                    slug="footer",
                    title="Footer",
                    content="<!-- wp:paragraph -->footer<!-- /wp:paragraph -->",
                    area="footer",
                ),
            ]
        )
        session.add(
            Plugin(file="akismet/akismet.php", name="Akismet", version="5.3", author="Automattic", description="Spam.")
        )
        session.add(Plugin(file="hello.php", name="Hello Dolly", version="1.7.2", author="Matt", description="Lyrics."))
        session.commit()

    directory = runtime.directory
    directory.update_network_option("default_theme", BLOCK_THEME)
    directory.update_network_option("allowedthemes", {BLOCK_THEME: True})
    directory.update_network_option(
        "active_sitewide_plugins", {"akismet/akismet.php": 1700000000, "missing/missing.php": 1700000001}
    )


@pytest.fixture
def network(runtime: Runtime) -> SeededNetwork:
    _seed_catalogue(runtime)
    directory = runtime.directory

    admin = directory.create_user(login="admin", email="admin@example.com", first_name="Ada", last_name="Admin")
    editor = directory.create_user(login="editor", email="editor@example.com")
    with runtime.session_factory() as session:
        row = session.get(User, admin.id)
        row.is_super_admin = True
        session.add(row)
        session.commit()

    main_site_id = runtime.settings.main_site_id
    directory.add_user_to_site(main_site_id, admin.id, "administrator")
    directory.update_blog_option(main_site_id, "stylesheet", BLOCK_THEME)
    directory.update_blog_option(main_site_id, "template", BLOCK_THEME)

    news = directory.create_site(domain="example.com", path="/news/", title="News", user_id=admin.id, public=True)

    with runtime.tenants.switch_to(news.id):
        about = runtime.content.insert_post(
            post_type="page", post_title="About", post_status="publish", post_author=admin.id
        )
        blog = runtime.content.insert_post(
            post_type="page", post_title="Blog", post_status="draft", post_author=admin.id
        )

    return SeededNetwork(
        main_site_id=main_site_id,
        news_site_id=news.id,
        admin_id=admin.id,
        editor_id=editor.id,
        about_page_id=about.id,
        blog_page_id=blog.id,
    )


@pytest.fixture
def run(runtime: Runtime) -> Callable[..., AbilityResult]:
    """Execute an ability, as a network super admin unless another caller is given."""

    def _run(name: str, payload: Optional[Dict[str, Any]] = None, caller: Optional[Caller] = None) -> AbilityResult:
        with acting_as(caller or Caller.super_admin()):
            return runtime.executor.execute(name, payload)

    return _run
