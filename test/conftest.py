from __future__ import annotations

import pytest

from multisite_abilities.core.config import Settings

TEST_API_TOKEN = "test-api-token"


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at a private in-memory database.

    Passed explicitly so no ``.env`` file or environment variable can leak
    into the tests.
    """
    return Settings(
        database_url="sqlite:///:memory:",
        network_domain="example.com",
        network_path="/",
        scheme="https",
        subdomain_install=False,
        main_site_id=1,
        api_token=TEST_API_TOKEN,
        log_level="DEBUG",
    )
