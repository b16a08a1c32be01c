from typing import AsyncGenerator, Dict
from unittest.mock import patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from multisite_abilities.factory import Runtime


@pytest.fixture
def auth_headers(test_settings) -> Dict[str, str]:
    return {"Authorization": f"Bearer {test_settings.api_token}"}


@pytest_asyncio.fixture(name="client")
async def client_fixture(runtime: Runtime, network) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with mocked lifespan and overridden dependencies."""
    from multisite_abilities.server.main import app
    from multisite_abilities.server.services.deps import get_runtime

    def get_runtime_override() -> Runtime:
        return runtime

    app.dependency_overrides[get_runtime] = get_runtime_override

    # Mock the lifespan to prevent database initialization during tests
    async def mock_lifespan(app):
        yield

    with patch("multisite_abilities.server.main.lifespan", mock_lifespan):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client

    app.dependency_overrides.clear()
