"""
Unit tests for the abilities API endpoints.

Covers discovery of abilities and categories and the mapping of execution
results to HTTP responses.
"""

import pytest
from httpx import AsyncClient

from multisite_abilities.abilities.base import BaseAbility
from multisite_abilities.abilities.builtin import BUILTIN_ABILITIES
from multisite_abilities.abilities.executor import UNEXPECTED_ERROR_MESSAGE
from multisite_abilities.abilities.schemas.domain import AbilityCategory

pytestmark = pytest.mark.asyncio

BASE_URL = "/api/v1/abilities"


class ExplodeAbility(BaseAbility):
    name = "testing/explode"
    label = "Explode"
    description = "Always raises."
    category = "testing"
    tenant_field = None

    def execute(self, ctx, *, args):
        raise RuntimeError("kaboom")


class TestDiscovery:
    async def test_list_abilities(self, client: AsyncClient):
        response = await client.get(BASE_URL)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == len(BUILTIN_ABILITIES)
        by_name = {row["name"]: row for row in data}
        assert by_name["vip-multisite/list-sites"]["tenant_scoped"] is False
        assert by_name["vip-multisite/get-site-option"]["tenant_scoped"] is True
        assert by_name["vip-multisite/get-site-option"]["input_schema"]["required"] == ["site_id", "option_names"]
        option_names = by_name["vip-multisite/get-site-option"]["input_schema"]["properties"]["option_names"]
        assert option_names["type"] == "array"
        assert option_names["minItems"] == 1
        assert option_names["maxItems"] == 20

    async def test_filter_by_category(self, client: AsyncClient):
        matching = await client.get(BASE_URL, params={"category": "vip-multisite"})
        other = await client.get(BASE_URL, params={"category": "nope"})

        assert len(matching.json()) == len(BUILTIN_ABILITIES)
        assert other.json() == []

    async def test_list_categories(self, client: AsyncClient):
        response = await client.get(f"{BASE_URL}/categories")

        assert response.status_code == 200
        (category,) = response.json()
        assert category["slug"] == "vip-multisite"
        assert category["label"] == "VIP Multisite"
        assert len(category["abilities"]) == len(BUILTIN_ABILITIES)

    async def test_get_ability(self, client: AsyncClient):
        response = await client.get(f"{BASE_URL}/vip-multisite/get-site")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "vip-multisite/get-site"
        assert data["category"] == "vip-multisite"
        assert data["output_schema"]["type"] == "object"

    async def test_get_unknown_ability(self, client: AsyncClient):
        response = await client.get(f"{BASE_URL}/vip-multisite/does-not-exist")

        assert response.status_code == 404
        assert response.json()["detail"] == "Ability 'vip-multisite/does-not-exist' is not registered."


class TestRunAbility:
    async def test_success_returns_flattened_result(self, client: AsyncClient, auth_headers, network):
        site_id = network.news_site_id
        response = await client.post(
            f"{BASE_URL}/vip-multisite/get-site-option/run",
            json={"input": {"site_id": site_id, "option_names": ["blogname"]}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "site_id": site_id,
            "options": {"blogname": "News"},
            "message": f"Retrieved 1 option(s) from site {site_id}.",
        }

    async def test_business_failure_is_still_200(self, client: AsyncClient, auth_headers, network):
        response = await client.post(
            f"{BASE_URL}/vip-multisite/get-pattern/run",
            json={"input": {"site_id": network.news_site_id, "post_id": 999}},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert "error" not in data

    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer wrong-token"}, {"Authorization": "Basic test-api-token"}],
    )
    async def test_anonymous_caller_is_denied(self, client: AsyncClient, network, headers):
        response = await client.post(
            f"{BASE_URL}/vip-multisite/get-site-option/run",
            json={"input": {"site_id": network.news_site_id, "option_names": ["blogname"]}},
            headers=headers,
        )

        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "site_id": 0,
            "options": {},
            "message": "You are not permitted to run this ability.",
            "error": "permission_denied",
        }

    async def test_invalid_input(self, client: AsyncClient, auth_headers, network):
        response = await client.post(
            f"{BASE_URL}/vip-multisite/get-site-option/run",
            json={"input": {"site_id": network.news_site_id}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_failed"
        assert data["message"].startswith("Invalid input for 'option_names'")

    async def test_missing_input_fails_validation(self, client: AsyncClient, auth_headers):
        response = await client.post(f"{BASE_URL}/vip-multisite/get-site/run", json={}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"

    async def test_unknown_ability(self, client: AsyncClient, auth_headers):
        response = await client.post(f"{BASE_URL}/vip-multisite/nope/run", json={"input": {}}, headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Ability 'vip-multisite/nope' is not registered.",
            "error": "unknown_ability",
        }

    async def test_unknown_site(self, client: AsyncClient, auth_headers):
        response = await client.post(
            f"{BASE_URL}/vip-multisite/get-site-option/run",
            json={"input": {"site_id": 999, "option_names": ["blogname"]}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "tenant_not_found"
        assert data["message"] == "Site ID 999 not found."

    async def test_raising_ability_maps_to_500(self, client: AsyncClient, auth_headers, runtime):
        with runtime.registry.registration_window():
            runtime.registry.register_category(AbilityCategory(slug="testing", label="Testing"))
            runtime.registry.register(ExplodeAbility())

        response = await client.post(f"{BASE_URL}/testing/explode/run", json={"input": {}}, headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": UNEXPECTED_ERROR_MESSAGE,
            "error": "execution_failed",
        }
