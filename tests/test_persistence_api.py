"""
Tests for the persistence REST service and its HTTP client.

This module tests:
- The FastAPI endpoints (api.main) using TestClient
- HttpPersistence request building and error mapping with requests mocked
- HttpPersistence against the real service, routed through TestClient
"""

import os
from unittest.mock import Mock, patch

import pytest
import requests
from fastapi.testclient import TestClient

import api.main
from api.main import app
from recipelab.errors import PersistenceError
from recipelab.persistence.http_store import HttpPersistence

REQUESTS_REQUEST = "recipelab.persistence.http_store.requests.request"

CARBONARA = {"id": 1, "title": "Spaghetti Carbonara", "readyInMinutes": 30, "servings": 4, "tags": ["Italian"]}
SALAD = {"id": 3, "title": "Caesar Salad", "readyInMinutes": 15, "servings": 2}


@pytest.fixture(autouse=True)
def clean_store():
    api.main.store.clear()
    yield
    api.main.store.clear()


@pytest.fixture
def client():
    return TestClient(app)


class TestFavoritesEndpoints:
    """Test /users/{uid}/favorites."""

    def test_empty_favorites(self, client):
        response = client.get("/users/u1/favorites")
        assert response.status_code == 200
        assert response.json() == {"uid": "u1", "favorites": []}

    def test_add_and_remove(self, client):
        response = client.post("/users/u1/favorites", json=CARBONARA)
        assert response.status_code == 201
        favorites = response.json()["favorites"]
        assert favorites[0]["id"] == 1
        assert favorites[0]["readyInMinutes"] == 30

        client.post("/users/u1/favorites", json=SALAD)
        client.post("/users/u1/favorites", json=CARBONARA)
        ids = [item["id"] for item in client.get("/users/u1/favorites").json()["favorites"]]
        assert ids == [1, 3]

        response = client.delete("/users/u1/favorites/1")
        assert response.status_code == 200
        assert [item["id"] for item in response.json()["favorites"]] == [3]

    def test_invalid_recipe_rejected(self, client):
        response = client.post("/users/u1/favorites", json={"title": "no id"})
        assert response.status_code == 422


class TestMealPlanEndpoints:
    """Test /users/{uid}/meal-plan."""

    def test_every_day_present(self, client):
        meal_plan = client.get("/users/u1/meal-plan").json()["meal_plan"]
        assert list(meal_plan) == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    def test_add_and_remove(self, client):
        client.post("/users/u1/meal-plan/Mon", json=CARBONARA)
        client.post("/users/u1/meal-plan/Mon", json=CARBONARA)
        response = client.post("/users/u1/meal-plan/Tue", json=CARBONARA)
        assert response.status_code == 201
        assert len(response.json()["meal_plan"]["Mon"]) == 2

        response = client.delete("/users/u1/meal-plan/Mon/1")
        meal_plan = response.json()["meal_plan"]
        assert meal_plan["Mon"] == []
        assert [item["id"] for item in meal_plan["Tue"]] == [1]

    def test_unknown_day_is_400(self, client):
        response = client.post("/users/u1/meal-plan/Funday", json=CARBONARA)
        assert response.status_code == 400
        assert "Funday" in response.json()["detail"]
        assert client.delete("/users/u1/meal-plan/Funday/1").status_code == 400


class TestServiceEndpoints:
    """Test /health and /."""

    def test_health(self, client):
        client.post("/users/u1/favorites", json=CARBONARA)
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["users"] == 1
        assert body["uptime_seconds"] >= 0

    def test_root(self, client):
        body = client.get("/").json()
        assert body["docs"] == "/docs"
        assert "name" in body


def _mock_response(payload=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.content = b"{}" if payload is not None else b""
    response.json.return_value = payload
    if status_code >= 400:
        response.text = "error"
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
    return response


class TestHttpPersistence:
    """Test the HTTP client with requests mocked."""

    def test_requires_url(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(RuntimeError):
                HttpPersistence()

    @pytest.mark.asyncio
    async def test_get_favorites(self):
        store = HttpPersistence(base_url="https://store.test/", timeout=4)
        with patch(REQUESTS_REQUEST, return_value=_mock_response({"uid": "a b", "favorites": [CARBONARA]})) as mock_request:
            favorites = await store.get_favorites("a b")

        assert favorites[0].title == "Spaghetti Carbonara"
        args, kwargs = mock_request.call_args
        assert args == ("GET", "https://store.test/users/a%20b/favorites")
        assert kwargs["timeout"] == 4

    @pytest.mark.asyncio
    async def test_add_sends_wire_document(self, make_recipe):
        store = HttpPersistence(base_url="https://store.test")
        with patch(REQUESTS_REQUEST, return_value=_mock_response({})) as mock_request:
            await store.add_to_meal_plan("u", "Wed", make_recipe(7))

        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://store.test/users/u/meal-plan/Wed")
        assert kwargs["json"]["id"] == 7
        assert kwargs["json"]["readyInMinutes"] == 20

    @pytest.mark.asyncio
    async def test_delete_with_empty_body(self):
        store = HttpPersistence(base_url="https://store.test")
        with patch(REQUESTS_REQUEST, return_value=_mock_response(None, status_code=204)) as mock_request:
            await store.remove_from_favorites("u", 7)
        assert mock_request.call_args.args == ("DELETE", "https://store.test/users/u/favorites/7")

    @pytest.mark.asyncio
    async def test_http_error_becomes_persistence_error(self):
        store = HttpPersistence(base_url="https://store.test")
        with patch(REQUESTS_REQUEST, return_value=_mock_response({"detail": "boom"}, status_code=500)):
            with pytest.raises(PersistenceError) as exc_info:
                await store.get_meal_plan("u")
        assert "500" in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        requests.exceptions.Timeout("slow"),
        requests.exceptions.ConnectionError("refused"),
    ])
    async def test_network_errors_become_persistence_errors(self, error):
        store = HttpPersistence(base_url="https://store.test")
        with patch(REQUESTS_REQUEST, side_effect=error):
            with pytest.raises(PersistenceError):
                await store.get_favorites("u")

    @pytest.mark.asyncio
    async def test_unexpected_payload(self):
        store = HttpPersistence(base_url="https://store.test")
        with patch(REQUESTS_REQUEST, return_value=_mock_response({"favorites": [{"title": "no id"}]})):
            with pytest.raises(PersistenceError):
                await store.get_favorites("u")

    @pytest.mark.asyncio
    async def test_against_service(self, client, make_recipe):
        """Test the client against the real endpoints through TestClient."""

        def _route(method, url, timeout=None, **kwargs):
            return client.request(method, url, **kwargs)

        store = HttpPersistence(base_url="http://testserver")
        with patch(REQUESTS_REQUEST, side_effect=_route):
            await store.add_to_favorites("alice", make_recipe(1))
            await store.add_to_favorites("alice", make_recipe(2))
            await store.remove_from_favorites("alice", 1)
            await store.add_to_meal_plan("alice", "Fri", make_recipe(2))
            favorites = await store.get_favorites("alice")
            meal_plan = await store.get_meal_plan("alice")

        assert [recipe.id for recipe in favorites] == [2]
        assert [recipe.id for recipe in meal_plan["Fri"]] == [2]
        assert meal_plan["Mon"] == ()
