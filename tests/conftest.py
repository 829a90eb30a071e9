"""
Shared fixtures for the Recipes Lab test suite.

- Every test writes analytics events to a temporary file instead of events.log
- FakeConnector and ScriptedPersistence stand in for the catalog and the
  persistence service; both can hold a call back on an asyncio.Event so tests
  can interleave concurrent operations deterministically
"""

import asyncio
from typing import Any, Dict, List, Optional
from unittest.mock import patch

import pytest

from recipelab.connectors.base import BaseCatalogConnector, CatalogEmpty, CatalogResult, CatalogTransportError
from recipelab.errors import PersistenceError
from recipelab.models import Recipe, UserSession
from recipelab.personalization import PersonalizationStore
from recipelab.persistence.memory import InMemoryPersistence
from recipelab.state import SessionStarted, StateStore


class FakeConnector(BaseCatalogConnector):
    """
    Catalog connector returning scripted results.

    search_results[i] answers the i-th search (the last one repeats).
    search_gates[i] / detail_gates[recipe_id] hold a call until the event is set.
    """
    source = "fake"

    def __init__(
        self,
        search_results: Optional[List[CatalogResult]] = None,
        details: Optional[Dict[int, CatalogResult]] = None,
    ) -> None:
        self.search_results = list(search_results or [])
        self.details = dict(details or {})
        self.search_gates: Dict[int, asyncio.Event] = {}
        self.detail_gates: Dict[int, asyncio.Event] = {}
        self.search_calls: List[Dict[str, Any]] = []
        self.detail_calls: List[int] = []

    async def search(self, params: Dict[str, Any]) -> CatalogResult:
        call = len(self.search_calls)
        self.search_calls.append(params)
        gate = self.search_gates.get(call)
        if gate is not None:
            await gate.wait()
        if not self.search_results:
            return CatalogEmpty()
        return self.search_results[min(call, len(self.search_results) - 1)]

    async def detail(self, recipe_id: int) -> CatalogResult:
        self.detail_calls.append(recipe_id)
        gate = self.detail_gates.get(recipe_id)
        if gate is not None:
            await gate.wait()
        return self.details.get(recipe_id, CatalogTransportError(f"no detail for {recipe_id}"))


class ScriptedPersistence(InMemoryPersistence):
    """
    In-memory persistence that records calls and can fail or stall on demand.

    fail_on: method names that raise PersistenceError
    gates: method name -> asyncio.Event the call waits for
    """

    def __init__(self) -> None:
        super().__init__()
        self.fail_on = set()
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    async def _before(self, name: str) -> None:
        self.calls.append(name)
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if name in self.fail_on:
            raise PersistenceError(f"{name} failed")

    async def get_favorites(self, uid):
        await self._before("get_favorites")
        return await super().get_favorites(uid)

    async def add_to_favorites(self, uid, recipe):
        await self._before("add_to_favorites")
        await super().add_to_favorites(uid, recipe)

    async def remove_from_favorites(self, uid, recipe_id):
        await self._before("remove_from_favorites")
        await super().remove_from_favorites(uid, recipe_id)

    async def get_meal_plan(self, uid):
        await self._before("get_meal_plan")
        return await super().get_meal_plan(uid)

    async def add_to_meal_plan(self, uid, day, recipe):
        await self._before("add_to_meal_plan")
        await super().add_to_meal_plan(uid, day, recipe)

    async def remove_from_meal_plan(self, uid, day, recipe_id):
        await self._before("remove_from_meal_plan")
        await super().remove_from_meal_plan(uid, day, recipe_id)

    def mutations(self) -> List[str]:
        return [name for name in self.calls if not name.startswith("get_")]


def build_recipe(recipe_id: int, title: Optional[str] = None) -> Recipe:
    return Recipe(id=recipe_id, title=title or f"Recipe {recipe_id}", ready_in_minutes=20, servings=2)


@pytest.fixture(autouse=True)
def event_log(tmp_path):
    """Redirect the analytics event log to a temporary file."""
    path = tmp_path / "events.log"
    with patch("recipelab.events.EVENT_LOG_FILE", path):
        yield path


@pytest.fixture
def make_recipe():
    return build_recipe


@pytest.fixture
def store():
    return StateStore()


@pytest.fixture
def persistence():
    return ScriptedPersistence()


@pytest.fixture
def personalization(persistence, store):
    return PersonalizationStore(persistence, store)


@pytest.fixture
def alice():
    return UserSession(id="alice", display_name="Alice", email="alice@example.com")


@pytest.fixture
def sign_in(personalization, store):
    """Start a session for a user and wait until their data is loaded."""

    async def _sign_in(user: UserSession) -> int:
        epoch = store.dispatch(SessionStarted(session=user)).session_epoch
        await personalization.load(user, epoch)
        return epoch

    return _sign_in


@pytest.fixture
def fake_connector_cls():
    return FakeConnector
