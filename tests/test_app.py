"""
Tests for the RecipesLab facade and build_app().

These tests drive the application the way a presentation layer would: through
read models and write intents only.
"""

import os
import random
from unittest.mock import patch

import pytest

from recipelab.app import RecipesLab, build_app
from recipelab.auth import LocalAuthProvider
from recipelab.connectors.base import CatalogOk
from recipelab.models import Recipe, RecipeDetail
from recipelab.personalization import LOGIN_FOR_FAVORITES
from recipelab.persistence.http_store import HttpPersistence
from recipelab.persistence.memory import InMemoryPersistence
from recipelab.seed import SEED_RECIPES


@pytest.fixture
def lab(fake_connector_cls, persistence, alice, make_recipe):
    pool = [make_recipe(i, f"Dish {i}") for i in range(10, 30)]
    connector = fake_connector_cls(
        search_results=[CatalogOk(pool)],
        details={recipe.id: CatalogOk(RecipeDetail(id=recipe.id, title=recipe.title)) for recipe in pool},
    )
    return RecipesLab(connector, persistence, LocalAuthProvider(alice), rng=random.Random(11))


class TestBuildApp:
    """Test wiring from the environment."""

    @pytest.mark.asyncio
    async def test_unconfigured_app_uses_seed_and_memory(self):
        with patch.dict(os.environ, {}, clear=True):
            app = build_app()

        assert app.recipes == SEED_RECIPES
        assert isinstance(app.personalization._persistence, InMemoryPersistence)
        assert await app.search() == list(SEED_RECIPES)
        assert app.fallback_reason == "transport_error"
        assert await app.login() is False

    def test_persistence_url_selects_http_store(self):
        with patch.dict(os.environ, {"PERSISTENCE_URL": "https://store.test"}, clear=True):
            app = build_app()
        assert isinstance(app.personalization._persistence, HttpPersistence)

    @pytest.mark.asyncio
    async def test_local_account_from_env(self):
        with patch.dict(os.environ, {"RECIPELAB_USER_ID": "env-user", "RECIPELAB_USER_NAME": "Env"}, clear=True):
            app = build_app()
        assert await app.login() is True
        assert app.session_summary["user_id"] == "env-user"
        assert app.session_summary["display_name"] == "Env"


class TestRecipesLab:
    """Test a full user journey through the facade."""

    @pytest.mark.asyncio
    async def test_journey(self, lab):
        assert lab.recipes == SEED_RECIPES
        assert lab.session_summary["authenticated"] is False

        recipes = await lab.search()
        assert len(recipes) == 6
        assert lab.loading is False
        first = lab.recipes[0]

        assert await lab.toggle_favorite(first) is False
        assert lab.notices == (LOGIN_FOR_FAVORITES,)
        lab.dismiss_notice()
        assert lab.notices == ()

        assert await lab.login() is True
        assert lab.session_summary["favorites_count"] == 0

        assert await lab.toggle_favorite(first) is True
        assert lab.is_favorite(first.id)
        assert lab.favorites_page.items == (first,)

        detail = await lab.select_recipe(first)
        assert detail.id == first.id
        assert lab.selected_recipe == first
        assert lab.recipe_detail.id == first.id
        assert lab.detail_loading is False
        assert lab.detail_visible is True

        assert lab.open_day_selector() is True
        assert lab.day_selector_open is True
        assert await lab.choose_day("Mon") is True
        assert lab.meal_plan["Mon"] == (first,)
        assert lab.selected_recipe is None

        assert await lab.remove_from_day("Mon", first.id) is True
        assert lab.meal_plan["Mon"] == ()

        assert await lab.logout() is True
        assert lab.session_summary["authenticated"] is False
        assert lab.favorites_page.total_items == 0

    def test_filter(self, lab):
        lab.set_filter("carbonara")
        assert [recipe.id for recipe in lab.filtered_recipes] == [1]
        assert len(lab.recipes) == 6

    @pytest.mark.asyncio
    async def test_paging_intents(self, lab, persistence, make_recipe):
        for recipe_id in range(1, 14):
            await persistence.add_to_favorites("alice", make_recipe(recipe_id))
        await lab.login()

        assert lab.next_page() == 2
        assert lab.paginate(1) == 3
        assert lab.prev_page() == 2

    @pytest.mark.asyncio
    async def test_subscribe(self, lab):
        seen = []
        unsubscribe = lab.subscribe(lambda snapshot, event: seen.append(type(event).__name__))
        await lab.search()
        unsubscribe()
        lab.set_filter("x")
        assert seen == ["SearchStarted", "SearchSucceeded"]

    @pytest.mark.asyncio
    async def test_close_detail(self, lab):
        await lab.select_recipe(lab.recipes[0])
        lab.close_detail()
        assert lab.selected_recipe is None
        assert lab.recipe_detail is None


class TestRecipeProvenance:
    """Test that only recipes the client has shown can be added."""

    @pytest.mark.asyncio
    async def test_unknown_recipe_is_refused(self, lab, persistence):
        await lab.search()
        await lab.login()
        unknown = Recipe(id=999999, title="Not From The Catalog")

        assert await lab.toggle_favorite(unknown) is False
        assert await lab.add_to_meal_plan("Mon", unknown) is False

        assert lab.favorites_page.total_items == 0
        assert lab.meal_plan["Mon"] == ()
        assert persistence.mutations() == []
        assert await persistence.get_favorites("alice") == []

    @pytest.mark.asyncio
    async def test_pool_recipe_is_accepted(self, lab, persistence):
        await lab.search()
        await lab.login()
        recipe = lab.recipes[0]

        assert await lab.toggle_favorite(recipe) is True
        assert await lab.add_to_meal_plan("Tue", recipe) is True
        assert lab.meal_plan["Tue"] == (recipe,)

    @pytest.mark.asyncio
    async def test_detail_recipe_is_accepted(self, lab):
        """Test that the recipe behind the open detail view counts as shown."""
        await lab.search()
        await lab.login()
        recipe = lab.recipes[1]
        await lab.select_recipe(recipe)

        assert await lab.add_to_meal_plan("Wed", recipe) is True

    @pytest.mark.asyncio
    async def test_stored_favorite_can_be_removed(self, lab, persistence):
        """Test that a favorite loaded from the store is removable after the pool changed."""
        stored = Recipe(id=424242, title="Saved Last Week")
        await persistence.add_to_favorites("alice", stored)
        await lab.login()
        assert lab.is_favorite(stored.id)

        assert await lab.toggle_favorite(stored) is True
        assert not lab.is_favorite(stored.id)
        assert await persistence.get_favorites("alice") == []
