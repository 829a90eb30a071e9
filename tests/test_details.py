"""
Tests for the detail enricher.

This module tests that recipe detail:
- Resolves to None for every failure class instead of raising
- Is committed only while its recipe is still the current selection
"""

import asyncio
from unittest.mock import Mock

import pytest

from recipelab.connectors.base import CatalogEmpty, CatalogOk, CatalogQuotaExceeded, CatalogTransportError
from recipelab.details import DetailEnricher
from recipelab.models import RecipeDetail


def _detail(recipe_id, title="Detail"):
    return RecipeDetail(id=recipe_id, title=title, extended_ingredients=("1 egg",))


class TestFetchDetails:
    """Test failure handling of fetch_details."""

    @pytest.mark.asyncio
    async def test_success(self, store, fake_connector_cls):
        connector = fake_connector_cls(details={7: CatalogOk(_detail(7))})
        detail = await DetailEnricher(connector, store).fetch_details(7)
        assert detail.id == 7
        assert detail.extended_ingredients == ("1 egg",)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [
        CatalogTransportError("down", status_code=503),
        CatalogQuotaExceeded("limit"),
        CatalogEmpty(),
    ])
    async def test_failures_resolve_to_none(self, store, fake_connector_cls, result):
        connector = fake_connector_cls(details={7: result})
        assert await DetailEnricher(connector, store).fetch_details(7) is None

    @pytest.mark.asyncio
    async def test_no_connector(self, store):
        assert await DetailEnricher(None, store).fetch_details(7) is None

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, store, fake_connector_cls):
        connector = fake_connector_cls()
        connector.detail = Mock(side_effect=RuntimeError("bug"))
        assert await DetailEnricher(connector, store).fetch_details(7) is None

    @pytest.mark.asyncio
    async def test_no_caching(self, store, fake_connector_cls):
        """Test that opening the same recipe twice fetches twice."""
        connector = fake_connector_cls(details={7: CatalogOk(_detail(7))})
        enricher = DetailEnricher(connector, store)
        await enricher.fetch_details(7)
        await enricher.fetch_details(7)
        assert connector.detail_calls == [7, 7]


class TestSelect:
    """Test selection and stale response handling."""

    @pytest.mark.asyncio
    async def test_select_shows_base_recipe_then_detail(self, store, make_recipe, fake_connector_cls):
        """Test that the base recipe is shown immediately and detail_loading tracks the fetch."""
        recipe = make_recipe(7)
        connector = fake_connector_cls(details={7: CatalogOk(_detail(7))})
        gate = asyncio.Event()
        connector.detail_gates[7] = gate
        enricher = DetailEnricher(connector, store)

        task = asyncio.create_task(enricher.select(recipe))
        await asyncio.sleep(0)
        assert store.snapshot.selected == recipe
        assert store.snapshot.detail is None
        assert store.snapshot.detail_loading is True
        assert store.snapshot.detail_visible is True

        gate.set()
        await task
        assert store.snapshot.detail.id == 7
        assert store.snapshot.detail_loading is False

    @pytest.mark.asyncio
    async def test_failed_detail_leaves_summary_fallback(self, store, make_recipe, fake_connector_cls):
        """Test that a failed fetch clears the loading flag and leaves detail empty."""
        recipe = make_recipe(8)
        enricher = DetailEnricher(fake_connector_cls(), store)

        assert await enricher.select(recipe) is None
        assert store.snapshot.selected == recipe
        assert store.snapshot.detail is None
        assert store.snapshot.detail_loading is False

    @pytest.mark.asyncio
    async def test_stale_detail_is_discarded(self, store, make_recipe, fake_connector_cls):
        """Test that a slow response for A does not overwrite B's detail."""
        first, second = make_recipe(1, "A"), make_recipe(2, "B")
        connector = fake_connector_cls(details={1: CatalogOk(_detail(1, "A")), 2: CatalogOk(_detail(2, "B"))})
        gate = asyncio.Event()
        connector.detail_gates[1] = gate
        enricher = DetailEnricher(connector, store)

        slow = asyncio.create_task(enricher.select(first))
        await asyncio.sleep(0)
        await enricher.select(second)
        gate.set()
        late = await slow

        assert late.id == 1
        assert store.snapshot.selected.id == 2
        assert store.snapshot.detail.id == 2
        assert store.snapshot.detail_loading is False

    @pytest.mark.asyncio
    async def test_close_while_loading(self, store, make_recipe, fake_connector_cls):
        """Test that closing the detail view makes the in-flight response stale."""
        connector = fake_connector_cls(details={1: CatalogOk(_detail(1))})
        gate = asyncio.Event()
        connector.detail_gates[1] = gate
        enricher = DetailEnricher(connector, store)

        task = asyncio.create_task(enricher.select(make_recipe(1)))
        await asyncio.sleep(0)
        enricher.close()
        gate.set()
        await task

        assert store.snapshot.selected is None
        assert store.snapshot.detail is None
        assert store.snapshot.detail_loading is False
        assert store.snapshot.detail_visible is False
