"""
Detail enricher: on-demand full detail for the selected recipe.

Selecting a recipe shows its base fields immediately and sets detail_loading
while the catalog is asked for ingredients, instructions and nutrition. The
response is committed only if the recipe is still the current selection;
selecting another recipe or closing the detail view makes it stale.

Every failure (transport error, quota sentinel) resolves to None, and the
presentation layer falls back to Recipe.summary. Nothing is cached: opening
the same recipe again fetches again.
"""

import logging
from typing import Optional

from .connectors.base import BaseCatalogConnector, CatalogOk, describe_failure
from .events import log_recipe_viewed
from .models import Recipe, RecipeDetail
from .state import DetailClosed, DetailResolved, RecipeSelected, StateStore

logger = logging.getLogger(__name__)


class DetailEnricher:
    """Fetches RecipeDetail for the selected recipe and guards against stale responses."""

    def __init__(self, connector: Optional[BaseCatalogConnector], store: StateStore) -> None:
        self._connector = connector
        self._store = store

    async def fetch_details(self, recipe_id: int) -> Optional[RecipeDetail]:
        """
        Fetch full detail for one recipe.

        Returns:
            RecipeDetail, or None if the catalog is unavailable or the call failed.
        """
        if self._connector is None:
            logger.debug("No catalog connector configured; no detail for recipe %s", recipe_id)
            return None
        try:
            result = await self._connector.detail(recipe_id)
        except Exception as e:
            logger.error("Unexpected error fetching detail for recipe %s: %s", recipe_id, e, exc_info=True)
            return None

        if isinstance(result, CatalogOk):
            return result.payload
        logger.warning("No detail for recipe %s (%s)", recipe_id, describe_failure(result))
        return None

    async def select(self, recipe: Recipe) -> Optional[RecipeDetail]:
        """
        Make recipe the current selection and enrich it.

        Returns:
            The fetched detail (also when it arrived too late to be shown).
        """
        token = self._store.dispatch(RecipeSelected(recipe)).selection_token
        detail = await self.fetch_details(recipe.id)
        snapshot = self._store.dispatch(DetailResolved(token=token, detail=detail))

        if snapshot.selection_token == token:
            session = snapshot.session
            log_recipe_viewed(session.id if session else None, recipe.id, detail_available=detail is not None)
        else:
            logger.debug("Detail for recipe %s arrived after the selection changed", recipe.id)
        return detail

    def close(self) -> None:
        """Clear the selection; any fetch still in flight will be discarded."""
        self._store.dispatch(DetailClosed())
