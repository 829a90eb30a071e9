"""
Catalog fetcher: recipe search with fallback to the seed recipes.

This module provides the search flow of the client:
- Builds the fixed search criteria sent to the catalog
- Calls the connector and classifies the outcome
- Samples 6 recipes uniformly from a successful result
- Substitutes the seed recipes for every failure class
- Commits the result to the state store, ignoring superseded searches

Search flow: RecipesLab.search() -> CatalogFetcher.search() -> connector.search()
-> CatalogResult -> sample or seed -> SearchSucceeded / SearchFellBack

There is no caching: every search is a fresh remote attempt, and the seed
recipes are never merged with partial results. The free-text filter is applied
client-side at display time (filter_by_title) and is never sent to the catalog.
"""

import logging
import random
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .connectors.base import BaseCatalogConnector, CatalogOk, CatalogTransportError, describe_failure
from .events import log_search_performed
from .models import Recipe
from .seed import SEED_RECIPES
from .state import SearchFellBack, SearchStarted, SearchSucceeded, StateStore
from .utils.sampling import sample_without_replacement

logger = logging.getLogger(__name__)

# Number of recipes shown per search
SEARCH_RESULT_SIZE = 6

# Fixed filtering criteria for every search
SEARCH_CRITERIA: Dict[str, Any] = {
    "number": 100,
    "maxReadyTime": 40,
    "minHealthScore": 75,
    "maxPrice": 500,
    "includeNutrition": "true",
    "addRecipeInformation": "true",
    "fillIngredients": "true",
    "instructionsRequired": "true",
    "sort": "random",
}


def build_search_params(criteria: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the catalog search parameters.

    Args:
        criteria: Optional overrides merged over SEARCH_CRITERIA (e.g., {"cuisine": "italian"})

    Returns:
        New parameter dictionary. The API key is added by the connector.
    """
    params = dict(SEARCH_CRITERIA)
    if criteria:
        params.update(criteria)
    return params


def filter_by_title(recipes: Iterable[Recipe], text: str) -> List[Recipe]:
    """
    Case-insensitive substring match on title.

    An empty filter returns every recipe. Whitespace is part of the match.
    """
    needle = (text or "").lower()
    if not needle:
        return list(recipes)
    return [recipe for recipe in recipes if needle in recipe.title.lower()]


def unique_by_id(recipes: Iterable[Recipe]) -> List[Recipe]:
    """Drop repeated recipe ids, keeping the first occurrence and the catalog's order."""
    seen = set()
    unique: List[Recipe] = []
    for recipe in recipes:
        if recipe.id not in seen:
            seen.add(recipe.id)
            unique.append(recipe)
    return unique


class CatalogFetcher:
    """
    Runs searches against one catalog connector and commits the results.

    connector may be None when the catalog is not configured; every search then
    falls back to the seed recipes.
    """

    def __init__(
        self,
        connector: Optional[BaseCatalogConnector],
        store: StateStore,
        rng: Optional[random.Random] = None,
        sample_size: int = SEARCH_RESULT_SIZE,
    ) -> None:
        self._connector = connector
        self._store = store
        self._rng = rng
        self.sample_size = sample_size

    @staticmethod
    def initial_pool() -> Tuple[Recipe, ...]:
        """Recipes shown at start-up, before any search has run."""
        return SEED_RECIPES

    async def fetch(self, criteria: Optional[Dict[str, Any]] = None) -> Tuple[List[Recipe], Optional[str]]:
        """
        Call the catalog once and decide what to show.

        Returns:
            (recipes, fallback_reason). fallback_reason is None for a genuine
            result, otherwise "transport_error", "quota_exceeded" or "empty" and
            recipes is the seed set.
        """
        if self._connector is None:
            result = CatalogTransportError("catalog connector not configured")
        else:
            try:
                result = await self._connector.search(build_search_params(criteria))
            except Exception as e:
                # Connectors classify remote failures themselves; anything raised here is unexpected
                logger.error("Unexpected error during catalog search: %s", e, exc_info=True)
                result = CatalogTransportError(f"unexpected error: {e}")

        if isinstance(result, CatalogOk) and result.payload:
            pool = unique_by_id(result.payload)
            recipes = sample_without_replacement(pool, self.sample_size, self._rng)
            logger.info("Catalog search: sampled %d of %d recipes", len(recipes), len(pool))
            return recipes, None

        reason = describe_failure(result) if not isinstance(result, CatalogOk) else "empty"
        logger.warning("Catalog search fell back to seed recipes (%s): %s",
                       reason, getattr(result, "reason", ""))
        return list(SEED_RECIPES), reason

    async def search(self, criteria: Optional[Dict[str, Any]] = None) -> List[Recipe]:
        """
        Run a user-initiated search and commit the result to the store.

        loading is True while the call is in flight. If another search starts
        before this one resolves, this result is discarded by the store.

        Returns:
            The recipes this search produced (at most 6).
        """
        token = self._store.dispatch(SearchStarted()).search_token
        recipes, reason = await self.fetch(criteria)

        if reason is None:
            self._store.dispatch(SearchSucceeded(token=token, recipes=tuple(recipes)))
        else:
            self._store.dispatch(SearchFellBack(token=token, reason=reason, recipes=tuple(recipes)))

        session = self._store.snapshot.session
        log_search_performed(
            session.id if session else None,
            result_count=len(recipes),
            source="seed" if reason else "catalog",
            fallback_reason=reason,
        )
        return recipes
