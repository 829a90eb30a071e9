"""
Spoonacular catalog connector.

This connector interfaces with the Spoonacular REST API to search recipes and
fetch full recipe detail, normalizing both into the models used by the rest of
the client.

The connector:
- Calls GET /recipes/complexSearch for searches and
  GET /recipes/{id}/information?includeNutrition=true for detail
- Runs the blocking requests call in a worker thread (asyncio.to_thread) so
  only the issuing coroutine waits
- Treats a non-2xx status, a timeout or an unreadable body as a transport
  failure, and an in-body {"code": 402} or {"status": "failure"} as quota
  exhaustion
- Skips result records that fail validation instead of failing the search

Requires SPOONACULAR_API_KEY in the environment or .env file.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from recipelab.config import CatalogConfig
from recipelab.errors import QuotaExceeded, TransportFailure
from recipelab.models import Recipe, RecipeDetail

from .base import (
    BaseCatalogConnector,
    CatalogEmpty,
    CatalogOk,
    CatalogQuotaExceeded,
    CatalogResult,
    CatalogTransportError,
)

logger = logging.getLogger(__name__)

SEARCH_PATH = "/recipes/complexSearch"
DETAIL_PATH = "/recipes/{recipe_id}/information"


def _is_quota_sentinel(data: Any) -> bool:
    return isinstance(data, dict) and (data.get("code") == 402 or data.get("status") == "failure")


class SpoonacularConnector(BaseCatalogConnector):
    """
    Connector for the Spoonacular recipe API.

    The API key is sent as the apiKey query parameter on every call.
    """
    source = "spoonacular"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the Spoonacular connector.

        Args:
            api_key: Spoonacular API key (optional, reads SPOONACULAR_API_KEY if not provided)
            base_url: API base URL (optional, reads SPOONACULAR_BASE_URL or uses the public API)
            timeout: Request timeout in seconds (optional, reads CATALOG_TIMEOUT_SECONDS)

        Raises:
            RuntimeError: If no API key is configured.
        """
        key = api_key or CatalogConfig.get_api_key()
        if not key:
            raise RuntimeError(
                "SPOONACULAR_API_KEY is not set. Please add it to your .env file at the project root:\n"
                "SPOONACULAR_API_KEY=your_api_key_here"
            )
        self.api_key = key
        self.base_url = (base_url or CatalogConfig.get_base_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else CatalogConfig.get_timeout()

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        """
        GET a catalog endpoint and return the decoded body.

        Raises:
            TransportFailure: On network errors, timeouts, non-2xx status or an unreadable body.
            QuotaExceeded: If the body carries the quota/failure sentinel.
        """
        url = f"{self.base_url}{path}"
        query = {**params, "apiKey": self.api_key}
        try:
            response = await asyncio.to_thread(requests.get, url, params=query, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise TransportFailure(f"Request to {path} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise TransportFailure(f"Request to {path} failed: {e}") from e

        if not response.ok:
            raise TransportFailure(f"{path} returned HTTP {response.status_code}", status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportFailure(f"{path} returned a body that is not JSON") from e

        if _is_quota_sentinel(data):
            raise QuotaExceeded(f"{path} reported code={data.get('code')!r} status={data.get('status')!r}")
        return data

    async def search(self, params: Dict[str, Any]) -> CatalogResult:
        """
        Search recipes via complexSearch.

        Returns:
            CatalogOk(list of Recipe) when at least one result validates,
            CatalogEmpty when the pool is empty, otherwise a failure variant.
        """
        try:
            data = await self._get_json(SEARCH_PATH, params)
        except QuotaExceeded as e:
            logger.warning("Spoonacular quota exceeded during search: %s", e)
            return CatalogQuotaExceeded(str(e))
        except TransportFailure as e:
            logger.warning("Spoonacular search failed: %s", e)
            return CatalogTransportError(str(e), status_code=e.status_code)

        raw_results = data.get("results") if isinstance(data, dict) else None
        recipes: List[Recipe] = []
        parse_errors = 0
        for item in raw_results or []:
            try:
                recipes.append(Recipe.model_validate(item))
            except ValidationError as e:
                parse_errors += 1
                logger.warning("Spoonacular connector: skipping invalid result %s: %s", str(item)[:100], e)

        logger.info("Spoonacular search returned %d raw results, %d usable (parse errors: %d)",
                    len(raw_results or []), len(recipes), parse_errors)

        if not recipes:
            return CatalogEmpty()
        return CatalogOk(recipes)

    async def detail(self, recipe_id: int) -> CatalogResult:
        """Fetch full recipe information including nutrition."""
        path = DETAIL_PATH.format(recipe_id=recipe_id)
        try:
            data = await self._get_json(path, {"includeNutrition": "true"})
        except QuotaExceeded as e:
            logger.warning("Spoonacular quota exceeded fetching recipe %s: %s", recipe_id, e)
            return CatalogQuotaExceeded(str(e))
        except TransportFailure as e:
            logger.warning("Spoonacular detail fetch failed for recipe %s: %s", recipe_id, e)
            return CatalogTransportError(str(e), status_code=e.status_code)

        try:
            return CatalogOk(RecipeDetail.model_validate(data))
        except ValidationError as e:
            logger.warning("Spoonacular detail for recipe %s did not validate: %s", recipe_id, e)
            return CatalogTransportError(f"Invalid detail payload for recipe {recipe_id}")
