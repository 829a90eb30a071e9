"""
HTTP client for the persistence REST service.

All calls to the favorites / meal-plan service (api/main.py) go through this
module. It mirrors the BasePersistence contract over HTTP:

- GET    /users/{uid}/favorites
- POST   /users/{uid}/favorites
- DELETE /users/{uid}/favorites/{recipe_id}
- GET    /users/{uid}/meal-plan
- POST   /users/{uid}/meal-plan/{day}
- DELETE /users/{uid}/meal-plan/{day}/{recipe_id}

Timeouts, connection errors and non-2xx responses are raised as
PersistenceError. Blocking requests calls run in a worker thread.
"""

import asyncio
import logging
from typing import Any, List, Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError

from recipelab.config import PersistenceConfig
from recipelab.errors import PersistenceError
from recipelab.models import MealPlan, Recipe, normalize_meal_plan, validate_day

from .base import BasePersistence

logger = logging.getLogger(__name__)


class HttpPersistence(BasePersistence):
    """Persistence backend talking to the Recipes Lab persistence service."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        """
        Args:
            base_url: Service URL (optional, reads PERSISTENCE_URL if not provided)
            timeout: Request timeout in seconds (optional, reads PERSISTENCE_TIMEOUT_SECONDS)

        Raises:
            RuntimeError: If no service URL is configured.
        """
        url = base_url or PersistenceConfig.get_url()
        if not url:
            raise RuntimeError("PERSISTENCE_URL is not set; use InMemoryPersistence for local runs.")
        self.base_url = url.rstrip("/")
        self.timeout = timeout if timeout is not None else PersistenceConfig.get_timeout()

    def _user_url(self, uid: str, *parts: Any) -> str:
        segments = [quote(str(part), safe="") for part in (uid, *parts)]
        return f"{self.base_url}/users/" + "/".join(segments)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await asyncio.to_thread(requests.request, method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise PersistenceError(f"{method} {url} timed out") from e
        except requests.exceptions.HTTPError as e:
            raise PersistenceError(
                f"{method} {url} returned {e.response.status_code} - {e.response.text}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise PersistenceError(f"{method} {url} failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PersistenceError(f"{method} {url} returned a body that is not JSON") from e

    async def get_favorites(self, uid: str) -> List[Recipe]:
        data = await self._request("GET", self._user_url(uid, "favorites"))
        try:
            return [Recipe.model_validate(item) for item in (data or {}).get("favorites", [])]
        except (ValidationError, AttributeError) as e:
            raise PersistenceError(f"Unexpected favorites payload for {uid}: {e}") from e

    async def add_to_favorites(self, uid: str, recipe: Recipe) -> None:
        await self._request("POST", self._user_url(uid, "favorites"), json=recipe.to_document())

    async def remove_from_favorites(self, uid: str, recipe_id: int) -> None:
        await self._request("DELETE", self._user_url(uid, "favorites", recipe_id))

    async def get_meal_plan(self, uid: str) -> MealPlan:
        data = await self._request("GET", self._user_url(uid, "meal-plan"))
        try:
            return normalize_meal_plan((data or {}).get("meal_plan", {}))
        except (ValidationError, AttributeError) as e:
            raise PersistenceError(f"Unexpected meal plan payload for {uid}: {e}") from e

    async def add_to_meal_plan(self, uid: str, day: str, recipe: Recipe) -> None:
        validate_day(day)
        await self._request("POST", self._user_url(uid, "meal-plan", day), json=recipe.to_document())

    async def remove_from_meal_plan(self, uid: str, day: str, recipe_id: int) -> None:
        validate_day(day)
        await self._request("DELETE", self._user_url(uid, "meal-plan", day, recipe_id))
