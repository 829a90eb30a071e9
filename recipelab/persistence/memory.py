"""
In-memory persistence store for favorites and meal plans.

This module provides an in-memory store keyed by user id. It backs the
persistence REST service (api/main.py) and is the client's default when no
PERSISTENCE_URL is configured.

Documents are stored as camelCase dictionaries (Recipe.to_document()), the way
a document store would hold them, and validated back into Recipe on read.

Note: Data is lost on process restart.
"""

import logging
from typing import Any, Dict, List

from recipelab.models import DAYS_OF_WEEK, MealPlan, Recipe, normalize_meal_plan, validate_day

from .base import BasePersistence

logger = logging.getLogger(__name__)


class InMemoryPersistence(BasePersistence):
    """Dictionary-backed store: uid -> favorites list, uid -> day -> entries."""

    def __init__(self) -> None:
        self._favorites: Dict[str, List[Dict[str, Any]]] = {}
        self._meal_plans: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}

    def _meal_plan_documents(self, uid: str) -> Dict[str, List[Dict[str, Any]]]:
        if uid not in self._meal_plans:
            self._meal_plans[uid] = {day: [] for day in DAYS_OF_WEEK}
        return self._meal_plans[uid]

    async def get_favorites(self, uid: str) -> List[Recipe]:
        return [Recipe.model_validate(document) for document in self._favorites.get(uid, [])]

    async def add_to_favorites(self, uid: str, recipe: Recipe) -> None:
        documents = self._favorites.setdefault(uid, [])
        document = recipe.to_document()
        for index, existing in enumerate(documents):
            if existing.get("id") == recipe.id:
                documents[index] = document
                return
        documents.append(document)
        logger.debug("Stored favorite %s for %s (%d total)", recipe.id, uid, len(documents))

    async def remove_from_favorites(self, uid: str, recipe_id: int) -> None:
        documents = self._favorites.get(uid, [])
        self._favorites[uid] = [document for document in documents if document.get("id") != recipe_id]

    async def get_meal_plan(self, uid: str) -> MealPlan:
        return normalize_meal_plan(self._meal_plans.get(uid, {}))

    async def add_to_meal_plan(self, uid: str, day: str, recipe: Recipe) -> None:
        validate_day(day)
        self._meal_plan_documents(uid)[day].append(recipe.to_document())

    async def remove_from_meal_plan(self, uid: str, day: str, recipe_id: int) -> None:
        validate_day(day)
        plan = self._meal_plan_documents(uid)
        plan[day] = [document for document in plan[day] if document.get("id") != recipe_id]

    def user_count(self) -> int:
        """Number of users with any stored favorites or meal plan."""
        return len(set(self._favorites) | set(self._meal_plans))

    def clear(self) -> None:
        """Drop all stored data (useful for testing)."""
        self._favorites.clear()
        self._meal_plans.clear()
