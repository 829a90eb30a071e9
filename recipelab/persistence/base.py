"""
Base persistence abstract class for per-user favorites and meal plans.

Every backend is keyed by the user id from the auth session and exposes the
same six async operations. Backends validate documents into Recipe models
before returning them, and raise PersistenceError for any failure so callers
only need to handle one exception type.
"""

from abc import ABC, abstractmethod
from typing import List

from recipelab.models import MealPlan, Recipe


class BasePersistence(ABC):
    """Abstract base class for favorites / meal-plan storage."""

    @abstractmethod
    async def get_favorites(self, uid: str) -> List[Recipe]:
        """Return the user's favorites in stored order."""
        pass

    @abstractmethod
    async def add_to_favorites(self, uid: str, recipe: Recipe) -> None:
        """Store recipe as a favorite. Adding an existing favorite replaces it."""
        pass

    @abstractmethod
    async def remove_from_favorites(self, uid: str, recipe_id: int) -> None:
        """Remove the favorite with recipe_id. Removing a missing favorite is a no-op."""
        pass

    @abstractmethod
    async def get_meal_plan(self, uid: str) -> MealPlan:
        """Return the user's meal plan with every day of the week present."""
        pass

    @abstractmethod
    async def add_to_meal_plan(self, uid: str, day: str, recipe: Recipe) -> None:
        """Append recipe to day. The same recipe may appear several times."""
        pass

    @abstractmethod
    async def remove_from_meal_plan(self, uid: str, day: str, recipe_id: int) -> None:
        """Remove every entry with recipe_id from day; other days are untouched."""
        pass
