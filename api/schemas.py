"""
Pydantic schemas for FastAPI request and response models.

This module defines the models used by the persistence service for request
validation and response serialization. Recipe documents themselves are
validated with recipelab.models.Recipe, so the service and the client agree on
one schema.

The schemas include:
- FavoritesResponse: A user's favorites in insertion order
- MealPlanResponse: A user's meal plan, every day of the week present
- HealthResponse: Service status for monitoring

# NOTE: Recipes are serialized by alias (readyInMinutes), the same camelCase
    documents HttpPersistence validates on the way back in.
"""

from typing import Dict, List

from pydantic import BaseModel, Field, ConfigDict

from recipelab.models import Recipe


class FavoritesResponse(BaseModel):
    """Favorites stored for one user."""
    uid: str = Field(..., description="User id")
    favorites: List[Recipe] = Field(default_factory=list, description="Favorite recipes, oldest first")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "uid": "user-123",
                "favorites": [
                    {
                        "id": 1,
                        "title": "Classic Spaghetti Carbonara",
                        "image": "https://images.unsplash.com/photo-1612874742237-6526221588e3",
                        "tags": ["Italian", "Pasta"],
                        "readyInMinutes": 25,
                        "servings": 4,
                        "summary": "A creamy Italian pasta dish.",
                    }
                ],
            }
        }
    )


class MealPlanResponse(BaseModel):
    """Meal plan stored for one user."""
    uid: str = Field(..., description="User id")
    meal_plan: Dict[str, List[Recipe]] = Field(
        default_factory=dict,
        description="Day (Mon..Sun) -> recipes in insertion order; the same recipe may appear twice",
    )


class HealthResponse(BaseModel):
    status: str = Field(..., description="Always 'ok' when the service is reachable")
    name: str
    version: str
    uptime_seconds: int = Field(..., ge=0)
    users: int = Field(..., ge=0, description="Users with stored favorites or meal plans")
