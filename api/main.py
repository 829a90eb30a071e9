"""
FastAPI application for the Recipes Lab persistence service.

This module serves per-user favorites and meal plans over HTTP. It is the
remote store the client's HttpPersistence talks to:
- GET    /users/{uid}/favorites: List favorites
- POST   /users/{uid}/favorites: Add a recipe (re-adding replaces it)
- DELETE /users/{uid}/favorites/{recipe_id}: Remove a recipe
- GET    /users/{uid}/meal-plan: Meal plan with every day present
- POST   /users/{uid}/meal-plan/{day}: Append a recipe to a day
- DELETE /users/{uid}/meal-plan/{day}/{recipe_id}: Remove every entry with that id from a day

Days are Mon, Tue, Wed, Thu, Fri, Sat, Sun; anything else returns 400.

Data is held in memory and resets when the service restarts.

Run the API with:
    uvicorn api.main:app --reload

Access API documentation at:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

# Import config early to load .env file before any other code accesses environment variables
import recipelab.config  # noqa: F401

import logging
import time

from fastapi import FastAPI, HTTPException, Path, status

from recipelab.models import DAYS_OF_WEEK, Recipe, validate_day
from recipelab.persistence.memory import InMemoryPersistence
from api.schemas import FavoritesResponse, HealthResponse, MealPlanResponse

logger = logging.getLogger(__name__)

API_NAME = "Recipes Lab Persistence API"
API_VERSION = "1.0.0"

# Track app start time for uptime calculation
_APP_START_TIME = time.time()

app = FastAPI(
    title=API_NAME,
    description="Per-user favorites and weekly meal plans for the Recipes Lab client",
    version=API_VERSION,
    tags_metadata=[
        {
            "name": "favorites",
            "description": "A user's favorite recipes, unique by recipe id.",
        },
        {
            "name": "meal-plan",
            "description": "A user's weekly meal plan. Days: " + ", ".join(DAYS_OF_WEEK) + ".",
        },
        {
            "name": "health",
            "description": "Health check and monitoring endpoints.",
        },
    ],
)

store = InMemoryPersistence()


def _check_day(day: str) -> str:
    """
    Raises:
        HTTPException 400: If day is not one of Mon..Sun
    """
    try:
        return validate_day(day)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


async def _favorites_response(uid: str) -> FavoritesResponse:
    return FavoritesResponse(uid=uid, favorites=await store.get_favorites(uid))


async def _meal_plan_response(uid: str) -> MealPlanResponse:
    plan = await store.get_meal_plan(uid)
    return MealPlanResponse(uid=uid, meal_plan={day: list(recipes) for day, recipes in plan.items()})


@app.get(
    "/users/{uid}/favorites",
    response_model=FavoritesResponse,
    tags=["favorites"],
    summary="List a user's favorites",
)
async def list_favorites(uid: str = Path(..., description="User id")) -> FavoritesResponse:
    return await _favorites_response(uid)


@app.post(
    "/users/{uid}/favorites",
    response_model=FavoritesResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["favorites"],
    summary="Add a recipe to a user's favorites",
    description="Adds the recipe document. A recipe already in favorites is replaced, not duplicated.",
)
async def add_favorite(recipe: Recipe, uid: str = Path(..., description="User id")) -> FavoritesResponse:
    """
    Add a recipe to favorites.

    Example:
        ```bash
        POST /users/user-123/favorites
        Body: {"id": 1, "title": "Classic Spaghetti Carbonara", "readyInMinutes": 25, ...}
        ```
    """
    await store.add_to_favorites(uid, recipe)
    logger.info("Added favorite %s for %s", recipe.id, uid)
    return await _favorites_response(uid)


@app.delete(
    "/users/{uid}/favorites/{recipe_id}",
    response_model=FavoritesResponse,
    tags=["favorites"],
    summary="Remove a recipe from a user's favorites",
    description="Removing a recipe that is not a favorite is not an error.",
)
async def remove_favorite(
    uid: str = Path(..., description="User id"),
    recipe_id: int = Path(..., description="Recipe id"),
) -> FavoritesResponse:
    await store.remove_from_favorites(uid, recipe_id)
    logger.info("Removed favorite %s for %s", recipe_id, uid)
    return await _favorites_response(uid)


@app.get(
    "/users/{uid}/meal-plan",
    response_model=MealPlanResponse,
    tags=["meal-plan"],
    summary="Get a user's meal plan",
)
async def get_meal_plan(uid: str = Path(..., description="User id")) -> MealPlanResponse:
    return await _meal_plan_response(uid)


@app.post(
    "/users/{uid}/meal-plan/{day}",
    response_model=MealPlanResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["meal-plan"],
    summary="Append a recipe to a day",
    description="The same recipe may be planned more than once on the same day.",
)
async def add_meal(
    recipe: Recipe,
    uid: str = Path(..., description="User id"),
    day: str = Path(..., description="Day of week (Mon..Sun)"),
) -> MealPlanResponse:
    """
    Append a recipe to a day of the meal plan.

    Raises:
        HTTPException 400: If day is not one of Mon..Sun
    """
    await store.add_to_meal_plan(uid, _check_day(day), recipe)
    logger.info("Planned recipe %s on %s for %s", recipe.id, day, uid)
    return await _meal_plan_response(uid)


@app.delete(
    "/users/{uid}/meal-plan/{day}/{recipe_id}",
    response_model=MealPlanResponse,
    tags=["meal-plan"],
    summary="Remove a recipe from a day",
    description="Removes every entry with this recipe id from the day; other days are untouched.",
)
async def remove_meal(
    uid: str = Path(..., description="User id"),
    day: str = Path(..., description="Day of week (Mon..Sun)"),
    recipe_id: int = Path(..., description="Recipe id"),
) -> MealPlanResponse:
    """
    Raises:
        HTTPException 400: If day is not one of Mon..Sun
    """
    await store.remove_from_meal_plan(uid, _check_day(day), recipe_id)
    logger.info("Removed recipe %s from %s for %s", recipe_id, day, uid)
    return await _meal_plan_response(uid)


@app.get("/health", response_model=HealthResponse, tags=["health"])
def health() -> HealthResponse:
    """
    Health check endpoint for monitoring and status checks.

    Returns:
        Status, API metadata, uptime and the number of users with stored data.
        Always returns 200 OK if the endpoint is reachable.
    """
    return HealthResponse(
        status="ok",
        name=API_NAME,
        version=API_VERSION,
        uptime_seconds=int(time.time() - _APP_START_TIME),
        users=store.user_count(),
    )


@app.get("/")
def root():
    """
    Root endpoint providing API information.

    Returns:
        Dictionary with API name and version
    """
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "description": "Per-user favorites and weekly meal plans for the Recipes Lab client",
        "docs": "/docs",
    }
