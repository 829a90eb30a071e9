"""
Recipe, session and meal-plan models for Recipes Lab.

This module defines the canonical schemas used throughout the client. Raw
catalog payloads and persisted documents are validated into these models at
the boundary; the state store never holds untyped dictionaries.

# NOTE: Field names are snake_case in Python and camelCase on the wire
    (readyInMinutes, extendedIngredients, analyzedInstructions, displayName,
    photoURL). Both spellings are accepted on input; to_document() always
    produces the wire spelling so persisted documents match catalog records.

Current field expectations:
- Catalog search results return: id, title, image, readyInMinutes, servings,
  summary, cuisines, dishTypes, diets (tags are derived from the last three)
- Catalog detail returns the above plus extendedIngredients[].original,
  analyzedInstructions[].steps[], nutrition.nutrients[]
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

logger = logging.getLogger(__name__)

DAYS_OF_WEEK: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Raw catalog keys that are folded into Recipe.tags when a record has no tags
_TAG_SOURCE_KEYS = ("cuisines", "dishTypes", "diets")


class Recipe(BaseModel):
    """
    A recipe as shown in the pool, favorites and meal plan.

    Immutable once fetched: the client only copies recipes into favorites and
    meal-plan collections, it never edits them.
    """
    id: int = Field(..., description="Catalog recipe identifier (unique, stable)")
    title: str = Field(..., description="Recipe title")
    image: Optional[str] = Field(None, description="Image URI")
    tags: Tuple[str, ...] = Field(default=(), description="Ordered tags, may be empty")
    ready_in_minutes: Optional[int] = Field(None, alias="readyInMinutes", description="Total time in minutes")
    servings: Optional[int] = Field(None, description="Number of servings")
    summary: Optional[str] = Field(None, description="Summary markup, rendered verbatim")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _derive_tags(cls, data: Any) -> Any:
        """Build tags from cuisines, dish types and diets when the record carries none."""
        if not isinstance(data, dict) or data.get("tags"):
            return data
        tags: List[str] = []
        for key in _TAG_SOURCE_KEYS:
            for tag in data.get(key) or []:
                if tag and tag not in tags:
                    tags.append(tag)
        if tags:
            data = {**data, "tags": tags}
        return data

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the camelCase document stored by the persistence service."""
        return self.model_dump(mode="json", by_alias=True)


class InstructionStep(BaseModel):
    number: int
    step: str

    model_config = ConfigDict(frozen=True, extra="ignore")


class InstructionSet(BaseModel):
    name: str = ""
    steps: Tuple[InstructionStep, ...] = ()

    model_config = ConfigDict(frozen=True, extra="ignore")


class Nutrient(BaseModel):
    name: str
    amount: float
    unit: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")


class Nutrition(BaseModel):
    nutrients: Tuple[Nutrient, ...] = ()

    model_config = ConfigDict(frozen=True, extra="ignore")


class RecipeDetail(Recipe):
    """
    Full detail for a single recipe, keyed by the same id as Recipe.

    Fetched lazily when a recipe is selected. When no detail is available the
    caller falls back to Recipe.summary.
    """
    extended_ingredients: Tuple[str, ...] = Field(
        default=(), alias="extendedIngredients", description="Ingredient descriptions in order"
    )
    analyzed_instructions: Tuple[InstructionSet, ...] = Field(
        default=(), alias="analyzedInstructions", description="Instruction sets, each an ordered list of steps"
    )
    nutrition: Optional[Nutrition] = Field(None, description="Per-serving nutrients")

    @field_validator("extended_ingredients", mode="before")
    @classmethod
    def _ingredient_descriptions(cls, value: Any) -> Any:
        """Catalog ingredients are objects; keep their human-readable 'original' line."""
        if value is None:
            return ()
        descriptions = []
        for ingredient in value:
            if isinstance(ingredient, dict):
                text = ingredient.get("original") or ingredient.get("name")
            else:
                text = ingredient
            if text:
                descriptions.append(str(text))
        return descriptions

    @field_validator("analyzed_instructions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def steps(self) -> Tuple[InstructionStep, ...]:
        """Steps of the first instruction set (the one the catalog marks as primary)."""
        if not self.analyzed_instructions:
            return ()
        return self.analyzed_instructions[0].steps

    def top_nutrients(self, limit: int = 8) -> Tuple[Nutrient, ...]:
        if self.nutrition is None:
            return ()
        return self.nutrition.nutrients[:limit]


class UserSession(BaseModel):
    """Authenticated user as reported by the auth provider."""
    id: str = Field(..., description="Stable user id, keys all persisted data")
    display_name: Optional[str] = Field(None, alias="displayName")
    email: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class FavoriteStatus(str, Enum):
    """Lifecycle of the latest toggle for one recipe id."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class FavoritesPage(BaseModel):
    """One page of the favorites list plus the metadata needed to render pagination."""
    items: Tuple[Recipe, ...] = ()
    page: int = Field(1, ge=1)
    total_pages: int = Field(1, ge=1)
    total_items: int = Field(0, ge=0)
    per_page: int = Field(6, ge=1)

    model_config = ConfigDict(frozen=True)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


# day -> recipes in insertion order; duplicates allowed
MealPlan = Dict[str, Tuple[Recipe, ...]]


def empty_meal_plan() -> MealPlan:
    """Meal plan with every day of the week mapped to an empty tuple."""
    return {day: () for day in DAYS_OF_WEEK}


def validate_day(day: str) -> str:
    """
    Check that day is one of DAYS_OF_WEEK.

    Raises:
        ValueError: If day is not in DAYS_OF_WEEK
    """
    if day not in DAYS_OF_WEEK:
        raise ValueError(f"Invalid day: {day}. Must be one of {list(DAYS_OF_WEEK)}")
    return day


def normalize_meal_plan(raw: Optional[Mapping[str, Iterable[Any]]]) -> MealPlan:
    """
    Validate a meal plan read from the persistence service.

    Every day is present in the result. Unknown day keys are dropped with a
    warning; entries may be Recipe instances or raw documents.
    """
    plan = empty_meal_plan()
    for day, entries in (raw or {}).items():
        if day not in plan:
            logger.warning("Ignoring meal plan entries for unknown day %r", day)
            continue
        plan[day] = tuple(
            entry if isinstance(entry, Recipe) else Recipe.model_validate(entry)
            for entry in entries or ()
        )
    return plan
