"""
Seed Recipes Module.

A fixed, embedded set of six recipes. It is shown at start-up before any
search has run, and it replaces the search result whenever the catalog call
cannot be trusted (transport failure, quota sentinel, empty result).

# NOTE: The seed set is only ever used as a whole result. It is never merged
    with recipes from a real search.
"""

from typing import Tuple

from .models import Recipe

SEED_RECIPES: Tuple[Recipe, ...] = (
    Recipe(
        id=1,
        title="Spaghetti Carbonara",
        image="https://images.unsplash.com/photo-1612874742237-6526221588e3?w=400",
        tags=("Italian", "Pasta"),
        ready_in_minutes=30,
        servings=4,
        summary="A classic Italian pasta dish made with eggs, cheese, and bacon.",
    ),
    Recipe(
        id=2,
        title="Chicken Tikka Masala",
        image="https://images.unsplash.com/photo-1565557623262-b51c2513a641?w=400",
        tags=("Indian", "Curry"),
        ready_in_minutes=45,
        servings=6,
        summary="Tender chicken in a creamy, spiced tomato sauce.",
    ),
    Recipe(
        id=3,
        title="Caesar Salad",
        image="https://images.unsplash.com/photo-1546793665-c74683f339c1?w=400",
        tags=("Salad", "Healthy"),
        ready_in_minutes=15,
        servings=2,
        summary="Fresh romaine lettuce with classic Caesar dressing and croutons.",
    ),
    Recipe(
        id=4,
        title="Beef Tacos",
        image="https://images.unsplash.com/photo-1565299585323-38d6b0865b47?w=400",
        tags=("Mexican", "Quick"),
        ready_in_minutes=25,
        servings=4,
        summary="Seasoned ground beef in crispy taco shells with fresh toppings.",
    ),
    Recipe(
        id=5,
        title="Mushroom Risotto",
        image="https://images.unsplash.com/photo-1476124369491-c404fae0a326?w=400",
        tags=("Italian", "Vegetarian"),
        ready_in_minutes=40,
        servings=4,
        summary="Creamy Italian rice dish with savory mushrooms and parmesan.",
    ),
    Recipe(
        id=6,
        title="Chocolate Chip Cookies",
        image="https://images.unsplash.com/photo-1499636136210-6f4ee915583e?w=400",
        tags=("Dessert", "Baking"),
        ready_in_minutes=20,
        servings=24,
        summary="Classic homemade cookies with melty chocolate chips.",
    ),
)

SEED_RECIPE_IDS: Tuple[int, ...] = tuple(recipe.id for recipe in SEED_RECIPES)
