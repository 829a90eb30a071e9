"""
Recipes Lab client core.

Recipe discovery with a seed fallback, on-demand recipe detail, and per-user
favorites and weekly meal plans. Start with recipelab.app.build_app().
"""
