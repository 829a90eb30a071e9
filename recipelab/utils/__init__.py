"""
Helper modules for the Recipes Lab client.

This package contains:
- sampling: Uniform sampling of search results (partial Fisher-Yates)
- pagination: Page arithmetic for the favorites list
"""
