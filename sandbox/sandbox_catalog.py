"""
Sandbox script for trying the live recipe catalog.

This script runs one search through the CatalogFetcher (the same path the app
uses, including the seed fallback) and then fetches full detail for the first
recipe.

Prerequisites:
- SPOONACULAR_API_KEY must be set in .env file at project root

Run:
    python -m sandbox.sandbox_catalog
"""

import asyncio
from pprint import pprint

from recipelab.catalog import CatalogFetcher
from recipelab.connectors.spoonacular_connector import SpoonacularConnector
from recipelab.details import DetailEnricher
from recipelab.state import StateStore


async def run() -> None:
    print("Initializing Spoonacular connector...")
    connector = SpoonacularConnector()
    print("Connector initialized successfully ✅\n")

    store = StateStore()
    fetcher = CatalogFetcher(connector, store)

    print("Searching (maxReadyTime=40, minHealthScore=75, maxPrice=500)...")
    recipes = await fetcher.search()
    snapshot = store.snapshot

    print(f"\nGot {len(recipes)} recipes from '{snapshot.pool_source}'")
    if snapshot.fallback_reason:
        print(f"Fell back to seed recipes: {snapshot.fallback_reason}")
        print("  - quota_exceeded: the daily API quota is used up (HTTP 402)")
        print("  - transport_error: network problem, timeout or non-2xx status")
        print("  - empty: the criteria matched no recipes")

    print("\n=== Recipe Summary ===")
    for i, recipe in enumerate(recipes, 1):
        print(f"{i}. [{recipe.id}] {recipe.title} | {recipe.ready_in_minutes} min | {', '.join(recipe.tags)}")

    if not recipes:
        return

    first = recipes[0]
    print(f"\n=== Full Details ({first.title}) ===")
    detail = await DetailEnricher(connector, store).fetch_details(first.id)
    if detail is None:
        print("No detail available, the app would show the summary instead:")
        print(first.summary)
    else:
        print("Ingredients:")
        for line in detail.extended_ingredients:
            print(f"  - {line}")
        print("Steps:")
        for step in detail.steps:
            print(f"  {step.number}. {step.step}")
        print("Nutrients:")
        pprint([n.model_dump() for n in detail.top_nutrients()])

    print("\n" + "=" * 80)


def main():
    """Run a live search and detail fetch."""
    try:
        asyncio.run(run())
    except RuntimeError as e:
        print(f"\n❌ Runtime Error: {e}")
        print("\nTroubleshooting:")
        print("  1. Ensure SPOONACULAR_API_KEY is set in .env file at project root")
        print("  2. Check that the key is valid and has quota left today")
    except Exception as e:
        print(f"\n❌ Unexpected Error: {type(e).__name__}: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
