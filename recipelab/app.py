"""
Recipes Lab application facade.

RecipesLab is the boundary between the presentation layer and the rest of the
client. It exposes read models derived from the current state snapshot and
write intents that delegate to the component that owns them:

- search, set_filter                      -> CatalogFetcher
- select_recipe, close_detail             -> DetailEnricher
- toggle_favorite, day selector, paging   -> PersonalizationStore
- login, logout                           -> SessionManager

build_app() wires everything from the environment:
- SPOONACULAR_API_KEY set   -> live catalog, otherwise seed recipes only
- PERSISTENCE_URL set       -> HttpPersistence, otherwise InMemoryPersistence
- RECIPELAB_USER_ID set     -> LocalAuthProvider can sign that account in
"""

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

from .auth import BaseAuthProvider, LocalAuthProvider
from .catalog import CatalogFetcher, filter_by_title
from .config import PersistenceConfig
from .connectors.base import BaseCatalogConnector
from .connectors.spoonacular_connector import SpoonacularConnector
from .details import DetailEnricher
from .models import FavoritesPage, MealPlan, Recipe, RecipeDetail
from .personalization import NEXT_PAGE, PREVIOUS_PAGE, PersonalizationStore
from .persistence.base import BasePersistence
from .persistence.http_store import HttpPersistence
from .persistence.memory import InMemoryPersistence
from .session import SessionManager
from .state import FilterChanged, Listener, NoticeDismissed, Snapshot, StateStore

logger = logging.getLogger(__name__)


class RecipesLab:
    """Read models and write intents for one client session."""

    def __init__(
        self,
        connector: Optional[BaseCatalogConnector],
        persistence: BasePersistence,
        auth_provider: BaseAuthProvider,
        store: Optional[StateStore] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store or StateStore()
        self.catalog = CatalogFetcher(connector, self.store, rng=rng)
        self.details = DetailEnricher(connector, self.store)
        self.personalization = PersonalizationStore(persistence, self.store)
        self.session = SessionManager(auth_provider, self.personalization, self.store)
        self.session.attach()

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        return self.store.snapshot

    @property
    def recipes(self) -> Tuple[Recipe, ...]:
        """The current pool: seed recipes or the latest search result."""
        return self.snapshot.pool

    @property
    def filtered_recipes(self) -> List[Recipe]:
        """The pool narrowed by the title filter."""
        return filter_by_title(self.snapshot.pool, self.snapshot.filter_text)

    @property
    def loading(self) -> bool:
        return self.snapshot.loading

    @property
    def fallback_reason(self) -> Optional[str]:
        return self.snapshot.fallback_reason

    @property
    def selected_recipe(self) -> Optional[Recipe]:
        return self.snapshot.selected

    @property
    def recipe_detail(self) -> Optional[RecipeDetail]:
        return self.snapshot.detail

    @property
    def detail_loading(self) -> bool:
        return self.snapshot.detail_loading

    @property
    def detail_visible(self) -> bool:
        return self.snapshot.detail_visible

    @property
    def day_selector_open(self) -> bool:
        return self.snapshot.day_selector_open

    def is_favorite(self, recipe_id: int) -> bool:
        return self.snapshot.is_favorite(recipe_id)

    @property
    def favorites_page(self) -> FavoritesPage:
        return self.snapshot.favorites_view()

    @property
    def meal_plan(self) -> MealPlan:
        return self.snapshot.meal_plan

    @property
    def notices(self) -> Tuple[str, ...]:
        return self.snapshot.notices

    @property
    def session_summary(self) -> Dict[str, Any]:
        """
        What the header shows about the signed-in user.

        Returns:
            Dictionary with keys:
            - authenticated: bool
            - user_id, display_name, email, photo_url: None when anonymous
            - favorites_count: int
        """
        user = self.snapshot.session
        return {
            "authenticated": user is not None,
            "user_id": user.id if user else None,
            "display_name": user.display_name if user else None,
            "email": user.email if user else None,
            "photo_url": user.photo_url if user else None,
            "favorites_count": len(self.snapshot.favorites),
        }

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Be notified after every state change; returns an unsubscribe function."""
        return self.store.subscribe(listener)

    # ------------------------------------------------------------------
    # Write intents
    # ------------------------------------------------------------------

    async def search(self, criteria: Optional[Dict[str, Any]] = None) -> List[Recipe]:
        return await self.catalog.search(criteria)

    def set_filter(self, text: str) -> None:
        self.store.dispatch(FilterChanged(text=text))

    async def select_recipe(self, recipe: Recipe) -> Optional[RecipeDetail]:
        return await self.details.select(recipe)

    def close_detail(self) -> None:
        self.details.close()

    def _accepts(self, recipe: Recipe) -> bool:
        if self.store.snapshot.is_known_recipe(recipe.id):
            return True
        logger.warning("Refusing recipe %s: not in the pool, selection or detail", recipe.id)
        return False

    async def toggle_favorite(self, recipe: Recipe) -> bool:
        """Add or remove a favorite. Only shown recipes can be added; any favorite can be removed."""
        if not self.store.snapshot.is_favorite(recipe.id) and not self._accepts(recipe):
            return False
        return await self.personalization.toggle_favorite(recipe)

    def open_day_selector(self) -> bool:
        return self.personalization.open_day_selector()

    def cancel_day_selector(self) -> None:
        self.personalization.cancel_day_selector()

    async def choose_day(self, day: str) -> bool:
        return await self.personalization.choose_day(day)

    async def add_to_meal_plan(self, day: str, recipe: Recipe) -> bool:
        if not self._accepts(recipe):
            return False
        return await self.personalization.add_to_meal_plan(day, recipe)

    async def remove_from_day(self, day: str, recipe_id: int) -> bool:
        return await self.personalization.remove_from_meal_plan(day, recipe_id)

    def paginate(self, direction: int) -> int:
        return self.personalization.paginate(direction)

    def next_page(self) -> int:
        return self.personalization.paginate(NEXT_PAGE)

    def prev_page(self) -> int:
        return self.personalization.paginate(PREVIOUS_PAGE)

    async def login(self) -> bool:
        return await self.session.login()

    async def logout(self) -> bool:
        return await self.session.logout()

    def dismiss_notice(self) -> None:
        self.store.dispatch(NoticeDismissed())


def build_app(rng: Optional[random.Random] = None) -> RecipesLab:
    """
    Wire a RecipesLab from environment configuration.

    Missing catalog or persistence configuration is not an error: the app then
    runs on the seed recipes and an in-memory store.
    """
    try:
        connector: Optional[BaseCatalogConnector] = SpoonacularConnector()
    except RuntimeError as e:
        logger.warning("Recipe catalog disabled: %s", e)
        connector = None

    if PersistenceConfig.get_url():
        persistence: BasePersistence = HttpPersistence()
    else:
        logger.info("PERSISTENCE_URL not set; favorites and meal plans are kept in memory")
        persistence = InMemoryPersistence()

    return RecipesLab(connector, persistence, LocalAuthProvider.from_env(), rng=rng)
