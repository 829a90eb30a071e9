"""
Session-scoped state store for Recipes Lab.

All shared UI state (recipe pool, selection, favorites, meal plan, pagination
cursor, session) lives in one immutable Snapshot. Components never mutate it;
they dispatch events and apply_event() produces the next snapshot.

Responses that arrive late are filtered here, in one place:
- search results carry the search token of the request that produced them
- detail responses carry the selection token of the recipe they belong to
- favorites / meal-plan loads and favorite toggles carry the session epoch
An event whose token no longer matches the snapshot is dropped and the
snapshot is returned unchanged.

# NOTE: Snapshot.pool defaults to the seed recipes, so a freshly created store
    already shows something before any search runs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .models import (
    FavoritesPage,
    FavoriteStatus,
    MealPlan,
    Recipe,
    RecipeDetail,
    UserSession,
    empty_meal_plan,
    normalize_meal_plan,
)
from .seed import SEED_RECIPES
from .utils.pagination import FAVORITES_PER_PAGE, clamp_page, page_slice, total_pages

logger = logging.getLogger(__name__)

POOL_SOURCE_SEED = "seed"
POOL_SOURCE_CATALOG = "catalog"


class Snapshot(BaseModel):
    """Immutable view of everything the presentation layer renders."""
    # Recipe pool
    pool: Tuple[Recipe, ...] = Field(default_factory=lambda: SEED_RECIPES)
    pool_source: str = POOL_SOURCE_SEED
    fallback_reason: Optional[str] = None
    loading: bool = False
    search_token: int = 0
    filter_text: str = ""

    # Selected recipe and its enrichment
    selected: Optional[Recipe] = None
    selection_token: int = 0
    detail: Optional[RecipeDetail] = None
    detail_loading: bool = False
    day_selector_open: bool = False

    # Session and personal data
    session: Optional[UserSession] = None
    session_epoch: int = 0
    session_ready: bool = False
    favorites: Tuple[Recipe, ...] = ()
    favorite_status: Dict[int, FavoriteStatus] = Field(default_factory=dict)
    meal_plan: MealPlan = Field(default_factory=empty_meal_plan)
    favorites_page: int = 1

    # Transient user-facing messages, oldest first
    notices: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def is_authenticated(self) -> bool:
        """True once a session exists and its personal data has been loaded."""
        return self.session is not None and self.session_ready

    @property
    def detail_visible(self) -> bool:
        """The detail view is hidden while the day selector is open."""
        return self.selected is not None and not self.day_selector_open

    def is_favorite(self, recipe_id: int) -> bool:
        return any(recipe.id == recipe_id for recipe in self.favorites)

    def favorite_index(self, recipe_id: int) -> Optional[int]:
        for index, recipe in enumerate(self.favorites):
            if recipe.id == recipe_id:
                return index
        return None

    def is_known_recipe(self, recipe_id: int) -> bool:
        """True if recipe_id is in the pool, is the current selection, or is the fetched detail."""
        if any(recipe.id == recipe_id for recipe in self.pool):
            return True
        if self.selected is not None and self.selected.id == recipe_id:
            return True
        return self.detail is not None and self.detail.id == recipe_id

    def favorite_pending(self, recipe_id: int) -> bool:
        return self.favorite_status.get(recipe_id) == FavoriteStatus.PENDING

    def favorites_view(self, per_page: int = FAVORITES_PER_PAGE) -> FavoritesPage:
        return FavoritesPage(
            items=page_slice(self.favorites, self.favorites_page, per_page),
            page=clamp_page(self.favorites_page, len(self.favorites), per_page),
            total_pages=total_pages(len(self.favorites), per_page),
            total_items=len(self.favorites),
            per_page=per_page,
        )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SearchStarted:
    pass


@dataclass(frozen=True)
class SearchSucceeded:
    token: int
    recipes: Tuple[Recipe, ...]


@dataclass(frozen=True)
class SearchFellBack:
    token: int
    reason: str
    recipes: Tuple[Recipe, ...] = SEED_RECIPES


@dataclass(frozen=True)
class FilterChanged:
    text: str


@dataclass(frozen=True)
class RecipeSelected:
    recipe: Recipe


@dataclass(frozen=True)
class DetailResolved:
    token: int
    detail: Optional[RecipeDetail]


@dataclass(frozen=True)
class DetailClosed:
    pass


@dataclass(frozen=True)
class DaySelectorOpened:
    pass


@dataclass(frozen=True)
class DaySelectorClosed:
    pass


@dataclass(frozen=True)
class SessionStarted:
    session: UserSession


@dataclass(frozen=True)
class SessionReady:
    epoch: int


@dataclass(frozen=True)
class SessionEnded:
    pass


@dataclass(frozen=True)
class FavoritesLoaded:
    epoch: int
    favorites: Tuple[Recipe, ...]


@dataclass(frozen=True)
class MealPlanLoaded:
    epoch: int
    meal_plan: Mapping[str, Iterable[Any]]


@dataclass(frozen=True)
class FavoriteTogglePending:
    epoch: int
    recipe: Recipe
    adding: bool


@dataclass(frozen=True)
class FavoriteToggleConfirmed:
    epoch: int
    recipe_id: int


@dataclass(frozen=True)
class FavoriteToggleFailed:
    epoch: int
    recipe: Recipe
    adding: bool
    # position the recipe held before an optimistic removal
    index: Optional[int] = None


@dataclass(frozen=True)
class PageChanged:
    delta: int


@dataclass(frozen=True)
class NoticePushed:
    message: str


@dataclass(frozen=True)
class NoticeDismissed:
    pass


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def _is_current_epoch(snapshot: Snapshot, event: Any) -> bool:
    if event.epoch != snapshot.session_epoch:
        logger.debug("Discarding %s from session epoch %d (current: %d)",
                     type(event).__name__, event.epoch, snapshot.session_epoch)
        return False
    return True


def _with_favorites(snapshot: Snapshot, favorites: Tuple[Recipe, ...], **updates: Any) -> Snapshot:
    """Replace favorites and re-clamp the pagination cursor."""
    page = clamp_page(snapshot.favorites_page, len(favorites))
    return snapshot.model_copy(update={"favorites": favorites, "favorites_page": page, **updates})


def _cleared_personal_data(epoch: int) -> Dict[str, Any]:
    return {
        "session_epoch": epoch,
        "session_ready": False,
        "favorites": (),
        "favorite_status": {},
        "meal_plan": empty_meal_plan(),
        "favorites_page": 1,
    }


def _on_search_started(snapshot: Snapshot, event: SearchStarted) -> Snapshot:
    return snapshot.model_copy(update={"loading": True, "search_token": snapshot.search_token + 1})


def _on_search_succeeded(snapshot: Snapshot, event: SearchSucceeded) -> Snapshot:
    if event.token != snapshot.search_token:
        logger.debug("Discarding search result %d (current: %d)", event.token, snapshot.search_token)
        return snapshot
    return snapshot.model_copy(update={
        "pool": tuple(event.recipes),
        "pool_source": POOL_SOURCE_CATALOG,
        "fallback_reason": None,
        "loading": False,
    })


def _on_search_fell_back(snapshot: Snapshot, event: SearchFellBack) -> Snapshot:
    if event.token != snapshot.search_token:
        logger.debug("Discarding search fallback %d (current: %d)", event.token, snapshot.search_token)
        return snapshot
    return snapshot.model_copy(update={
        "pool": tuple(event.recipes),
        "pool_source": POOL_SOURCE_SEED,
        "fallback_reason": event.reason,
        "loading": False,
    })


def _on_filter_changed(snapshot: Snapshot, event: FilterChanged) -> Snapshot:
    return snapshot.model_copy(update={"filter_text": event.text})


def _on_recipe_selected(snapshot: Snapshot, event: RecipeSelected) -> Snapshot:
    return snapshot.model_copy(update={
        "selected": event.recipe,
        "selection_token": snapshot.selection_token + 1,
        "detail": None,
        "detail_loading": True,
        "day_selector_open": False,
    })


def _on_detail_resolved(snapshot: Snapshot, event: DetailResolved) -> Snapshot:
    if event.token != snapshot.selection_token:
        logger.debug("Discarding detail for selection %d (current: %d)", event.token, snapshot.selection_token)
        return snapshot
    return snapshot.model_copy(update={"detail": event.detail, "detail_loading": False})


def _on_detail_closed(snapshot: Snapshot, event: DetailClosed) -> Snapshot:
    # Bumping the token makes any in-flight detail response stale.
    return snapshot.model_copy(update={
        "selected": None,
        "selection_token": snapshot.selection_token + 1,
        "detail": None,
        "detail_loading": False,
        "day_selector_open": False,
    })


def _on_day_selector_opened(snapshot: Snapshot, event: DaySelectorOpened) -> Snapshot:
    if snapshot.selected is None:
        return snapshot
    return snapshot.model_copy(update={"day_selector_open": True})


def _on_day_selector_closed(snapshot: Snapshot, event: DaySelectorClosed) -> Snapshot:
    return snapshot.model_copy(update={"day_selector_open": False})


def _on_session_started(snapshot: Snapshot, event: SessionStarted) -> Snapshot:
    update = _cleared_personal_data(snapshot.session_epoch + 1)
    update["session"] = event.session
    return snapshot.model_copy(update=update)


def _on_session_ready(snapshot: Snapshot, event: SessionReady) -> Snapshot:
    if not _is_current_epoch(snapshot, event) or snapshot.session is None:
        return snapshot
    return snapshot.model_copy(update={"session_ready": True})


def _on_session_ended(snapshot: Snapshot, event: SessionEnded) -> Snapshot:
    update = _cleared_personal_data(snapshot.session_epoch + 1)
    update["session"] = None
    return snapshot.model_copy(update=update)


def _on_favorites_loaded(snapshot: Snapshot, event: FavoritesLoaded) -> Snapshot:
    if not _is_current_epoch(snapshot, event):
        return snapshot
    seen = set()
    favorites: List[Recipe] = []
    for recipe in event.favorites:
        if recipe.id not in seen:
            seen.add(recipe.id)
            favorites.append(recipe)
    return _with_favorites(snapshot, tuple(favorites), favorite_status={})


def _on_meal_plan_loaded(snapshot: Snapshot, event: MealPlanLoaded) -> Snapshot:
    if not _is_current_epoch(snapshot, event):
        return snapshot
    return snapshot.model_copy(update={"meal_plan": normalize_meal_plan(event.meal_plan)})


def _on_favorite_pending(snapshot: Snapshot, event: FavoriteTogglePending) -> Snapshot:
    if not _is_current_epoch(snapshot, event):
        return snapshot
    recipe_id = event.recipe.id
    if event.adding:
        favorites = snapshot.favorites
        if not snapshot.is_favorite(recipe_id):
            favorites = favorites + (event.recipe,)
    else:
        favorites = tuple(recipe for recipe in snapshot.favorites if recipe.id != recipe_id)
    status = {**snapshot.favorite_status, recipe_id: FavoriteStatus.PENDING}
    return _with_favorites(snapshot, favorites, favorite_status=status)


def _on_favorite_confirmed(snapshot: Snapshot, event: FavoriteToggleConfirmed) -> Snapshot:
    if not _is_current_epoch(snapshot, event):
        return snapshot
    status = {**snapshot.favorite_status, event.recipe_id: FavoriteStatus.CONFIRMED}
    return snapshot.model_copy(update={"favorite_status": status})


def _on_favorite_failed(snapshot: Snapshot, event: FavoriteToggleFailed) -> Snapshot:
    if not _is_current_epoch(snapshot, event):
        return snapshot
    recipe_id = event.recipe.id
    if event.adding:
        favorites = tuple(recipe for recipe in snapshot.favorites if recipe.id != recipe_id)
    elif snapshot.is_favorite(recipe_id):
        favorites = snapshot.favorites
    else:
        position = len(snapshot.favorites) if event.index is None else min(event.index, len(snapshot.favorites))
        favorites = snapshot.favorites[:position] + (event.recipe,) + snapshot.favorites[position:]
    status = {**snapshot.favorite_status, recipe_id: FavoriteStatus.FAILED}
    return _with_favorites(snapshot, favorites, favorite_status=status)


def _on_page_changed(snapshot: Snapshot, event: PageChanged) -> Snapshot:
    page = clamp_page(snapshot.favorites_page + event.delta, len(snapshot.favorites))
    if page == snapshot.favorites_page:
        return snapshot
    return snapshot.model_copy(update={"favorites_page": page})


def _on_notice_pushed(snapshot: Snapshot, event: NoticePushed) -> Snapshot:
    return snapshot.model_copy(update={"notices": snapshot.notices + (event.message,)})


def _on_notice_dismissed(snapshot: Snapshot, event: NoticeDismissed) -> Snapshot:
    if not snapshot.notices:
        return snapshot
    return snapshot.model_copy(update={"notices": snapshot.notices[1:]})


_REDUCERS: Dict[type, Callable[[Snapshot, Any], Snapshot]] = {
    SearchStarted: _on_search_started,
    SearchSucceeded: _on_search_succeeded,
    SearchFellBack: _on_search_fell_back,
    FilterChanged: _on_filter_changed,
    RecipeSelected: _on_recipe_selected,
    DetailResolved: _on_detail_resolved,
    DetailClosed: _on_detail_closed,
    DaySelectorOpened: _on_day_selector_opened,
    DaySelectorClosed: _on_day_selector_closed,
    SessionStarted: _on_session_started,
    SessionReady: _on_session_ready,
    SessionEnded: _on_session_ended,
    FavoritesLoaded: _on_favorites_loaded,
    MealPlanLoaded: _on_meal_plan_loaded,
    FavoriteTogglePending: _on_favorite_pending,
    FavoriteToggleConfirmed: _on_favorite_confirmed,
    FavoriteToggleFailed: _on_favorite_failed,
    PageChanged: _on_page_changed,
    NoticePushed: _on_notice_pushed,
    NoticeDismissed: _on_notice_dismissed,
}


def apply_event(snapshot: Snapshot, event: Any) -> Snapshot:
    """
    Produce the snapshot that follows event.

    Args:
        snapshot: Current snapshot (not modified)
        event: One of the event dataclasses defined in this module

    Returns:
        The next snapshot, or snapshot itself when the event is stale or has no effect

    Raises:
        TypeError: If event is not a known event type
    """
    reducer = _REDUCERS.get(type(event))
    if reducer is None:
        raise TypeError(f"Unknown state event: {type(event).__name__}")
    return reducer(snapshot, event)


Listener = Callable[[Snapshot, Any], None]


class StateStore:
    """
    Holder of the current snapshot.

    dispatch() is synchronous and runs on the event loop thread, so events are
    applied one at a time in the order they are dispatched.
    """

    def __init__(self, initial: Optional[Snapshot] = None) -> None:
        self._snapshot = initial or Snapshot()
        self._listeners: List[Listener] = []

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def dispatch(self, event: Any) -> Snapshot:
        """Apply event, notify listeners if the snapshot changed, and return the current snapshot."""
        previous = self._snapshot
        current = apply_event(previous, event)
        if current is previous:
            return current
        self._snapshot = current
        for listener in list(self._listeners):
            try:
                listener(current, event)
            except Exception as e:
                logger.error("State listener failed on %s: %s", type(event).__name__, e, exc_info=True)
        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener(snapshot, event); returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
