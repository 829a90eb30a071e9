"""
Personalization store: favorites, weekly meal plan and favorites pagination.

Every mutation goes through the persistence service and is gated on an
authenticated session. Without one, favorite and meal-plan additions push a
login notice and do nothing else.

Favorites are optimistic:
- the local list changes immediately and the recipe is marked pending
- a successful remote call marks it confirmed
- a failed remote call rolls the local change back, marks it failed and
  pushes a notice
Toggles for the same recipe id are serialized, so a double click performs
add-then-remove against the service rather than two adds.

The meal plan is pessimistic: each add/remove is persisted, then the whole
plan is reloaded from the service and replaces local state. Meal-plan
operations are serialized so a reload never overtakes a later mutation.

All results are dispatched with the session epoch they started under; the
state store drops them if the user logged out or switched in the meantime.
"""

import asyncio
import logging
from typing import Dict

from .events import log_favorite_toggled, log_meal_plan_changed
from .models import FavoritesPage, MealPlan, Recipe, UserSession, validate_day
from .persistence.base import BasePersistence
from .state import (
    DaySelectorClosed,
    DaySelectorOpened,
    DetailClosed,
    FavoritesLoaded,
    FavoriteToggleConfirmed,
    FavoriteToggleFailed,
    FavoriteTogglePending,
    MealPlanLoaded,
    NoticePushed,
    PageChanged,
    SessionReady,
    StateStore,
)

logger = logging.getLogger(__name__)

LOGIN_FOR_FAVORITES = "Please login to add favorites!"
LOGIN_FOR_MEAL_PLAN = "Please login to add to meal plan!"
FAVORITE_FAILED = "Could not update favorites. Please try again."

NEXT_PAGE = 1
PREVIOUS_PAGE = -1


class PersonalizationStore:
    """Mediates favorites and meal-plan mutations between the state store and persistence."""

    def __init__(self, persistence: BasePersistence, store: StateStore) -> None:
        self._persistence = persistence
        self._store = store
        self._favorite_locks: Dict[int, asyncio.Lock] = {}
        self._meal_plan_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def is_favorite(self, recipe_id: int) -> bool:
        return self._store.snapshot.is_favorite(recipe_id)

    def favorites_page(self) -> FavoritesPage:
        return self._store.snapshot.favorites_view()

    def meal_plan(self) -> MealPlan:
        return self._store.snapshot.meal_plan

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def load(self, session: UserSession, epoch: int) -> None:
        """
        Load favorites and meal plan for session and mark the session ready.

        A failed read is logged and leaves that collection empty; the session
        still becomes ready so the user can keep working.
        """
        favorites, meal_plan = await asyncio.gather(
            self._persistence.get_favorites(session.id),
            self._persistence.get_meal_plan(session.id),
            return_exceptions=True,
        )

        if isinstance(favorites, BaseException):
            logger.error("Failed to load favorites for %s: %s", session.id, favorites)
        else:
            self._store.dispatch(FavoritesLoaded(epoch=epoch, favorites=tuple(favorites)))

        if isinstance(meal_plan, BaseException):
            logger.error("Failed to load meal plan for %s: %s", session.id, meal_plan)
        else:
            self._store.dispatch(MealPlanLoaded(epoch=epoch, meal_plan=meal_plan))

        snapshot = self._store.dispatch(SessionReady(epoch=epoch))
        if snapshot.session_epoch == epoch:
            logger.info("Loaded %d favorites and %d planned meals for %s",
                        len(snapshot.favorites), sum(len(day) for day in snapshot.meal_plan.values()), session.id)

    def reset(self) -> None:
        """Forget per-session serialization state after logout."""
        self._favorite_locks.clear()

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def toggle_favorite(self, recipe: Recipe) -> bool:
        """
        Add recipe to favorites if absent, remove it if present.

        Returns:
            True if the remote store confirmed the change, False otherwise
            (anonymous, session changed, or the remote call failed and the
            local change was rolled back).
        """
        snapshot = self._store.snapshot
        if not snapshot.is_authenticated:
            if snapshot.session is None:
                self._store.dispatch(NoticePushed(LOGIN_FOR_FAVORITES))
            return False

        epoch = snapshot.session_epoch
        uid = snapshot.session.id
        lock = self._favorite_locks.setdefault(recipe.id, asyncio.Lock())

        async with lock:
            snapshot = self._store.snapshot
            if snapshot.session_epoch != epoch:
                logger.debug("Session changed while toggle for %s was queued", recipe.id)
                return False

            adding = not snapshot.is_favorite(recipe.id)
            index = snapshot.favorite_index(recipe.id)
            self._store.dispatch(FavoriteTogglePending(epoch=epoch, recipe=recipe, adding=adding))

            try:
                if adding:
                    await self._persistence.add_to_favorites(uid, recipe)
                else:
                    await self._persistence.remove_from_favorites(uid, recipe.id)
            except asyncio.CancelledError:
                # The remote outcome is unknown; roll back like a failure and keep cancelling
                logger.warning("Favorite toggle for %s was cancelled", recipe.id)
                self._store.dispatch(
                    FavoriteToggleFailed(epoch=epoch, recipe=recipe, adding=adding, index=index)
                )
                raise
            except Exception as e:
                logger.error("Error toggling favorite %s for %s: %s", recipe.id, uid, e)
                snapshot = self._store.dispatch(
                    FavoriteToggleFailed(epoch=epoch, recipe=recipe, adding=adding, index=index)
                )
                if snapshot.session_epoch == epoch:
                    self._store.dispatch(NoticePushed(FAVORITE_FAILED))
                log_favorite_toggled(uid, recipe.id, added=adding, confirmed=False)
                return False

            self._store.dispatch(FavoriteToggleConfirmed(epoch=epoch, recipe_id=recipe.id))
            log_favorite_toggled(uid, recipe.id, added=adding, confirmed=True)
            return True

    # ------------------------------------------------------------------
    # Meal plan
    # ------------------------------------------------------------------

    async def _reload_meal_plan(self, uid: str, epoch: int) -> None:
        meal_plan = await self._persistence.get_meal_plan(uid)
        self._store.dispatch(MealPlanLoaded(epoch=epoch, meal_plan=meal_plan))

    async def add_to_meal_plan(self, day: str, recipe: Recipe) -> bool:
        """
        Append recipe to day, persist, then reload the whole plan.

        Raises:
            ValueError: If day is not one of DAYS_OF_WEEK

        Returns:
            True if the addition was persisted and the plan reloaded.
        """
        validate_day(day)
        snapshot = self._store.snapshot
        if not snapshot.is_authenticated:
            if snapshot.session is None:
                self._store.dispatch(NoticePushed(LOGIN_FOR_MEAL_PLAN))
            return False

        epoch = snapshot.session_epoch
        uid = snapshot.session.id
        async with self._meal_plan_lock:
            if self._store.snapshot.session_epoch != epoch:
                return False
            try:
                await self._persistence.add_to_meal_plan(uid, day, recipe)
                await self._reload_meal_plan(uid, epoch)
            except Exception as e:
                logger.error("Error adding recipe %s to %s for %s: %s", recipe.id, day, uid, e)
                return False

        log_meal_plan_changed(uid, day, recipe.id, action="added")
        return True

    async def remove_from_meal_plan(self, day: str, recipe_id: int) -> bool:
        """
        Remove every entry with recipe_id from day, then reload the whole plan.

        Anonymous calls are a silent no-op.

        Raises:
            ValueError: If day is not one of DAYS_OF_WEEK
        """
        validate_day(day)
        snapshot = self._store.snapshot
        if not snapshot.is_authenticated:
            return False

        epoch = snapshot.session_epoch
        uid = snapshot.session.id
        async with self._meal_plan_lock:
            if self._store.snapshot.session_epoch != epoch:
                return False
            try:
                await self._persistence.remove_from_meal_plan(uid, day, recipe_id)
                await self._reload_meal_plan(uid, epoch)
            except Exception as e:
                logger.error("Error removing recipe %s from %s for %s: %s", recipe_id, day, uid, e)
                return False

        log_meal_plan_changed(uid, day, recipe_id, action="removed")
        return True

    def open_day_selector(self) -> bool:
        """Show the day selector for the selected recipe. Returns False if nothing is selected."""
        return self._store.dispatch(DaySelectorOpened()).day_selector_open

    def cancel_day_selector(self) -> None:
        self._store.dispatch(DaySelectorClosed())

    async def choose_day(self, day: str) -> bool:
        """
        Add the selected recipe to day.

        On success the day selector and the selection are closed. On failure
        (including an anonymous user) both stay open.
        """
        selected = self._store.snapshot.selected
        if selected is None:
            logger.debug("choose_day(%s) called with no recipe selected", day)
            return False
        added = await self.add_to_meal_plan(day, selected)
        if added:
            self._store.dispatch(DaySelectorClosed())
            self._store.dispatch(DetailClosed())
        return added

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def paginate(self, direction: int) -> int:
        """
        Move the favorites cursor one page forward (+1) or back (-1), clamped.

        Raises:
            ValueError: If direction is not +1 or -1

        Returns:
            The current page after the move.
        """
        if direction not in (NEXT_PAGE, PREVIOUS_PAGE):
            raise ValueError(f"Invalid direction: {direction}. Must be 1 or -1")
        return self._store.dispatch(PageChanged(delta=direction)).favorites_page
