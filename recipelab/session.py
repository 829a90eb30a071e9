"""
Session manager: tracks the signed-in user and drives personal data loads.

The manager subscribes to the auth provider and reacts to every session change:
- Anonymous -> Authenticated: start a new session epoch, then load favorites
  and meal plan for that user before the handler returns
- Authenticated -> Anonymous: clear favorites, meal plan and the pagination
  cursor immediately, with no persistence call
- Authenticated -> Authenticated (user switch): same as a fresh login; the
  previous user's data is cleared first

login() and logout() never raise. Auth failures are logged and the session
stays in its prior state.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .auth import BaseAuthProvider
from .errors import AuthError
from .models import UserSession
from .personalization import PersonalizationStore
from .state import SessionEnded, SessionStarted, StateStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionManager:
    """Bridges auth provider notifications to the state store and the personalization store."""

    def __init__(
        self,
        auth_provider: BaseAuthProvider,
        personalization: PersonalizationStore,
        store: StateStore,
    ) -> None:
        self._auth = auth_provider
        self._personalization = personalization
        self._store = store
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def state(self) -> SessionState:
        if self._store.snapshot.session is None:
            return SessionState.ANONYMOUS
        return SessionState.AUTHENTICATED

    @property
    def user(self) -> Optional[UserSession]:
        return self._store.snapshot.session

    def attach(self) -> None:
        """Start listening to the auth provider. Calling it twice has no extra effect."""
        if self._unsubscribe is None:
            self._unsubscribe = self._auth.subscribe(self.handle_auth_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def handle_auth_change(self, user: Optional[UserSession]) -> None:
        """
        Apply a session change reported by the auth provider.

        Args:
            user: The newly signed-in user, or None after sign-out
        """
        if user is None:
            if self._store.snapshot.session is not None:
                logger.info("Session ended for %s", self._store.snapshot.session.id)
            self._store.dispatch(SessionEnded())
            self._personalization.reset()
            return

        epoch = self._store.dispatch(SessionStarted(session=user)).session_epoch
        logger.info("Session started for %s (epoch %d)", user.id, epoch)
        await self._personalization.load(user, epoch)

    async def login(self) -> bool:
        """
        Ask the auth provider to sign in.

        Returns:
            True if a session is active afterwards.
        """
        try:
            await self._auth.login()
        except AuthError as e:
            logger.warning("Login failed: %s", e)
            return False
        except Exception as e:
            logger.error("Unexpected error during login: %s", e, exc_info=True)
            return False
        return self.state == SessionState.AUTHENTICATED

    async def logout(self) -> bool:
        """
        Ask the auth provider to sign out.

        Returns:
            True if no session is active afterwards.
        """
        try:
            await self._auth.logout()
        except AuthError as e:
            logger.warning("Logout failed: %s", e)
            return False
        except Exception as e:
            logger.error("Unexpected error during logout: %s", e, exc_info=True)
            return False
        return self.state == SessionState.ANONYMOUS
