"""
Auth provider contract and a local in-process provider.

The client only needs three things from authentication: a notification when
the signed-in user changes, login() and logout(). Everything else about the
auth protocol is the provider's business.

Providers notify listeners with the new UserSession (or None after logout)
and await each listener, so by the time login() returns the session manager
has finished loading the user's favorites and meal plan.
"""

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional

from .config import AuthConfig
from .errors import AuthError
from .models import UserSession

logger = logging.getLogger(__name__)

AuthListener = Callable[[Optional[UserSession]], Awaitable[None]]


class BaseAuthProvider(ABC):
    """
    Abstract base class for auth providers.

    Subclasses implement login() and logout() and call _notify() whenever the
    signed-in user changes.
    """

    def __init__(self) -> None:
        self._listeners: List[AuthListener] = []
        self._current_user: Optional[UserSession] = None

    @property
    def current_user(self) -> Optional[UserSession]:
        return self._current_user

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        """Register an async listener for session changes; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self, user: Optional[UserSession]) -> None:
        self._current_user = user
        for listener in list(self._listeners):
            try:
                await listener(user)
            except Exception as e:
                logger.error("Auth listener failed: %s", e, exc_info=True)

    @abstractmethod
    async def login(self) -> UserSession:
        """
        Start a session.

        Raises:
            AuthError: If the provider rejects the login.
        """
        pass

    @abstractmethod
    async def logout(self) -> None:
        """
        End the current session.

        Raises:
            AuthError: If the provider rejects the logout.
        """
        pass


class LocalAuthProvider(BaseAuthProvider):
    """
    In-process provider that signs in one configured account.

    Used for local runs and tests. With no account configured, login() fails
    with AuthError like a rejected sign-in would.
    """

    def __init__(self, account: Optional[UserSession] = None) -> None:
        super().__init__()
        self.account = account

    @classmethod
    def from_env(cls) -> "LocalAuthProvider":
        """Build the provider from the RECIPELAB_USER_* environment variables."""
        user_id = AuthConfig.get_user_id()
        if not user_id:
            return cls(None)
        return cls(UserSession(
            id=user_id,
            display_name=AuthConfig.get_display_name(),
            email=AuthConfig.get_email(),
            photo_url=AuthConfig.get_photo_url(),
        ))

    async def login(self) -> UserSession:
        if self.account is None:
            raise AuthError("No local account configured (set RECIPELAB_USER_ID)")
        await self._notify(self.account)
        return self.account

    async def logout(self) -> None:
        if self._current_user is None:
            return
        await self._notify(None)
