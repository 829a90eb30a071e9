"""
Exception taxonomy for Recipes Lab.

Catalog failures never leave the catalog layer: connectors raise
TransportFailure / QuotaExceeded internally and convert them into tagged
results (see recipelab.connectors.base). An empty search result is a result
variant, not an exception.

AuthError and PersistenceError are raised by the auth provider and the
persistence backends and are caught (and logged) by the session manager and
the personalization store.
"""

from typing import Optional


class RecipeLabError(Exception):
    """Base class for all Recipes Lab errors."""


class CatalogError(RecipeLabError):
    """A catalog call could not be trusted."""


class TransportFailure(CatalogError):
    """The call did not complete successfully (network error, timeout, non-2xx status, bad body)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class QuotaExceeded(CatalogError):
    """The call completed but the body signals a rate-limit or billing failure."""


class AuthError(RecipeLabError):
    """Login or logout was rejected by the auth provider."""


class PersistenceError(RecipeLabError):
    """A read or mutation against the persistence service failed."""
