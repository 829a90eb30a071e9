"""
Base connector abstract class for recipe catalog integrations.

This module defines the abstract base class every catalog connector must
implement, and the tagged result variants connectors return. Raw, duck-typed
catalog payloads never leave a connector: a call resolves to exactly one of

- CatalogOk: the call succeeded; payload is a list of Recipe (search) or a
  RecipeDetail (detail)
- CatalogQuotaExceeded: the body carried a quota/failure sentinel
- CatalogTransportError: the call did not complete successfully
- CatalogEmpty: the search completed with zero usable results

All connectors must:
- Implement the source attribute (e.g., "spoonacular")
- Provide an async search method returning a CatalogResult
- Provide an async detail method returning a CatalogResult
- Never raise for remote failures; classify them instead
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class CatalogOk:
    payload: Any


@dataclass(frozen=True)
class CatalogQuotaExceeded:
    reason: str


@dataclass(frozen=True)
class CatalogTransportError:
    reason: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class CatalogEmpty:
    reason: str = "no results"


CatalogResult = Union[CatalogOk, CatalogQuotaExceeded, CatalogTransportError, CatalogEmpty]


def describe_failure(result: CatalogResult) -> str:
    """Short label for logs and analytics: 'transport_error', 'quota_exceeded' or 'empty'."""
    if isinstance(result, CatalogQuotaExceeded):
        return "quota_exceeded"
    if isinstance(result, CatalogEmpty):
        return "empty"
    if isinstance(result, CatalogTransportError):
        return "transport_error"
    return "ok"


class BaseCatalogConnector(ABC):
    """
    Abstract base class for all recipe catalog connectors.

    Each connector handles the specifics of its catalog's API while
    normalizing data into Recipe / RecipeDetail.

    Attributes:
        source: String identifier for the catalog (e.g., "spoonacular")
    """
    source: str

    @abstractmethod
    async def search(self, params: Dict[str, Any]) -> CatalogResult:
        """
        Search the catalog.

        Args:
            params: Search criteria (result count, max prep time, min health
                score, max price, inclusion flags, sort mode). Credentials are
                added by the connector.

        Returns:
            CatalogOk with a non-empty list of Recipe, or a failure variant.
        """
        pass

    @abstractmethod
    async def detail(self, recipe_id: int) -> CatalogResult:
        """
        Fetch full detail for one recipe.

        Returns:
            CatalogOk with a RecipeDetail, or a failure variant.
        """
        pass
