"""
Configuration management for Recipes Lab.

This module centralizes environment variable loading from the .env file at the
project root. It is imported by the client package and by the persistence API
(api/main.py) so that .env is loaded before anything reads the environment.

In deployed environments .env usually does not exist; load_dotenv() then
no-ops and the platform's environment variables are used instead.

Environment Variables:
- SPOONACULAR_API_KEY: API key for the recipe catalog. Without it the catalog
  connector is disabled and the seed recipes are shown.
- SPOONACULAR_BASE_URL: Optional, defaults to "https://api.spoonacular.com"
- CATALOG_TIMEOUT_SECONDS: Optional, defaults to 10
- PERSISTENCE_URL: Optional, base URL of the favorites/meal-plan service.
  When unset an in-memory store is used.
- PERSISTENCE_TIMEOUT_SECONDS: Optional, defaults to 10
- RECIPELAB_USER_ID, RECIPELAB_USER_NAME, RECIPELAB_USER_EMAIL,
  RECIPELAB_USER_PHOTO_URL: Optional account used by the local auth provider
- RECIPELAB_EVENT_LOG: Optional, path of the JSONL event log (default: events.log)
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_env_file() -> None:
    """
    Load environment variables from .env file at project root.

    The project root is found by going up from this file's location
    (recipelab/config.py -> project root). Existing environment variables take
    precedence over values in the file. Safe to call multiple times.
    """
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env", override=False)


# Load .env file on module import
load_env_file()


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class CatalogConfig:
    """Configuration for the Spoonacular catalog connector."""

    @staticmethod
    def get_api_key() -> Optional[str]:
        """
        Get the Spoonacular API key from environment.

        Returns:
            API key string or None if not set

        Note:
            This does not raise an error - the connector handles validation.
        """
        return os.getenv("SPOONACULAR_API_KEY")

    @staticmethod
    def get_base_url() -> str:
        """Get the catalog base URL with trailing slash removed."""
        return os.getenv("SPOONACULAR_BASE_URL", "https://api.spoonacular.com").rstrip("/")

    @staticmethod
    def get_timeout() -> float:
        """Request timeout in seconds. A timed out call counts as a transport failure."""
        return _get_float("CATALOG_TIMEOUT_SECONDS", 10.0)


class PersistenceConfig:
    """Configuration for the favorites/meal-plan persistence service."""

    @staticmethod
    def get_url() -> Optional[str]:
        """
        Get the persistence service base URL.

        Returns:
            URL string with trailing slash removed, or None when the in-memory
            store should be used.
        """
        url = os.getenv("PERSISTENCE_URL")
        return url.rstrip("/") if url else None

    @staticmethod
    def get_timeout() -> float:
        return _get_float("PERSISTENCE_TIMEOUT_SECONDS", 10.0)


class AuthConfig:
    """Account used by the local auth provider."""

    @staticmethod
    def get_user_id() -> Optional[str]:
        return os.getenv("RECIPELAB_USER_ID")

    @staticmethod
    def get_display_name() -> str:
        return os.getenv("RECIPELAB_USER_NAME", "")

    @staticmethod
    def get_email() -> str:
        return os.getenv("RECIPELAB_USER_EMAIL", "")

    @staticmethod
    def get_photo_url() -> Optional[str]:
        return os.getenv("RECIPELAB_USER_PHOTO_URL")


class EventsConfig:
    """Configuration for the analytics event log."""

    @staticmethod
    def get_event_log_path() -> Path:
        return Path(os.getenv("RECIPELAB_EVENT_LOG", "events.log"))


def get_required_env_vars() -> dict:
    """
    Get a dictionary of the environment variables that enable live services.

    Returns:
        Dictionary with keys:
        - spoonacular_api_key: bool (True if set)
        - persistence_url: bool (True if set)
    """
    return {
        "spoonacular_api_key": CatalogConfig.get_api_key() is not None,
        "persistence_url": PersistenceConfig.get_url() is not None,
    }


def validate_required_config() -> None:
    """
    Validate that the live catalog can be used.

    Raises:
        RuntimeError: If SPOONACULAR_API_KEY is missing

    Note:
        This is a convenience function for scripts. The application itself
        runs without a key and shows the seed recipes instead.
    """
    if not CatalogConfig.get_api_key():
        raise RuntimeError(
            "Missing required environment variables:\n"
            "  - SPOONACULAR_API_KEY (required for live recipe search)\n\n"
            "Please create a .env file at the project root with this variable."
        )
