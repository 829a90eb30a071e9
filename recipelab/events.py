# recipelab/events.py
"""
Event logging for Recipes Lab.

Responsibilities:
- Provide a single log_event(...) function that appends a JSONL record to the
  event log and never raises (analytics are strictly non-blocking).

- Provide small helper functions for common event types:
  - log_search_performed(...)
  - log_recipe_viewed(...)
  - log_favorite_toggled(...)
  - log_meal_plan_changed(...)
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from .config import EventsConfig

logger = logging.getLogger(__name__)

# JSONL file with one event per line.
EVENT_LOG_FILE = EventsConfig.get_event_log_path()


def _write_to_file(record: Dict[str, Any]) -> None:
    """
    Append a single JSON record to the event log as JSONL.
    Never raise exceptions.
    """
    try:
        path = Path(EVENT_LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
    except Exception as exc:
        logger.debug("Failed to write event to %s: %s", EVENT_LOG_FILE, exc)


def log_event(
    event: str,
    session_id: Optional[str],
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Core event logger.

    Builds a record with keys ts, event, session_id, payload and appends it to
    the event log. session_id is the user id, or None for anonymous events.
    """
    record = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "session_id": session_id,
        "payload": payload or {},
    }
    _write_to_file(record)


# ---------------------------------------------------------------------------
# Helper functions for common event types
# ---------------------------------------------------------------------------

def log_search_performed(
    session_id: Optional[str],
    result_count: int,
    source: str,
    fallback_reason: Optional[str] = None,
) -> None:
    """
    Log a search_performed event.

    payload:
    {
        "result_count": 6,
        "source": "catalog" | "seed",
        "fallback_reason": "quota_exceeded" | "transport_error" | "empty" | None
    }
    """
    payload = {
        "result_count": result_count,
        "source": source,
        "fallback_reason": fallback_reason,
    }
    log_event("search_performed", session_id, payload)


def log_recipe_viewed(
    session_id: Optional[str],
    recipe_id: int,
    detail_available: bool,
) -> None:
    """
    Log a recipe_viewed event.

    payload:
    {
        "recipe_id": 123,
        "detail_available": true
    }
    """
    log_event("recipe_viewed", session_id, {"recipe_id": recipe_id, "detail_available": detail_available})


def log_favorite_toggled(
    session_id: Optional[str],
    recipe_id: int,
    added: bool,
    confirmed: bool,
) -> None:
    """
    Log a favorite_toggled event.

    payload:
    {
        "recipe_id": 123,
        "action": "added" | "removed",
        "confirmed": false  # the remote call failed and the toggle was rolled back
    }
    """
    payload = {
        "recipe_id": recipe_id,
        "action": "added" if added else "removed",
        "confirmed": confirmed,
    }
    log_event("favorite_toggled", session_id, payload)


def log_meal_plan_changed(
    session_id: Optional[str],
    day: str,
    recipe_id: int,
    action: str,
) -> None:
    """
    Log a meal_plan_changed event.

    payload:
    {
        "day": "Mon",
        "recipe_id": 123,
        "action": "added" | "removed"
    }
    """
    log_event("meal_plan_changed", session_id, {"day": day, "recipe_id": recipe_id, "action": action})
