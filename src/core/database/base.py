"""
Geode Discord Bot - Database Helpers
====================================

Helpers shared by the table mixins.
"""

import json
from typing import Any, Optional

from src.core.logger import logger


def _safe_json_loads(value: Optional[str], default: Any = None) -> Any:
    """Safely parse a JSON column, returning default on error."""
    if not value:
        return default if default is not None else []
    try:
        return json.loads(value)
    except (json.JSONDecodeError, ValueError):
        logger.warning(f"Corrupted JSON in database: {value[:50] if len(value) > 50 else value}")
        return default if default is not None else []


__all__ = ["_safe_json_loads"]
