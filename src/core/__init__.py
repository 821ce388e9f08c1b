"""
Geode Discord Bot - Core Package
================================

Configuration, database, logging and health monitoring.

DESIGN:
    Core modules expose shared instances so state stays consistent
    across the application:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    get_config,
    is_admin,
    is_developer,
)

from .database import DatabaseManager, get_db

from .exceptions import IndexAPIError, MessageError

from .logger import logger, TreeLogger

from .health import HealthCheckServer


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "get_config",
    "is_admin",
    "is_developer",
    # Database
    "DatabaseManager",
    "get_db",
    # Errors
    "IndexAPIError",
    "MessageError",
    # Logger
    "logger",
    "TreeLogger",
    # Health
    "HealthCheckServer",
]
