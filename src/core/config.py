"""
Geode Discord Bot - Configuration Module
========================================

Centralized configuration management with environment variable validation.

DESIGN:
    A single Config dataclass is loaded from environment variables at
    startup (main.py calls load_dotenv() first, so a .env file works too).
    Validation happens once at load time, not on every access.

    Key patterns:
    - get_config() returns one shared Config instance
    - Required values fail fast with ConfigValidationError
    - Out-of-range optional values are clamped with a warning
    - Permission helpers centralize authorization logic
"""

import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Defaults
# =============================================================================

DEFAULT_INDEX_API_URL = "https://api.geode-sdk.org"
DEFAULT_INDEX_WEBSITE_URL = "https://geode-sdk.org"


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        developer_id: User ID of the bot developer (treated as admin everywhere).
        test_guild_id: If set, app commands are synced to this guild only.
        index_api_url: Base URL of the Geode mod index API.
        index_website_url: Base URL of the Geode website, used for mod links.
        guess_timeout: Seconds a guess round waits for an answer.
        guess_options: Number of buttons (candidates) in a guess round.
        guess_leaderboard_range: Half-width of the popularity window candidates are drawn from.
        user_cache_size: Maximum number of users kept by the name resolver.
        user_cache_ttl: Seconds a resolved user name stays cached.
        health_port: Port for the /health endpoint (0 disables it).
        error_webhook_url: Discord webhook that receives error alerts.
        log_timezone: Timezone name used for log timestamps.
    """

    # -------------------------------------------------------------------------
    # Required: Discord
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Discord
    # -------------------------------------------------------------------------

    developer_id: Optional[int] = None
    test_guild_id: Optional[int] = None

    # -------------------------------------------------------------------------
    # Optional: Mod Index
    # -------------------------------------------------------------------------

    index_api_url: str = DEFAULT_INDEX_API_URL
    index_website_url: str = DEFAULT_INDEX_WEBSITE_URL

    # -------------------------------------------------------------------------
    # Optional: Guess Game
    # -------------------------------------------------------------------------

    guess_timeout: int = 60
    guess_options: int = 5
    guess_leaderboard_range: int = 5

    # -------------------------------------------------------------------------
    # Optional: User Name Cache
    # -------------------------------------------------------------------------

    user_cache_size: int = 1000
    user_cache_ttl: int = 3600

    # -------------------------------------------------------------------------
    # Optional: Operations
    # -------------------------------------------------------------------------

    health_port: int = 8080
    error_webhook_url: Optional[str] = None
    log_timezone: str = "UTC"


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Standardized color palette for Discord embeds."""

    GEODE = 0xF5AE45    # Quote and mod embeds
    GREEN = 0x57F287
    RED = 0xED4245
    BLURPLE = 0x5865F2

    SUCCESS = GREEN
    ERROR = RED
    INFO = BLURPLE
    QUOTE = GEODE


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int_optional(value: Optional[str], name: str) -> Optional[int]:
    """
    Parse optional string to integer.

    Args:
        value: String value from environment variable, may be None.
        name: Variable name for warning messages.

    Returns:
        Parsed integer or None if unset or invalid.
    """
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' is not an integer, ignoring")
        return None


def _parse_int_with_default(value: Optional[str], default: int, name: str, min_val: int = None, max_val: int = None) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        from src.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        from src.core.logger import logger
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """
    Validate URL format.

    Args:
        value: URL string to validate.
        name: Variable name for warning messages.

    Returns:
        URL without trailing slash if valid, None if invalid or empty.
    """
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from src.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value.rstrip("/")


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If DISCORD_TOKEN is missing.
    """
    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token or not discord_token.strip():
        raise ConfigValidationError("Missing required environment variables: DISCORD_TOKEN")

    return Config(
        discord_token=discord_token.strip(),
        developer_id=_parse_int_optional(os.getenv("DEVELOPER_ID"), "DEVELOPER_ID"),
        test_guild_id=_parse_int_optional(os.getenv("TEST_GUILD_ID"), "TEST_GUILD_ID"),
        index_api_url=_validate_url(os.getenv("GEODE_API"), "GEODE_API") or DEFAULT_INDEX_API_URL,
        index_website_url=_validate_url(os.getenv("GEODE_WEBSITE"), "GEODE_WEBSITE") or DEFAULT_INDEX_WEBSITE_URL,
        guess_timeout=_parse_int_with_default(
            os.getenv("GUESS_TIMEOUT"), 60, "GUESS_TIMEOUT", min_val=5, max_val=600
        ),
        guess_options=_parse_int_with_default(
            os.getenv("GUESS_OPTIONS"), 5, "GUESS_OPTIONS", min_val=2, max_val=25
        ),
        guess_leaderboard_range=_parse_int_with_default(
            os.getenv("GUESS_LEADERBOARD_RANGE"), 5, "GUESS_LEADERBOARD_RANGE", min_val=1, max_val=50
        ),
        user_cache_size=_parse_int_with_default(
            os.getenv("USER_CACHE_SIZE"), 1000, "USER_CACHE_SIZE", min_val=10, max_val=100000
        ),
        user_cache_ttl=_parse_int_with_default(
            os.getenv("USER_CACHE_TTL"), 3600, "USER_CACHE_TTL", min_val=60, max_val=7 * 86400
        ),
        health_port=_parse_int_with_default(
            os.getenv("HEALTH_PORT"), 8080, "HEALTH_PORT", min_val=0, max_val=65535
        ),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
        log_timezone=os.getenv("LOG_TIMEZONE", "UTC"),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached Config so the next get_config() reloads it."""
    global _config
    _config = None


# =============================================================================
# Config Validation & Logging
# =============================================================================

def validate_and_log_config() -> None:
    """
    Validate configuration and log a summary at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from src.core.logger import logger

    config = get_config()

    logger.tree("Configuration Validated", [
        ("Required", "✅ All required variables set"),
        ("Command Sync", f"Guild {config.test_guild_id}" if config.test_guild_id else "Global"),
        ("Index API", config.index_api_url),
        ("Guess", f"{config.guess_options} options, {config.guess_timeout}s, range {config.guess_leaderboard_range}"),
        ("User Cache", f"{config.user_cache_size} entries, {config.user_cache_ttl}s TTL"),
        ("Health Port", str(config.health_port) if config.health_port else "Disabled"),
        ("Webhook Alerts", "Enabled" if config.error_webhook_url else "Disabled"),
    ], emoji="⚙️")


# =============================================================================
# Permission Helpers
# =============================================================================

def is_developer(user_id: int) -> bool:
    """
    Check if user is the bot developer.

    Args:
        user_id: Discord user ID to check.

    Returns:
        True if user is the developer.
    """
    developer_id = get_config().developer_id
    return developer_id is not None and user_id == developer_id


def is_admin(member) -> bool:
    """
    Check if a member is the developer or a guild administrator.

    Args:
        member: Discord member (or user outside a guild) to check.

    Returns:
        True if the member has admin rights.
    """
    if member is None:
        return False

    if is_developer(member.id):
        return True

    permissions = getattr(member, "guild_permissions", None)
    return bool(permissions and permissions.administrator)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "DEFAULT_INDEX_API_URL",
    "DEFAULT_INDEX_WEBSITE_URL",
    "get_config",
    "load_config",
    "reset_config",
    "validate_and_log_config",
    "is_developer",
    "is_admin",
]
