"""
Geode Discord Bot - Centralized Constants
=========================================

Magic numbers and fixed strings shared across modules.
"""

# =============================================================================
# Database Constants
# =============================================================================

DB_CONNECTION_TIMEOUT = 30.0          # sqlite3.connect timeout (seconds)
SQLITE_BUSY_TIMEOUT = 5000            # PRAGMA busy_timeout (milliseconds)

# =============================================================================
# Quote Constants
# =============================================================================

QUOTE_NAME_LENGTH = 7                 # Random default quote names
QUOTE_NAME_MAX_LENGTH = 30            # Longest name /quote rename accepts
QUOTE_AUTOCOMPLETE_LIMIT = 25         # Discord's choice limit
QUOTE_GALLERY_CHUNK = 4               # Images per gallery embed group
QUOTE_LINKS_PER_MESSAGE = 5           # Link embeds per followup message
CENSORED_TEXT = "?????"
CENSORED_TIMESTAMP = 694201337        # Shown instead of the real date while guessing

# =============================================================================
# Guess Game Constants
# =============================================================================

GUESS_QUOTE_ATTEMPTS = 10             # Random quotes tried before giving up
GUESS_FIX_NAMES_TIMEOUT = 20          # Seconds the "Fix names" button stays active
LEADERBOARD_SIZE = 10
TIMEOUT_GUESS_ID = 0                  # guesses.guess_id when the round timed out

# =============================================================================
# Mod Index Constants
# =============================================================================

INDEX_USER_AGENT = "GeodeDiscord"
INDEX_REQUEST_TIMEOUT = 15            # Seconds per API request
INDEX_DOWNLOAD_TIMEOUT = 60           # Seconds to download a .geode package
INDEX_PAGINATOR_TIMEOUT = 600         # Seconds the mod list buttons stay active
INDEX_SELECT_LIMIT = 25               # Discord's select option limit
INDEX_MOD_STATUSES = ("accepted", "pending", "rejected", "unlisted")

# =============================================================================
# Root Command Constants
# =============================================================================

CRASH_IMAGE_URL = (
    "https://media.discordapp.net/attachments/979352389985390603/1159030798406647939/"
    "this_mod_is_crashing_I_will_not_give_crashlog.jpg?ex=65c3328c&is=65b0bd8c"
    "&hm=bbad96287a6d6144e6353e4851f7e52285802d7c5628f63bd196e8c383837b45&=&format=webp"
)

# =============================================================================
# Network Constants
# =============================================================================

HEALTH_CHECK_HOST = "0.0.0.0"
