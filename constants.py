"""
Global constants for the tickets bot.

Contains Discord API limits, HTTP status codes and other constant values
used throughout the bot and branches.
"""

# ============================================================================
# Discord API Limits
# ============================================================================

# Embed Limits (from Discord API documentation)
EMBED_TITLE_MAX = 256
EMBED_DESCRIPTION_MAX = 4096
EMBED_FOOTER_MAX = 2048

# Channel Name Limits
CHANNEL_NAME_MAX = 100

# Discord snowflakes fit in 64 bits
DISCORD_ID_MAX = 2**63

# ============================================================================
# HTTP Status Codes
# ============================================================================
# Status codes returned by the control API
HTTP_BAD_REQUEST = 400
HTTP_INTERNAL_ERROR = 500
HTTP_SERVICE_UNAVAILABLE = 503

# ============================================================================
# Framework Constants
# ============================================================================

# Branch Configuration
BRANCH_CONFIG_FILE = "config.yml"

# Logging
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Default embed color (Discord blurple)
DEFAULT_EMBED_COLOR = 0x5865F2

# ============================================================================
# Helper Functions
# ============================================================================

def truncate_for_embed_description(text: str, suffix: str = "...") -> str:
    """
    Truncate text to fit in an embed description.

    Args:
        text: Text to truncate
        suffix: Suffix to add if truncated (default: "...")

    Returns:
        Truncated text that fits within EMBED_DESCRIPTION_MAX
    """
    if not text:
        return ""

    if len(text) <= EMBED_DESCRIPTION_MAX:
        return text

    return text[:EMBED_DESCRIPTION_MAX - len(suffix)] + suffix
