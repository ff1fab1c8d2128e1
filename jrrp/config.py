"""
Configuration constants for Jrrp
"""

# Luck value range (inclusive on both ends)
LUCK_MIN = 0
LUCK_MAX = 100

# Day / month string forms
DAY_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

# "platform:id" user identifiers
UID_SEPARATOR = ":"
PLATFORM = "discord"

# Database file (inside cog_data_path)
DB_FILE = "jrrp.db"

# Legacy table from the first plugin layout (day stored as epoch ms)
LEGACY_TABLE = "luck_records_v1"

# Red Config global defaults
DEFAULTS = {
    "timezone": "UTC",
    "events": [],  # list of ScheduledEvent dicts, first match wins
    "seed_salt": "",
}

# Output
PAGE_LENGTH = 1900
CALLER_MARK = "＊"
OTHER_MARK = "　"
EMPTY_DAY = "·"
