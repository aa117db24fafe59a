"""
Centralized Configuration Module for psup.

All configurable constants, timeouts, paths, and limits are defined here.
Import from this module instead of hardcoding values.
"""

import os
from pathlib import Path

# =============================================================================
# PROBLEM SOURCE CONFIGURATION
# =============================================================================

PROBLEM_BASE_URL = os.getenv("PSUP_PROBLEM_BASE_URL", "https://www.acmicpc.net")
PROBLEM_URL_TEMPLATE = PROBLEM_BASE_URL + "/problem/{problem_id}"

# The judge rejects default client user agents
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)
FETCH_TIMEOUT = float(os.getenv("PSUP_FETCH_TIMEOUT", "15"))  # seconds

# Problem identifiers are used verbatim in the URL path
PROBLEM_ID_PATTERN = r"^[A-Za-z0-9_-]+$"
MAX_PROBLEM_ID_LENGTH = 32

# =============================================================================
# STORAGE CONFIGURATION
# =============================================================================

DATA_DIR = Path(os.getenv("PSUP_DATA_DIR", Path.home() / ".local" / "share" / "psup"))
DB_FILENAME = "psup.db"

# Full SQLAlchemy URL override (mostly for tests and portable installs)
DATABASE_URL = os.getenv("DATABASE_URL")

# =============================================================================
# ACTIVITY SETTINGS
# =============================================================================

DEFAULT_ACTIVITY_DAYS = 365
MAX_ACTIVITY_DAYS = 3660

# (minimum daily count, level), checked from the top down
ACTIVITY_LEVEL_THRESHOLDS = [
    (11, 4),
    (6, 3),
    (3, 2),
    (1, 1),
]


def get_activity_level(count: int) -> int:
    """Map a daily solve count to a heatmap intensity level (0-4)."""
    for minimum, level in ACTIVITY_LEVEL_THRESHOLDS:
        if count >= minimum:
            return level
    return 0

# =============================================================================
# CHAT SETTINGS
# =============================================================================

CHAT_MODEL = os.getenv("PSUP_CHAT_MODEL", "llama-3.3-70b-versatile")
CHAT_TEMPERATURE = 0.7
CHAT_MAX_TOKENS = 8192

# =============================================================================
# API SETTINGS
# =============================================================================

API_VERSION = "v1"

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
