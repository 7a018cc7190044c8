"""Central configuration defaults and constants for RaceConfig."""

import os

# Folders
DEFAULT_TEMPLATES_DIR = os.getenv("RACECONFIG_TEMPLATES_DIR", "./templates")
DEFAULT_OUTPUT_DIR = os.getenv("RACECONFIG_OUTPUT_DIR", "./output")
DEFAULT_APP_CONFIG_DIR = os.getenv(
    "RACECONFIG_APP_CONFIG_DIR", os.path.join(os.path.expanduser("~"), ".raceconfig")
)
DEFAULT_APP_CONFIG_FILE = "app_config.json"

# Template discovery - parse from comma-separated env var or use default suffixes
_suffixes_env = os.getenv("RACECONFIG_TEMPLATE_SUFFIXES")
DEFAULT_TEMPLATE_SUFFIXES = (
    tuple(s.strip().lower() for s in _suffixes_env.split(",") if s.strip()) if _suffixes_env
    else (".yaml", ".yml")
)

# Range comments are scanned this many lines below the option key
DEFAULT_RANGE_WINDOW_LINES = int(os.getenv("RACECONFIG_RANGE_WINDOW_LINES", "80"))

# Player names
DEFAULT_PLAYER_NAME = os.getenv("RACECONFIG_DEFAULT_PLAYER_NAME", "Runner01")
DEFAULT_MAX_PLAYER_NAME_LENGTH = int(os.getenv("RACECONFIG_MAX_PLAYER_NAME_LENGTH", "16"))

# HTTP surface
DEFAULT_API_HOST = os.getenv("RACECONFIG_API_HOST", "127.0.0.1")
DEFAULT_API_PORT = int(os.getenv("RACECONFIG_API_PORT", "5000"))
DEFAULT_API_DEBUG = os.getenv("RACECONFIG_API_DEBUG", "false").lower() in ("true", "1", "yes", "on")

# Generated weights: downstream consumers read 50 as "fully selected"
SELECTED_WEIGHT = 50
UNSELECTED_WEIGHT = 0

# Non-numeric selector keys that may sit beside numeric keys in a range option
SPECIAL_SELECTOR_KEYS = frozenset(
    {
        "random",
        "random-low",
        "random_low",
        "random-high",
        "random_high",
        "disabled",
        "normal",
        "extreme",
    }
)
