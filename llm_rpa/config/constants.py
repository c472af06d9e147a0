"""
Configuration constants for LLM RPA Planner.

Bounds and defaults shared by the settings schema, the CLI and the
completion client.
"""

# Sampling temperature bounds
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
DEFAULT_TEMPERATURE = 0.7

# Output token bounds
MIN_MAX_TOKENS = 100
MAX_MAX_TOKENS = 32000
DEFAULT_MAX_TOKENS = 4096

# Per-attempt HTTP timeout bounds (seconds)
MIN_REQUEST_TIMEOUT = 1.0
MAX_REQUEST_TIMEOUT = 600.0

DEFAULT_MODEL_ID = "claude-3-5-sonnet-20240620"

# Settings file location
CONFIG_DIR_ENV_VAR = "LLM_RPA_CONFIG_DIR"
DEFAULT_CONFIG_DIR = "~/.llm-rpa/config"
SETTINGS_FILENAME = "llm-settings.json"

# Used when no browser target is selected
DEFAULT_SOURCE_URL = "https://example.com"
