"""Constants for aireset."""

# Workspace layout
AI_DIR = ".ai"
CONFIG_FILE = "reset.toml"
LOCK_FILE = "reset.lock"

# Archive format
METADATA_FILE = "archive-info.json"
SCHEMA_VERSION = "1.0.0"
GENERATOR = "aireset"

# Placeholder value when provenance cannot be determined
UNKNOWN = "unknown"

# Subprocess timeouts (seconds)
GIT_TIMEOUT = 30
INIT_TOOL_CHECK_TIMEOUT = 10
