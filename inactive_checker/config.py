# ============================================
# Files
# ============================================
CONFIG_PATH = "config.yml"     # YAML run configuration
CACHE_PATH = "database.db"     # Staleness cache (SQLite)

# ============================================
# Credentials
# ============================================
CRED_TARGET = "InactiveChecker/SSH"   # Windows Credential Manager target
PASSWORD_ENV_VARS = ("INACTIVE_CHECKER_PASS", "SSH_PASS")

# ============================================
# Connection Behavior
# ============================================
DEVICE_TYPE = "juniper_junos"  # Netmiko platform
SSH_PORT = 22
AUTH_TIMEOUT = 20              # SSH authentication timeout (seconds)
CONNECTION_TIMEOUT = 25        # SSH connection timeout (seconds)
BANNER_TIMEOUT = 30            # Banner timeout (seconds)
READ_TIMEOUT = 120             # Command read timeout (seconds); full configs are large

# ============================================
# Retrieval & Parsing
# ============================================
RETRIEVAL_COMMAND = "show configuration | display xml"
INACTIVE_ATTRIBUTE = "inactive"
NAME_TAG = "name"              # Child element that qualifies its parent
RPC_ENVELOPE_TAG = "rpc-reply"
CONFIGURATION_ROOT_TAG = "configuration"

# ============================================
# Staleness
# ============================================
STALE_AFTER_HOURS = 24 * 30    # Entries older than this are reported as stale
STALE_AFTER_SECONDS = STALE_AFTER_HOURS * 3600

# ============================================
# Export & Output
# ============================================
MIN_EXCEL_COLUMN_WIDTH = 8     # Minimum Excel column width
MAX_EXCEL_COLUMN_WIDTH = 80    # Maximum Excel column width
