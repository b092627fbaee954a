"""Internal constants shared across the package."""

PUSHOVER_API_URL = "https://api.pushover.net/1/messages.json"
PUSHOVER_REQUEST_TIMEOUT = 15.0

DEFAULT_CONTAINER_NAME = "wg-easy"
DEFAULT_TIMEOUT_THRESHOLD = 120
DEFAULT_LOCK_FILE = "/tmp/wg_monitor.lock"
DEFAULT_STATE_FILE_NAME = ".wg_monitor_state"
DEFAULT_WG_CONFIG_PATH = "/etc/wireguard/wg0.conf"

# ------------------------------------------------------------------
# Pushover payload limits
# ------------------------------------------------------------------

PUSHOVER_TITLE_MAX = 250
PUSHOVER_MESSAGE_MAX = 1024
VPN_NAME_MAX = 32

CONNECTED_GLYPH = "\U0001f7e2"  # green circle
DISCONNECTED_GLYPH = "\U0001f534"  # red circle
