"""Internal constants shared across the library."""

BASE_URL = "http://localhost:5001"
USER_AGENT = "pyvitaltwin/0.1"

# ------------------------------------------------------------------
# Remote telemetry API paths
# ------------------------------------------------------------------

LATEST_READING_PATH = "/api/iot/data/latest"
HISTORY_PATH = "/api/iot/data"
ANOMALIES_PATH = "/api/iot/anomalies"
DEVICE_STATUS_PATH = "/api/iot/status"

# ------------------------------------------------------------------
# Engine defaults
# ------------------------------------------------------------------

DEFAULT_POLL_INTERVAL: float = 5.0
DEFAULT_HISTORY_CAPACITY = 50
DEFAULT_ANOMALY_CAPACITY = 10
DEFAULT_REQUEST_TIMEOUT: float = 10.0
