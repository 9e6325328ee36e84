"""Constants for HomeWizard Cleaner integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, and capability names.
"""

DOMAIN = "homewizard_cleaner"
APP_NAME = "HomeWizard Cleaner"
MANUFACTURER = "HomeWizard"

BASE_URL = "https://api.homewizardeasyonline.com/v1"
REFERENCE_STATES_URL = (
    "https://gist.githubusercontent.com/smarthomesven/"
    "4e03927279bd25ab079ac5d588be5efd/raw/"
    "d04d6d6b77c39d2ea97e0c098edbfdfc08779229/state.json"
)
REPORT_URL = "https://device-support-requests.vercel.app/api/send-report"

DEVICE_TYPE_CLEANER = "cleaner"

POLL_INTERVAL = 4.0  # Seconds between status polls, also bounds a single tick

STORAGE_VERSION = 1
STORAGE_SAVE_DELAY = 1.0

CONF_DEVICES = "devices"

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"


SERVICE_DOCK = "dock"
SERVICE_START = "start"

CAPABILITY_DOCK = "dock"
CAPABILITY_START = "start"
CAPABILITY_STATE = "state"
CAPABILITY_MEASURE_BATTERY = "measure_battery"

COMMAND_CHARGE = "charge"
COMMAND_WORK = "work"

# Boolean capability writes and actions both resolve to the same vendor command
CAPABILITY_COMMAND_MAP = {
    CAPABILITY_DOCK: COMMAND_CHARGE,
    CAPABILITY_START: COMMAND_WORK,
}
ACTION_COMMAND_MAP = {
    SERVICE_DOCK: COMMAND_CHARGE,
    SERVICE_START: COMMAND_WORK,
}

STATUS_VOCABULARY = (
    "working",
    "finished_charging",
    "charging",
    "standby",
    "docking",
    "malfunction",
)
STATE_UNKNOWN = "unknown"

UNAVAILABLE_INIT_ERROR = "Initialization error"
UNAVAILABLE_UNREACHABLE = "Device unreachable"
