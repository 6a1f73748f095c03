"""Constants for the LG webOS TV integration."""

from __future__ import annotations

DOMAIN = "lgwebos_tv"

# Config keys
CONF_INPUTS = "inputs"
CONF_SWITCH_INFO_MENU = "switch_info_menu"
CONF_WOL_BROADCAST = "wol_broadcast"

DEFAULT_NAME = "LG webOS TV"
DEFAULT_PORT = 3000
DEFAULT_SWITCH_INFO_MENU = False
DEFAULT_WOL_BROADCAST = "255.255.255.255"

# Device profile defaults (refined once the TV reports its own metadata)
DEFAULT_MANUFACTURER = "LG Electronics"
DEFAULT_MODEL = "LG webOS TV"
DEFAULT_SERIAL_NUMBER = "SN0000004"
DEFAULT_FIRMWARE_REVISION = "FW0000004"

# Timing (seconds)
PROBE_INTERVAL = 5.0
# Failed probes after a Wake-on-LAN packet before the TV is reported off again
WAKE_GRACE_PROBES = 4
PROBE_TIMEOUT = 2.0
RECONNECT_INTERVAL = 3.0
CONNECTION_TIMEOUT = 5.0
REQUEST_TIMEOUT = 5.0
HEARTBEAT_INTERVAL = 20.0
SERVICE_TIMEOUT = 15.0

MAX_RECENT_EVENTS = 25

# Storage
STORAGE_VERSION = 1
STORAGE_KEY_PAIRING = "key"
STORAGE_KEY_SYSTEM = "system"
STORAGE_KEY_SOFTWARE = "software"
STORAGE_KEY_SERVICES = "services"
STORAGE_KEY_APPS = "apps"
STORAGE_KEY_INPUTS = "inputs"

# SSAP endpoints
EP_SYSTEM_INFO = "ssap://system/getSystemInfo"
EP_SOFTWARE_INFO = "ssap://com.webos.service.update/getCurrentSWInformation"
EP_SERVICE_LIST = "ssap://api/getServiceList"
EP_APP_LIST = "ssap://com.webos.applicationManager/listApps"
EP_POWER_STATE = "ssap://com.webos.service.tvpower/power/getPowerState"
EP_FOREGROUND_APP = "ssap://com.webos.applicationManager/getForegroundAppInfo"
EP_VOLUME = "ssap://audio/getVolume"
EP_CURRENT_CHANNEL = "ssap://tv/getCurrentChannel"
EP_POINTER_SOCKET = "ssap://com.webos.service.networkinput/getPointerInputSocket"
EP_TURN_OFF = "ssap://system/turnOff"
EP_SET_MUTE = "ssap://audio/setMute"
EP_SET_VOLUME = "ssap://audio/setVolume"
EP_LAUNCH = "ssap://system.launcher/launch"
EP_OPEN_CHANNEL = "ssap://tv/openChannel"

# Metadata fetched once per session: (endpoint, storage key)
METADATA_ENDPOINTS = (
    (EP_SYSTEM_INFO, STORAGE_KEY_SYSTEM),
    (EP_SOFTWARE_INFO, STORAGE_KEY_SOFTWARE),
    (EP_SERVICE_LIST, STORAGE_KEY_SERVICES),
    (EP_APP_LIST, STORAGE_KEY_APPS),
)

# Power state values reported by the TV
POWER_STATE_ACTIVE = "Active"
POWER_STATE_ACTIVE_STANDBY = "Active Standby"

# Pointer channel button names
BUTTON_BACK = "BACK"
BUTTON_INFO = "INFO"
BUTTON_MENU = "MENU"
BUTTON_PLAY = "PLAY"
BUTTON_PAUSE = "PAUSE"
BUTTON_VOLUME_UP = "VOLUMEUP"
BUTTON_VOLUME_DOWN = "VOLUMEDOWN"

# Abstract remote key -> button name. Keys missing here (or mapped to "") are
# accepted and ignored. play_pause and information depend on runtime state.
REMOTE_KEY_BUTTONS: dict[str, str] = {
    "rewind": "REWIND",
    "fast_forward": "FASTFORWARD",
    "next_track": "",
    "previous_track": "",
    "arrow_up": "UP",
    "arrow_down": "DOWN",
    "arrow_left": "LEFT",
    "arrow_right": "RIGHT",
    "select": "ENTER",
    "back": "BACK",
    "exit": "EXIT",
}

VOLUME_SELECTOR_BUTTONS: dict[str, str] = {
    "increment": BUTTON_VOLUME_UP,
    "decrement": BUTTON_VOLUME_DOWN,
}

# Registration handshake manifest
CLIENT_MANIFEST = {
    "manifestVersion": 1,
    "appVersion": "1.1",
    "permissions": [
        "LAUNCH",
        "LAUNCH_WEBAPP",
        "APP_TO_APP",
        "CLOSE",
        "TEST_OPEN",
        "TEST_PROTECTED",
        "CONTROL_AUDIO",
        "CONTROL_DISPLAY",
        "CONTROL_INPUT_JOYSTICK",
        "CONTROL_INPUT_MEDIA_RECORDING",
        "CONTROL_INPUT_MEDIA_PLAYBACK",
        "CONTROL_INPUT_TV",
        "CONTROL_POWER",
        "READ_APP_STATUS",
        "READ_CURRENT_CHANNEL",
        "READ_INPUT_DEVICE_LIST",
        "READ_NETWORK_STATE",
        "READ_RUNNING_APPS",
        "READ_TV_CHANNEL_LIST",
        "WRITE_NOTIFICATION_TOAST",
        "READ_POWER_STATE",
        "READ_COUNTRY_INFO",
        "READ_SETTINGS",
        "CONTROL_TV_SCREEN",
        "CONTROL_TV_STANBY",
        "CONTROL_FAVORITE_GROUP",
        "CONTROL_USER_INFO",
        "CHECK_BLUETOOTH_DEVICE",
        "CONTROL_BLUETOOTH",
        "CONTROL_TIMER_INFO",
        "STB_INTERNAL_CONNECTION",
        "CONTROL_RECORDING",
        "READ_RECORDING_STATE",
        "WRITE_RECORDING_LIST",
        "READ_RECORDING_LIST",
        "READ_RECORDING_SCHEDULE",
        "WRITE_RECORDING_SCHEDULE",
        "READ_STORAGE_DEVICE_LIST",
        "READ_TV_PROGRAM_INFO",
        "CONTROL_BOX_CHANNEL",
        "READ_TV_ACR_AUTH_TOKEN",
        "READ_TV_CONTENT_STATE",
        "READ_TV_CURRENT_TIME",
        "ADD_LAUNCHER_CHANNEL",
        "SET_CHANNEL_SKIP",
        "RELEASE_CHANNEL_SKIP",
        "CONTROL_CHANNEL_BLOCK",
        "DELETE_SELECT_CHANNEL",
        "CONTROL_CHANNEL_GROUP",
        "SCAN_TV_CHANNELS",
        "CONTROL_TV_POWER",
        "CONTROL_WOL",
    ],
}

# Services
SERVICE_RENAME_INPUT = "rename_input"
SERVICE_SEND_KEY = "send_key"
SERVICE_TOGGLE_INFO_OVERLAY = "toggle_info_overlay"

ATTR_REFERENCE = "reference"
ATTR_DISPLAY_NAME = "display_name"
ATTR_KEY = "key"

EVENT_CONNECTION_STATE = f"{DOMAIN}_connection_state"
