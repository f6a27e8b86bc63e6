"""Centralized constants for ical-share."""

# Key storage constants
KEYRING_SERVICE_NAME = "ical-share"
KEYRING_ACCOUNT_NAME = "uploadthing_token"

# Environment variable names
PERMA_KEY_ENV_VAR = "CALENDAR_PERMA_KEY"
UPLOADTHING_TOKEN_ENV_VAR = "UPLOADTHING_TOKEN"
UPLOADTHING_APP_ID_ENV_VAR = "UPLOADTHING_APP_ID"
BACKEND_ENV_VAR = "ICAL_SHARE_BACKEND"
TOOL_PATH_ENV_VAR = "ICAL_SHARE_TOOL"
OUTPUT_PATH_ENV_VAR = "ICAL_SHARE_OUTPUT"
TIMEZONE_ENV_VAR = "ICAL_SHARE_TIMEZONE"
S3_BUCKET_ENV_VAR = "ICAL_SHARE_S3_BUCKET"
S3_PUBLIC_BASE_URL_ENV_VAR = "ICAL_SHARE_PUBLIC_BASE_URL"
S3_ENDPOINT_URL_ENV_VAR = "ICAL_SHARE_S3_ENDPOINT_URL"

# Publishing backends
BACKEND_UPLOADTHING = "uploadthing"
BACKEND_S3 = "s3"
SUPPORTED_BACKENDS = (BACKEND_UPLOADTHING, BACKEND_S3)

# Defaults
DEFAULT_OUTPUT_FILE = "shared.ics"
DEFAULT_TOOL_PATH = "bin/calendar-export"
DEFAULT_TIMEZONE = "local"
UPLOADER_NAME = "ical-share"

# ICS calendar constants
ICS_PRODID = "-//ical-share//Calendar Export//EN"
ICS_VERSION = "2.0"
ICS_CALSCALE = "GREGORIAN"
ICS_METHOD = "PUBLISH"
ICS_CALNAME = "Shared Calendar"
ICS_MIME_TYPE = "text/calendar"
UID_NAMESPACE = "ical-share"

# Default event fields when the tool leaves them out
DEFAULT_EVENT_TITLE = "Untitled Event"
DEFAULT_CALENDAR_NAME = "Unknown Calendar"

# Calendar tool contract
TOOL_DATE_FORMAT = "%m/%d/%Y %H:%M:%S"
TOOL_CHECK_TIMEOUT_SECONDS = 10
LEGACY_EVENTS_MARKER = "=== EVENTS ==="
LEGACY_FIELD_SEPARATOR = "||"
LEGACY_SCRIPT_SUFFIXES = (".applescript", ".scpt")
OSASCRIPT = "osascript"

# Phrases the tool prints on stderr when the OS refuses calendar access
ACCESS_DENIED_PATTERNS = [
    "access denied",
    "permission denied",
    "not authorized",
    "not granted",
    "not allowed",
]

# UploadThing REST API
UPLOADTHING_API_URL = "https://api.uploadthing.com"
UPLOADTHING_API_VERSION = "6.4.0"
UPLOADTHING_FILE_URL_TEMPLATE = "https://{app_id}.ufs.sh/f/{custom_id}"
UPLOAD_TIMEOUT_SECONDS = 30

# Timezone abbreviation to IANA zone mapping
ABBR_TO_TZ = {
    # North America
    "EST": "America/New_York",
    "EDT": "America/New_York",
    "CST": "America/Chicago",
    "CDT": "America/Chicago",
    "MST": "America/Denver",
    "MDT": "America/Denver",
    "PST": "America/Los_Angeles",
    "PDT": "America/Los_Angeles",
    # United Kingdom / Europe
    "GMT": "Europe/London",
    "BST": "Europe/London",
    "CET": "Europe/Paris",
    "CEST": "Europe/Paris",
    "EET": "Europe/Athens",
    "EEST": "Europe/Athens",
    # Australia
    "AEST": "Australia/Sydney",
    "AEDT": "Australia/Sydney",
    # Asia
    "IST": "Asia/Kolkata",
}
