"""Configuration module for ical-share."""

from icalshare.config.settings import ExportConfig, load_config
from icalshare.config.constants import (
    DEFAULT_OUTPUT_FILE,
    DEFAULT_TOOL_PATH,
    ICS_PRODID,
    ICS_MIME_TYPE,
    PERMA_KEY_ENV_VAR,
    UID_NAMESPACE,
)

__all__ = [
    "ExportConfig",
    "load_config",
    "DEFAULT_OUTPUT_FILE",
    "DEFAULT_TOOL_PATH",
    "ICS_PRODID",
    "ICS_MIME_TYPE",
    "PERMA_KEY_ENV_VAR",
    "UID_NAMESPACE",
]
