"""Utility functions for ical-share."""

from icalshare.utils.masking import mask_key
from icalshare.utils.paths import get_resource_path, resolve_tool_path

__all__ = [
    "mask_key",
    "get_resource_path",
    "resolve_tool_path",
]
