"""Utilities for masking sensitive data."""

from typing import Optional


def mask_key(key: Optional[str]) -> str:
    """Mask a token or identifier for safe logging.

    Args:
        key: The secret to mask.

    Returns:
        Masked value showing only first and last 4 characters.
    """
    if not key:
        return "<empty>"
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}...{key[-4:]}"
