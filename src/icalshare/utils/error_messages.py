"""User-friendly error message handling."""

from icalshare.exceptions.errors import (
    AccessDeniedError,
    ConfigurationError,
    ParseError,
    ToolNotFoundError,
    UploadError,
)


# Error message mappings for upload diagnostics
ERROR_MAPPINGS = {
    "401": "The upload service rejected the credentials. Check UPLOADTHING_TOKEN.",
    "403": "The upload service refused access. Check the token's permissions.",
    "timed out": "The request timed out. Check your connection and run again.",
    "connection": "Network error. Please check your internet connection.",
}


def get_user_friendly_error(error: Exception) -> str:
    """Convert an exception to a message for the operator.

    Args:
        error: The exception to convert.

    Returns:
        A user-friendly error message string.
    """
    if isinstance(error, (AccessDeniedError, ToolNotFoundError, ConfigurationError)):
        return str(error)

    if isinstance(error, ParseError):
        return f"{error}\nThe calendar tool may be out of date; rebuild it and run again."

    if isinstance(error, UploadError):
        detail = (error.detail or "").lower()
        for pattern, message in ERROR_MAPPINGS.items():
            if pattern in detail:
                return f"{error}\n{message}"
        return str(error)

    return f"An error occurred: {error}"
