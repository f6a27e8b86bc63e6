"""High-level upload token management."""

import logging
import os
from typing import Mapping, Optional, Tuple

from icalshare.config.constants import UPLOADTHING_TOKEN_ENV_VAR
from icalshare.storage.keyring_storage import load_from_keyring, save_to_keyring
from icalshare.storage.env_storage import (
    get_env_file_path,
    get_working_dir_env_path,
    load_from_env_file,
    store_in_env_file,
)
from icalshare.utils.masking import mask_key

logger = logging.getLogger(__name__)


def get_upload_token_source(
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[Optional[str], str]:
    """Determine where the upload token is currently coming from.

    Priority:
        1. UPLOADTHING_TOKEN environment variable
        2. OS keyring
        3. User config .env
        4. .env in the working directory

    Args:
        environ: Environment mapping to consult (default: os.environ).

    Returns:
        Tuple of (token, source_description).
    """
    env = os.environ if environ is None else environ

    env_token = env.get(UPLOADTHING_TOKEN_ENV_VAR)
    if env_token:
        return env_token, f"Environment Variable ({UPLOADTHING_TOKEN_ENV_VAR})"

    keyring_token = load_from_keyring()
    if keyring_token:
        return keyring_token, "OS Keyring"

    user_path = get_env_file_path()
    file_token = load_from_env_file(user_path, UPLOADTHING_TOKEN_ENV_VAR)
    if file_token:
        return file_token, f"User Config: {user_path}"

    local_path = get_working_dir_env_path()
    local_token = load_from_env_file(local_path, UPLOADTHING_TOKEN_ENV_VAR)
    if local_token:
        return local_token, f"Working Directory: {local_path}"

    return None, "No Upload Token Found"


def load_upload_token(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Load the UploadThing token, or None when no source has one."""
    token, source = get_upload_token_source(environ)
    if token:
        logger.debug("Using upload token %s from %s", mask_key(token), source)
    return token


def save_upload_token(token: str) -> Tuple[bool, str]:
    """Save the upload token securely.

    Primary: OS keyring. Fallback: .env in the per-user config dir.

    Args:
        token: The token to save.

    Returns:
        Tuple of (success, description of where it was stored).
    """
    token = token.strip().strip("'\"").strip()
    if not token:
        return False, "Token is empty"

    if save_to_keyring(token):
        logger.info("Upload token %s saved to keyring", mask_key(token))
        return True, "OS Keyring"

    logger.warning("Keyring unavailable, using file storage instead")
    try:
        path = store_in_env_file(UPLOADTHING_TOKEN_ENV_VAR, token)
    except OSError as e:
        logger.error("Failed to save upload token: %s", e)
        return False, f"Could not write token file: {e}"
    return True, f"User Config: {path}"
