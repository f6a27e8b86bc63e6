"""Secret and .env storage for ical-share."""

from icalshare.storage.key_manager import (
    load_upload_token,
    save_upload_token,
    get_upload_token_source,
)
from icalshare.storage.env_storage import (
    get_user_config_dir,
    get_env_file_path,
    get_working_dir_env_path,
    load_env_values,
)

__all__ = [
    "load_upload_token",
    "save_upload_token",
    "get_upload_token_source",
    "get_user_config_dir",
    "get_env_file_path",
    "get_working_dir_env_path",
    "load_env_values",
]
