"""Environment file storage for configuration and secrets."""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values, set_key

logger = logging.getLogger(__name__)


def get_user_config_dir() -> Path:
    """Return a per-user config directory that works across platforms.

    Returns:
        Path to the user's config directory for this application.
    """
    if sys.platform.startswith("win"):
        base_str = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        base = Path(base_str) if base_str else (Path.home() / "AppData" / "Roaming")
        return base / "ical-share"

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "ical-share"

    base_str = os.environ.get("XDG_CONFIG_HOME")
    base = Path(base_str) if base_str else (Path.home() / ".config")
    return base / "ical-share"


def get_env_file_path() -> Path:
    """Get managed .env path under the user config directory."""
    return get_user_config_dir() / ".env"


def get_working_dir_env_path() -> Path:
    """Get the .env in the current working directory (checkout or launch dir)."""
    return Path.cwd() / ".env"


def harden_file_permissions(path: Path) -> None:
    """Best-effort: restrict permissions to the current user on POSIX.

    Args:
        path: Path to the file to secure.
    """
    if os.name != "posix":
        return
    try:
        path.chmod(0o600)
    except OSError as e:
        logger.warning("Could not tighten permissions on %s: %s", path, e)


def load_env_values(path: Path) -> Dict[str, str]:
    """Read a .env file without mutating os.environ.

    Args:
        path: Path to the .env file.

    Returns:
        Mapping of the non-empty values found in the file.
    """
    if not path.exists():
        return {}
    values = dotenv_values(path)
    return {
        name: str(value).strip().strip("'\"").strip()
        for name, value in values.items()
        if value
    }


def load_from_env_file(path: Path, name: str) -> Optional[str]:
    """Load a single value from an environment file.

    Args:
        path: Path to the .env file.
        name: Variable name to look up.

    Returns:
        The value if present, None otherwise.
    """
    return load_env_values(path).get(name) or None


def store_in_env_file(name: str, value: str) -> Path:
    """Write a value to the per-user config .env with secure permissions.

    Args:
        name: Variable name.
        value: Value to store.

    Returns:
        Path of the file written.
    """
    env_path = get_env_file_path()
    env_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)

    if not env_path.exists():
        try:
            fd = os.open(str(env_path), os.O_CREAT | os.O_WRONLY | os.O_EXCL, 0o600)
            os.close(fd)
        except FileExistsError:
            pass

    harden_file_permissions(env_path)
    set_key(str(env_path), name, value)
    return env_path
