"""Path utilities for resource access."""

import sys
from pathlib import Path
from typing import Optional, Union

from icalshare.config.constants import DEFAULT_TOOL_PATH


def get_project_root() -> Path:
    """Get the project root directory (the checkout or install prefix)."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent.parent.parent


def get_resource_path(relative_path: Union[str, Path]) -> Path:
    """Get absolute path to a resource shipped next to the program.

    Absolute paths are returned unchanged.

    Args:
        relative_path: Path relative to the project root.

    Returns:
        Absolute path to the resource.
    """
    path = Path(relative_path).expanduser()
    if path.is_absolute():
        return path
    return get_project_root() / path


def resolve_tool_path(tool_path: Optional[Union[str, Path]] = None) -> Path:
    """Locate the calendar access tool, falling back to the bundled default."""
    return get_resource_path(tool_path or DEFAULT_TOOL_PATH)
