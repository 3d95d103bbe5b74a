"""Configuration scopes and settings-file discovery."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

# Searched in order; the first existing file wins.
SEARCH_EXTENSIONS: Tuple[str, ...] = ("toml", "yaml", "yml", "json")


class ConfigScope(str, Enum):
    """Where a configuration file lives relative to the user and project.

    Scopes are usually layered in declaration order, from ``PREFERENCES``
    up to ``RUNTIME``.
    """

    PREFERENCES = "preferences"
    USER_GLOBAL = "user_global"
    PROJECT_LOCAL = "project_local"
    LOCAL_DATA = "local_data"
    PERSISTENT_DATA = "persistent_data"
    RUNTIME = "runtime"

    @property
    def is_file_based(self) -> bool:
        # runtime values come from the environment and CLI, never a file
        return self is not ConfigScope.RUNTIME


def find_config_in(
    directory: Union[str, Path], basename: str = "settings"
) -> Optional[Path]:
    """Find ``<basename>.<ext>`` in a directory.

    Args:
        directory: Directory to look in.
        basename: File name without extension.

    Returns:
        The first existing candidate in ``SEARCH_EXTENSIONS`` order, or None
        when the directory is missing or holds no candidate.
    """
    base = Path(directory)
    if not base.is_dir():
        return None
    for ext in SEARCH_EXTENSIONS:
        candidate = base / f"{basename}.{ext}"
        if candidate.is_file():
            return candidate
    return None
