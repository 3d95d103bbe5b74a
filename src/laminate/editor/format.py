from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional, Union


class ConfigFormat(str, Enum):
    """File formats a layer editor can edit."""

    TOML = "toml"
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> Optional["ConfigFormat"]:
        """Detect the format from a file extension, or None if unrecognized."""
        suffix = Path(path).suffix.lower().lstrip(".")
        if suffix == "yml":
            return cls.YAML
        try:
            return cls(suffix)
        except ValueError:
            return None

    def __str__(self) -> str:
        return self.value
