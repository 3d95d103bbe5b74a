"""Readers that turn configuration files into plain nested dictionaries."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import tomlkit
import tomlkit.exceptions
import yaml

from ..core.errors import SettingsError


def _read_yaml(text: str) -> Any:
    return yaml.safe_load(text)


def _read_json(text: str) -> Any:
    if not text.strip():
        return {}
    return json.loads(text)


def _read_toml(text: str) -> Any:
    return tomlkit.parse(text).unwrap()


_READERS = {
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".json": _read_json,
    ".toml": _read_toml,
}


def load_file(path: Path) -> Dict[str, Any]:
    """Read a TOML, JSON or YAML file by extension.

    Args:
        path: File to read.

    Returns:
        The top-level mapping; an empty document yields an empty dict.

    Raises:
        SettingsError: If the format is unsupported, the file cannot be
            read or parsed, or its top level is not a mapping.
    """
    path = Path(path)
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise SettingsError(f"unsupported configuration format: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SettingsError(f"could not read {path}: {e}") from e
    try:
        data = reader(text)
    except (yaml.YAMLError, json.JSONDecodeError, tomlkit.exceptions.ParseError) as e:
        raise SettingsError(f"invalid configuration file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError(
            f"configuration file {path} must contain a mapping at the top level, "
            f"got {type(data).__name__}"
        )
    return data
