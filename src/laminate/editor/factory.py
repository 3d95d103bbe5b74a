from __future__ import annotations

from pathlib import Path
from typing import Dict, Type, Union

from ..core.errors import FormatMismatchError
from .base import LayerEditor
from .format import ConfigFormat
from .json_editor import JsonEditor
from .toml_editor import TomlEditor
from .yaml_editor import YamlEditor

EDITORS: Dict[ConfigFormat, Type[LayerEditor]] = {
    ConfigFormat.TOML: TomlEditor,
    ConfigFormat.JSON: JsonEditor,
    ConfigFormat.YAML: YamlEditor,
}


def editor_class(fmt: Union[ConfigFormat, str]) -> Type[LayerEditor]:
    return EDITORS[ConfigFormat(fmt)]


def open_editor(path: Union[str, Path]) -> LayerEditor:
    """Open an existing file with the editor matching its extension.

    Raises:
        FormatMismatchError: If the extension is not toml, json, yaml or yml.
        EditorIOError: If the file cannot be read.
        ParseError: If the file cannot be parsed.
    """
    fmt = ConfigFormat.from_path(path)
    if fmt is None:
        raise FormatMismatchError(Path(path))
    return editor_class(fmt).open(path)


def create_editor(path: Union[str, Path], fmt: Union[ConfigFormat, str]) -> LayerEditor:
    """Create ``path`` as an empty document of the given format."""
    return editor_class(fmt).create(path)
