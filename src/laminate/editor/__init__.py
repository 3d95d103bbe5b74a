"""Format-preserving editors that write changes back to their source files."""

from .base import LayerEditor
from .config_editor import ConfigEditor
from .factory import create_editor, open_editor
from .format import ConfigFormat
from .json_editor import JsonEditor
from .toml_editor import TomlEditor
from .yaml_editor import YamlEditor

__all__ = [
    "ConfigEditor",
    "ConfigFormat",
    "JsonEditor",
    "LayerEditor",
    "TomlEditor",
    "YamlEditor",
    "create_editor",
    "open_editor",
]
