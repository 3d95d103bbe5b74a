"""Laminate - layered configuration with provenance-aware editing.

Compose configuration from ordered layers (files, secrets, environment
variables), record which layer supplied every key, and write edits back to
the file each key came from.
"""

from .core.builder import LayerBuilder
from .core.config import Config
from .core.environment import Environment
from .core.errors import EditorError, LaminateError, SettingsError
from .core.manifest import ManifestLoader
from .core.provenance import SourceMap
from .core.scope import ConfigScope
from .core.types import SourceKind, SourceMetadata
from .editor import ConfigEditor, ConfigFormat, create_editor, open_editor

__all__ = [
    "Config",
    "ConfigEditor",
    "ConfigFormat",
    "ConfigScope",
    "EditorError",
    "Environment",
    "LaminateError",
    "LayerBuilder",
    "ManifestLoader",
    "SettingsError",
    "SourceKind",
    "SourceMap",
    "SourceMetadata",
    "create_editor",
    "open_editor",
]
