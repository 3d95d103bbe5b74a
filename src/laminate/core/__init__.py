"""Layer composition, merging and provenance tracking."""

from .builder import LayerBuilder
from .config import Config
from .environment import Environment
from .errors import (
    EditorError,
    EditorIOError,
    FormatMismatchError,
    InvalidPathError,
    KeyNotFoundError,
    LaminateError,
    LayerNotFoundError,
    ManifestError,
    ParseError,
    SerializationError,
    SettingsError,
    TypeMismatchError,
    UnrecognizedEnvironmentError,
)
from .layer import (
    ConfigLayer,
    EnvSearchLayer,
    EnvVarLayer,
    EnvVarsLayer,
    PathLayer,
    ScopedPathLayer,
    SecretsLayer,
)
from .manifest import ManifestLoader
from .merge import merge_layers
from .provenance import SourceMap
from .scope import ConfigScope, find_config_in
from .types import SourceKind, SourceMetadata

__all__ = [
    "Config",
    "ConfigLayer",
    "ConfigScope",
    "EditorError",
    "EditorIOError",
    "EnvSearchLayer",
    "EnvVarLayer",
    "EnvVarsLayer",
    "Environment",
    "FormatMismatchError",
    "InvalidPathError",
    "KeyNotFoundError",
    "LaminateError",
    "LayerBuilder",
    "LayerNotFoundError",
    "ManifestError",
    "ManifestLoader",
    "ParseError",
    "PathLayer",
    "ScopedPathLayer",
    "SecretsLayer",
    "SerializationError",
    "SettingsError",
    "SourceKind",
    "SourceMap",
    "SourceMetadata",
    "TypeMismatchError",
    "UnrecognizedEnvironmentError",
    "find_config_in",
    "merge_layers",
]
