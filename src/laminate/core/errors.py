"""Exception hierarchy for layer building and configuration editing."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class LaminateError(Exception):
    """Base class for every error raised by laminate."""


class SettingsError(LaminateError):
    """A layer set could not be turned into a configuration."""


class LayerNotFoundError(SettingsError):
    """A mandatory layer points at a file that does not exist.

    Attributes:
        path: Absolute path that was looked up.
        layer: The layer description that produced the path.
    """

    def __init__(self, path: Path, layer: Any = None, message: Optional[str] = None):
        self.path = path
        self.layer = layer
        super().__init__(message or f"config file not found: {path}")


class ManifestError(SettingsError):
    """The layer manifest is malformed."""


class UnrecognizedEnvironmentError(SettingsError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"environment not recognized for name: {name}")


class EditorError(LaminateError):
    """Base class for configuration editing errors."""


class EditorIOError(EditorError):
    """File system failure (not found, permission denied, disk full...)."""

    def __init__(self, path: Optional[Path], error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"IO error: {path}: {error}")


class ParseError(EditorError):
    def __init__(self, message: str):
        super().__init__(f"Parse error: {message}")


class SerializationError(EditorError):
    def __init__(self, message: str):
        super().__init__(f"Serialization error: {message}")


class KeyNotFoundError(EditorError):
    """The key to edit is missing, or a new key has nowhere to go."""

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = key
        super().__init__(message or f"Key not found: {key}")


class FormatMismatchError(EditorError):
    """The file extension does not name a supported format."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        detail = f": {path}" if path is not None else ""
        super().__init__(f"Format mismatch: unrecognized configuration format{detail}")


class TypeMismatchError(EditorError):
    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Type mismatch: expected {expected}, got {actual}")


class InvalidPathError(EditorError):
    """Empty key, empty segment, or a scalar where a container is needed."""

    def __init__(self, message: str):
        super().__init__(f"Invalid path: {message}")
