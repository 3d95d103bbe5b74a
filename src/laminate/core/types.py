"""Type definitions for provenance tracking."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .scope import ConfigScope


class SourceKind(str, Enum):
    """Classification of a configuration source.

    Used for reporting and edit routing only. Precedence is positional.
    """

    DEFAULT = "default"
    FILE = "file"
    ENVIRONMENT = "environment"
    SECRETS = "secrets"
    OVERRIDE = "override"


@dataclass(frozen=True)
class SourceMetadata:
    """Record of the layer that produced a configuration value.

    Attributes:
        id: Stable, human-readable identifier (``file:/abs/path``, ``env:APP``).
        kind: What sort of source this is.
        path: Absolute path for file-backed sources.
        scope: Optional scope the file was loaded for.
        layer_index: Position of the layer in build order.
    """

    id: str
    kind: SourceKind
    path: Optional[Path] = None
    scope: Optional[ConfigScope] = None
    layer_index: int = 0

    @classmethod
    def file(
        cls, path: Path, scope: Optional[ConfigScope] = None, layer_index: int = 0
    ) -> "SourceMetadata":
        return cls(
            id=f"file:{path}",
            kind=SourceKind.FILE,
            path=path,
            scope=scope,
            layer_index=layer_index,
        )

    @classmethod
    def secrets(cls, path: Path, layer_index: int = 0) -> "SourceMetadata":
        return cls(
            id=f"secrets:{path}",
            kind=SourceKind.SECRETS,
            path=path,
            layer_index=layer_index,
        )

    @classmethod
    def env(cls, prefix: str, layer_index: int = 0) -> "SourceMetadata":
        return cls(id=f"env:{prefix}", kind=SourceKind.ENVIRONMENT, layer_index=layer_index)

    @classmethod
    def override(cls, name: str, layer_index: int = 0) -> "SourceMetadata":
        return cls(id=f"override:{name}", kind=SourceKind.OVERRIDE, layer_index=layer_index)

    @classmethod
    def default(cls, layer_index: int = 0) -> "SourceMetadata":
        return cls(id="default", kind=SourceKind.DEFAULT, layer_index=layer_index)

    @property
    def is_file(self) -> bool:
        return self.kind is SourceKind.FILE and self.path is not None

    def __str__(self) -> str:
        if self.scope is not None:
            return f"{self.id} ({self.scope.value})"
        return self.id
