"""Declarative descriptions of configuration layers.

Layers are applied in order, first to last; later layers override earlier
ones for overlapping keys.

- ``PathLayer`` - explicit file path, must exist
- ``ScopedPathLayer`` - explicit file path carrying a scope for provenance
- ``EnvVarLayer`` - file path read from an environment variable, skipped if unset
- ``EnvSearchLayer`` - environment-named file search, currently contributes nothing
- ``SecretsLayer`` - secrets file path, must exist
- ``EnvVarsLayer`` - process environment variables under a prefix
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple, Union

from .environment import Environment
from .scope import ConfigScope


@dataclass(frozen=True)
class PathLayer:
    path: Path


@dataclass(frozen=True)
class ScopedPathLayer:
    path: Path
    scope: ConfigScope


@dataclass(frozen=True)
class EnvVarLayer:
    name: str


@dataclass(frozen=True)
class EnvSearchLayer:
    environment: Environment
    dirs: Tuple[Path, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SecretsLayer:
    path: Path


@dataclass(frozen=True)
class EnvVarsLayer:
    """Environment variables ``<prefix><sep><a><sep><b>`` mapped to ``a.b``."""

    prefix: str
    separator: str = "__"


ConfigLayer = Union[
    PathLayer,
    ScopedPathLayer,
    EnvVarLayer,
    EnvSearchLayer,
    SecretsLayer,
    EnvVarsLayer,
]
