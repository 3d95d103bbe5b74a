"""Ordered composition of configuration layers."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ..sources.env_vars import read_env_vars
from ..sources.files import load_file
from .config import Config
from .environment import Environment
from .errors import LayerNotFoundError
from .layer import (
    ConfigLayer,
    EnvSearchLayer,
    EnvVarLayer,
    EnvVarsLayer,
    PathLayer,
    ScopedPathLayer,
    SecretsLayer,
)
from .merge import merge_layers
from .paths import absolutize
from .provenance import SourceMap
from .scope import ConfigScope
from .types import SourceMetadata

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Preference order for with_path_in_dir().
DIR_SEARCH_EXTENSIONS = ("yaml", "yml", "toml", "json")

Resolution = Tuple[SourceMetadata, Dict[str, Any]]


class LayerBuilder:
    """Ordered, append-only list of configuration layers.

    Layers are applied first to last, so a later layer overrides an earlier
    one for any key both define. Position is the only thing that decides
    precedence; the kind of layer never does.

    Example:
        >>> config, sources = (
        ...     LayerBuilder()
        ...     .with_path("config/base.yaml")
        ...     .with_env_var("APP_CONFIG")
        ...     .with_secrets("secrets.yaml")
        ...     .with_env_vars("APP", "__")
        ...     .build_with_provenance()
        ... )
    """

    def __init__(self, layers: Optional[Iterable[ConfigLayer]] = None):
        self._layers: List[ConfigLayer] = list(layers or [])

    def with_layer(self, layer: ConfigLayer) -> "LayerBuilder":
        self._layers.append(layer)
        return self

    def with_path(self, path: PathLike) -> "LayerBuilder":
        """Add a file layer. The file must exist when building."""
        return self.with_layer(PathLayer(Path(path)))

    def with_scoped_path(self, path: PathLike, scope: ConfigScope) -> "LayerBuilder":
        """Add a file layer whose provenance records ``scope``."""
        return self.with_layer(ScopedPathLayer(Path(path), ConfigScope(scope)))

    def with_path_in_dir(self, directory: PathLike, basename: str) -> "LayerBuilder":
        """Add the first existing ``basename.{yaml,yml,toml,json}`` in a directory.

        When none exists a layer for ``basename.yaml`` is still added so the
        build fails with a clear not-found error.
        """
        base = Path(directory)
        for ext in DIR_SEARCH_EXTENSIONS:
            candidate = base / f"{basename}.{ext}"
            if candidate.exists():
                return self.with_path(candidate)
        return self.with_path(base / f"{basename}.yaml")

    def with_env_var(self, name: str) -> "LayerBuilder":
        """Add a file layer whose path is held in environment variable ``name``.

        Skipped when the variable is unset.
        """
        return self.with_layer(EnvVarLayer(name))

    def with_env_search(
        self, environment: Union[Environment, str], dirs: Iterable[PathLike]
    ) -> "LayerBuilder":
        if not isinstance(environment, Environment):
            environment = Environment.from_name(environment)
        return self.with_layer(EnvSearchLayer(environment, tuple(Path(d) for d in dirs)))

    def with_secrets(self, path: PathLike) -> "LayerBuilder":
        """Add a secrets file layer. The file must exist when building."""
        return self.with_layer(SecretsLayer(Path(path)))

    def with_env_vars(self, prefix: str, separator: str = "__") -> "LayerBuilder":
        return self.with_layer(EnvVarsLayer(prefix, separator))

    @property
    def layers(self) -> Tuple[ConfigLayer, ...]:
        return tuple(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def is_empty(self) -> bool:
        return not self._layers

    def has_path_layer(self) -> bool:
        return any(isinstance(layer, PathLayer) for layer in self._layers)

    def has_env_var_layer(self, name: str) -> bool:
        return any(
            isinstance(layer, EnvVarLayer) and layer.name == name for layer in self._layers
        )

    def has_secrets_layer(self) -> bool:
        return any(isinstance(layer, SecretsLayer) for layer in self._layers)

    def has_env_vars_layer(self, prefix: str, separator: str) -> bool:
        return any(
            isinstance(layer, EnvVarsLayer)
            and layer.prefix == prefix
            and layer.separator == separator
            for layer in self._layers
        )

    def build(self) -> Config:
        """Merge all layers into a :class:`Config`.

        Raises:
            LayerNotFoundError: If a mandatory file layer is missing.
            SettingsError: If a layer file cannot be read or parsed.
        """
        config, _ = self.build_with_provenance()
        return config

    def build_with_provenance(self) -> Tuple[Config, SourceMap]:
        """Merge all layers and record which layer won each key."""
        resolved = self._resolve_all()
        merged, source_map = merge_layers(resolved)
        logger.debug(
            "built configuration from %d of %d layers (%d keys tracked)",
            len(resolved),
            len(self._layers),
            len(source_map),
        )
        return Config(merged), source_map

    def _resolve_all(self) -> List[Resolution]:
        # every layer is validated before anything is merged
        resolved: List[Resolution] = []
        for idx, layer in enumerate(self._layers):
            resolution = self._resolve(layer, idx)
            if resolution is not None:
                resolved.append(resolution)
        return resolved

    def _resolve(self, layer: ConfigLayer, idx: int) -> Optional[Resolution]:
        if isinstance(layer, PathLayer):
            path = self._require_file(layer.path, layer)
            return SourceMetadata.file(path, layer_index=idx), load_file(path)
        if isinstance(layer, ScopedPathLayer):
            path = self._require_file(layer.path, layer)
            return SourceMetadata.file(path, layer.scope, idx), load_file(path)
        if isinstance(layer, SecretsLayer):
            path = self._require_file(layer.path, layer, kind="secrets file")
            return SourceMetadata.secrets(path, idx), load_file(path)
        if isinstance(layer, EnvVarLayer):
            return self._resolve_env_var(layer, idx)
        if isinstance(layer, EnvVarsLayer):
            payload = read_env_vars(layer.prefix, layer.separator)
            logger.debug(
                "layer %d: %d top-level keys from environment prefix %r",
                idx,
                len(payload),
                layer.prefix,
            )
            return SourceMetadata.env(layer.prefix, idx), payload
        if isinstance(layer, EnvSearchLayer):
            logger.debug(
                "layer %d: environment search for %s contributes no values", idx, layer.environment
            )
            return None
        raise TypeError(f"Unsupported layer type: {layer!r}")

    def _resolve_env_var(self, layer: EnvVarLayer, idx: int) -> Optional[Resolution]:
        value = os.environ.get(layer.name)
        if value is None:
            logger.debug("layer %d: environment variable %s not set, skipping", idx, layer.name)
            return None
        path = absolutize(value)
        if not path.exists():
            raise LayerNotFoundError(
                path,
                layer,
                f"config file from env var {layer.name} not found: {path}",
            )
        return SourceMetadata.file(path, layer_index=idx), load_file(path)

    @staticmethod
    def _require_file(path: Path, layer: ConfigLayer, kind: str = "config file") -> Path:
        absolute = absolutize(path)
        if not absolute.exists():
            raise LayerNotFoundError(absolute, layer, f"{kind} not found: {absolute}")
        return absolute
