"""Layer manifest loading for laminate.yaml files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .builder import LayerBuilder
from .environment import Environment
from .errors import ManifestError, UnrecognizedEnvironmentError
from .layer import (
    ConfigLayer,
    EnvSearchLayer,
    EnvVarLayer,
    EnvVarsLayer,
    PathLayer,
    ScopedPathLayer,
    SecretsLayer,
)
from .scope import ConfigScope

logger = logging.getLogger(__name__)

MANIFEST_NAME = "laminate.yaml"


class ManifestLoader:
    """Loads the per-environment layer lists declared in ``laminate.yaml``.

    Example manifest::

        environments:
          production:
            default_target: config/local.toml
            layers:
              - path: config/base.yaml
              - env_var: APP_CONFIG
              - secrets: secrets.yaml
              - env_vars: {prefix: APP, separator: "__"}

    Relative paths are resolved against the manifest's directory.
    """

    def __init__(self, manifest_path: Optional[Union[str, Path]] = None):
        """Initialize the loader.

        Args:
            manifest_path: Path to the manifest. If None, looks for
                ``laminate.yaml`` in the current directory and its parents.
        """
        self.manifest_path = self._find_manifest(manifest_path)
        self._manifest: Optional[Dict[str, Any]] = None

    def _find_manifest(
        self, manifest_path: Optional[Union[str, Path]] = None
    ) -> Optional[Path]:
        if manifest_path is not None:
            path = Path(manifest_path)
            return path if path.exists() else None

        current = Path.cwd()
        for directory in (current, *current.parents):
            candidate = directory / MANIFEST_NAME
            if candidate.exists():
                return candidate
        return None

    @property
    def base_dir(self) -> Path:
        if self.manifest_path is None:
            return Path.cwd()
        return self.manifest_path.resolve().parent

    def load(self) -> Dict[str, Any]:
        """Load the manifest, or an empty dict when there is none.

        Raises:
            ManifestError: If the manifest cannot be read or is not a mapping
                of valid YAML.
        """
        if self.manifest_path is None:
            return {}
        if self._manifest is not None:
            return self._manifest

        try:
            with open(self.manifest_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ManifestError(f"Invalid {MANIFEST_NAME} at {self.manifest_path}: {e}") from e
        except OSError as e:
            raise ManifestError(f"Could not read {self.manifest_path}: {e}") from e
        if not isinstance(data, dict):
            raise ManifestError(f"{self.manifest_path} must contain a mapping")
        logger.debug("loaded layer manifest %s", self.manifest_path)
        self._manifest = data
        return data

    def environment_config(self, environment_name: str) -> Optional[Dict[str, Any]]:
        environments = self.load().get("environments") or {}
        return environments.get(environment_name)

    def layer_entries(self, environment_name: str) -> List[Dict[str, Any]]:
        env_config = self.environment_config(environment_name)
        if env_config is None:
            if self.manifest_path is not None:
                logger.warning(
                    "environment %r is not declared in %s", environment_name, self.manifest_path
                )
            return []
        return env_config.get("layers") or []

    def default_target(self, environment_name: str) -> Optional[Path]:
        env_config = self.environment_config(environment_name) or {}
        target = env_config.get("default_target")
        return self._resolve_path(target) if target else None

    def builder_for(self, environment_name: str) -> LayerBuilder:
        """Create a :class:`LayerBuilder` holding the environment's layers in order."""
        layers = [
            self.parse_layer(entry, environment_name)
            for entry in self.layer_entries(environment_name)
        ]
        return LayerBuilder(layers)

    def parse_layer(
        self, entry: Dict[str, Any], environment_name: Optional[str] = None
    ) -> ConfigLayer:
        """Turn one manifest entry into a layer description.

        Args:
            entry: Single-key mapping such as ``{"path": "base.yaml"}``.
            environment_name: Environment used by ``env_search`` entries that
                do not name one.

        Raises:
            ManifestError: If the entry is not recognized or is malformed.
        """
        if not isinstance(entry, dict) or len(entry) != 1:
            raise ManifestError(f"Layer entry must be a single-key mapping: {entry!r}")
        kind, value = next(iter(entry.items()))

        if kind == "path":
            return PathLayer(self._resolve_path(value))
        if kind == "secrets":
            return SecretsLayer(self._resolve_path(value))
        if kind == "env_var":
            if not isinstance(value, str) or not value:
                raise ManifestError(f"env_var layer needs a variable name: {entry!r}")
            return EnvVarLayer(value)
        if kind == "scoped_path":
            options = self._options(kind, value)
            try:
                scope = ConfigScope(options["scope"])
            except (KeyError, ValueError) as e:
                raise ManifestError(f"scoped_path layer needs a valid scope: {entry!r}") from e
            return ScopedPathLayer(self._resolve_path(options.get("path")), scope)
        if kind == "env_vars":
            if isinstance(value, str):
                return EnvVarsLayer(value)
            options = self._options(kind, value)
            if "prefix" not in options:
                raise ManifestError(f"env_vars layer needs a prefix: {entry!r}")
            return EnvVarsLayer(str(options["prefix"]), str(options.get("separator", "__")))
        if kind == "env_search":
            options = self._options(kind, value or {})
            name = options.get("environment", environment_name)
            try:
                environment = Environment.from_name(str(name))
            except UnrecognizedEnvironmentError as e:
                raise ManifestError(f"env_search layer: {e}") from e
            dirs = tuple(self._resolve_path(d) for d in options.get("dirs") or [])
            return EnvSearchLayer(environment, dirs)
        raise ManifestError(f"Unknown layer kind {kind!r} in {self.manifest_path}")

    @staticmethod
    def _options(kind: str, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise ManifestError(f"{kind} layer options must be a mapping, got {value!r}")
        return value

    def _resolve_path(self, raw: Any) -> Path:
        if not isinstance(raw, (str, Path)) or not str(raw):
            raise ManifestError(f"Expected a file path, got {raw!r}")
        path = Path(raw).expanduser()
        return path if path.is_absolute() else self.base_dir / path
