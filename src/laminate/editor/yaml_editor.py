from __future__ import annotations

import copy
from collections.abc import MutableMapping
from typing import Any

import yaml

from ..core.errors import SerializationError
from .base import LayerEditor
from .format import ConfigFormat


class YamlEditor(LayerEditor):
    """Edits a YAML file as a plain value tree.

    Comments are not kept; key order is.
    """

    format = ConfigFormat.YAML
    parse_errors = (yaml.YAMLError,)

    @classmethod
    def _parse(cls, text: str) -> Any:
        data = yaml.safe_load(text)
        return {} if data is None else data

    @classmethod
    def _empty(cls) -> MutableMapping:
        return {}

    def _dump(self, document: MutableMapping) -> str:
        return yaml.safe_dump(
            document, default_flow_style=False, sort_keys=False, allow_unicode=True
        )

    def _to_node(self, value: Any) -> Any:
        try:
            yaml.safe_dump(value)
        except yaml.YAMLError as e:
            raise SerializationError(f"cannot represent {value!r} in YAML: {e}") from e
        return copy.deepcopy(value)

    def _plain(self, node: Any) -> Any:
        return copy.deepcopy(node)
