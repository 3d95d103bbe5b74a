"""TOML editing on top of tomlkit's style-preserving document model."""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any

import tomlkit
from tomlkit.exceptions import ConvertError
from tomlkit.exceptions import ParseError as TOMLParseError
from tomlkit.items import AoT, InlineTable, Item, Table

from ..core.errors import SerializationError
from .base import LayerEditor
from .format import ConfigFormat


class TomlEditor(LayerEditor):
    """Edits a TOML file without disturbing what it does not touch.

    Comments, blank lines and key order survive a round trip. Replacing an
    existing scalar keeps the comment that trailed the old value.
    """

    format = ConfigFormat.TOML
    parse_errors = (TOMLParseError,)

    @classmethod
    def _parse(cls, text: str) -> Any:
        return tomlkit.parse(text)

    @classmethod
    def _empty(cls) -> MutableMapping:
        return tomlkit.document()

    def _dump(self, document: MutableMapping) -> str:
        return tomlkit.dumps(document)

    def _new_table(self, parent: MutableMapping) -> MutableMapping:
        if isinstance(parent, InlineTable):
            return tomlkit.inline_table()
        return tomlkit.table()

    def _to_node(self, value: Any) -> Any:
        try:
            return tomlkit.item(value)
        except (ConvertError, TypeError, ValueError) as e:
            raise SerializationError(f"cannot represent {value!r} in TOML: {e}") from e

    def _assign(self, container: MutableMapping, key: str, node: Any) -> None:
        old = container.get(key)
        if (
            isinstance(old, Item)
            and isinstance(node, Item)
            and not isinstance(old, (Table, AoT))
            and not isinstance(node, (Table, AoT))
        ):
            node.trivia.indent = old.trivia.indent
            node.trivia.comment_ws = old.trivia.comment_ws
            node.trivia.comment = old.trivia.comment
            node.trivia.trail = old.trivia.trail
        container[key] = node

    def _plain(self, node: Any) -> Any:
        unwrap = getattr(node, "unwrap", None)
        return unwrap() if unwrap is not None else node
