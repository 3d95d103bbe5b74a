"""Tests for provenance-routed editing."""

import os
from pathlib import Path

import pytest
import yaml

from laminate.core.builder import LayerBuilder
from laminate.core.errors import (
    EditorIOError,
    FormatMismatchError,
    InvalidPathError,
    KeyNotFoundError,
)
from laminate.editor import ConfigEditor, TomlEditor

X_TOML = """\
# primary database
[db]
host = "localhost"  # change me
"""

Y_YAML = "db:\n  port: 5432\nlog_level: info\n"


@pytest.fixture
def layered(tmp_path, monkeypatch):
    """db.host from x.toml, db.port from y.yaml, db.user from the environment."""
    x = tmp_path / "x.toml"
    x.write_text(X_TOML)
    y = tmp_path / "y.yaml"
    y.write_text(Y_YAML)
    monkeypatch.setenv("LAMEDIT__DB__USER", "admin")
    _, sources = (
        LayerBuilder()
        .with_path(x)
        .with_path(y)
        .with_env_vars("LAMEDIT")
        .build_with_provenance()
    )
    return x, y, sources


def listing(directory: Path):
    return sorted(p.name for p in directory.iterdir())


class TestRouting:
    """Edits go to the file that supplied the key."""

    def test_get_reads_owning_file(self, layered):
        _, _, sources = layered
        editor = ConfigEditor(sources)
        assert editor.get("db.host") == "localhost"
        assert editor.get("db.port") == 5432
        assert editor.get("db.port", str) is None

    def test_get_unknown_or_non_file_key(self, layered):
        _, _, sources = layered
        editor = ConfigEditor(sources)
        assert editor.get("nope") is None
        assert editor.get("db.user") is None

    def test_set_only_touches_owning_file(self, layered):
        x, y, sources = layered
        editor = ConfigEditor(sources)
        editor.set("db.host", "new")
        assert editor.is_dirty()
        assert editor.dirty_files() == [x]
        editor.save()

        assert not editor.is_dirty()
        assert y.read_text() == Y_YAML
        text = x.read_text()
        assert 'host = "new"  # change me' in text
        assert text.startswith("# primary database")

    def test_editors_are_cached_per_file(self, layered):
        x, _, sources = layered
        editor = ConfigEditor(sources)
        first = editor.editor_for(x)
        assert editor.editor_for(str(x)) is first
        editor.get("db.host")
        assert editor.editor_for(x) is first
        assert isinstance(first, TomlEditor)

    def test_set_non_file_key_fails(self, layered):
        _, _, sources = layered
        editor = ConfigEditor(sources, default_target=sources.source_of("db.host").path)
        with pytest.raises(InvalidPathError):
            editor.set("db.user", "root")

    def test_set_unknown_key_without_default_target(self, layered):
        _, _, sources = layered
        with pytest.raises(KeyNotFoundError):
            ConfigEditor(sources).set("cache.ttl", 30)

    def test_set_unknown_key_goes_to_default_target(self, layered, tmp_path):
        x, y, sources = layered
        target = tmp_path / "local.toml"
        editor = ConfigEditor(sources, default_target=target)
        editor.set("cache.ttl", 30)
        assert target.exists()
        assert editor.get("cache.ttl") == 30
        editor.save()

        assert TomlEditor.open(target).get("cache.ttl") == 30
        assert x.read_text() == X_TOML
        assert y.read_text() == Y_YAML

    def test_default_target_existing_file(self, layered):
        x, _, sources = layered
        editor = ConfigEditor(sources)
        editor.set_default_target(x)
        editor.set("db.name", "app")
        editor.save()
        reopened = TomlEditor.open(x)
        assert reopened.get("db.name") == "app"
        assert reopened.get("db.host") == "localhost"

    def test_default_target_with_unknown_extension(self, layered, tmp_path):
        _, _, sources = layered
        editor = ConfigEditor(sources, default_target=tmp_path / "local.conf")
        with pytest.raises(FormatMismatchError):
            editor.set("cache.ttl", 30)

    def test_unset(self, layered):
        _, y, sources = layered
        editor = ConfigEditor(sources)
        editor.unset("db.port")
        editor.save()
        assert yaml.safe_load(y.read_text()) == {"db": {}, "log_level": "info"}

    def test_unset_errors(self, layered):
        _, _, sources = layered
        editor = ConfigEditor(sources)
        with pytest.raises(KeyNotFoundError):
            editor.unset("nope")
        with pytest.raises(InvalidPathError):
            editor.unset("db.user")

    def test_numeric_yaml_keys_are_routed(self, tmp_path):
        path = tmp_path / "ports.yaml"
        path.write_text("ports:\n  8080: web\n")
        _, sources = LayerBuilder().with_path(path).build_with_provenance()
        editor = ConfigEditor(sources)
        assert editor.get("ports.8080") == "web"

        editor.set("ports.8080", "api")
        editor.save()
        assert yaml.safe_load(path.read_text()) == {"ports": {8080: "api"}}

    def test_save_without_changes_writes_nothing(self, layered, monkeypatch):
        _, _, sources = layered
        editor = ConfigEditor(sources)
        editor.get("db.host")

        def fail(*args, **kwargs):
            raise AssertionError("nothing should be written")

        monkeypatch.setattr(os, "replace", fail)
        editor.save()


class TestTwoPhaseSave:
    """Multi-file saves stage everything before replacing anything."""

    def test_staging_failure_changes_nothing(self, layered, monkeypatch):
        x, y, sources = layered
        directory = x.parent
        before = listing(directory)
        editor = ConfigEditor(sources)
        editor.set("db.host", "new")
        editor.set("db.port", 6543)

        real_fsync = os.fsync
        calls = []

        def flaky_fsync(fd):
            calls.append(fd)
            if len(calls) == 2:
                raise OSError("no space left on device")
            real_fsync(fd)

        monkeypatch.setattr(os, "fsync", flaky_fsync)
        with pytest.raises(EditorIOError):
            editor.save()

        assert x.read_text() == X_TOML
        assert y.read_text() == Y_YAML
        assert sorted(editor.dirty_files()) == sorted([x, y])
        assert listing(directory) == before

    def test_rename_failure_keeps_earlier_files(self, layered, monkeypatch):
        x, y, sources = layered
        directory = x.parent
        before = listing(directory)
        editor = ConfigEditor(sources)
        editor.set("db.host", "new")
        editor.set("db.port", 6543)

        real_replace = os.replace
        calls = []

        def flaky_replace(src, dst):
            calls.append(dst)
            if len(calls) == 2:
                raise OSError("device busy")
            real_replace(src, dst)

        monkeypatch.setattr(os, "replace", flaky_replace)
        with pytest.raises(EditorIOError):
            editor.save()

        assert 'host = "new"' in x.read_text()
        assert y.read_text() == Y_YAML
        assert editor.dirty_files() == [y]
        assert listing(directory) == before

        monkeypatch.undo()
        editor.save()
        assert not editor.is_dirty()
        assert yaml.safe_load(y.read_text())["db"]["port"] == 6543
