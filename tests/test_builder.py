"""Tests for ordered layer composition."""

import json
from pathlib import Path

import pytest

from laminate.core.builder import LayerBuilder
from laminate.core.environment import Environment
from laminate.core.errors import LayerNotFoundError, SettingsError, UnrecognizedEnvironmentError
from laminate.core.layer import EnvSearchLayer, EnvVarLayer, PathLayer, SecretsLayer
from laminate.core.scope import ConfigScope
from laminate.core.types import SourceKind


@pytest.fixture
def base_and_override(tmp_path):
    base = tmp_path / "base.yaml"
    base.write_text("port: 8000\ndebug: false\n")
    override = tmp_path / "override.yaml"
    override.write_text("port: 9000\n")
    return base, override


class TestLayerBuilder:
    """Test LayerBuilder composition and precedence."""

    def test_empty_builder_builds_empty_config(self):
        builder = LayerBuilder()
        assert builder.is_empty()
        config, sources = builder.build_with_provenance()
        assert config.data == {}
        assert len(sources) == 0

    def test_fluent_api_keeps_order(self, tmp_path):
        builder = (
            LayerBuilder()
            .with_path(tmp_path / "a.yaml")
            .with_env_var("APP_CONFIG")
            .with_secrets(tmp_path / "s.yaml")
            .with_env_vars("APP", "__")
        )
        assert len(builder) == 4
        assert [type(layer).__name__ for layer in builder.layers] == [
            "PathLayer",
            "EnvVarLayer",
            "SecretsLayer",
            "EnvVarsLayer",
        ]
        assert builder.has_path_layer()
        assert builder.has_env_var_layer("APP_CONFIG")
        assert not builder.has_env_var_layer("OTHER")
        assert builder.has_secrets_layer()
        assert builder.has_env_vars_layer("APP", "__")
        assert not builder.has_env_vars_layer("APP", "_")

    def test_base_and_override_scenario(self, base_and_override):
        base, override = base_and_override
        config, sources = (
            LayerBuilder().with_path(base).with_path(override).build_with_provenance()
        )
        assert config.data == {"port": 9000, "debug": False}
        assert sources.source_of("port").path == override
        assert sources.source_of("debug").path == base
        assert sources.source_of("port").layer_index == 1

    def test_build_returns_same_data(self, base_and_override):
        base, override = base_and_override
        builder = LayerBuilder().with_path(base).with_path(override)
        assert builder.build().data == builder.build_with_provenance()[0].data

    def test_order_decides_precedence_not_kind(self, tmp_path, monkeypatch):
        secrets = tmp_path / "secrets.yaml"
        secrets.write_text("token: from-secrets\n")
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"token": "from-file"}))
        monkeypatch.setenv("APP__TOKEN", "from-env")

        config, sources = (
            LayerBuilder()
            .with_env_vars("APP")
            .with_secrets(secrets)
            .with_path(config_file)
            .build_with_provenance()
        )
        assert config.get("token") == "from-file"
        assert sources.source_of("token").kind is SourceKind.FILE

    def test_missing_path_layer_fails(self, tmp_path):
        builder = LayerBuilder().with_path(tmp_path / "missing.yaml")
        with pytest.raises(LayerNotFoundError) as exc_info:
            builder.build()
        assert exc_info.value.path == tmp_path / "missing.yaml"
        assert isinstance(exc_info.value.layer, PathLayer)

    def test_missing_secrets_layer_fails(self, tmp_path):
        with pytest.raises(LayerNotFoundError, match="secrets file not found"):
            LayerBuilder().with_secrets(tmp_path / "secrets.yaml").build()

    def test_no_partial_build(self, tmp_path, base_and_override):
        base, _ = base_and_override
        builder = LayerBuilder().with_path(base).with_path(tmp_path / "missing.toml")
        with pytest.raises(LayerNotFoundError):
            builder.build_with_provenance()

    def test_unset_env_var_layer_is_skipped(self, base_and_override, monkeypatch):
        base, _ = base_and_override
        monkeypatch.delenv("LAMINATE_TEST_CONFIG", raising=False)
        config = LayerBuilder().with_path(base).with_env_var("LAMINATE_TEST_CONFIG").build()
        assert config.data == {"port": 8000, "debug": False}

    def test_env_var_layer_pointing_at_missing_file_fails(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LAMINATE_TEST_CONFIG", str(tmp_path / "nope.yaml"))
        with pytest.raises(LayerNotFoundError) as exc_info:
            LayerBuilder().with_env_var("LAMINATE_TEST_CONFIG").build()
        assert "LAMINATE_TEST_CONFIG" in str(exc_info.value)
        assert isinstance(exc_info.value.layer, EnvVarLayer)

    def test_env_var_layer_loads_file(self, base_and_override, monkeypatch):
        base, override = base_and_override
        monkeypatch.setenv("LAMINATE_TEST_CONFIG", str(override))
        config, sources = (
            LayerBuilder()
            .with_path(base)
            .with_env_var("LAMINATE_TEST_CONFIG")
            .build_with_provenance()
        )
        assert config.get("port") == 9000
        meta = sources.source_of("port")
        assert meta.is_file
        assert meta.path == override

    def test_env_vars_layer(self, base_and_override, monkeypatch):
        base, _ = base_and_override
        monkeypatch.setenv("LAMTEST__PORT", "7000")
        monkeypatch.setenv("LAMTEST__DB__HOST", "db.internal")
        config, sources = (
            LayerBuilder().with_path(base).with_env_vars("LAMTEST", "__").build_with_provenance()
        )
        assert config.get("port") == 7000
        assert config.get("db.host") == "db.internal"
        assert sources.source_of("db.host").id == "env:LAMTEST"
        assert sources.source_of("debug").is_file

    def test_env_search_is_a_no_op(self, tmp_path, base_and_override):
        base, _ = base_and_override
        (tmp_path / "production.yaml").write_text("port: 1\n")
        builder = LayerBuilder().with_path(base).with_env_search("production", [tmp_path])
        assert isinstance(builder.layers[1], EnvSearchLayer)
        assert builder.layers[1].environment is Environment.PRODUCTION
        assert builder.build().get("port") == 8000

    def test_env_search_rejects_unknown_environment(self, tmp_path):
        with pytest.raises(UnrecognizedEnvironmentError):
            LayerBuilder().with_env_search("staging", [tmp_path])

    def test_secrets_layer_metadata(self, tmp_path):
        secrets = tmp_path / "secrets.toml"
        secrets.write_text('[db]\npassword = "hunter2"\n')
        config, sources = LayerBuilder().with_secrets(secrets).build_with_provenance()
        assert config.get("db.password") == "hunter2"
        assert sources.source_of("db.password").kind is SourceKind.SECRETS
        assert not sources.source_of("db.password").is_file
        assert isinstance(LayerBuilder().with_secrets(secrets).layers[0], SecretsLayer)

    def test_scoped_path_records_scope(self, base_and_override):
        base, _ = base_and_override
        _, sources = (
            LayerBuilder()
            .with_scoped_path(base, ConfigScope.PROJECT_LOCAL)
            .build_with_provenance()
        )
        assert sources.source_of("port").scope is ConfigScope.PROJECT_LOCAL

    def test_with_path_in_dir(self, tmp_path):
        (tmp_path / "settings.toml").write_text("a = 1\n")
        builder = LayerBuilder().with_path_in_dir(tmp_path, "settings")
        assert builder.layers[0].path == tmp_path / "settings.toml"
        assert builder.build().get("a") == 1

    def test_with_path_in_dir_missing(self, tmp_path):
        builder = LayerBuilder().with_path_in_dir(tmp_path, "settings")
        assert builder.layers[0].path == tmp_path / "settings.yaml"
        with pytest.raises(LayerNotFoundError):
            builder.build()

    def test_invalid_layer_file(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{")
        with pytest.raises(SettingsError):
            LayerBuilder().with_path(bad).build()

    def test_relative_paths_are_absolutized(self, tmp_path, monkeypatch):
        (tmp_path / "c.yaml").write_text("a: 1\n")
        monkeypatch.chdir(tmp_path)
        _, sources = LayerBuilder().with_path("c.yaml").build_with_provenance()
        assert sources.source_of("a").path.is_absolute()
        assert sources.source_of("a").path == Path.cwd() / "c.yaml"
