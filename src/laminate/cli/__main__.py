from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import typer
import yaml

from ..core.builder import LayerBuilder
from ..core.config import Config
from ..core.errors import LaminateError
from ..core.manifest import ManifestLoader
from ..core.provenance import SourceMap
from ..editor.config_editor import ConfigEditor

app = typer.Typer(help="Inspect and edit layered configuration")


@dataclass
class LayerOptions:
    manifest: Optional[Path] = None
    env: str = "local"
    layers: List[Path] = field(default_factory=list)
    secrets: Optional[Path] = None
    env_prefix: Optional[str] = None
    separator: str = "__"
    default_target: Optional[Path] = None

    def builder(self) -> Tuple[LayerBuilder, Optional[Path]]:
        """Builder for the selected layers, plus the default edit target."""
        if self.layers or self.secrets or self.env_prefix:
            builder = LayerBuilder()
            for path in self.layers:
                builder.with_path(path)
            if self.secrets is not None:
                builder.with_secrets(self.secrets)
            if self.env_prefix:
                builder.with_env_vars(self.env_prefix, self.separator)
            return builder, self.default_target

        loader = ManifestLoader(self.manifest)
        target = self.default_target or loader.default_target(self.env)
        return loader.builder_for(self.env), target

    def build(self) -> Tuple[Config, SourceMap, Optional[Path]]:
        builder, target = self.builder()
        config, source_map = builder.build_with_provenance()
        return config, source_map, target


def _fail(error: LaminateError) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=1)


def _parse_value(raw: str):
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


@app.callback()
def main(
    ctx: typer.Context,
    manifest: Optional[Path] = typer.Option(None, "--manifest", "-m", help="Layer manifest (laminate.yaml)"),
    env: str = typer.Option("local", "--env", "-e", help="Environment to load from the manifest"),
    layer: Optional[List[Path]] = typer.Option(None, "--layer", "-l", help="Config file layer, repeatable"),
    secrets: Optional[Path] = typer.Option(None, "--secrets", help="Secrets file layer"),
    env_prefix: Optional[str] = typer.Option(None, "--env-prefix", help="Environment variable prefix"),
    separator: str = typer.Option("__", "--separator", help="Nesting separator for environment variables"),
    default_target: Optional[Path] = typer.Option(None, "--default-target", "-t", help="File receiving new keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = LayerOptions(
        manifest=manifest,
        env=env,
        layers=list(layer or []),
        secrets=secrets,
        env_prefix=env_prefix,
        separator=separator,
        default_target=default_target,
    )


@app.command()
def audit(ctx: typer.Context):
    """Show which layer supplies each key."""
    try:
        _, source_map, _ = ctx.obj.build()
    except LaminateError as e:
        raise _fail(e)
    typer.echo(source_map.audit_report(), nl=False)


@app.command()
def get(ctx: typer.Context, key: str):
    try:
        config, source_map, _ = ctx.obj.build()
    except LaminateError as e:
        raise _fail(e)
    source = source_map.source_of(key)
    typer.echo(json.dumps(
        {"key": key, "value": config.get(key), "source": str(source) if source else None},
        indent=2,
        default=str,
    ))


@app.command()
def set(
    ctx: typer.Context,
    key: str,
    value: str,
    no_save: bool = typer.Option(False, "--no-save", help="Validate the edit without writing"),
):
    """Set KEY in the file it comes from. VALUE is read as a YAML scalar."""
    try:
        _, source_map, target = ctx.obj.build()
        editor = ConfigEditor(source_map, target)
        editor.set(key, _parse_value(value))
        if not no_save:
            editor.save()
    except LaminateError as e:
        raise _fail(e)
    typer.echo("OK")


@app.command()
def unset(ctx: typer.Context, key: str):
    try:
        _, source_map, target = ctx.obj.build()
        editor = ConfigEditor(source_map, target)
        editor.unset(key)
        editor.save()
    except LaminateError as e:
        raise _fail(e)
    typer.echo("OK")


if __name__ == "__main__":
    app()
