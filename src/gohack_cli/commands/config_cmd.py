from __future__ import annotations

import json

import typer
import tomli_w

from gohack_core.config import HackConfig, config_as_toml_dict, default_root, resolve_config_path

from ..util import get_state

app = typer.Typer(help="Configuration inspection")


@app.command("show")
def config_show(ctx: typer.Context):
    """Print effective config as JSON."""
    state = get_state(ctx)
    config = state.config
    typer.echo(
        json.dumps(
            {
                "config_path": str(config.config_path) if config.config_path else None,
                "config": config.model_dump(exclude={"config_path"}),
            },
            indent=2,
            default=str,
        )
    )


@app.command("init")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
):
    """Write a config file holding the default settings."""
    state = get_state(ctx)
    path = state.config.config_path or resolve_config_path()
    if path.exists() and not force:
        typer.echo(f"Config file already exists: {path} (use --force to overwrite)", err=True)
        raise typer.Exit(1)

    defaults = HackConfig(root=default_root())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomli_w.dumps(config_as_toml_dict(defaults)), encoding="utf-8")
    typer.echo(f"Wrote {path}")
