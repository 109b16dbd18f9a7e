# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Config command for LazyFocus.

Validates and shows the resolved configuration.
"""

from typing import Optional

import typer
import yaml

from lazyfocus.config import ConfigError, load_config
from lazyfocus.context import get_state

app = typer.Typer(help="Manage and validate configuration")


def _config_path(ctx: typer.Context, config_path: Optional[str]) -> Optional[str]:
    return config_path or get_state(ctx).config_path


@app.command()
def validate(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """
    Validate configuration file.

    Checks that the config file exists, is valid YAML and holds valid values.
    """
    typer.echo("Validating configuration...")
    typer.echo()

    try:
        config = load_config(_config_path(ctx, config_path))
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except ConfigError as e:
        typer.echo(f"Validation failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("Configuration structure is valid")
    typer.echo()
    typer.echo(f"Source: {config.source or '(defaults)'}")
    typer.echo(f"Timeout: {config.timeout:g}s")
    typer.echo(f"Interpreter: {config.interpreter} {' '.join(config.interpreter_args)}")
    typer.echo()
    typer.echo("Configuration validation complete!")


@app.command()
def show(
    ctx: typer.Context,
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Show the resolved configuration as YAML."""
    try:
        config = load_config(_config_path(ctx, config_path))
    except (FileNotFoundError, ConfigError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(yaml.safe_dump(config.to_dict(), sort_keys=False).rstrip())
