# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Main CLI entry point for LazyFocus.

Thin trigger: parses args, calls the OmniFocus service, renders output.
No OmniFocus logic here - it lives in the bundled scripts and the service.
"""

import logging
from typing import Optional

import typer

from lazyfocus import __version__
from lazyfocus.bridge.scripts import default_store
from lazyfocus.context import AppState, get_state, handle_errors
from lazyfocus.models import Task
from lazyfocus.output import emit


app = typer.Typer(
    name="lazyfocus",
    help="Command-line access to OmniFocus through osascript",
    no_args_is_help=True,
)


@app.callback()
def root(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON instead of text"),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0.001, help="Script timeout in seconds"
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """LazyFocus: OmniFocus from the terminal."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = AppState(json_output=json_output, timeout=timeout, config_path=config_path)


@app.command()
def perspective(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Perspective name (inbox, flagged, forecast, projects)"),
):
    """Show tasks from a built-in perspective."""
    state = get_state(ctx)
    with handle_errors():
        tasks = state.get_service().get_perspective_tasks(name)
        emit(tasks, state.format_type, Task)


@app.command()
def scripts():
    """List bundled OmniFocus scripts and their parameters."""
    with handle_errors():
        store = default_store()
        for name in store.names():
            template = store.get(name)
            typer.echo(name)
            if template.description:
                typer.echo(f"  {template.description}")
            for param in template.placeholders:
                spec = template.param_spec(param)
                optional = "" if spec.required else ", optional"
                typer.echo(f"    {param} ({spec.policy.value}{optional})")


@app.command()
def version():
    """Show version information."""
    typer.echo(f"lazyfocus version {__version__}")


# Sub-command groups
from lazyfocus.commands import config, projects, tags, tasks

app.add_typer(tasks.app, name="task")
app.add_typer(projects.app, name="project")
app.add_typer(tags.app, name="tag")
app.add_typer(config.app, name="config")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
