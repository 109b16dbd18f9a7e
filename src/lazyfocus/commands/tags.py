# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tag CLI commands for LazyFocus."""

import typer

from lazyfocus.context import get_state, handle_errors
from lazyfocus.models import Tag
from lazyfocus.output import emit

app = typer.Typer(
    name="tag",
    help="List tags and tag usage",
    no_args_is_help=True,
)


@app.command("list")
def list_command(
    ctx: typer.Context,
    flat: bool = typer.Option(False, "--flat", help="Flat list instead of a tree"),
):
    """List tags."""
    state = get_state(ctx)
    with handle_errors():
        emit(state.get_service().get_tags(flat=flat), state.format_type, Tag)


@app.command()
def show(
    ctx: typer.Context,
    tag_id: str = typer.Argument(..., help="Tag ID"),
):
    """Show a single tag and its children."""
    state = get_state(ctx)
    with handle_errors():
        emit(state.get_service().get_tag_by_id(tag_id), state.format_type)


@app.command()
def counts(ctx: typer.Context):
    """Number of incomplete tasks per tag."""
    state = get_state(ctx)
    with handle_errors():
        emit(state.get_service().get_tag_counts(), state.format_type)
