# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Project CLI commands for LazyFocus."""

import typer

from lazyfocus.context import EXIT_VALIDATION, fail, get_state, handle_errors
from lazyfocus.models import PROJECT_STATUSES, Project
from lazyfocus.output import emit

app = typer.Typer(
    name="project",
    help="List and show projects",
    no_args_is_help=True,
)


@app.command("list")
def list_command(
    ctx: typer.Context,
    status: str = typer.Option(
        "active", "--status", "-s", help="active, on-hold, completed, dropped or all"
    ),
):
    """List projects with a given status."""
    valid = PROJECT_STATUSES + ("all",)
    if status not in valid:
        fail(f"invalid status: {status}", EXIT_VALIDATION, f"Valid statuses: {', '.join(valid)}")
    state = get_state(ctx)
    with handle_errors():
        projects = state.get_service().get_projects(status)
        emit(projects, state.format_type, Project)


@app.command()
def show(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project ID"),
    with_tasks: bool = typer.Option(False, "--with-tasks", help="Include the project's tasks"),
):
    """Show a single project."""
    state = get_state(ctx)
    with handle_errors():
        service = state.get_service()
        if with_tasks:
            project = service.get_project_with_tasks(project_id)
        else:
            project = service.get_project_by_id(project_id)
        emit(project, state.format_type)
