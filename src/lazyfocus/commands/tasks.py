# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Task CLI commands for LazyFocus.

Thin wrappers around OmniFocusService task operations.
"""

from datetime import datetime
from typing import List, Optional

import typer

from lazyfocus.bridge.errors import BridgeError
from lazyfocus.context import EXIT_GENERAL, exit_code_for, get_state, handle_errors
from lazyfocus.dateparse import parse_date
from lazyfocus.models import Task, TaskInput, TaskModification
from lazyfocus.output import emit
from lazyfocus.service import OmniFocusService, TaskFilters
from lazyfocus.taskparse import parse_task_text

app = typer.Typer(
    name="task",
    help="List, show, create and change tasks",
    no_args_is_help=True,
)


def _date(value: Optional[str]) -> Optional[datetime]:
    return parse_date(value) if value else None


def _project_id(service: OmniFocusService, name_or_id: Optional[str]) -> Optional[str]:
    """Resolve a project name or ID; empty input passes through."""
    if not name_or_id:
        return name_or_id
    return service.resolve_project(name_or_id).id


@app.command("list")
def list_command(
    ctx: typer.Context,
    inbox: bool = typer.Option(False, "--inbox", help="Only inbox tasks"),
    flagged: bool = typer.Option(False, "--flagged", help="Only flagged tasks"),
    completed: bool = typer.Option(False, "--completed", help="Include completed tasks"),
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Project ID"),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Tag ID"),
    due_start: Optional[str] = typer.Option(None, "--due-start", help="Due on or after DATE"),
    due_end: Optional[str] = typer.Option(None, "--due-end", help="Due on or before DATE"),
):
    """List tasks.

    Examples:
        lazyfocus task list --inbox
        lazyfocus task list --due-end "next friday"
    """
    state = get_state(ctx)
    with handle_errors():
        filters = TaskFilters(
            inbox=inbox,
            project_id=project,
            tag_id=tag,
            flagged=flagged,
            completed=completed,
            due_start=_date(due_start),
            due_end=_date(due_end),
        )
        tasks = state.get_service().get_all_tasks(filters)
        emit(tasks, state.format_type, Task)


@app.command()
def show(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
):
    """Show a single task."""
    state = get_state(ctx)
    with handle_errors():
        emit(state.get_service().get_task_by_id(task_id), state.format_type)


@app.command()
def add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Task name"),
    note: str = typer.Option("", "--note", "-n", help="Task note"),
    project: str = typer.Option("", "--project", "-p", help="Project name or ID (default: inbox)"),
    tag: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag name (repeatable)"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date"),
    defer: Optional[str] = typer.Option(None, "--defer", help="Defer date"),
    flag: bool = typer.Option(False, "--flag", help="Flag the task"),
):
    """Create a task.

    The name accepts quick-add modifiers: #tag, @project or @"Project Name",
    due:DATE, defer:DATE (quote dates with spaces) and ! to flag.
    Options override the modifiers.

    Examples:
        lazyfocus task add "Buy milk" --due tomorrow --tag errands
        lazyfocus task add "Review PR @Work due:tomorrow #urgent !"
    """
    state = get_state(ctx)
    with handle_errors():
        parsed = parse_task_text(name)
        due_date = _date(due) or parsed.due_date
        defer_date = _date(defer) or parsed.defer_date
        service = state.get_service()
        task_input = TaskInput(
            name=parsed.name,
            note=note,
            project_id=_project_id(service, project or parsed.project_name),
            tag_names=list(tag) if tag else parsed.tag_names,
            due_date=due_date,
            defer_date=defer_date,
            flagged=True if flag else parsed.flagged,
        )
        task = service.create_task(task_input)
        if state.format_type == "json":
            emit(task, "json")
        else:
            typer.echo(f"Created: {task.name} ({task.id})")


@app.command()
def modify(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
    name: Optional[str] = typer.Option(None, "--name", help="New name"),
    note: Optional[str] = typer.Option(None, "--note", help="New note"),
    project: Optional[str] = typer.Option(
        None, "--project", "-p", help="Move to project (name or ID)"
    ),
    clear_project: bool = typer.Option(False, "--clear-project", help="Move back to the inbox"),
    add_tag: Optional[List[str]] = typer.Option(None, "--add-tag", help="Tag to add (repeatable)"),
    remove_tag: Optional[List[str]] = typer.Option(None, "--remove-tag", help="Tag to remove (repeatable)"),
    due: Optional[str] = typer.Option(None, "--due", help="New due date"),
    clear_due: bool = typer.Option(False, "--clear-due", help="Remove the due date"),
    defer: Optional[str] = typer.Option(None, "--defer", help="New defer date"),
    clear_defer: bool = typer.Option(False, "--clear-defer", help="Remove the defer date"),
    flag: Optional[bool] = typer.Option(None, "--flag/--unflag", help="Set or clear the flag"),
):
    """Change fields of an existing task."""
    state = get_state(ctx)
    with handle_errors():
        due_date = _date(due)
        defer_date = _date(defer)
        service = state.get_service()
        modification = TaskModification(
            name=name,
            note=note,
            project_id="" if clear_project else _project_id(service, project),
            add_tags=list(add_tag or []),
            remove_tags=list(remove_tag or []),
            due_date=due_date,
            defer_date=defer_date,
            flagged=flag,
            clear_due=clear_due,
            clear_defer=clear_defer,
        )
        task = service.modify_task(task_id, modification)
        if state.format_type == "json":
            emit(task, "json")
        else:
            typer.echo(f"Modified: {task.name} ({task.id})")


@app.command()
def complete(
    ctx: typer.Context,
    task_ids: List[str] = typer.Argument(..., help="Task ID(s) to complete"),
):
    """Mark one or more tasks complete.

    Every ID is attempted; failures are reported and the command fails
    only when no task was completed.
    """
    state = get_state(ctx)
    with handle_errors():
        service = state.get_service()
        completed = []
        last_error = None
        for task_id in task_ids:
            try:
                result = service.complete_task(task_id)
            except BridgeError as e:
                last_error = e
                typer.echo(f"Error: failed to complete {task_id}: {e.message}", err=True)
                continue
            if not result.success:
                reason = result.message or "not completed"
                typer.echo(f"Error: failed to complete {task_id}: {reason}", err=True)
                continue
            completed.append(result)
            if state.format_type != "json":
                typer.echo(f"Completed: {result.id or task_id}")

        if not completed:
            raise typer.Exit(exit_code_for(last_error) if last_error else EXIT_GENERAL)
        if state.format_type == "json":
            emit(completed, "json")


@app.command()
def delete(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a task."""
    state = get_state(ctx)
    if not yes:
        typer.confirm(f"Delete task {task_id}?", abort=True)
    with handle_errors():
        result = state.get_service().delete_task(task_id)
        if state.format_type == "json":
            emit(result, "json")
        else:
            typer.echo(f"Deleted: {result.id or task_id}")
