# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Output rendering for CLI results.

Two formats: "human" (tables and detail blocks) and "json" (the wire
format of the models, one document per command).
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import typer

from lazyfocus.models import OperationResult, Project, Tag, Task

DATE_FORMAT = "%Y-%m-%d %H:%M"


def _format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime(DATE_FORMAT)


def _to_wire(payload: Any) -> Any:
    if isinstance(payload, list):
        return [_to_wire(item) for item in payload]
    if hasattr(payload, "to_dict"):
        return payload.to_dict()
    return payload


def render_json(payload: Any) -> str:
    """Render a payload as a JSON document."""
    return json.dumps(_to_wire(payload), indent=2)


def render_table(rows: List[Dict[str, Any]]) -> str:
    """Render rows as a simple table."""
    if not rows:
        return "(no rows)"
    keys = list(rows[0].keys())
    widths = {k: max(len(str(k)), max(len(str(r.get(k, ""))) for r in rows)) for k in keys}
    header = " | ".join(str(k).ljust(widths[k]) for k in keys)
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(" | ".join(str(row.get(k, "")).ljust(widths[k]) for k in keys).rstrip())
    return "\n".join(lines)


def _task_row(task: Task) -> Dict[str, Any]:
    return {
        "ID": task.id,
        "Name": task.name,
        "Project": task.project_name,
        "Due": _format_date(task.due_date),
        "Flag": "*" if task.flagged else "",
        "Tags": ", ".join(task.tags),
    }


def render_tasks(tasks: List[Task]) -> str:
    if not tasks:
        return "No tasks found."
    return render_table([_task_row(t) for t in tasks])


def render_task(task: Task) -> str:
    """Detail view of a single task."""
    lines = [
        f"Task: {task.name}",
        f"  ID: {task.id}",
    ]
    if task.project_name or task.project_id:
        lines.append(f"  Project: {task.project_name or task.project_id}")
    if task.tags:
        lines.append(f"  Tags: {', '.join(task.tags)}")
    if task.due_date:
        lines.append(f"  Due: {_format_date(task.due_date)}")
    if task.defer_date:
        lines.append(f"  Defer: {_format_date(task.defer_date)}")
    lines.append(f"  Flagged: {'yes' if task.flagged else 'no'}")
    lines.append(f"  Completed: {'yes' if task.completed else 'no'}")
    if task.completed_date:
        lines.append(f"  Completed on: {_format_date(task.completed_date)}")
    if task.note:
        lines.append(f"  Note: {task.note}")
    return "\n".join(lines)


def render_projects(projects: List[Project]) -> str:
    if not projects:
        return "No projects found."
    return render_table(
        [{"ID": p.id, "Name": p.name, "Status": p.status} for p in projects]
    )


def render_project(project: Project) -> str:
    lines = [
        f"Project: {project.name}",
        f"  ID: {project.id}",
        f"  Status: {project.status}",
    ]
    if project.note:
        lines.append(f"  Note: {project.note}")
    if project.tasks:
        lines.append("")
        lines.append(render_tasks(project.tasks))
    return "\n".join(lines)


def _tag_lines(tags: List[Tag], depth: int) -> List[str]:
    lines = []
    for tag in tags:
        lines.append(f"{'  ' * depth}{tag.name} ({tag.id})")
        lines.extend(_tag_lines(tag.children, depth + 1))
    return lines


def render_tags(tags: List[Tag]) -> str:
    """Tags as an indented tree."""
    if not tags:
        return "No tags found."
    return "\n".join(_tag_lines(tags, 0))


def render_tag(tag: Tag) -> str:
    lines = [f"Tag: {tag.name}", f"  ID: {tag.id}"]
    if tag.parent_id:
        lines.append(f"  Parent: {tag.parent_id}")
    if tag.children:
        lines.append(f"  Children: {', '.join(c.name for c in tag.children)}")
    return "\n".join(lines)


def render_tag_counts(counts: Dict[str, int]) -> str:
    if not counts:
        return "No tags found."
    return render_table([{"Tag": name, "Tasks": n} for name, n in sorted(counts.items())])


def render_result(result: OperationResult) -> str:
    status = "OK" if result.success else "FAILED"
    text = f"{status}: {result.id}" if result.id else status
    if result.message:
        text += f" ({result.message})"
    return text


HUMAN_RENDERERS = {
    Task: render_task,
    Project: render_project,
    Tag: render_tag,
    OperationResult: render_result,
}

LIST_RENDERERS = {
    Task: render_tasks,
    Project: render_projects,
    Tag: render_tags,
}


def render(payload: Any, format_type: str = "human", item_type: Optional[type] = None) -> str:
    """
    Render a command payload.

    Args:
        payload: A model, a list of models, or a tag-count mapping
        format_type: "human" or "json"
        item_type: Model type of a list payload, used when it is empty

    Returns:
        Text to print
    """
    if format_type == "json":
        return render_json(payload)

    if isinstance(payload, dict):
        return render_tag_counts(payload)
    if isinstance(payload, list):
        kind = type(payload[0]) if payload else item_type
        if kind not in LIST_RENDERERS:
            return "(no rows)"
        return LIST_RENDERERS[kind](payload)
    return HUMAN_RENDERERS[type(payload)](payload)


def emit(payload: Any, format_type: str = "human", item_type: Optional[type] = None) -> None:
    """Render a payload and print it to stdout."""
    typer.echo(render(payload, format_type, item_type))
