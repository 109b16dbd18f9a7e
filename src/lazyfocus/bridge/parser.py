# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Response parser for interpreter output.

Every script prints one JSON object: a shape-specific payload field plus an
optional ``error`` string. One parse_* function exists per payload shape.

- invalid JSON or wrong field types -> MalformedResponseError
- error == the "not running" text -> NotAvailableError
- any other non-empty error -> ApplicationError (message verbatim)
- otherwise -> typed payload; missing collections decode as empty
"""

import json
from typing import Any, Callable, Dict, List, Optional, TypeVar

from lazyfocus.bridge.errors import (
    ApplicationError,
    MalformedResponseError,
    NotAvailableError,
)
from lazyfocus.models import OperationResult, Project, Tag, Task


NOT_RUNNING_MESSAGE = "OmniFocus is not running"

T = TypeVar("T")


def _decode(text: str, shape: str, not_running_message: str) -> Dict[str, Any]:
    """Decode a response object and raise its error field, if any."""
    try:
        response = json.loads(text)
    except (TypeError, RecursionError, json.JSONDecodeError) as e:
        raise MalformedResponseError(f"failed to parse {shape} JSON: {e}") from e

    if not isinstance(response, dict):
        raise MalformedResponseError(
            f"failed to parse {shape} JSON: expected an object, got {type(response).__name__}"
        )

    error = response.get("error")
    if error is not None and not isinstance(error, str):
        raise MalformedResponseError(f"failed to parse {shape} JSON: error must be a string")
    if error:
        if error == not_running_message:
            raise NotAvailableError(error)
        raise ApplicationError(error)

    return response


def _build(shape: str, build: Callable[[], T]) -> T:
    """Run a payload constructor, mapping shape mismatches to MalformedResponseError."""
    try:
        return build()
    except (TypeError, ValueError, RecursionError) as e:
        raise MalformedResponseError(f"failed to parse {shape} JSON: {e}") from e


def _items(response: Dict[str, Any], key: str) -> List[Any]:
    value = response.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a list, got: {type(value).__name__}")
    return value


def parse_tasks(text: str, not_running_message: str = NOT_RUNNING_MESSAGE) -> List[Task]:
    """Parse ``{"tasks": [...]}`` into a list of Tasks (empty if absent)."""
    response = _decode(text, "tasks", not_running_message)
    return _build("tasks", lambda: [Task.from_dict(t) for t in _items(response, "tasks")])


def parse_task(text: str, not_running_message: str = NOT_RUNNING_MESSAGE) -> Optional[Task]:
    """Parse ``{"task": {...}}``; None if the payload is absent."""
    response = _decode(text, "task", not_running_message)
    data = response.get("task")
    if data is None:
        return None
    return _build("task", lambda: Task.from_dict(data))


def parse_projects(text: str, not_running_message: str = NOT_RUNNING_MESSAGE) -> List[Project]:
    """Parse ``{"projects": [...]}`` into a list of Projects."""
    response = _decode(text, "projects", not_running_message)
    return _build(
        "projects", lambda: [Project.from_dict(p) for p in _items(response, "projects")]
    )


def parse_project(text: str, not_running_message: str = NOT_RUNNING_MESSAGE) -> Optional[Project]:
    """Parse ``{"project": {...}}``; None if the payload is absent."""
    response = _decode(text, "project", not_running_message)
    data = response.get("project")
    if data is None:
        return None
    return _build("project", lambda: Project.from_dict(data))


def parse_tags(text: str, not_running_message: str = NOT_RUNNING_MESSAGE) -> List[Tag]:
    """Parse ``{"tags": [...]}`` into a list of Tags (children recursive)."""
    response = _decode(text, "tags", not_running_message)
    return _build("tags", lambda: [Tag.from_dict(t) for t in _items(response, "tags")])


def parse_tag(text: str, not_running_message: str = NOT_RUNNING_MESSAGE) -> Optional[Tag]:
    """Parse ``{"tag": {...}}``; None if the payload is absent."""
    response = _decode(text, "tag", not_running_message)
    data = response.get("tag")
    if data is None:
        return None
    return _build("tag", lambda: Tag.from_dict(data))


def _counts(response: Dict[str, Any]) -> Dict[str, int]:
    value = response.get("counts")
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"counts must be an object, got: {type(value).__name__}")
    counts = {}
    for key, count in value.items():
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValueError(f"count for {key} must be an integer, got: {count!r}")
        counts[key] = count
    return counts


def parse_tag_counts(text: str, not_running_message: str = NOT_RUNNING_MESSAGE) -> Dict[str, int]:
    """Parse ``{"counts": {name: n}}``; empty dict if absent."""
    response = _decode(text, "tag counts", not_running_message)
    return _build("tag counts", lambda: _counts(response))


def parse_operation_result(
    text: str, not_running_message: str = NOT_RUNNING_MESSAGE
) -> OperationResult:
    """Parse ``{"success": .., "id": .., "message": ..}``."""
    response = _decode(text, "operation result", not_running_message)
    return _build("operation result", lambda: OperationResult.from_dict(response))
