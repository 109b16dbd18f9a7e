# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Typed payloads exchanged with OmniFocus.

Wire format: camelCase keys, dates as RFC3339 UTC strings or null.
Collections always decode to lists/dicts, never None, at every level.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


PROJECT_STATUSES = ("active", "on-hold", "completed", "dropped")

# Sentinel understood by modify_task for "remove project / clear date"
CLEAR = "CLEAR"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an RFC3339 string (or None) into an aware UTC datetime.

    Raises:
        ValueError: If the value is not a string or not a valid timestamp.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"date must be a string or null, got: {value!r}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as RFC3339 UTC with a Z suffix."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _str_field(data: Dict[str, Any], *keys: str, default: str = "") -> str:
    """First present key among aliases, coerced to str."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            if not isinstance(value, str):
                raise ValueError(f"{key} must be a string, got: {value!r}")
            return value
    return default


def _bool_field(data: Dict[str, Any], key: str) -> bool:
    value = data.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean, got: {value!r}")
    return value


def _list_field(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a list, got: {type(value).__name__}")
    return value


def _require_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be an object, got: {type(data).__name__}")
    return data


@dataclass
class Task:
    """An OmniFocus task."""

    id: str
    name: str
    note: str = ""
    project_id: str = ""
    project_name: str = ""
    tags: List[str] = field(default_factory=list)
    due_date: Optional[datetime] = None
    defer_date: Optional[datetime] = None
    flagged: bool = False
    completed: bool = False
    completed_date: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Task":
        data = _require_mapping(data, "task")
        tags = _list_field(data, "tags")
        if not all(isinstance(t, str) for t in tags):
            raise ValueError("tags must be a list of strings")
        return cls(
            id=_str_field(data, "id"),
            name=_str_field(data, "name"),
            note=_str_field(data, "note"),
            project_id=_str_field(data, "projectId", "projectID"),
            project_name=_str_field(data, "projectName"),
            tags=list(tags),
            due_date=parse_datetime(data.get("dueDate")),
            defer_date=parse_datetime(data.get("deferDate")),
            flagged=_bool_field(data, "flagged"),
            completed=_bool_field(data, "completed"),
            completed_date=parse_datetime(data.get("completedDate")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "note": self.note,
            "projectId": self.project_id,
            "projectName": self.project_name,
            "tags": list(self.tags),
            "dueDate": format_datetime(self.due_date),
            "deferDate": format_datetime(self.defer_date),
            "flagged": self.flagged,
            "completed": self.completed,
            "completedDate": format_datetime(self.completed_date),
        }


@dataclass
class Project:
    """An OmniFocus project, optionally with its tasks."""

    id: str
    name: str
    status: str = "active"
    note: str = ""
    tasks: List[Task] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Project":
        data = _require_mapping(data, "project")
        return cls(
            id=_str_field(data, "id"),
            name=_str_field(data, "name"),
            status=_str_field(data, "status", default="active"),
            note=_str_field(data, "note"),
            tasks=[Task.from_dict(t) for t in _list_field(data, "tasks")],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "note": self.note,
            "tasks": [t.to_dict() for t in self.tasks],
        }


@dataclass
class Tag:
    """An OmniFocus tag; children form the tag hierarchy."""

    id: str
    name: str
    parent_id: str = ""
    children: List["Tag"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Tag":
        data = _require_mapping(data, "tag")
        return cls(
            id=_str_field(data, "id"),
            name=_str_field(data, "name"),
            parent_id=_str_field(data, "parentId", "parentID"),
            children=[Tag.from_dict(c) for c in _list_field(data, "children")],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parentId": self.parent_id,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass
class OperationResult:
    """Acknowledgement returned by write operations."""

    success: bool
    id: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "OperationResult":
        data = _require_mapping(data, "operation result")
        return cls(
            success=_bool_field(data, "success"),
            id=_str_field(data, "id"),
            message=_str_field(data, "message"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "id": self.id, "message": self.message}


class TaskInputError(ValueError):
    """Raised when a create/modify request is invalid."""

    pass


def _flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass
class TaskInput:
    """Fields for creating a task. Only name is required."""

    name: str
    note: str = ""
    project_id: str = ""
    tag_names: List[str] = field(default_factory=list)
    due_date: Optional[datetime] = None
    defer_date: Optional[datetime] = None
    flagged: Optional[bool] = None

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise TaskInputError("task name is required")

    def to_params(self) -> Dict[str, str]:
        """Script parameters for create_task; unset fields are omitted."""
        self.validate()
        params = {"Name": self.name.strip()}
        if self.note:
            params["Note"] = self.note
        if self.project_id:
            params["ProjectID"] = self.project_id
        if self.tag_names:
            params["Tags"] = ",".join(self.tag_names)
        if self.due_date is not None:
            params["DueDate"] = format_datetime(self.due_date)
        if self.defer_date is not None:
            params["DeferDate"] = format_datetime(self.defer_date)
        if self.flagged is not None:
            params["Flagged"] = _flag(self.flagged)
        return params


@dataclass
class TaskModification:
    """Changes to apply to an existing task. None means "leave unchanged"."""

    name: Optional[str] = None
    note: Optional[str] = None
    project_id: Optional[str] = None  # "" moves the task to the inbox
    add_tags: List[str] = field(default_factory=list)
    remove_tags: List[str] = field(default_factory=list)
    due_date: Optional[datetime] = None
    defer_date: Optional[datetime] = None
    flagged: Optional[bool] = None
    clear_due: bool = False
    clear_defer: bool = False

    def is_empty(self) -> bool:
        return (
            self.name is None
            and self.note is None
            and self.project_id is None
            and not self.add_tags
            and not self.remove_tags
            and self.due_date is None
            and self.defer_date is None
            and self.flagged is None
            and not self.clear_due
            and not self.clear_defer
        )

    def validate(self) -> None:
        if self.is_empty():
            raise TaskInputError("no modifications specified")
        if self.name is not None and not self.name.strip():
            raise TaskInputError("task name cannot be empty")
        if self.clear_due and self.due_date is not None:
            raise TaskInputError("cannot both set and clear the due date")
        if self.clear_defer and self.defer_date is not None:
            raise TaskInputError("cannot both set and clear the defer date")

    def to_params(self, task_id: str) -> Dict[str, str]:
        """Script parameters for modify_task; unchanged fields are omitted."""
        self.validate()
        params = {"TaskID": task_id}
        if self.name is not None:
            params["Name"] = self.name.strip()
        if self.note:
            params["Note"] = self.note
        if self.project_id is not None:
            params["ProjectID"] = self.project_id or CLEAR
        if self.add_tags:
            params["AddTags"] = ",".join(self.add_tags)
        if self.remove_tags:
            params["RemoveTags"] = ",".join(self.remove_tags)
        if self.clear_due:
            params["DueDate"] = CLEAR
        elif self.due_date is not None:
            params["DueDate"] = format_datetime(self.due_date)
        if self.clear_defer:
            params["DeferDate"] = CLEAR
        elif self.defer_date is not None:
            params["DeferDate"] = format_datetime(self.defer_date)
        if self.flagged is not None:
            params["Flagged"] = _flag(self.flagged)
        return params
