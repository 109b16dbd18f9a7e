# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
OmniFocus service - one call per supported operation.

Composes the bridge per operation:
script store -> renderer -> (retrying) executor -> response parser.
The operation name is the bundled script name.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from lazyfocus.bridge import parser
from lazyfocus.bridge.errors import ApplicationError, TemplateNotFoundError
from lazyfocus.bridge.executor import DEFAULT_TIMEOUT, Executor, ScriptExecutor
from lazyfocus.bridge.retry import RetryingExecutor
from lazyfocus.bridge.scripts import ScriptStore, default_store
from lazyfocus.models import (
    OperationResult,
    Project,
    Tag,
    Task,
    TaskInput,
    TaskModification,
    format_datetime,
)

logger = logging.getLogger(__name__)


# Operation name -> parser for the script's payload shape
OPERATIONS: Dict[str, Callable[..., Any]] = {
    "get_inbox_tasks": parser.parse_tasks,
    "get_all_tasks": parser.parse_tasks,
    "get_due_tasks": parser.parse_tasks,
    "get_tasks_by_project": parser.parse_tasks,
    "get_tasks_by_tag": parser.parse_tasks,
    "get_perspective_tasks": parser.parse_tasks,
    "get_task_by_id": parser.parse_task,
    "get_projects": parser.parse_projects,
    "get_project_by_id": parser.parse_project,
    "get_project_with_tasks": parser.parse_project,
    "get_tags": parser.parse_tags,
    "get_tag_by_id": parser.parse_tag,
    "get_tag_counts": parser.parse_tag_counts,
    "create_task": parser.parse_task,
    "modify_task": parser.parse_task,
    "complete_task": parser.parse_operation_result,
    "delete_task": parser.parse_operation_result,
}


@dataclass
class TaskFilters:
    """Filtering criteria for task queries.

    project_id / tag_id / due range select the script; flagged and
    completed are applied to the parsed list.
    """

    inbox: bool = False
    project_id: Optional[str] = None
    tag_id: Optional[str] = None
    flagged: bool = False
    completed: bool = False
    due_start: Optional[datetime] = None
    due_end: Optional[datetime] = None


class OmniFocusService:
    """High-level OmniFocus operations over an Executor."""

    def __init__(
        self,
        executor: Executor,
        timeout: float = DEFAULT_TIMEOUT,
        store: Optional[ScriptStore] = None,
        not_running_message: str = parser.NOT_RUNNING_MESSAGE,
    ):
        self.executor = executor
        self.timeout = timeout
        self.store = store
        self.not_running_message = not_running_message

    def _store(self) -> ScriptStore:
        if self.store is None:
            self.store = default_store()
        return self.store

    def run(
        self,
        operation: str,
        params: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Any:
        """
        Run one operation end to end.

        Args:
            operation: Operation (script) name, see OPERATIONS
            params: Placeholder values; validated before anything runs
            timeout: Per-attempt timeout; defaults to the service timeout
            cancel: Optional event that kills the running interpreter

        Returns:
            The parsed payload for the operation's shape

        Raises:
            BridgeError: Classified failure from any stage, unchanged
        """
        parse = OPERATIONS.get(operation)
        if parse is None:
            raise TemplateNotFoundError(operation)

        script = self._store().render(operation, params)
        timeout = self.timeout if timeout is None else timeout

        logger.debug(f"Running {operation} with params {sorted(params or {})}")
        output = self.executor.execute_with_timeout(script, timeout, cancel=cancel)
        return parse(output, not_running_message=self.not_running_message)

    # Tasks

    def get_inbox_tasks(self, cancel: Optional[threading.Event] = None) -> List[Task]:
        return self.run("get_inbox_tasks", cancel=cancel)

    def get_all_tasks(
        self,
        filters: Optional[TaskFilters] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[Task]:
        """Tasks matching ``filters``."""
        filters = filters or TaskFilters()

        if filters.inbox:
            tasks = self.get_inbox_tasks(cancel=cancel)
        elif filters.project_id:
            tasks = self.get_tasks_by_project(filters.project_id, cancel=cancel)
        elif filters.tag_id:
            tasks = self.get_tasks_by_tag(filters.tag_id, cancel=cancel)
        elif filters.due_start or filters.due_end:
            tasks = self.get_due_tasks(filters.due_start, filters.due_end, cancel=cancel)
        else:
            params = {}
            if filters.completed:
                params["ShowCompleted"] = "true"
            if filters.flagged:
                params["FlaggedOnly"] = "true"
            tasks = self.run("get_all_tasks", params, cancel=cancel)

        if filters.flagged:
            tasks = [t for t in tasks if t.flagged]
        if not filters.completed:
            tasks = [t for t in tasks if not t.completed]
        return tasks

    def get_flagged_tasks(self, cancel: Optional[threading.Event] = None) -> List[Task]:
        return self.run("get_all_tasks", {"FlaggedOnly": "true"}, cancel=cancel)

    def get_due_tasks(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[Task]:
        """Incomplete tasks due within [start, end]; open-ended if None."""
        params = {}
        if start is not None:
            params["DueStart"] = format_datetime(start)
        if end is not None:
            params["DueEnd"] = format_datetime(end)
        return self.run("get_due_tasks", params, cancel=cancel)

    def get_tasks_by_project(
        self, project_id: str, cancel: Optional[threading.Event] = None
    ) -> List[Task]:
        return self.run("get_tasks_by_project", {"ProjectID": project_id}, cancel=cancel)

    def get_tasks_by_tag(self, tag_id: str, cancel: Optional[threading.Event] = None) -> List[Task]:
        return self.run("get_tasks_by_tag", {"TagID": tag_id}, cancel=cancel)

    def get_perspective_tasks(
        self, name: str, cancel: Optional[threading.Event] = None
    ) -> List[Task]:
        return self.run("get_perspective_tasks", {"PerspectiveName": name}, cancel=cancel)

    def get_task_by_id(self, task_id: str, cancel: Optional[threading.Event] = None) -> Task:
        """A single task; a missing payload is reported as not found."""
        task = self.run("get_task_by_id", {"TaskID": task_id}, cancel=cancel)
        if task is None:
            raise ApplicationError(f"Task not found: {task_id}")
        return task

    def create_task(self, task_input: TaskInput, cancel: Optional[threading.Event] = None) -> Task:
        """Create a task.

        Raises:
            TaskInputError: If the input is invalid.
            BridgeError: If the bridge fails.
        """
        task = self.run("create_task", task_input.to_params(), cancel=cancel)
        if task is None:
            raise ApplicationError("create_task returned no task")
        return task

    def modify_task(
        self,
        task_id: str,
        modification: TaskModification,
        cancel: Optional[threading.Event] = None,
    ) -> Task:
        """Apply ``modification`` to a task and return the updated task."""
        task = self.run("modify_task", modification.to_params(task_id), cancel=cancel)
        if task is None:
            raise ApplicationError(f"Task not found: {task_id}")
        return task

    def complete_task(
        self, task_id: str, cancel: Optional[threading.Event] = None
    ) -> OperationResult:
        return self.run("complete_task", {"TaskID": task_id}, cancel=cancel)

    def delete_task(self, task_id: str, cancel: Optional[threading.Event] = None) -> OperationResult:
        return self.run("delete_task", {"TaskID": task_id}, cancel=cancel)

    # Projects

    def get_projects(
        self, status: str = "active", cancel: Optional[threading.Event] = None
    ) -> List[Project]:
        """Projects with ``status`` (active, on-hold, completed, dropped or all)."""
        return self.run("get_projects", {"Status": status}, cancel=cancel)

    def get_project_by_id(
        self, project_id: str, cancel: Optional[threading.Event] = None
    ) -> Project:
        project = self.run("get_project_by_id", {"ProjectID": project_id}, cancel=cancel)
        if project is None:
            raise ApplicationError(f"Project not found: {project_id}")
        return project

    def get_project_with_tasks(
        self, project_id: str, cancel: Optional[threading.Event] = None
    ) -> Project:
        project = self.run("get_project_with_tasks", {"ProjectID": project_id}, cancel=cancel)
        if project is None:
            raise ApplicationError(f"Project not found: {project_id}")
        return project

    def resolve_project(
        self, name_or_id: str, cancel: Optional[threading.Event] = None
    ) -> Project:
        """Find a project by exact ID, then by case-insensitive name."""
        projects = self.get_projects("all", cancel=cancel)
        for project in projects:
            if project.id == name_or_id:
                return project
        wanted = name_or_id.casefold()
        for project in projects:
            if project.name.casefold() == wanted:
                logger.debug(f"Resolved project '{name_or_id}' to {project.id}")
                return project
        raise ApplicationError(f"Project not found: {name_or_id}")

    # Tags

    def get_tags(self, flat: bool = False, cancel: Optional[threading.Event] = None) -> List[Tag]:
        params = {"Flat": "true"} if flat else None
        return self.run("get_tags", params, cancel=cancel)

    def get_tag_by_id(self, tag_id: str, cancel: Optional[threading.Event] = None) -> Tag:
        tag = self.run("get_tag_by_id", {"TagID": tag_id}, cancel=cancel)
        if tag is None:
            raise ApplicationError(f"Tag not found: {tag_id}")
        return tag

    def get_tag_counts(self, cancel: Optional[threading.Event] = None) -> Dict[str, int]:
        return self.run("get_tag_counts", cancel=cancel)


def build_service(config) -> OmniFocusService:
    """Build the real osascript-backed service from a Config."""
    executor = RetryingExecutor(
        ScriptExecutor(
            interpreter=config.interpreter,
            interpreter_args=config.interpreter_args,
            timeout=config.timeout,
        ),
        policy=config.retry,
        timeout=config.timeout,
    )
    return OmniFocusService(
        executor,
        timeout=config.timeout,
        not_running_message=config.not_running_message,
    )
