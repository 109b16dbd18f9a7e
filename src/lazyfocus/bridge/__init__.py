"""Script execution bridge between LazyFocus and OmniFocus.

Renders parameterized automation scripts, runs them through osascript with
enforced timeouts, retries timeouts only, and parses the JSON printed on
stdout into typed payloads or classified errors.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

from lazyfocus.bridge.errors import (
    ApplicationError,
    BridgeError,
    ErrorKind,
    ExecutionCancelledError,
    ExecutionFailedError,
    ExecutionTimeoutError,
    InterpreterNotFoundError,
    MalformedResponseError,
    NotAvailableError,
    ParameterValidationError,
    TemplateMalformedError,
    TemplateNotFoundError,
)
from lazyfocus.bridge.executor import Executor, ScriptExecutor
from lazyfocus.bridge.parser import (
    NOT_RUNNING_MESSAGE,
    parse_operation_result,
    parse_project,
    parse_projects,
    parse_tag,
    parse_tag_counts,
    parse_tags,
    parse_task,
    parse_tasks,
)
from lazyfocus.bridge.retry import RetryingExecutor, RetryPolicy
from lazyfocus.bridge.scripts import (
    ScriptStore,
    ScriptTemplate,
    get_script,
    list_scripts,
    render_script,
)
from lazyfocus.bridge.validation import ParamPolicy, validate_param

__all__ = [
    "ErrorKind",
    "BridgeError",
    "ParameterValidationError",
    "TemplateNotFoundError",
    "TemplateMalformedError",
    "InterpreterNotFoundError",
    "ExecutionTimeoutError",
    "ExecutionFailedError",
    "ExecutionCancelledError",
    "NotAvailableError",
    "ApplicationError",
    "MalformedResponseError",
    "ParamPolicy",
    "validate_param",
    "ScriptTemplate",
    "ScriptStore",
    "get_script",
    "list_scripts",
    "render_script",
    "Executor",
    "ScriptExecutor",
    "RetryPolicy",
    "RetryingExecutor",
    "NOT_RUNNING_MESSAGE",
    "parse_tasks",
    "parse_task",
    "parse_projects",
    "parse_project",
    "parse_tags",
    "parse_tag",
    "parse_tag_counts",
    "parse_operation_result",
]
