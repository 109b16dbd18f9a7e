"""Tests for the process executor.

Runs real child processes through the current Python interpreter, so no
osascript is needed.
"""

import subprocess
import sys
import threading
import time

import pytest

from lazyfocus.bridge.errors import (
    ErrorKind,
    ExecutionCancelledError,
    ExecutionFailedError,
    ExecutionTimeoutError,
    InterpreterNotFoundError,
    MalformedResponseError,
)
from lazyfocus.bridge.executor import (
    DEFAULT_INTERPRETER,
    DEFAULT_INTERPRETER_ARGS,
    Executor,
    ScriptExecutor,
)
from lazyfocus.bridge.parser import parse_tasks


@pytest.fixture
def python_executor():
    return ScriptExecutor(interpreter=sys.executable, interpreter_args=("-c",), timeout=10.0)


class TestScriptExecutor:
    """Tests for ScriptExecutor."""

    def test_defaults_invoke_osascript_javascript(self):
        executor = ScriptExecutor()
        assert executor.interpreter == DEFAULT_INTERPRETER == "osascript"
        assert executor.interpreter_args == DEFAULT_INTERPRETER_ARGS == ("-l", "JavaScript", "-e")

    def test_satisfies_executor_protocol(self, python_executor):
        assert isinstance(python_executor, Executor)

    def test_returns_stdout(self, python_executor):
        output = python_executor.execute("print('{\"tasks\": []}')")
        assert output.strip() == '{"tasks": []}'

    def test_script_passed_as_single_argument(self, python_executor):
        script = "import sys; print(len(sys.argv))"
        # python -c <script>: argv is ['-c'], nothing leaks past the script
        assert python_executor.execute_with_timeout(script, 5.0).strip() == "1"

    def test_nonzero_exit(self, python_executor):
        script = "import sys; sys.stderr.write('boom'); sys.exit(3)"
        with pytest.raises(ExecutionFailedError) as exc_info:
            python_executor.execute_with_timeout(script, 5.0)

        error = exc_info.value
        assert error.kind is ErrorKind.EXECUTION_FAILED
        assert error.returncode == 3
        assert "boom" in error.stderr
        assert "boom" in error.message

    def test_invalid_utf8_stdout_is_replaced(self, python_executor):
        script = "import sys; sys.stdout.buffer.write(b'\\xff\\xfe{}')"
        output = python_executor.execute_with_timeout(script, 5.0)
        assert output == "\ufffd\ufffd{}"

    def test_invalid_utf8_stdout_fails_parsing(self, python_executor):
        script = "import sys; sys.stdout.buffer.write(b'\\xff')"
        output = python_executor.execute_with_timeout(script, 5.0)
        with pytest.raises(MalformedResponseError):
            parse_tasks(output)

    def test_invalid_utf8_stderr_on_failure(self, python_executor):
        script = "import sys; sys.stderr.buffer.write(b'bad \\xff'); sys.stderr.flush(); sys.exit(1)"
        with pytest.raises(ExecutionFailedError) as exc_info:
            python_executor.execute_with_timeout(script, 5.0)
        assert exc_info.value.returncode == 1
        assert "bad \ufffd" in exc_info.value.stderr

    def test_missing_interpreter(self):
        executor = ScriptExecutor(interpreter="lazyfocus-no-such-interpreter")
        with pytest.raises(InterpreterNotFoundError) as exc_info:
            executor.execute_with_timeout("1", 1.0)
        assert exc_info.value.kind is ErrorKind.INTERPRETER_NOT_FOUND
        assert "lazyfocus-no-such-interpreter" in exc_info.value.message

    def test_other_spawn_errors_are_execution_failures(self, monkeypatch, python_executor):
        def raise_oserror(*args, **kwargs):
            raise OSError("too many open files")

        monkeypatch.setattr(subprocess, "Popen", raise_oserror)
        with pytest.raises(ExecutionFailedError) as exc_info:
            python_executor.execute_with_timeout("1", 1.0)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_timeout_kills_process(self, python_executor):
        """A 3s sleep with a 100ms deadline times out promptly."""
        start = time.monotonic()
        with pytest.raises(ExecutionTimeoutError) as exc_info:
            python_executor.execute_with_timeout("import time; time.sleep(3)", 0.1)
        elapsed = time.monotonic() - start

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert exc_info.value.timeout == 0.1
        assert elapsed < 2.0

    def test_cancel_before_start(self, python_executor):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ExecutionCancelledError):
            python_executor.execute_with_timeout("print(1)", 5.0, cancel=cancel)

    def test_cancel_while_running(self, python_executor):
        cancel = threading.Event()
        timer = threading.Timer(0.2, cancel.set)
        timer.start()
        start = time.monotonic()
        try:
            with pytest.raises(ExecutionCancelledError) as exc_info:
                python_executor.execute_with_timeout("import time; time.sleep(5)", 10.0, cancel=cancel)
        finally:
            timer.cancel()

        assert exc_info.value.kind is ErrorKind.CANCELLED
        assert time.monotonic() - start < 3.0

    def test_cancel_event_not_set_completes(self, python_executor):
        cancel = threading.Event()
        output = python_executor.execute_with_timeout("print('done')", 5.0, cancel=cancel)
        assert output.strip() == "done"

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_rejects_non_positive_timeout(self, python_executor, timeout):
        with pytest.raises(ValueError):
            python_executor.execute_with_timeout("print(1)", timeout)

    def test_constructor_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            ScriptExecutor(timeout=0)

    def test_concurrent_calls_are_independent(self, python_executor):
        results = {}

        def run(n):
            results[n] = python_executor.execute_with_timeout(f"print({n})", 5.0).strip()

        threads = [threading.Thread(target=run, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == {n: str(n) for n in range(4)}
