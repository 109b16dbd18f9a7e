"""Tests for lazyfocus.output."""

import json
from datetime import datetime, timezone

from lazyfocus.models import OperationResult, Project, Tag, Task
from lazyfocus.output import render, render_table


class TestRenderTable:
    """Tests for render_table."""

    def test_empty(self):
        assert render_table([]) == "(no rows)"

    def test_aligned_columns(self):
        lines = render_table([{"ID": "a", "Name": "Short"}, {"ID": "bbb", "Name": "x"}]).splitlines()
        assert lines[0] == "ID  | Name "
        assert lines[2] == "a   | Short"
        assert lines[3] == "bbb | x"


class TestRender:
    """Tests for render dispatch."""

    def test_json_list_uses_wire_format(self):
        task = Task(id="a", name="Milk", due_date=datetime(2027, 1, 1, tzinfo=timezone.utc))
        data = json.loads(render([task], "json"))
        assert data[0]["id"] == "a"
        assert data[0]["dueDate"] == "2027-01-01T00:00:00Z"

    def test_json_counts(self):
        assert json.loads(render({"Home": 2}, "json")) == {"Home": 2}

    def test_human_task_list(self):
        text = render([Task(id="a", name="Milk", flagged=True, tags=["errands"])])
        assert "Milk" in text
        assert "errands" in text

    def test_human_empty_list(self):
        assert render([], item_type=Task) == "No tasks found."
        assert render([], item_type=Project) == "No projects found."

    def test_human_task_detail(self):
        text = render(Task(id="a", name="Milk", note="2%"))
        assert text.startswith("Task: Milk")
        assert "Note: 2%" in text

    def test_human_tag_tree(self):
        tags = [Tag(id="t1", name="Work", children=[Tag(id="t2", name="Calls", parent_id="t1")])]
        assert render(tags) == "Work (t1)\n  Calls (t2)"

    def test_human_project_with_tasks(self):
        project = Project(id="p1", name="Home", tasks=[Task(id="a", name="Milk")])
        text = render(project)
        assert "Project: Home" in text
        assert "Milk" in text

    def test_human_result(self):
        assert render(OperationResult(success=True, id="a")) == "OK: a"
