"""Tests for parameter validation."""

import pytest

from lazyfocus.bridge.errors import ErrorKind, ParameterValidationError
from lazyfocus.bridge.validation import (
    MAX_PARAM_LENGTH,
    ParamPolicy,
    policy_for,
    validate_identifier,
    validate_param,
    validate_text,
)


class TestPolicyInference:
    """Tests for policy_for."""

    @pytest.mark.parametrize("name", ["TaskID", "ProjectID", "tagid", "id"])
    def test_id_suffix_is_identifier(self, name):
        """Names ending in ID or id are identifiers."""
        assert policy_for(name) is ParamPolicy.IDENTIFIER

    @pytest.mark.parametrize("name", ["Name", "Note", "Status", "PerspectiveName", "Idea"])
    def test_other_names_are_text(self, name):
        """Everything else is free text."""
        assert policy_for(name) is ParamPolicy.TEXT


class TestValidateIdentifier:
    """Tests for identifier values."""

    @pytest.mark.parametrize("value", ["abc123", "a-b_c", "X", "jK7-_0"])
    def test_accepts_safe_ids(self, value):
        validate_identifier("TaskID", value)

    def test_length_boundary(self):
        """100 characters are accepted, 101 are rejected."""
        validate_identifier("TaskID", "a" * MAX_PARAM_LENGTH)

        with pytest.raises(ParameterValidationError) as exc_info:
            validate_identifier("TaskID", "a" * (MAX_PARAM_LENGTH + 1))
        assert "too long" in exc_info.value.message

    def test_rejects_empty(self):
        with pytest.raises(ParameterValidationError) as exc_info:
            validate_identifier("TaskID", "")
        assert "cannot be empty" in exc_info.value.message

    @pytest.mark.parametrize(
        "value",
        [
            "abc'; app.quit(); '",
            "abc def",
            "abc.def",
            'abc"',
            "abc\n",
            "ab$c",
            "tâche",
        ],
    )
    def test_rejects_anything_outside_safe_set(self, value):
        with pytest.raises(ParameterValidationError):
            validate_identifier("TaskID", value)

    def test_error_names_parameter(self):
        """The error identifies the offending parameter and has validation kind."""
        with pytest.raises(ParameterValidationError) as exc_info:
            validate_identifier("ProjectID", "bad id")

        error = exc_info.value
        assert error.param == "ProjectID"
        assert "ProjectID" in str(error)
        assert error.kind is ErrorKind.VALIDATION


class TestValidateText:
    """Tests for free-text values."""

    @pytest.mark.parametrize(
        "value",
        ["Buy milk", "Call Mom (re: trip)", "50% off, today!", "Café au lait", "a" * 100],
    )
    def test_accepts_ordinary_text(self, value):
        validate_text("Name", value)

    @pytest.mark.parametrize("char", [";", "|", "&", "$", "`", '"', "'", "\\"])
    def test_rejects_metacharacters(self, char):
        with pytest.raises(ParameterValidationError) as exc_info:
            validate_text("Name", f"buy{char}milk")
        assert exc_info.value.param == "Name"

    @pytest.mark.parametrize("char", ["\n", "\r", "\t", "\x00", "\x7f"])
    def test_rejects_control_characters(self, char):
        with pytest.raises(ParameterValidationError):
            validate_text("Note", f"line{char}two")

    def test_length_counts_characters(self):
        """Length is measured in characters, not bytes."""
        validate_text("Name", "é" * MAX_PARAM_LENGTH)
        with pytest.raises(ParameterValidationError):
            validate_text("Name", "é" * (MAX_PARAM_LENGTH + 1))


class TestValidateParam:
    """Tests for policy dispatch."""

    def test_inferred_identifier(self):
        with pytest.raises(ParameterValidationError):
            validate_param("TaskID", "has space")

    def test_inferred_text(self):
        validate_param("Name", "has space")

    def test_explicit_policy_overrides_name(self):
        """A declared policy wins over suffix inference."""
        validate_param("PerspectiveID", "Due Soon", ParamPolicy.TEXT)
        with pytest.raises(ParameterValidationError):
            validate_param("Status", "on hold", ParamPolicy.IDENTIFIER)

    @pytest.mark.parametrize("value", [None, 42, ["a"]])
    def test_rejects_non_strings(self, value):
        with pytest.raises(ParameterValidationError) as exc_info:
            validate_param("Name", value)
        assert "must be a string" in exc_info.value.message
