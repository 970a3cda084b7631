"""Tests for custom exception classes."""

import pytest

from scriptforge.exceptions import (
    ConfigurationError,
    NormsError,
    ScriptForgeError,
    ScriptForgeFileNotFoundError,
    ToolInputError,
    check_config_keys,
)


class TestScriptForgeError:
    """Test the base exception formatting."""

    def test_message_only(self):
        """A bare message is prefixed with Error."""
        error = ScriptForgeError("Something broke")
        assert str(error) == "Error: Something broke"
        assert error.hint is None
        assert error.details is None

    def test_hint_and_details(self):
        """Hints and details are appended on their own lines."""
        error = ScriptForgeError(
            message="Bad file",
            hint="Check the path",
            details={"file": "draft.fountain", "size": 0},
        )
        assert str(error) == (
            "Error: Bad file\n"
            "Hint: Check the path\n"
            "Details:\n"
            "  file: draft.fountain\n"
            "  size: 0"
        )

    @pytest.mark.parametrize(
        "error_class",
        [ConfigurationError, NormsError, ScriptForgeFileNotFoundError],
    )
    def test_subclasses(self, error_class):
        """Every domain error is a ScriptForgeError."""
        error = error_class(message="oops", hint="fix it")
        assert isinstance(error, ScriptForgeError)
        assert error.message == "oops"
        assert "Hint: fix it" in str(error)


class TestToolInputError:
    """Test ToolInputError."""

    def test_errors_in_hint(self):
        """Validation messages are joined into the hint."""
        error = ToolInputError("read_act", ["actNumber: Field required", "x: bad"])
        assert error.tool == "read_act"
        assert error.errors == ["actNumber: Field required", "x: bad"]
        assert error.message == "Invalid input for read_act"
        assert error.hint == "actNumber: Field required; x: bad"
        assert error.details == {"tool": "read_act"}

    def test_no_errors(self):
        """An empty error list leaves the hint unset."""
        assert ToolInputError("read_act", []).hint is None


class TestCheckConfigKeys:
    """Test configuration key validation."""

    def test_valid_config(self):
        """Correct keys pass."""
        check_config_keys({"lines_per_page": 55, "norms_file": "norms.yaml"})
        check_config_keys({})

    @pytest.mark.parametrize(
        ("wrong", "correct"),
        [
            ("page_lines", "lines_per_page"),
            ("acts", "heuristic_act_count"),
            ("norms", "norms_file"),
            ("tripod_norms", "norms_file"),
        ],
    )
    def test_invalid_key(self, wrong, correct):
        """Common mistakes name the right key."""
        with pytest.raises(ConfigurationError) as exc_info:
            check_config_keys({wrong: 1})
        error = exc_info.value
        assert error.message == f"Invalid configuration key '{wrong}'"
        assert error.hint == f"Use '{correct}' instead of '{wrong}'"
        assert error.details["correct_key"] == correct

    def test_multiple_invalid_keys_stops_at_first(self):
        """Only the first mistake is reported."""
        with pytest.raises(ConfigurationError) as exc_info:
            check_config_keys({"page_lines": 50, "acts": 3})
        assert exc_info.value.details["invalid_key"] == "page_lines"
        assert exc_info.value.details["found_keys"] == ["page_lines", "acts"]
