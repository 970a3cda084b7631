"""Custom exception hierarchy for ScriptForge with helpful error messages.

The document engine itself never raises for malformed screenplays or missing
scenes; these exceptions cover configuration, reference data, and the
command-line edge where files are read and written.
"""

from __future__ import annotations

from typing import Any


class ScriptForgeError(Exception):
    """Base exception with helpful formatting for all ScriptForge errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class ConfigurationError(ScriptForgeError):
    """Configuration errors including invalid settings and missing config files."""

    pass


class NormsError(ScriptForgeError):
    """Turning-point reference data that is missing or malformed."""

    pass


class ToolInputError(ScriptForgeError):
    """Tool input that failed validation.

    Raised inside the tool layer and converted to a plain text result before
    it reaches the caller.
    """

    def __init__(self, tool: str, errors: list[str]) -> None:
        """Initialize with the tool name and the individual validation errors.

        Args:
            tool: Name of the tool whose input was rejected
            errors: Human readable validation messages
        """
        self.tool = tool
        self.errors = errors
        super().__init__(
            message=f"Invalid input for {tool}",
            hint="; ".join(errors) if errors else None,
            details={"tool": tool},
        )


class ScriptForgeFileNotFoundError(ScriptForgeError):
    """File not found errors with helpful path information."""

    pass


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "page_lines": "lines_per_page",
        "acts": "heuristic_act_count",
        "norms": "norms_file",
        "tripod_norms": "norms_file",
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
