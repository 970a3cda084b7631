"""JSON output formatter for CLI."""

from __future__ import annotations

import json
from typing import Any


class JsonFormatter:
    """Generic JSON formatter for CLI output."""

    def format(self, data: Any) -> str:
        """Format data as JSON.

        Args:
            data: Data to format

        Returns:
            JSON string
        """
        if hasattr(data, "model_dump"):
            # Pydantic models
            return json.dumps(data.model_dump(mode="json"), default=str, indent=2)
        if hasattr(data, "to_dict"):
            return json.dumps(data.to_dict(), default=str, indent=2)
        if isinstance(data, dict | list | tuple):
            return json.dumps(data, default=str, indent=2)
        return json.dumps({"value": data}, default=str, indent=2)

    def format_error_response(self, error: str | Exception, code: int = 1) -> str:
        """Format an error response.

        Args:
            error: Error message or exception
            code: Error code

        Returns:
            JSON string
        """
        error_msg = getattr(error, "message", None) or str(error)
        response = {"success": False, "error": error_msg, "code": code}
        return json.dumps(response, indent=2)
