"""JDK tool invocation exceptions."""

from __future__ import annotations

from typing import Any


class CLIError(Exception):
    """Base exception for JDK tool invocation errors."""

    pass


class ConfigurationError(CLIError, ValueError):
    """Raised when a builder is given an invalid or incomplete configuration.

    Always raised before any process is spawned.
    """

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"error": str(self), "kind": "configuration"}


class LaunchError(CLIError):
    """Raised when the operating system fails to create the tool process."""

    def __init__(
        self,
        message: str,
        tool_name: str,
        command: list[str] | None = None,
        os_error: OSError | None = None,
    ):
        super().__init__(message)
        self.tool_name = tool_name
        self.command = list(command or [])
        self.os_error = os_error

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "kind": "launch",
            "tool": self.tool_name,
            "command": self.command,
        }
        if self.os_error is not None and self.os_error.errno is not None:
            result["errno"] = self.os_error.errno
        return result


class ProcessTimeoutError(CLIError):
    """Raised when a tool process overran its deadline and was terminated."""

    def __init__(
        self,
        tool_name: str,
        duration: int,
        unit: str,
        pid: int | None = None,
    ):
        super().__init__(f"{tool_name} process timed out after {duration} {unit}")
        self.tool_name = tool_name
        self.duration = duration
        self.unit = unit
        self.pid = pid

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "kind": "timeout",
            "tool": self.tool_name,
            "timeout": self.duration,
            "unit": self.unit,
        }
        if self.pid is not None:
            result["pid"] = self.pid
        return result
