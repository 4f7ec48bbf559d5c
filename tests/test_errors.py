"""Tests for the error taxonomy."""

import errno

import pytest

from jdktools_mcp.cli.errors import (
    CLIError,
    ConfigurationError,
    LaunchError,
    ProcessTimeoutError,
)


class TestErrorHierarchy:
    """Tests for error kinds."""

    def test_all_share_base(self):
        """Test every kind derives from CLIError."""
        assert issubclass(ConfigurationError, CLIError)
        assert issubclass(LaunchError, CLIError)
        assert issubclass(ProcessTimeoutError, CLIError)

    def test_kinds_are_distinguishable(self):
        """Test kinds do not subclass each other."""
        assert not issubclass(LaunchError, ConfigurationError)
        assert not issubclass(ProcessTimeoutError, LaunchError)
        assert not issubclass(ConfigurationError, ProcessTimeoutError)

    def test_configuration_error_is_value_error(self):
        """Test configuration errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise ConfigurationError("bad")


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_to_dict(self):
        """Test conversion to dict."""
        assert ConfigurationError("Timeout duration cannot be negative").to_dict() == {
            "error": "Timeout duration cannot be negative",
            "kind": "configuration",
        }


class TestLaunchError:
    """Tests for LaunchError."""

    def test_attributes(self):
        """Test stored attributes."""
        os_error = FileNotFoundError(errno.ENOENT, "No such file", "jar")
        error = LaunchError("Failed to start jar process", "jar", ["jar", "--list"], os_error)

        assert error.tool_name == "jar"
        assert error.command == ["jar", "--list"]
        assert error.os_error is os_error

    def test_to_dict_with_errno(self):
        """Test errno is included when known."""
        os_error = PermissionError(errno.EACCES, "Permission denied")
        error = LaunchError("Failed to start jar process", "jar", ["jar"], os_error)

        result = error.to_dict()

        assert result["kind"] == "launch"
        assert result["tool"] == "jar"
        assert result["command"] == ["jar"]
        assert result["errno"] == errno.EACCES

    def test_to_dict_without_os_error(self):
        """Test errno is omitted without an OS error."""
        result = LaunchError("Failed", "jlink").to_dict()

        assert "errno" not in result
        assert result["command"] == []


class TestProcessTimeoutError:
    """Tests for ProcessTimeoutError."""

    def test_message(self):
        """Test message names tool and bound."""
        error = ProcessTimeoutError("jar", 30, "seconds")
        assert str(error) == "jar process timed out after 30 seconds"

    def test_to_dict(self):
        """Test conversion to dict."""
        result = ProcessTimeoutError("jlink", 500, "milliseconds", pid=123).to_dict()

        assert result == {
            "error": "jlink process timed out after 500 milliseconds",
            "kind": "timeout",
            "tool": "jlink",
            "timeout": 500,
            "unit": "milliseconds",
            "pid": 123,
        }

    def test_to_dict_without_pid(self):
        """Test pid is omitted when unknown."""
        assert "pid" not in ProcessTimeoutError("jar", 1, "seconds").to_dict()
