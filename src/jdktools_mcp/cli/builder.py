"""Fluent builder base shared by all JDK tool builders.

A builder accumulates two ordered token sequences:
- general options, appended by option setters in call order
- trailing entries (files, -C markers), which must follow all options

build_command() concatenates, in this fixed order: executable path, mode
token (if the tool has one), general options, trailing entries.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Iterable
from typing import ClassVar, TypeVar, Union

from ..utils.platform import Platform
from .errors import ConfigurationError
from .policy import ExecutionPolicy, TimeUnit
from .process import DEFAULT_GRACE_PERIOD, ProcessHandle, ProcessResult, start_supervised

logger = logging.getLogger(__name__)

StrPath = Union[str, "os.PathLike[str]"]

B = TypeVar("B", bound="CLIBuilder")


class CLIBuilder:
    """Base class for tool builders.

    Setters validate eagerly and raise ConfigurationError without touching
    accumulated state. run() may be called more than once; each call spawns
    an independent process from the same accumulated state.
    """

    TOOL_NAME: ClassVar[str] = ""

    def __init__(
        self,
        executable: StrPath,
        platform: Platform | None = None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ):
        """Initialize builder.

        Args:
            executable: Resolved path to the tool executable
            platform: Platform used for path-list separators (host if not given)
            grace_period: Seconds between terminate and kill on timeout
        """
        self._executable = self._fspath(executable, "Executable path")
        self._platform = platform or Platform.current()
        self._grace_period = grace_period
        self._arguments: list[str] = []
        self._trailing: list[str] = []
        self._policy = ExecutionPolicy()

    @property
    def tool_name(self) -> str:
        return self.TOOL_NAME

    @property
    def executable(self) -> str:
        return self._executable

    @property
    def platform(self) -> Platform:
        return self._platform

    @property
    def arguments(self) -> tuple[str, ...]:
        """General option tokens in insertion order."""
        return tuple(self._arguments)

    @property
    def trailing_entries(self) -> tuple[str, ...]:
        """Trailing entry tokens in insertion order."""
        return tuple(self._trailing)

    @property
    def policy(self) -> ExecutionPolicy:
        """Snapshot of the execution policy."""
        return self._policy.copy()

    # ============== Generic options ==============

    def add_argument(self: B, arg: str) -> B:
        """Add a raw argument token to the general options."""
        self._arguments.append(self._require_str(arg, "Argument"))
        return self

    def set_working_directory(self: B, path: StrPath | None) -> B:
        """Set the working directory. None restores the caller's directory."""
        self._policy.working_directory = (
            None if path is None else self._fspath(path, "Working directory")
        )
        return self

    def set_environment_variable(self: B, key: str, value: str) -> B:
        """Set an environment variable for the child process."""
        key = self._require_str(key, "Environment variable key")
        value = self._require_str(value, "Environment variable value")
        if not key:
            raise ConfigurationError("Environment variable key cannot be empty")
        if "=" in key:
            raise ConfigurationError(f"Environment variable key cannot contain '=': {key!r}")
        self._policy.environment[key] = value
        return self

    def use_system_environment_variables(self: B, use_system_vars: bool) -> B:
        """Choose whether the overlay merges with or replaces os.environ."""
        self._policy.inherit_environment = bool(use_system_vars)
        return self

    def set_timeout(self: B, duration: int, unit: TimeUnit = TimeUnit.SECONDS) -> B:
        """Set the execution deadline. Zero disables supervision."""
        if isinstance(duration, bool) or not isinstance(duration, int):
            raise ConfigurationError(f"Timeout duration must be an integer: {duration!r}")
        if duration < 0:
            raise ConfigurationError("Timeout duration cannot be negative")
        if not isinstance(unit, TimeUnit):
            raise ConfigurationError(f"Invalid time unit: {unit!r}")
        self._policy.timeout = duration
        self._policy.timeout_unit = unit
        return self

    # ============== Helpers for subclasses ==============

    @staticmethod
    def _require(value: object, what: str) -> None:
        if value is None:
            raise ConfigurationError(f"{what} cannot be None")

    @staticmethod
    def _check_text(value: str, what: str) -> str:
        # The OS cannot pass NUL inside an argument or environment entry
        if "\0" in value:
            raise ConfigurationError(f"{what} cannot contain a NUL character: {value!r}")
        return value

    @classmethod
    def _require_str(cls, value: object, what: str) -> str:
        cls._require(value, what)
        if not isinstance(value, str):
            raise ConfigurationError(f"{what} must be a string: {value!r}")
        return cls._check_text(value, what)

    @classmethod
    def _fspath(cls, value: object, what: str) -> str:
        """Normalize a str or path-like value to the same string token."""
        cls._require(value, what)
        if not isinstance(value, (str, os.PathLike)):
            raise ConfigurationError(f"{what} must be a string or path: {value!r}")
        result = os.fspath(value)
        if not isinstance(result, str):
            raise ConfigurationError(f"{what} must be a text path: {value!r}")
        return cls._check_text(result, what)

    @classmethod
    def _join(
        cls,
        values: Iterable[object] | None,
        separator: str,
        what: str,
        allow_empty: bool = False,
        paths: bool = False,
    ) -> str:
        """Validate every element of a multi-value option and join them."""
        cls._require(values, what)
        items = [
            cls._fspath(value, what) if paths else cls._require_str(value, what)
            for value in values  # type: ignore[union-attr]
        ]
        if not items and not allow_empty:
            raise ConfigurationError(f"{what} cannot be empty")
        return separator.join(items)

    def _append(self: B, token: str) -> B:
        self._arguments.append(token)
        return self

    def _append_trailing(self: B, token: str) -> B:
        self._trailing.append(token)
        return self

    def _mode_token(self) -> str | None:
        """Mode token placed right after the executable (None if modeless).

        Raises:
            ConfigurationError: If the tool requires a mode and none is valid
        """
        return None

    # ============== Assembly and execution ==============

    def build_command(self) -> list[str]:
        """Assemble the argument vector.

        Raises:
            ConfigurationError: If the configuration cannot be run
        """
        command = [self._executable]
        mode = self._mode_token()
        if mode is not None:
            command.append(mode)
        command.extend(self._arguments)
        command.extend(self._trailing)
        return command

    async def run(self) -> ProcessHandle:
        """Spawn the tool and return its handle without waiting for exit.

        Raises:
            ConfigurationError: If the configuration is invalid (nothing spawned)
            LaunchError: If the process could not be created
        """
        command = self.build_command()
        return await start_supervised(
            command,
            self._policy.copy(),
            self.tool_name,
            grace_period=self._grace_period,
        )

    async def execute(self, input: bytes | None = None) -> ProcessResult:
        """Run the tool to completion and collect its output.

        Raises:
            ConfigurationError, LaunchError, ProcessTimeoutError
        """
        start_time = time.perf_counter()
        handle = await self.run()
        stdout, stderr = await handle.communicate(input)
        duration = (time.perf_counter() - start_time) * 1000
        exit_code = handle.returncode if handle.returncode is not None else -1
        if exit_code != 0:
            logger.info(f"{self.tool_name} exited with code {exit_code}")
        return ProcessResult(
            tool_name=self.tool_name,
            command=handle.command,
            exit_code=exit_code,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            duration_ms=duration,
        )
