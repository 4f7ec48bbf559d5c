"""Execution policy - working directory, environment and timeout settings.

Environment handling:
- inherit_environment=True: overlay is applied on top of os.environ
- inherit_environment=False: child sees only the overlay entries

A timeout of zero means the process runs unsupervised.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Final


class TimeUnit(str, Enum):
    """Units accepted for timeout durations."""

    NANOSECONDS = "nanoseconds"
    MICROSECONDS = "microseconds"
    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    def to_seconds(self, duration: int) -> float:
        """Convert a duration in this unit to seconds."""
        return duration * _SECONDS_PER_UNIT[self]


_SECONDS_PER_UNIT: Final[dict[TimeUnit, float]] = {
    TimeUnit.NANOSECONDS: 1e-9,
    TimeUnit.MICROSECONDS: 1e-6,
    TimeUnit.MILLISECONDS: 1e-3,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
    TimeUnit.DAYS: 86400.0,
}


@dataclass
class ExecutionPolicy:
    """How a tool process is spawned and supervised."""

    working_directory: str | None = None
    environment: dict[str, str] = field(default_factory=dict)
    inherit_environment: bool = True
    timeout: int = 0
    timeout_unit: TimeUnit = TimeUnit.SECONDS

    @property
    def is_supervised(self) -> bool:
        """Whether a watchdog should be armed for the process."""
        return self.timeout > 0

    @property
    def timeout_seconds(self) -> float:
        """Timeout converted to seconds (0.0 when unsupervised)."""
        return self.timeout_unit.to_seconds(self.timeout)

    def build_environment(self) -> dict[str, str]:
        """Build the environment mapping for the child process."""
        if self.inherit_environment:
            env = os.environ.copy()
            env.update(self.environment)
            return env
        return dict(self.environment)

    def copy(self) -> ExecutionPolicy:
        """Return an independent copy (the overlay is not shared)."""
        return ExecutionPolicy(
            working_directory=self.working_directory,
            environment=dict(self.environment),
            inherit_environment=self.inherit_environment,
            timeout=self.timeout,
            timeout_unit=self.timeout_unit,
        )
