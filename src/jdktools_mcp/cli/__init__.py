"""Typed builders for invoking JDK packaging tools.

Provides:
- Fluent option accumulation with eager validation
- Deterministic command assembly (executable, mode, options, trailing entries)
- Process launch with working-directory and environment policy
- Timeout watchdog that terminates overrunning processes
"""

from .builder import CLIBuilder
from .errors import CLIError, ConfigurationError, LaunchError, ProcessTimeoutError
from .jar import JarCLIBuilder, OperationMode
from .jlink import JlinkCLIBuilder
from .policy import ExecutionPolicy, TimeUnit
from .process import (
    ProcessHandle,
    ProcessResult,
    Watchdog,
    WatchdogState,
    launch_process,
    start_supervised,
)

__all__ = [
    "CLIBuilder",
    "JarCLIBuilder",
    "JlinkCLIBuilder",
    "OperationMode",
    "ExecutionPolicy",
    "TimeUnit",
    "ProcessHandle",
    "ProcessResult",
    "Watchdog",
    "WatchdogState",
    "launch_process",
    "start_supervised",
    "CLIError",
    "ConfigurationError",
    "LaunchError",
    "ProcessTimeoutError",
]
