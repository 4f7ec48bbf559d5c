"""Process launching and timeout supervision.

Watchdog state machine:
IDLE → ARMED → COMPLETED | TIMED_OUT

IDLE is only left when a positive timeout is configured. While ARMED, one
supervisory task races the child's exit against the deadline. The
transition out of ARMED happens exactly once, and termination is always
issued before TIMED_OUT becomes observable.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import LaunchError, ProcessTimeoutError
from .policy import ExecutionPolicy, TimeUnit

logger = logging.getLogger(__name__)

# Time allowed between terminate() and kill()
DEFAULT_GRACE_PERIOD: float = 2.0

# Output kept per stream when collected by the handle
MAX_OUTPUT_BYTES: int = 5_000_000  # 5MB per stream, oldest lines dropped first
MAX_OUTPUT_LINE: int = 10_000  # 10KB per line

_READ_CHUNK_SIZE: int = 64 * 1024
_TRUNCATED_MARKER: bytes = b"...[truncated]\n"


class WatchdogState(str, Enum):
    """Timeout watchdog states."""

    IDLE = "idle"
    ARMED = "armed"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"


class Watchdog:
    """Supervises a single process against a deadline.

    Holds a non-owning reference to the process: it only signals it. Reaping
    goes through the normal asyncio path whichever side ends the process.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        tool_name: str,
        duration: int,
        unit: TimeUnit = TimeUnit.SECONDS,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ):
        self._process = process
        self._tool_name = tool_name
        self._duration = duration
        self._unit = unit
        self._grace_period = grace_period
        self._state = WatchdogState.IDLE
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> WatchdogState:
        """Current watchdog state."""
        return self._state

    @property
    def is_armed(self) -> bool:
        """Whether supervision is still in progress."""
        return self._state == WatchdogState.ARMED

    def arm(self) -> None:
        """Start supervision. A zero duration leaves the watchdog IDLE."""
        if self._state != WatchdogState.IDLE:
            raise RuntimeError("Watchdog can only be armed once")
        if self._duration <= 0:
            return
        self._state = WatchdogState.ARMED
        self._task = asyncio.get_running_loop().create_task(
            self._supervise(), name=f"{self._tool_name}-watchdog-{self._process.pid}"
        )

    async def wait(self) -> WatchdogState:
        """Wait for supervision to finish and return the final state."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self._state

    def timeout_error(self) -> ProcessTimeoutError:
        """Build the timeout error for this watchdog's process."""
        return ProcessTimeoutError(
            self._tool_name, self._duration, self._unit.value, self._process.pid
        )

    def _finish(self, state: WatchdogState) -> None:
        """Leave ARMED exactly once."""
        if self._state != WatchdogState.ARMED:
            return
        self._state = state
        logger.debug(f"{self._tool_name} watchdog: armed -> {state.value}")

    async def _supervise(self) -> None:
        timeout = self._unit.to_seconds(self._duration)
        try:
            await asyncio.wait_for(self._process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            # Exit observed right at the deadline counts as completion
            if self._process.returncode is not None:
                self._finish(WatchdogState.COMPLETED)
                return
            logger.warning(
                f"{self._tool_name} process {self._process.pid} timed out after "
                f"{self._duration} {self._unit.value}, terminating"
            )
            if await self._terminate() and self._ended_by_signal():
                self._finish(WatchdogState.TIMED_OUT)
            else:
                self._finish(WatchdogState.COMPLETED)
            return
        self._finish(WatchdogState.COMPLETED)

    def _ended_by_signal(self) -> bool:
        """Whether the reaped exit status comes from terminate() or kill().

        A child that had already exited when terminate() was sent keeps its
        own status and counts as completed.
        """
        if sys.platform == "win32":
            # TerminateProcess leaves no distinguishable status
            return True
        # 128 + SIGTERM is the JVM's exit status after its shutdown hooks run
        return self._process.returncode in (
            -signal.SIGTERM,
            -signal.SIGKILL,
            128 + signal.SIGTERM,
        )

    async def _terminate(self) -> bool:
        """Terminate the process, escalating to kill after the grace period.

        Returns:
            False if the process was already gone when signalled
        """
        try:
            self._process.terminate()
        except ProcessLookupError:
            return False

        try:
            await asyncio.wait_for(self._process.wait(), timeout=self._grace_period)
        except asyncio.TimeoutError:
            logger.warning(
                f"{self._tool_name} process {self._process.pid} ignored terminate, killing"
            )
            try:
                self._process.kill()
            except ProcessLookupError:
                pass
            await self._process.wait()
        return True


async def read_stream(
    stream: asyncio.StreamReader | None,
    max_bytes: int = MAX_OUTPUT_BYTES,
    max_line: int = MAX_OUTPUT_LINE,
) -> bytes:
    """Read a stream to EOF, keeping at most max_bytes of its latest lines.

    Lines longer than max_line are cut and marked as truncated.
    """
    if stream is None:
        return b""

    lines: deque[bytes] = deque()
    total = 0
    pending = b""
    skipping = False

    def keep(line: bytes) -> None:
        nonlocal total
        if len(line) > max_line:
            line = line[:max_line] + _TRUNCATED_MARKER
        lines.append(line)
        total += len(line)
        # Drop old lines if buffer too large
        while total > max_bytes and lines:
            total -= len(lines.popleft())

    while True:
        chunk = await stream.read(_READ_CHUNK_SIZE)
        if not chunk:
            break
        pending += chunk
        *complete, pending = pending.split(b"\n")
        for line in complete:
            if skipping:
                # Rest of a line that was already cut
                skipping = False
                continue
            keep(line + b"\n")
        if skipping:
            pending = b""
        elif len(pending) > max_line:
            keep(pending)
            pending = b""
            skipping = True

    if pending and not skipping:
        keep(pending)
    return b"".join(lines)


async def discard_stream(stream: asyncio.StreamReader | None) -> None:
    """Read a stream to EOF without keeping anything."""
    if stream is None:
        return
    while await stream.read(_READ_CHUNK_SIZE):
        pass


class ProcessHandle:
    """Caller-owned handle to a spawned tool process.

    The standard streams are exposed unmodified for callers that read them
    directly. wait() discards whatever output is still unread and
    communicate() collects it, so a child is never blocked on a full pipe
    once either is awaited. Both raise ProcessTimeoutError if the watchdog
    had to terminate the process.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        command: list[str],
        tool_name: str,
        watchdog: Watchdog,
    ):
        self._process = process
        self._command = list(command)
        self._tool_name = tool_name
        self._watchdog = watchdog

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def stdin(self) -> asyncio.StreamWriter | None:
        return self._process.stdin

    @property
    def stdout(self) -> asyncio.StreamReader | None:
        return self._process.stdout

    @property
    def stderr(self) -> asyncio.StreamReader | None:
        return self._process.stderr

    @property
    def command(self) -> list[str]:
        """The argument vector the process was started with."""
        return list(self._command)

    @property
    def tool_name(self) -> str:
        return self._tool_name

    @property
    def watchdog_state(self) -> WatchdogState:
        return self._watchdog.state

    @property
    def timed_out(self) -> bool:
        """Whether the watchdog terminated the process."""
        return self._watchdog.state == WatchdogState.TIMED_OUT

    async def wait(self) -> int:
        """Wait for the process to exit, discarding unread output.

        Returns:
            Natural exit code

        Raises:
            ProcessTimeoutError: If the deadline elapsed first
        """
        _, _, returncode = await asyncio.gather(
            discard_stream(self._process.stdout),
            discard_stream(self._process.stderr),
            self._process.wait(),
        )
        await self._check_timeout()
        return returncode

    async def communicate(self, input: bytes | None = None) -> tuple[bytes, bytes]:
        """Send input, read stdout/stderr until EOF and wait for exit.

        Each stream keeps at most MAX_OUTPUT_BYTES of its latest output.

        Raises:
            ProcessTimeoutError: If the deadline elapsed first
        """
        stdout, stderr, _, _ = await asyncio.gather(
            read_stream(self._process.stdout),
            read_stream(self._process.stderr),
            self._feed_stdin(input),
            self._process.wait(),
        )
        await self._check_timeout()
        return stdout, stderr

    def terminate(self) -> None:
        self._process.terminate()

    def kill(self) -> None:
        self._process.kill()

    async def _feed_stdin(self, input: bytes | None) -> None:
        stdin = self._process.stdin
        if stdin is None:
            return
        try:
            if input:
                stdin.write(input)
                await stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            # Child exited without reading all of its input
            logger.debug(f"{self._tool_name} stdin closed early: {e}")
        finally:
            stdin.close()

    async def _check_timeout(self) -> None:
        if await self._watchdog.wait() == WatchdogState.TIMED_OUT:
            raise self._watchdog.timeout_error()


@dataclass
class ProcessResult:
    """Collected outcome of a completed tool invocation."""

    tool_name: str
    command: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "tool": self.tool_name,
            "command": self.command,
            "exitCode": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "durationMs": round(self.duration_ms, 2),
        }

    def to_summary(self) -> str:
        """Generate human-readable summary."""
        status = f"[OK] {self.tool_name} succeeded" if self.success else (
            f"[FAILED] {self.tool_name} exited with {self.exit_code}"
        )
        parts = [
            status,
            f"  Command: {' '.join(self.command)}",
            f"  Duration: {self.duration_ms:.0f}ms",
        ]
        if not self.success and self.stderr.strip():
            parts.append(f"  stderr: {self.stderr.strip().splitlines()[-1]}")
        return "\n".join(parts)


async def launch_process(
    command: list[str],
    policy: ExecutionPolicy,
    tool_name: str,
) -> asyncio.subprocess.Process:
    """Spawn a process from an assembled argument vector.

    Args:
        command: Executable path followed by its arguments
        policy: Working directory and environment policy
        tool_name: Tool name for logging and error messages

    Returns:
        The live process, before it necessarily exits

    Raises:
        LaunchError: If the OS could not create the process
    """
    logger.info(f"Running {tool_name}: {' '.join(command)}")
    try:
        # Never use shell=True: tokens are passed through verbatim
        return await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=policy.working_directory,
            env=policy.build_environment(),
        )
    except OSError as e:
        raise LaunchError(
            f"Failed to start {tool_name} process: {e}",
            tool_name=tool_name,
            command=command,
            os_error=e,
        ) from e


async def start_supervised(
    command: list[str],
    policy: ExecutionPolicy,
    tool_name: str,
    grace_period: float = DEFAULT_GRACE_PERIOD,
) -> ProcessHandle:
    """Launch a process and arm a watchdog for it per the policy timeout."""
    process = await launch_process(command, policy, tool_name)
    watchdog = Watchdog(
        process,
        tool_name,
        policy.timeout,
        policy.timeout_unit,
        grace_period=grace_period,
    )
    watchdog.arm()
    return ProcessHandle(process, command, tool_name, watchdog)
