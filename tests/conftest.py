"""Pytest fixtures for jdktools-mcp tests."""

import asyncio
import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from jdktools_mcp.cli.builder import CLIBuilder  # noqa: E402
from jdktools_mcp.cli.jar import JarCLIBuilder  # noqa: E402
from jdktools_mcp.cli.jlink import JlinkCLIBuilder  # noqa: E402
from jdktools_mcp.utils.platform import Platform  # noqa: E402


class PythonCLIBuilder(CLIBuilder):
    """Builder that runs the current interpreter, used as a stand-in tool."""

    TOOL_NAME = "python"

    def code(self, source: str) -> "PythonCLIBuilder":
        return self.add_argument("-c").add_argument(source)


class FakeProcess:
    """Minimal stand-in for asyncio.subprocess.Process."""

    def __init__(self, pid: int = 4242):
        self.pid = pid
        self.returncode: int | None = None
        self.signals: list[str] = []
        self.ignore_terminate = False
        self.gone = False
        self.terminate_exit_code = -15
        self.stdin = None
        self.stdout = None
        self.stderr = None
        self._exited = asyncio.Event()

    async def wait(self) -> int:
        await self._exited.wait()
        return self.returncode

    def exit(self, code: int) -> None:
        self.returncode = code
        self._exited.set()

    def terminate(self) -> None:
        if self.gone:
            raise ProcessLookupError()
        self.signals.append("terminate")
        if not self.ignore_terminate:
            self.exit(self.terminate_exit_code)

    def kill(self) -> None:
        if self.gone:
            raise ProcessLookupError()
        self.signals.append("kill")
        self.exit(-9)


@pytest.fixture
def jar_builder():
    """jar builder with a fixed executable and Linux conventions."""
    return JarCLIBuilder("jar", platform=Platform.LINUX)


@pytest.fixture
def jlink_builder():
    """jlink builder with a fixed executable and Linux conventions."""
    return JlinkCLIBuilder("jlink", platform=Platform.LINUX)


@pytest.fixture
def python_tool():
    """Factory for builders running inline Python code as the tool."""

    def make(source: str, grace_period: float = 2.0) -> PythonCLIBuilder:
        return PythonCLIBuilder(sys.executable, grace_period=grace_period).code(source)

    return make


@pytest.fixture
def fake_jdk(tmp_path):
    """A JDK home layout with bin/jar, bin/jlink and a release file."""
    home = tmp_path / "jdk-21"
    bin_dir = home / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "jar").touch()
    (bin_dir / "jlink").touch()
    (home / "release").write_text(
        'IMPLEMENTOR="Eclipse Adoptium"\nJAVA_VERSION="21.0.2"\n'
    )
    return home
