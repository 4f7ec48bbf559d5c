"""JDK installation lookup.

Resolves a JDK home directory from:
1. An explicit path (--jdk flag)
2. Environment variables (JDKTOOLS_JDK_HOME, JAVA_HOME)
3. The jar executable found on PATH
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .cli.jar import JarCLIBuilder
from .cli.jlink import JlinkCLIBuilder
from .utils.platform import Platform, executable_name

logger = logging.getLogger(__name__)

JDK_HOME_ENV_VARS: tuple[str, ...] = ("JDKTOOLS_JDK_HOME", "JAVA_HOME")


def read_release_properties(java_home: str | Path) -> dict[str, str]:
    """Read the `release` metadata file of a JDK home.

    Args:
        java_home: JDK installation root

    Returns:
        KEY -> value mapping with surrounding quotes stripped; empty if the
        file is missing or unreadable
    """
    release = Path(java_home) / "release"
    if not release.is_file():
        return {}

    properties: dict[str, str] = {}
    try:
        text = release.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Cannot read {release}: {e}")
        return {}

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        properties[key.strip()] = value.strip().strip('"')
    return properties


@dataclass
class JDK:
    """A JDK installation and factory for its tool builders."""

    path: Path
    name: str | None = None
    platform: Platform = field(default_factory=Platform.current)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if self.name is None:
            self.name = self.path.name

    @property
    def version(self) -> str | None:
        """JAVA_VERSION from the release file, if present."""
        return read_release_properties(self.path).get("JAVA_VERSION")

    def executable_path(self, name: str) -> Path:
        """Locate an executable, preferring the bin/ directory.

        Args:
            name: Executable file name (platform suffix included)

        Returns:
            <home>/bin/<name> if it exists, otherwise <home>/<name>
        """
        if not name:
            raise ValueError("Executable name cannot be empty")
        candidate = self.path / "bin" / name
        if candidate.exists():
            return candidate
        return self.path / name

    def tool_path(self, tool: str) -> Path:
        """Executable path for a bare tool name on this JDK's platform."""
        return self.executable_path(executable_name(tool, self.platform))

    def jar(self) -> JarCLIBuilder:
        """Builder for this JDK's jar tool."""
        return JarCLIBuilder(self.tool_path("jar"), platform=self.platform)

    def jlink(self) -> JlinkCLIBuilder:
        """Builder for this JDK's jlink tool."""
        return JlinkCLIBuilder(self.tool_path("jlink"), platform=self.platform)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "path": str(self.path),
            "version": self.version,
            "platform": self.platform.value,
            "tools": {
                tool: str(self.tool_path(tool)) for tool in ("jar", "jlink")
            },
        }


def find_jdk(
    explicit_path: str | Path | None = None,
    platform: Platform | None = None,
) -> JDK | None:
    """Resolve the JDK to use.

    Args:
        explicit_path: JDK home given on the command line
        platform: Platform for executable naming (host if not given)

    Returns:
        JDK, or None if no installation could be determined
    """
    platform = platform or Platform.current()

    if explicit_path:
        path = Path(explicit_path)
        if path.is_dir():
            logger.info(f"Using explicit JDK path: {path}")
            return JDK(path, platform=platform)
        logger.warning(f"Explicit JDK path not valid: {path}")

    for env_var in JDK_HOME_ENV_VARS:
        env_value = os.environ.get(env_var)
        if env_value:
            path = Path(env_value)
            if path.is_dir():
                logger.info(f"Using JDK from {env_var}: {path}")
                return JDK(path, platform=platform)
            logger.warning(f"{env_var}={env_value} - path does not exist or is not a directory")

    # jar lives in <home>/bin
    system_jar = shutil.which(executable_name("jar", platform))
    if system_jar:
        home = Path(system_jar).resolve().parent.parent
        logger.info(f"Using JDK from PATH: {home}")
        return JDK(home, platform=platform)

    logger.warning("Could not determine a JDK from any source")
    return None
