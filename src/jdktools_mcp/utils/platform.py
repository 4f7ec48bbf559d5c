"""Host platform detection and executable naming."""

from __future__ import annotations

import sys
from enum import Enum


class Platform(str, Enum):
    """Operating system families that affect tool invocation."""

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    OTHER = "other"

    @classmethod
    def current(cls) -> Platform:
        """Detect the platform of the running interpreter."""
        if sys.platform.startswith(("win32", "cygwin")):
            return cls.WINDOWS
        if sys.platform == "darwin":
            return cls.MACOS
        if sys.platform.startswith("linux"):
            return cls.LINUX
        return cls.OTHER

    @property
    def path_separator(self) -> str:
        """Separator used between entries of a path list (e.g. module paths)."""
        return ";" if self == Platform.WINDOWS else ":"

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self == Platform.WINDOWS else ""


def executable_name(tool: str, platform: Platform) -> str:
    """Get the file name of a JDK tool executable on the given platform.

    Args:
        tool: Bare tool name (e.g. "jar")
        platform: Target platform

    Returns:
        File name, with ".exe" appended on Windows
    """
    if not tool:
        raise ValueError("Tool name cannot be empty")
    return f"{tool}{platform.executable_suffix}"
