"""Utility modules for jdktools-mcp."""

from .platform import Platform, executable_name

__all__ = [
    "Platform",
    "executable_name",
]
