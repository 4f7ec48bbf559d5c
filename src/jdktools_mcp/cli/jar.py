"""Builder for the jar archiver.

Exactly one operation mode must be selected before running. Selecting a
mode replaces any previous one; leaving GENERATE_INDEX discards its target.
"""

from __future__ import annotations

from enum import Enum

from ..utils.platform import Platform
from .builder import CLIBuilder, StrPath
from .errors import ConfigurationError
from .process import DEFAULT_GRACE_PERIOD

# Lowest release accepted by --release
MIN_RELEASE_VERSION: int = 9


class OperationMode(str, Enum):
    """Primary jar actions, valued by their command-line flag."""

    CREATE = "--create"
    LIST = "--list"
    UPDATE = "--update"
    EXTRACT = "--extract"
    VALIDATE = "--validate"
    DESCRIBE_MODULE = "--describe-module"
    GENERATE_INDEX = "--generate-index"

    @property
    def flag(self) -> str:
        return self.value


class JarCLIBuilder(CLIBuilder):
    """Fluent builder for jar commands.

    Usage:
        handle = await (
            JarCLIBuilder("/opt/jdk/bin/jar")
            .create_archive()
            .archive_file("out.jar")
            .main_class("App")
            .add_file("App.class")
            .run()
        )
    """

    TOOL_NAME = "jar"

    def __init__(
        self,
        executable: StrPath,
        platform: Platform | None = None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
    ):
        super().__init__(executable, platform, grace_period)
        self._operation_mode: OperationMode | None = None
        self._generate_index_target: str | None = None

    @property
    def operation_mode(self) -> OperationMode | None:
        return self._operation_mode

    @property
    def generate_index_target(self) -> str | None:
        return self._generate_index_target

    # ============== Operation modes ==============

    def operation(self, mode: OperationMode) -> JarCLIBuilder:
        """Select the operation mode, replacing any previous selection."""
        if not isinstance(mode, OperationMode):
            raise ConfigurationError(f"Invalid operation mode: {mode!r}")
        self._operation_mode = mode
        if mode != OperationMode.GENERATE_INDEX:
            self._generate_index_target = None
        return self

    def create_archive(self) -> JarCLIBuilder:
        return self.operation(OperationMode.CREATE)

    def list_contents(self) -> JarCLIBuilder:
        return self.operation(OperationMode.LIST)

    def update_archive(self) -> JarCLIBuilder:
        return self.operation(OperationMode.UPDATE)

    def extract_archive(self) -> JarCLIBuilder:
        return self.operation(OperationMode.EXTRACT)

    def describe_module(self) -> JarCLIBuilder:
        return self.operation(OperationMode.DESCRIBE_MODULE)

    def validate_archive(self) -> JarCLIBuilder:
        return self.operation(OperationMode.VALIDATE)

    def generate_index(self, jar_file: StrPath) -> JarCLIBuilder:
        """Select GENERATE_INDEX for the given archive."""
        target = self._fspath(jar_file, "JAR file path")
        self.operation(OperationMode.GENERATE_INDEX)
        self._generate_index_target = target
        return self

    def _mode_token(self) -> str | None:
        if self._operation_mode is None:
            raise ConfigurationError(
                "An operation mode must be specified before running the jar command"
            )
        if self._operation_mode == OperationMode.GENERATE_INDEX:
            if self._generate_index_target is None:
                raise ConfigurationError(
                    "Generate-index operation requires a target jar file"
                )
            return f"{self._operation_mode.flag}={self._generate_index_target}"
        return self._operation_mode.flag

    # ============== General options ==============

    def archive_file(self, jar_file: StrPath) -> JarCLIBuilder:
        return self._append(f"--file {self._fspath(jar_file, 'Archive file path')}")

    def verbose(self) -> JarCLIBuilder:
        return self._append("--verbose")

    def main_class(self, class_name: str) -> JarCLIBuilder:
        return self._append(f"--main-class {self._require_str(class_name, 'Main class')}")

    def manifest(self, manifest_path: StrPath) -> JarCLIBuilder:
        return self._append(f"--manifest {self._fspath(manifest_path, 'Manifest path')}")

    def no_manifest(self) -> JarCLIBuilder:
        return self._append("--no-manifest")

    def module_version(self, version: str) -> JarCLIBuilder:
        return self._append(
            f"--module-version {self._require_str(version, 'Module version')}"
        )

    def hash_modules(self, pattern: str) -> JarCLIBuilder:
        return self._append(
            f"--hash-modules {self._require_str(pattern, 'Module hash pattern')}"
        )

    def module_path(self, *module_paths: StrPath) -> JarCLIBuilder:
        """Add --module-path, joined with the platform path separator."""
        joined = self._join(
            module_paths, self._platform.path_separator, "Module paths", paths=True
        )
        return self._append(f"--module-path {joined}")

    def argument_file(self, arg_file: StrPath) -> JarCLIBuilder:
        return self._append(f"@{self._fspath(arg_file, 'Argument file path')}")

    def no_compress(self) -> JarCLIBuilder:
        return self._append("--no-compress")

    def entry_timestamp(self, iso_timestamp: str) -> JarCLIBuilder:
        return self._append(f"--date {self._require_str(iso_timestamp, 'Timestamp')}")

    def help(self) -> JarCLIBuilder:
        return self._append("--help")

    def help_compat(self) -> JarCLIBuilder:
        return self._append("--help:compat")

    def help_extra(self) -> JarCLIBuilder:
        return self._append("--help-extra")

    def version_info(self) -> JarCLIBuilder:
        return self._append("--version")

    def destination_directory(self, directory: StrPath) -> JarCLIBuilder:
        return self._append(f"--dir {self._fspath(directory, 'Directory')}")

    def keep_old_files(self) -> JarCLIBuilder:
        return self._append("--keep-old-files")

    # ============== Trailing entries ==============

    def release_entries(self, version: int) -> JarCLIBuilder:
        """Place following files in a versioned directory (--release N)."""
        if isinstance(version, bool) or not isinstance(version, int):
            raise ConfigurationError(f"Release version must be an integer: {version!r}")
        if version < MIN_RELEASE_VERSION:
            raise ConfigurationError(
                f"Release version must be {MIN_RELEASE_VERSION} or greater"
            )
        return self._append_trailing(f"--release {version}")

    def change_directory(self, directory: StrPath) -> JarCLIBuilder:
        return self._append_trailing(f"-C {self._fspath(directory, 'Directory')}")

    def add_file(self, file_path: StrPath) -> JarCLIBuilder:
        return self._append_trailing(self._fspath(file_path, "File path"))

    def add_files(self, *files: StrPath) -> JarCLIBuilder:
        """Add several file entries; nothing is added if any is invalid."""
        entries = [self._fspath(file, "File path") for file in files]
        self._trailing.extend(entries)
        return self
