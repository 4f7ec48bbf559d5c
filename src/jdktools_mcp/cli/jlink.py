"""Builder for the jlink module linker."""

from __future__ import annotations

from .builder import CLIBuilder, StrPath
from .errors import ConfigurationError

# Valid --compress levels
MIN_COMPRESSION_LEVEL: int = 0
MAX_COMPRESSION_LEVEL: int = 2

ENDIANNESS: frozenset[str] = frozenset({"little", "big"})


class JlinkCLIBuilder(CLIBuilder):
    """Fluent builder for jlink commands.

    jlink has no operation mode: the command is the executable followed by
    options in call order.
    """

    TOOL_NAME = "jlink"

    def add_modules(self, *modules: str) -> JlinkCLIBuilder:
        """Root modules to resolve (--add-modules a,b)."""
        return self._append(f"--add-modules {self._join(modules, ',', 'Modules')}")

    def bind_services(self) -> JlinkCLIBuilder:
        return self._append("--bind-services")

    def compression_level(
        self, level: int, filter_pattern: str | None = None
    ) -> JlinkCLIBuilder:
        """Compress resources (--compress=<level>[:filter=<pattern>]).

        Raises:
            ConfigurationError: If level is outside 0..2
        """
        if isinstance(level, bool) or not isinstance(level, int):
            raise ConfigurationError(f"Compression level must be an integer: {level!r}")
        if not MIN_COMPRESSION_LEVEL <= level <= MAX_COMPRESSION_LEVEL:
            raise ConfigurationError("Compression level must be 0, 1, or 2")
        if filter_pattern is None:
            return self._append(f"--compress={level}")
        pattern = self._require_str(filter_pattern, "Filter pattern")
        return self._append(f"--compress={level}:filter={pattern}")

    def disable_plugin(self, plugin_name: str) -> JlinkCLIBuilder:
        return self._append(
            f"--disable-plugin {self._require_str(plugin_name, 'Plugin name')}"
        )

    def endian(self, endian: str) -> JlinkCLIBuilder:
        """Byte order of the generated image (little or big)."""
        value = self._require_str(endian, "Endian")
        if value not in ENDIANNESS:
            raise ConfigurationError(f"Invalid endian: {value}")
        return self._append(f"--endian {value}")

    def help(self) -> JlinkCLIBuilder:
        return self._append("--help")

    def ignore_signing_information(self) -> JlinkCLIBuilder:
        return self._append("--ignore-signing-information")

    def launcher(self, command_name: str, module_or_main: str) -> JlinkCLIBuilder:
        """Add a launcher script (--launcher <cmd>=<module>[/<mainclass>])."""
        name = self._require_str(command_name, "Command name")
        target = self._require_str(module_or_main, "Module definition")
        return self._append(f"--launcher {name}={target}")

    def limit_modules(self, *modules: str) -> JlinkCLIBuilder:
        return self._append(
            f"--limit-modules {self._join(modules, ',', 'Module names')}"
        )

    def list_plugins(self) -> JlinkCLIBuilder:
        return self._append("--list-plugins")

    def module_path(self, *module_paths: StrPath) -> JlinkCLIBuilder:
        """Module path entries, joined with the platform path separator."""
        joined = self._join(
            module_paths,
            self._platform.path_separator,
            "Module path entries",
            paths=True,
        )
        return self._append(f"--module-path {joined}")

    def no_header_files(self) -> JlinkCLIBuilder:
        return self._append("--no-header-files")

    def no_man_pages(self) -> JlinkCLIBuilder:
        return self._append("--no-man-pages")

    def output(self, path: StrPath) -> JlinkCLIBuilder:
        return self._append(f"--output {self._fspath(path, 'Output path')}")

    def save_options(self, file: StrPath) -> JlinkCLIBuilder:
        return self._append(f"--save-opts {self._fspath(file, 'Options file')}")

    def suggest_providers(self, *service_types: str) -> JlinkCLIBuilder:
        """Suggest providers; with no service types, suggests for all."""
        joined = self._join(service_types, ",", "Service types", allow_empty=True)
        if not joined:
            return self._append("--suggest-providers")
        return self._append(f"--suggest-providers {joined}")

    def version(self) -> JlinkCLIBuilder:
        return self._append("--version")

    def include_locales(self, *locales: str) -> JlinkCLIBuilder:
        return self._append(f"--include-locales={self._join(locales, ',', 'Locales')}")

    def order_resources(self, pattern_list: str) -> JlinkCLIBuilder:
        return self._append(
            f"--order-resources={self._require_str(pattern_list, 'Pattern list')}"
        )

    def strip_debug(self) -> JlinkCLIBuilder:
        return self._append("--strip-debug")

    def generate_cds_archive(self) -> JlinkCLIBuilder:
        return self._append("--generate-cds-archive")

    def add_argument_file(self, file: StrPath) -> JlinkCLIBuilder:
        return self._append(f"@{self._fspath(file, 'Argument file')}")
