"""MCP Server exposing JDK packaging tools."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from mcp.server.fastmcp import FastMCP

from .cli import CLIError, JarCLIBuilder, JlinkCLIBuilder, OperationMode, TimeUnit
from .cli.builder import CLIBuilder
from .jdk import JDK, find_jdk

logger = logging.getLogger(__name__)

# Global JDK (resolved lazily on first use)
_jdk: JDK | None = None
_initial_jdk_path: str | None = None

# Accepted names for the jar `mode` tool argument
JAR_MODES: dict[str, OperationMode] = {
    "create": OperationMode.CREATE,
    "list": OperationMode.LIST,
    "update": OperationMode.UPDATE,
    "extract": OperationMode.EXTRACT,
    "validate": OperationMode.VALIDATE,
    "describe-module": OperationMode.DESCRIBE_MODULE,
    "generate-index": OperationMode.GENERATE_INDEX,
}


def get_jdk() -> JDK:
    """Get the configured JDK.

    Raises:
        FileNotFoundError: If no JDK can be found
    """
    global _jdk
    if _jdk is None:
        _jdk = find_jdk(_initial_jdk_path)
        if _jdk is None:
            raise FileNotFoundError(
                "No JDK found. Pass --jdk or set JDKTOOLS_JDK_HOME / JAVA_HOME."
            )
    return _jdk


def apply_execution_options(
    builder: CLIBuilder,
    cwd: str | None = None,
    env: Mapping[str, str] | None = None,
    inherit_env: bool = True,
    timeout: int = 0,
) -> None:
    """Apply working directory, environment and timeout to a builder."""
    if cwd:
        builder.set_working_directory(cwd)
    for key, value in (env or {}).items():
        builder.set_environment_variable(key, value)
    builder.use_system_environment_variables(inherit_env)
    builder.set_timeout(timeout, TimeUnit.SECONDS)


def configure_jar(
    builder: JarCLIBuilder,
    mode: str,
    archive_file: str | None = None,
    files: list[str] | None = None,
    change_directory: str | None = None,
    main_class: str | None = None,
    manifest: str | None = None,
    no_manifest: bool = False,
    module_version: str | None = None,
    destination_directory: str | None = None,
    index_target: str | None = None,
    verbose: bool = False,
    no_compress: bool = False,
) -> JarCLIBuilder:
    """Translate jar tool arguments into builder calls.

    Raises:
        ConfigurationError: If an argument is invalid
    """
    operation = JAR_MODES.get(mode)
    if operation is None:
        raise ValueError(f"Unknown jar mode: {mode}. Expected one of: {', '.join(JAR_MODES)}")

    if operation == OperationMode.GENERATE_INDEX:
        if not index_target:
            raise ValueError("generate-index mode requires index_target")
        builder.generate_index(index_target)
    else:
        builder.operation(operation)

    if archive_file:
        builder.archive_file(archive_file)
    if main_class:
        builder.main_class(main_class)
    if manifest:
        builder.manifest(manifest)
    if no_manifest:
        builder.no_manifest()
    if module_version:
        builder.module_version(module_version)
    if destination_directory:
        builder.destination_directory(destination_directory)
    if verbose:
        builder.verbose()
    if no_compress:
        builder.no_compress()
    if change_directory:
        builder.change_directory(change_directory)
    if files:
        builder.add_files(*files)
    return builder


def configure_jlink(
    builder: JlinkCLIBuilder,
    add_modules: list[str],
    output: str,
    module_path: list[str] | None = None,
    compression_level: int | None = None,
    launchers: dict[str, str] | None = None,
    strip_debug: bool = False,
    no_header_files: bool = False,
    no_man_pages: bool = False,
    bind_services: bool = False,
) -> JlinkCLIBuilder:
    """Translate jlink tool arguments into builder calls.

    Raises:
        ConfigurationError: If an argument is invalid
    """
    if module_path:
        builder.module_path(*module_path)
    builder.add_modules(*add_modules)
    if bind_services:
        builder.bind_services()
    if compression_level is not None:
        builder.compression_level(compression_level)
    for name, target in (launchers or {}).items():
        builder.launcher(name, target)
    if strip_debug:
        builder.strip_debug()
    if no_header_files:
        builder.no_header_files()
    if no_man_pages:
        builder.no_man_pages()
    builder.output(output)
    return builder


def error_result(error: Exception) -> dict:
    """Build a failed tool result, with details for CLI errors."""
    result: dict = {"success": False, "error": str(error)}
    if isinstance(error, CLIError):
        result["details"] = error.to_dict()
    return result


async def execute_builder(builder: CLIBuilder) -> dict:
    """Run a configured builder and wrap the outcome as a tool result."""
    try:
        result = await builder.execute()
    except CLIError as e:
        logger.warning(f"{builder.tool_name} failed: {e}")
        return error_result(e)
    return {"success": result.success, "data": result.to_dict()}


def create_server(jdk_path: str | None = None) -> FastMCP:
    """Create and configure the MCP server.

    Args:
        jdk_path: JDK home to use. Falls back to JDKTOOLS_JDK_HOME,
            JAVA_HOME and PATH lookup when not given.
    """
    global _initial_jdk_path, _jdk
    _initial_jdk_path = jdk_path
    _jdk = None
    mcp = FastMCP("jdktools-mcp")

    # ============== Packaging Tools ==============

    @mcp.tool()
    async def jar(
        mode: str,
        archive_file: str | None = None,
        files: list[str] | None = None,
        change_directory: str | None = None,
        main_class: str | None = None,
        manifest: str | None = None,
        no_manifest: bool = False,
        module_version: str | None = None,
        destination_directory: str | None = None,
        index_target: str | None = None,
        verbose: bool = False,
        no_compress: bool = False,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int = 300,
    ) -> dict:
        """
        Run the jar archiver.

        Args:
            mode: create, list, update, extract, validate, describe-module
                or generate-index
            archive_file: Archive to operate on (--file)
            files: Files to add, placed after all options
            change_directory: Directory to change to before the files (-C)
            main_class: Application entry point (--main-class)
            manifest: Manifest file to include (--manifest)
            no_manifest: Do not create a manifest (--no-manifest)
            module_version: Module version for modular jars
            destination_directory: Extraction directory (--dir)
            index_target: Archive to index (generate-index mode only)
            verbose: Verbose output
            no_compress: Store entries without compression
            cwd: Working directory for the jar process
            env: Extra environment variables
            timeout: Timeout in seconds (0 = no timeout)
        """
        try:
            builder = configure_jar(
                get_jdk().jar(),
                mode,
                archive_file=archive_file,
                files=files,
                change_directory=change_directory,
                main_class=main_class,
                manifest=manifest,
                no_manifest=no_manifest,
                module_version=module_version,
                destination_directory=destination_directory,
                index_target=index_target,
                verbose=verbose,
                no_compress=no_compress,
            )
            apply_execution_options(builder, cwd=cwd, env=env, timeout=timeout)
        except Exception as e:
            return error_result(e)
        return await execute_builder(builder)

    @mcp.tool()
    async def jlink(
        add_modules: list[str],
        output: str,
        module_path: list[str] | None = None,
        compression_level: int | None = None,
        launchers: dict[str, str] | None = None,
        strip_debug: bool = False,
        no_header_files: bool = False,
        no_man_pages: bool = False,
        bind_services: bool = False,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: int = 600,
    ) -> dict:
        """
        Run the jlink module linker to assemble a custom runtime image.

        Args:
            add_modules: Root modules to resolve
            output: Output directory of the runtime image
            module_path: Module path entries
            compression_level: Resource compression (0, 1 or 2)
            launchers: Launcher name -> module[/mainclass]
            strip_debug: Strip debug information
            no_header_files: Exclude include header files
            no_man_pages: Exclude man pages
            bind_services: Link service provider modules
            cwd: Working directory for the jlink process
            env: Extra environment variables
            timeout: Timeout in seconds (0 = no timeout)
        """
        try:
            builder = configure_jlink(
                get_jdk().jlink(),
                add_modules,
                output,
                module_path=module_path,
                compression_level=compression_level,
                launchers=launchers,
                strip_debug=strip_debug,
                no_header_files=no_header_files,
                no_man_pages=no_man_pages,
                bind_services=bind_services,
            )
            apply_execution_options(builder, cwd=cwd, env=env, timeout=timeout)
        except Exception as e:
            return error_result(e)
        return await execute_builder(builder)

    @mcp.tool()
    async def get_jdk_info() -> dict:
        """Get the JDK used for packaging tools (path, version, executables)."""
        try:
            return {"success": True, "data": get_jdk().to_dict()}
        except Exception as e:
            return {"success": False, "error": str(e)}

    # ============== Resources ==============

    @mcp.resource("jdk://info", mime_type="application/json")
    async def jdk_info_resource() -> str:
        """JDK used for packaging tools."""
        try:
            return json.dumps(get_jdk().to_dict(), indent=2)
        except FileNotFoundError as e:
            return json.dumps({"error": str(e)}, indent=2)

    return mcp
