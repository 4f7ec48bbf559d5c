"""Entry point for jdktools-mcp server."""

import argparse
import asyncio
import logging
import os
import sys

from .server import create_server


def configure_logging() -> None:
    """Configure logging based on environment."""
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="JDK Tools MCP Server - run jar and jlink via MCP"
    )
    parser.add_argument(
        "--jdk",
        type=str,
        default=None,
        help="JDK home directory providing jar and jlink. "
        "Defaults to JDKTOOLS_JDK_HOME, then JAVA_HOME, then the jar found on PATH.",
    )
    return parser.parse_args(argv)


async def main() -> None:
    """Main entry point."""
    configure_logging()
    logger = logging.getLogger(__name__)

    args = parse_args()
    logger.info(f"Starting JDK Tools MCP Server (jdk: {args.jdk or 'auto'})...")

    mcp = create_server(args.jdk)

    try:
        await mcp.run_stdio_async()
    except Exception:
        logger.exception("Server error")
        raise
    finally:
        logger.info("Server stopped")


def run() -> None:
    """Run the server."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
