#!/usr/bin/env python3
# CREW_FEAT: main-entry-001
"""
Skeleton Crew - Main Entry Point
================================

Runs a standalone runtime host from a configuration file.

Usage:
    python -m skeleton_crew.main --config crew.yaml
    python -m skeleton_crew.main --config crew.yaml -p plugins/ --list

Author: Skeleton Crew Development Team
Version: 1.0.0
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from skeleton_crew.core.config_manager import ConfigManager
from skeleton_crew.core.exceptions import CrewError
from skeleton_crew.core.orchestrator import Runtime


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Skeleton Crew - Embeddable Plugin Runtime",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default="crew.yaml",
        help="Path to configuration file (default: crew.yaml)",
    )

    parser.add_argument(
        "-p", "--plugins",
        type=str,
        nargs="+",
        default=[],
        help="Plugin files or directories to load (added to runtime.plugin_paths)",
    )

    parser.add_argument(
        "--package",
        type=str,
        nargs="+",
        default=[],
        help="Importable plugin packages (added to runtime.plugin_packages)",
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (overrides config)",
    )

    parser.add_argument(
        "--list",
        action="store_true",
        help="Initialize, print registered plugins, actions and screens, then exit",
    )

    return parser.parse_args(argv)


def print_summary(runtime: Runtime) -> None:
    """Print the introspection summary of an initialized runtime."""
    introspect = runtime.get_context().introspect
    metadata = introspect.get_metadata()

    print(f"Skeleton Crew runtime v{metadata.runtime_version}")
    print(f"Plugins ({metadata.total_plugins}):")
    for name in introspect.list_plugins():
        plugin = introspect.get_plugin_definition(name)
        deps = f" (depends on: {', '.join(plugin.dependencies)})" if plugin.dependencies else ""
        print(f"  - {plugin.name} v{plugin.version}{deps}")
    print(f"Actions ({metadata.total_actions}):")
    for action_id in introspect.list_actions():
        print(f"  - {action_id}")
    print(f"Screens ({metadata.total_screens}):")
    for screen_id in introspect.list_screens():
        print(f"  - {screen_id}")


async def wait_for_signal() -> None:
    """Block until SIGINT or SIGTERM."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await stop.wait()


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config_manager = ConfigManager()
    config_path = Path(args.config)
    if config_path.exists():
        if not config_manager.load(config_path):
            setup_logging(args.log_level or "INFO")
            logging.getLogger("CREW_MAIN").error(f"Failed to load configuration: {config_path}")
            return 1
    else:
        config_manager.load_dict({})

    # Setup logging
    setup_logging(args.log_level or config_manager.settings.log_level)
    logger = logging.getLogger("CREW_MAIN")

    if not config_path.exists():
        logger.warning(f"Configuration file not found, using defaults: {config_path}")

    errors = config_manager.validate()
    if errors:
        for error in errors:
            logger.error(f"Validation error: {error}")
        return 1

    settings = config_manager.settings
    runtime = Runtime.from_config(
        config_manager,
        plugin_paths=[*settings.plugin_paths, *args.plugins],
        plugin_packages=[*settings.plugin_packages, *args.package],
    )

    try:
        await runtime.initialize()
    except CrewError as e:
        logger.error(f"Failed to initialize runtime: {e}")
        return 1

    try:
        if args.list:
            print_summary(runtime)
        else:
            logger.info("Skeleton Crew running. Press Ctrl+C to stop.")
            await wait_for_signal()
            logger.info("Shutdown requested...")
    finally:
        await runtime.shutdown()

    logger.info("Skeleton Crew shutdown complete")
    return 0


def run() -> None:
    """Synchronous entry point."""
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
