"""
ARMVIZ Application Entry Point

Runs the arm mirroring service against simulated arms built from the
configuration file. Handles command-line arguments, configuration loading,
signal handling and shutdown.

Usage:
    armviz                              # Run with default config discovery
    armviz --config /path/to/config.yaml
    armviz --log-level DEBUG
    armviz --dry-run                    # Validate config without starting
    armviz --duration 30 --log-interval 5

Entry Points:
    - CLI: `armviz` command (via pyproject.toml)
    - Direct: `python -m armviz.main`
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import TYPE_CHECKING, Optional

from armviz import __version__
from armviz.config import ArmVizConfig, load_config
from armviz.exceptions import ArmVizError, ConfigurationError
from armviz.logging_config import get_logger, log_exception, setup_logging
from armviz.registry import Dependencies
from armviz.service import ArmVizService
from services.simulators import ArmSimulator

if TYPE_CHECKING:
    from types import FrameType

__all__ = ["main", "async_main", "create_parser", "build_dependencies"]

# Module logger
logger = get_logger(__name__)


# =============================================================================
# Argument Parser
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="armviz",
        description="Mirror one robotic arm onto another and log diagnostics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Configuration
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file (default: auto-discover)",
    )

    # Logging
    parser.add_argument(
        "-l",
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (overrides config file)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        metavar="PATH",
        help="Path to log file (default: stdout only)",
    )

    # Operation modes
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and exit without starting the service",
    )
    parser.add_argument(
        "--duration",
        type=float,
        metavar="SECONDS",
        default=None,
        help="Stop after this many seconds (default: run until interrupted)",
    )
    parser.add_argument(
        "--log-interval",
        type=float,
        metavar="SECONDS",
        default=None,
        help="Issue the diagnostic 'log' command at this interval",
    )

    return parser


# =============================================================================
# Signal Handlers
# =============================================================================


class GracefulShutdown:
    """Manages graceful shutdown on SIGINT and SIGTERM."""

    def __init__(self) -> None:
        self._shutdown_requested = False
        self._shutdown_event: asyncio.Event | None = None
        self._original_handlers: dict[int, signal.Handlers] = {}

    @property
    def shutdown_requested(self) -> bool:
        """Check if shutdown has been requested."""
        return self._shutdown_requested

    def install_handlers(self) -> None:
        """Install signal handlers for graceful shutdown."""
        self._original_handlers[signal.SIGINT] = signal.signal(
            signal.SIGINT, self._handle_signal
        )
        self._original_handlers[signal.SIGTERM] = signal.signal(
            signal.SIGTERM, self._handle_signal
        )
        logger.debug("Signal handlers installed for graceful shutdown")

    def restore_handlers(self) -> None:
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()
        logger.debug("Original signal handlers restored")

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        signal_name = signal.Signals(signum).name
        if self._shutdown_requested:
            logger.warning(f"Received {signal_name} again - forcing immediate exit")
            sys.exit(1)

        logger.info(f"Received {signal_name} - initiating graceful shutdown...")
        self._shutdown_requested = True

        if self._shutdown_event is not None:
            self._shutdown_event.set()

    def get_shutdown_event(self) -> asyncio.Event:
        """Get or create async shutdown event."""
        if self._shutdown_event is None:
            self._shutdown_event = asyncio.Event()
        return self._shutdown_event


# =============================================================================
# Wiring
# =============================================================================


def build_dependencies(config: ArmVizConfig) -> Dependencies:
    """Build a simulated arm for every configured arm and register it."""
    deps = Dependencies()
    for arm_config in config.arms:
        deps.register(arm_config.name, ArmSimulator.from_config(arm_config))
    return deps


async def _periodic_log(service: ArmVizService, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await service.do_command({"log": True})
        except ArmVizError as e:
            log_exception(logger, "Diagnostic log failed", e, include_traceback=False)


async def async_main(
    args: argparse.Namespace,
    config: ArmVizConfig,
    shutdown_event: Optional[asyncio.Event] = None,
) -> int:
    """Run the service until shutdown, timeout, or loop termination.

    Args:
        args: Parsed command-line arguments
        config: Validated configuration
        shutdown_event: Event that requests shutdown; defaults to the
                        signal handler's event

    Returns:
        Exit code (0 for clean stop)
    """
    if shutdown_event is None:
        shutdown_event = get_shutdown_handler().get_shutdown_event()

    deps = build_dependencies(config)
    service = ArmVizService(deps, config.mirror, logger=get_logger("service"))
    sync_task = service.start()

    shutdown_waiter = asyncio.create_task(shutdown_event.wait())
    log_task = None
    if args.log_interval:
        log_task = asyncio.create_task(_periodic_log(service, args.log_interval))

    try:
        await asyncio.wait(
            {sync_task, shutdown_waiter},
            timeout=args.duration,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        helpers = [task for task in (shutdown_waiter, log_task) if task is not None]
        for task in helpers:
            task.cancel()
        await asyncio.gather(*helpers, return_exceptions=True)
        result = await service.close()

    logger.info(f"Final status: {service.status()}")
    if result is not None and result.failed:
        return 1
    return 0


# Global shutdown handler
_shutdown_handler = GracefulShutdown()


def get_shutdown_handler() -> GracefulShutdown:
    """Get the global shutdown handler instance."""
    return _shutdown_handler


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the ARMVIZ application.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Basic setup before config is loaded
    setup_logging(log_level=args.log_level or "INFO")

    logger.info(f"ARMVIZ v{__version__} starting...")

    try:
        config = load_config(args.config)
        required = config.mirror.validate_dependencies()
        defined = {arm.name for arm in config.arms}
        missing = [name for name in dict.fromkeys(required) if name not in defined]
        if missing:
            raise ConfigurationError(
                f"arms not defined in configuration: {', '.join(missing)}",
                config_key="arms",
            )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    setup_logging(
        log_level=args.log_level or config.log_level,
        log_file=args.log_file or config.log_file,
        json_format=config.log_json,
    )

    if args.dry_run:
        logger.info("Dry run mode - configuration valid, exiting")
        print("Configuration is valid")
        return 0

    shutdown = get_shutdown_handler()
    shutdown.install_handlers()

    try:
        return asyncio.run(async_main(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except ArmVizError as e:
        logger.error(f"ARMVIZ error: {e}")
        return 1
    finally:
        shutdown.restore_handlers()
        logger.info("ARMVIZ shutdown complete")


if __name__ == "__main__":
    sys.exit(main())
