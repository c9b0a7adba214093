"""
ARMVIZ Service

Lifecycle controller for the arm mirroring service. Resolves the source and
destination arms from the dependency registry, owns the single SyncSession
and its background task, dispatches diagnostic commands, and shuts the loop
down on close.

Usage:
    service = await create_arm_viz(deps, config.mirror)
    await service.do_command({"log": True})
    await service.close()
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from armviz.commands import CommandKind, CommandResult, DiagnosticRequest, parse_command
from armviz.config import MirrorConfig
from armviz.exceptions import UnsupportedCommandError
from armviz.logging_config import get_logger
from armviz.registry import Dependencies
from services.diagnostics import DiagnosticReporter
from services.sync import SyncResult, SyncSchedule, SyncSession, SyncState, Synchronizer

DEFAULT_SERVICE_NAME = "debug-arm-viz"


class ArmVizService:
    """
    Mirrors one arm onto another and answers diagnostic commands.

    Construction validates the configuration and resolves both arms; it
    fails without creating anything if either step fails. ``start()`` must
    be called from a running event loop.
    """

    def __init__(
        self,
        dependencies: Dependencies,
        config: MirrorConfig,
        name: str = DEFAULT_SERVICE_NAME,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the service.

        Args:
            dependencies: Registry holding the resolved arms
            config: Mirror configuration naming the arms
            name: Service instance name
            logger: Logger to use; defaults to the armviz.service logger

        Raises:
            ConfigurationError: An arm name is missing
            DependencyResolutionError: An arm cannot be resolved
        """
        config.validate_dependencies()

        self.name = name
        self.config = config
        self.logger = logger or get_logger(__name__)

        cancel_event = asyncio.Event()
        try:
            source = dependencies.get_arm(config.src_arm_name)
            destination = dependencies.get_arm(config.dst_arm_name)
        except Exception:
            cancel_event.set()
            raise

        self._session = SyncSession(
            source=source,
            destination=destination,
            source_name=config.src_arm_name,
            destination_name=config.dst_arm_name,
            cancel_event=cancel_event,
            period_sec=config.sync_period_sec,
            schedule=SyncSchedule(config.schedule),
        )
        self._synchronizer = Synchronizer(self._session)
        self._reporter = DiagnosticReporter(
            source,
            destination,
            source_name=config.src_arm_name,
            destination_name=config.dst_arm_name,
            log=self.logger,
        )
        self._closed = False

    @property
    def session(self) -> SyncSession:
        """The service's sync session."""
        return self._session

    @property
    def synchronizer(self) -> Synchronizer:
        """The synchronizer running the session."""
        return self._synchronizer

    @property
    def sync_state(self) -> SyncState:
        """Current synchronizer state."""
        return self._session.state

    @property
    def sync_result(self) -> Optional[SyncResult]:
        """Terminal result of the mirroring loop, once it has ended."""
        return self._synchronizer.result

    @property
    def is_closed(self) -> bool:
        """Check if close() has been called."""
        return self._closed

    def start(self) -> asyncio.Task:
        """Spawn the mirroring loop in the background."""
        if self._synchronizer.task is not None:
            return self._synchronizer.task
        task = self._synchronizer.start()
        task.add_done_callback(self._on_sync_done)
        self.logger.info(
            f"{self.name} started: {self.config.src_arm_name} -> {self.config.dst_arm_name}"
        )
        return task

    def _on_sync_done(self, task: asyncio.Task):
        result = self._synchronizer.result
        if result is not None and result.failed and not self._closed:
            self.logger.error(
                f"{self.name} mirroring ended with {result.state.value}; "
                "it will not restart"
            )

    async def execute(self, request: DiagnosticRequest) -> CommandResult:
        """
        Execute a parsed command.

        Raises:
            DeviceReadError: A diagnostic read failed
            UnsupportedCommandError: The request kind is not handled
        """
        if request.kind is CommandKind.LOG:
            snapshot = await self._reporter.report()
            return CommandResult(kind=request.kind, snapshot=snapshot)
        raise UnsupportedCommandError(command=request.kind.value)

    async def do_command(self, cmd: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Generic command entry point for the host.

        Args:
            cmd: Command mapping, e.g. {"log": True}

        Returns:
            {"success": True} on success

        Raises:
            UnsupportedCommandError: The mapping names no known command
            DeviceReadError: A diagnostic read failed
        """
        request = parse_command(cmd)
        result = await self.execute(request)
        return result.to_dict()

    def status(self) -> Dict[str, Any]:
        """Summarize the service state."""
        result = self._synchronizer.result
        return {
            "name": self.name,
            "source": self.config.src_arm_name,
            "destination": self.config.dst_arm_name,
            "state": self._session.state.value,
            "cycles": self._session.cycles,
            "closed": self._closed,
            "result": result.to_dict() if result else None,
        }

    async def close(self) -> Optional[SyncResult]:
        """
        Stop the mirroring loop.

        Waits at most ``stop_timeout_sec`` for an in-flight device call to
        unwind. Calling close() again returns the same result.
        """
        if self._closed:
            return self._synchronizer.result
        self._closed = True
        result = await self._synchronizer.stop(timeout=self.config.stop_timeout_sec)
        self.logger.info(f"{self.name} closed")
        return result


async def create_arm_viz(
    dependencies: Dependencies,
    config: MirrorConfig,
    name: str = DEFAULT_SERVICE_NAME,
    logger: Optional[logging.Logger] = None,
) -> ArmVizService:
    """
    Construct the service and start mirroring.

    Returns:
        Running ArmVizService
    """
    service = ArmVizService(dependencies, config, name=name, logger=logger)
    service.start()
    return service
