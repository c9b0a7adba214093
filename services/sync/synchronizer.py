"""
Joint-position synchronizer.

Copies the source arm's joint positions onto the destination arm once per
period in a background asyncio task, until the session's cancellation
event is set or a device call fails.

Each cycle is strictly read-then-write; cycles never overlap. Positions are
forwarded verbatim, the destination arm alone decides whether a target is
reachable. A failed read or write ends the loop (no retry) and becomes the
loop's terminal result.

Two timing policies are available:
    fixed_delay  Sleep a full period before every poll. The real cycle
                 period is the period plus device latency (default).
    fixed_rate   Poll on a fixed grid of deadlines. An overrun longer than
                 a period re-anchors the grid instead of bursting.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from armviz.exceptions import ArmVizError, DeviceReadError, DeviceWriteError
from armviz.types import ArmHandle, JointPositions

logger = logging.getLogger("armviz.services.sync")

DEFAULT_PERIOD_SEC = 1.0


class SyncState(Enum):
    """Synchronizer lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    CANCELLED = "cancelled"
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"


class SyncSchedule(Enum):
    """Cycle timing policy."""
    FIXED_DELAY = "fixed_delay"
    FIXED_RATE = "fixed_rate"


@dataclass
class SyncResult:
    """Terminal result of a synchronizer loop."""
    state: SyncState
    cycles: int
    error: Optional[ArmVizError] = None

    @property
    def failed(self) -> bool:
        """True if the loop ended on a device error."""
        return self.state in {SyncState.READ_FAILED, SyncState.WRITE_FAILED}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "state": self.state.value,
            "cycles": self.cycles,
            "error": str(self.error) if self.error else None,
        }


@dataclass
class SyncSession:
    """
    Live state of one mirroring loop.

    Owned by exactly one service. Once ``cancel_event`` is set the session
    never issues another command to either arm.
    """
    source: ArmHandle
    destination: ArmHandle
    source_name: str = "source"
    destination_name: str = "destination"
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
    period_sec: float = DEFAULT_PERIOD_SEC
    schedule: SyncSchedule = SyncSchedule.FIXED_DELAY
    state: SyncState = SyncState.IDLE
    cycles: int = 0
    last_positions: Optional[JointPositions] = None

    def __post_init__(self):
        if self.period_sec <= 0:
            raise ValueError(f"period_sec must be positive, got {self.period_sec}")
        self.schedule = SyncSchedule(self.schedule)

    @property
    def is_cancelled(self) -> bool:
        """Check if the session has been cancelled."""
        return self.cancel_event.is_set()

    def cancel(self):
        """Signal the loop to stop."""
        self.cancel_event.set()


class Synchronizer:
    """
    Runs the mirroring loop for one SyncSession.

    Example:
        >>> session = SyncSession(source=left, destination=right)
        >>> sync = Synchronizer(session)
        >>> sync.start()
        >>> ...
        >>> result = await sync.stop()
    """

    def __init__(self, session: SyncSession):
        self.session = session
        self._task: Optional[asyncio.Task] = None
        self._result: Optional[SyncResult] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        """Background task, once started."""
        return self._task

    @property
    def result(self) -> Optional[SyncResult]:
        """Terminal result, or None while the loop has not finished."""
        return self._result

    @property
    def is_running(self) -> bool:
        """Check if the background task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """
        Spawn the loop as a background task.

        Must be called from a running event loop. Returns the existing task
        if already started.
        """
        if self._task is None:
            self._task = asyncio.create_task(
                self.run(), name=f"sync:{self.session.source_name}->{self.session.destination_name}"
            )
        return self._task

    async def run(self) -> SyncResult:
        """
        Run the loop until cancellation or a device failure.

        Returns:
            SyncResult describing how the loop ended
        """
        session = self.session
        session.state = SyncState.RUNNING
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        logger.info(
            f"Mirroring {session.source_name} -> {session.destination_name} "
            f"every {session.period_sec}s ({session.schedule.value})"
        )

        try:
            while True:
                if session.is_cancelled:
                    return self._finish(SyncState.CANCELLED)

                if session.schedule is SyncSchedule.FIXED_RATE:
                    deadline += session.period_sec
                    now = loop.time()
                    if now - deadline > session.period_sec:
                        logger.debug(f"Sync overran by {now - deadline:.3f}s, re-anchoring schedule")
                        deadline = now
                    delay = max(0.0, deadline - now)
                else:
                    delay = session.period_sec

                if await self._wait_for_cancel(delay):
                    return self._finish(SyncState.CANCELLED)

                try:
                    positions = await session.source.get_joint_positions()
                except Exception as e:
                    error = DeviceReadError(
                        f"reading joint positions from '{session.source_name}' failed: {e}",
                        device_type="arm",
                        device_id=session.source_name,
                        operation="get_joint_positions",
                    )
                    error.__cause__ = e
                    return self._finish(SyncState.READ_FAILED, error)

                if session.is_cancelled:
                    return self._finish(SyncState.CANCELLED)

                try:
                    await session.destination.move_to_joint_positions(positions)
                except Exception as e:
                    error = DeviceWriteError(
                        f"moving '{session.destination_name}' to joint positions failed: {e}",
                        device_type="arm",
                        device_id=session.destination_name,
                        operation="move_to_joint_positions",
                    )
                    error.__cause__ = e
                    return self._finish(SyncState.WRITE_FAILED, error)

                session.cycles += 1
                session.last_positions = positions
                logger.debug(f"Sync cycle {session.cycles}: {list(positions)}")
        except asyncio.CancelledError:
            session.cancel()
            self._finish(SyncState.CANCELLED)
            raise

    async def _wait_for_cancel(self, delay: float) -> bool:
        """Sleep for ``delay`` seconds; return True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self.session.cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    def _finish(self, state: SyncState, error: Optional[ArmVizError] = None) -> SyncResult:
        session = self.session
        session.state = state
        self._result = SyncResult(state=state, cycles=session.cycles, error=error)

        if error is not None:
            logger.error(f"Mirroring stopped after {session.cycles} cycles: {error}")
        else:
            logger.info(f"Mirroring cancelled after {session.cycles} cycles")
        return self._result

    async def stop(self, timeout: Optional[float] = None) -> Optional[SyncResult]:
        """
        Cancel the loop and wait for it to wind down.

        Sets the session's cancellation event and cancels the task so an
        in-flight device call is interrupted. If the task has not finished
        after ``timeout`` seconds it is abandoned; the cancellation event
        keeps it from commanding either arm again. Safe to call repeatedly.

        Args:
            timeout: Maximum seconds to wait, or None to wait indefinitely

        Returns:
            The terminal result, or None if the task did not finish in time
        """
        self.session.cancel()

        if self._task is None:
            if self._result is None:
                self._finish(SyncState.CANCELLED)
            return self._result

        if not self._task.done():
            self._task.cancel()
            done, _ = await asyncio.wait({self._task}, timeout=timeout)
            if not done:
                logger.warning(
                    f"Sync task did not stop within {timeout}s, abandoning it"
                )
                return None

        if self._task.cancelled():
            # Cancelled before its first step, run() never saw the CancelledError
            if self._result is None:
                self._finish(SyncState.CANCELLED)
        else:
            # Retrieve the outcome so a crashed task does not go unreported
            exc = self._task.exception()
            if exc is not None:
                logger.error(f"Sync task crashed: {exc!r}")
        return self._result
