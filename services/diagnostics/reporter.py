"""
On-demand diagnostic snapshot of both mirrored arms.

Reads joint positions and geometries from the source arm, then from the
destination arm, and logs all four values. The first failed read aborts the
report; nothing is logged for a partial snapshot.

Reads are not coordinated with the synchronizer, so a snapshot may land
between a cycle's read and its write.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from armviz.exceptions import DeviceReadError
from armviz.logging_config import log_timing
from armviz.types import ArmHandle, Geometries, JointPositions

logger = logging.getLogger("armviz.services.diagnostics")

T = TypeVar("T")


@dataclass
class ArmSnapshot:
    """State read from one arm."""
    name: str
    positions: JointPositions
    geometries: Geometries

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "positions": list(self.positions),
            "geometries": [g.to_dict() if hasattr(g, "to_dict") else g for g in self.geometries],
        }


@dataclass
class DiagnosticSnapshot:
    """Both arms' state at the time of a report."""
    source: ArmSnapshot
    destination: ArmSnapshot
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source.to_dict(),
            "destination": self.destination.to_dict(),
            "timestamp": self.timestamp.isoformat(),
        }


class DiagnosticReporter:
    """
    Snapshots and logs the state of the source and destination arms.

    Example:
        >>> reporter = DiagnosticReporter(left, right, "left_arm", "right_arm")
        >>> snapshot = await reporter.report()
    """

    def __init__(
        self,
        source: ArmHandle,
        destination: ArmHandle,
        source_name: str = "source",
        destination_name: str = "destination",
        log: Optional[logging.Logger] = None,
    ):
        self.source = source
        self.destination = destination
        self.source_name = source_name
        self.destination_name = destination_name
        self._log = log or logger

    async def report(self) -> DiagnosticSnapshot:
        """
        Read both arms and log the result.

        Returns:
            The snapshot that was logged

        Raises:
            DeviceReadError: If any of the four reads fails
        """
        with log_timing(self._log, "diagnostic report"):
            src_positions = await self._read(
                self.source_name, "get_joint_positions", self.source.get_joint_positions
            )
            src_geometries = await self._read(
                self.source_name, "get_geometries", self.source.get_geometries
            )
            dst_positions = await self._read(
                self.destination_name, "get_joint_positions", self.destination.get_joint_positions
            )
            dst_geometries = await self._read(
                self.destination_name, "get_geometries", self.destination.get_geometries
            )

        self._log.info(f"{self.source_name} positions: {list(src_positions)}")
        self._log.info(f"{self.source_name} geometries: {src_geometries}")
        self._log.info(f"{self.destination_name} positions: {list(dst_positions)}")
        self._log.info(f"{self.destination_name} geometries: {dst_geometries}")

        return DiagnosticSnapshot(
            source=ArmSnapshot(self.source_name, src_positions, src_geometries),
            destination=ArmSnapshot(self.destination_name, dst_positions, dst_geometries),
        )

    async def _read(self, arm_name: str, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except Exception as e:
            raise DeviceReadError(
                f"diagnostic read {operation} from '{arm_name}' failed: {e}",
                device_type="arm",
                device_id=arm_name,
                operation=operation,
            ) from e
