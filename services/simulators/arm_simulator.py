"""
ARMVIZ Arm Simulator

Simulates a serial-link robotic arm implementing the ArmHandle protocol so
the mirroring service can run without hardware.

Features:
- Joint position read and move commands with simulated latency
- Per-call timeout enforcement (raises DeviceTimeoutError)
- Joint limit and joint count checks on move targets
- One box geometry per link from planar forward kinematics
- Bounded move history
- Error injection for testing failure handling
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from armviz.config import ArmConfig
from armviz.exceptions import DeviceTimeoutError
from armviz.types import Extra, Geometries, Geometry, JointPositions

from . import SimulatorState, SimulatorStats

logger = logging.getLogger("armviz.services.simulators.arm")

LINK_WIDTH_M = 0.05
MAX_HISTORY = 1000

# Error injection keys understood by inject_error()
INJECTABLE_ERRORS = ("read_fail", "write_fail", "geometry_fail", "hang")


class ArmSimulator:
    """
    Simulated robotic arm.

    Usage:
        arm = ArmSimulator("left_arm", joint_count=6)
        await arm.move_to_joint_positions([0, 45, -30, 0, 10, 0])
        positions = await arm.get_joint_positions()

        # Inject errors for testing
        arm.inject_error("read_fail")
    """

    def __init__(
        self,
        name: str,
        joint_count: int = 6,
        link_length_m: float = 0.2,
        latency_sec: float = 0.01,
        timeout_sec: float = 2.0,
        joint_limit_deg: float = 360.0,
        initial_positions: Optional[Sequence[float]] = None,
    ):
        """
        Initialize arm simulator.

        Args:
            name: Arm identifier
            joint_count: Number of controllable joints
            link_length_m: Length of every link in meters
            latency_sec: Simulated duration of each device call
            timeout_sec: Calls taking longer than this raise DeviceTimeoutError
            joint_limit_deg: Symmetric joint limit in degrees
            initial_positions: Starting joint positions (degrees), zeros if omitted
        """
        self.name = name
        self.joint_count = joint_count
        self.link_length_m = link_length_m
        self.latency_sec = latency_sec
        self.timeout_sec = timeout_sec
        self.joint_limit_deg = joint_limit_deg

        if initial_positions is None:
            self._positions = np.zeros(joint_count)
        else:
            self._positions = self._validate_target(initial_positions)

        self.state = SimulatorState.RUNNING
        self.stats = SimulatorStats(started_at=datetime.now())
        self._history: List[Tuple[datetime, List[float]]] = []
        self._inject_errors: Dict[str, bool] = {}

    @classmethod
    def from_config(cls, config: ArmConfig) -> "ArmSimulator":
        """Create a simulator from its configuration block."""
        return cls(
            name=config.name,
            joint_count=config.joint_count,
            link_length_m=config.link_length_m,
            latency_sec=config.latency_sec,
            timeout_sec=config.timeout_sec,
            joint_limit_deg=config.joint_limit_deg,
            initial_positions=config.initial_positions,
        )

    @property
    def positions(self) -> List[float]:
        """Current joint positions without simulated latency."""
        return self._positions.tolist()

    @property
    def move_count(self) -> int:
        """Number of completed moves."""
        return len(self._history)

    def get_history(self, limit: int = 100) -> List[Tuple[datetime, List[float]]]:
        """Recent (timestamp, positions) move records."""
        return self._history[-limit:]

    # =========================================================================
    # ArmHandle protocol
    # =========================================================================

    async def get_joint_positions(self, extra: Extra = None) -> JointPositions:
        """Read current joint positions (degrees)."""
        await self._call("get_joint_positions", "read_fail")
        return self._positions.tolist()

    async def move_to_joint_positions(
        self, positions: JointPositions, extra: Extra = None
    ) -> None:
        """
        Move to the given joint positions.

        Raises:
            ValueError: Wrong joint count or a target beyond the joint limit
        """
        target = self._validate_target(positions)
        await self._call("move_to_joint_positions", "write_fail")
        self._positions = target
        self._history.append((datetime.now(), target.tolist()))
        if len(self._history) > MAX_HISTORY:
            self._history = self._history[-MAX_HISTORY:]

    async def get_geometries(self, extra: Extra = None) -> Geometries:
        """Return one box per link at the current pose."""
        await self._call("get_geometries", "geometry_fail")
        return self.compute_geometries(self._positions)

    # =========================================================================
    # Simulation
    # =========================================================================

    def compute_geometries(self, positions: Sequence[float]) -> Geometries:
        """
        Planar forward kinematics: every joint rotates about z and each link
        extends ``link_length_m`` along its rotated x axis.
        """
        angles = np.cumsum(np.radians(np.asarray(positions, dtype=float)))
        steps = self.link_length_m * np.column_stack(
            (np.cos(angles), np.sin(angles), np.zeros_like(angles))
        )
        joints = np.vstack((np.zeros(3), np.cumsum(steps, axis=0)))
        centers = (joints[:-1] + joints[1:]) / 2.0

        return [
            Geometry(
                label=f"{self.name}:link_{i}",
                kind="box",
                center=tuple(float(v) for v in center),
                dimensions=(self.link_length_m, LINK_WIDTH_M, LINK_WIDTH_M),
            )
            for i, center in enumerate(centers)
        ]

    def _validate_target(self, positions: Sequence[float]) -> np.ndarray:
        target = np.asarray(list(positions), dtype=float)
        if target.shape != (self.joint_count,):
            raise ValueError(
                f"{self.name}: expected {self.joint_count} joint positions, got {target.size}"
            )
        if np.any(np.abs(target) > self.joint_limit_deg):
            raise ValueError(
                f"{self.name}: target {target.tolist()} exceeds joint limit "
                f"±{self.joint_limit_deg}°"
            )
        return target

    async def _call(self, operation: str, fail_key: str) -> None:
        """Simulate one device round trip."""
        self.stats.commands_received += 1
        try:
            await asyncio.wait_for(self._respond(operation, fail_key), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            self.stats.commands_failed += 1
            raise DeviceTimeoutError(
                f"{self.name}: {operation} timed out",
                device_type="arm",
                device_id=self.name,
                operation=operation,
                timeout_seconds=self.timeout_sec,
            ) from None
        except Exception:
            self.stats.commands_failed += 1
            raise
        self.stats.commands_succeeded += 1

    async def _respond(self, operation: str, fail_key: str) -> None:
        if self._inject_errors.get("hang"):
            self.stats.faults_injected += 1
            await asyncio.Event().wait()
        if self.latency_sec > 0:
            await asyncio.sleep(self.latency_sec)
        if self._inject_errors.get(fail_key):
            self.stats.faults_injected += 1
            raise RuntimeError(f"{self.name}: simulated {operation} failure")

    # =========================================================================
    # Error injection
    # =========================================================================

    def inject_error(self, error_type: str, enabled: bool = True) -> None:
        """
        Enable or disable an injected fault.

        Args:
            error_type: One of "read_fail", "write_fail", "geometry_fail", "hang"
            enabled: True to inject, False to clear
        """
        if error_type not in INJECTABLE_ERRORS:
            raise ValueError(f"Unknown error type: {error_type}")
        self._inject_errors[error_type] = enabled
        logger.debug(f"{self.name}: {error_type} injection {'on' if enabled else 'off'}")

    def clear_errors(self) -> None:
        """Clear all injected faults."""
        self._inject_errors.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get simulator statistics."""
        return {
            "name": self.name,
            "state": self.state.value,
            "positions": self.positions,
            "moves": self.move_count,
            "commands_received": self.stats.commands_received,
            "commands_succeeded": self.stats.commands_succeeded,
            "commands_failed": self.stats.commands_failed,
            "faults_injected": self.stats.faults_injected,
        }
