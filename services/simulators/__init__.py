"""
ARMVIZ Simulators Package

Simulated devices for running and testing the mirroring service without
physical hardware. Simulators implement the same ArmHandle protocol as real
arm drivers and support:
- Configurable timing and call timeouts
- Fault injection for error testing
- Statistics and command history
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional
from datetime import datetime


class SimulatorState(Enum):
    """Common states for all simulators."""
    STOPPED = "stopped"
    RUNNING = "running"
    ERROR = "error"


@dataclass
class SimulatorStats:
    """Statistics tracked by simulators."""
    started_at: Optional[datetime] = None
    commands_received: int = 0
    commands_succeeded: int = 0
    commands_failed: int = 0
    faults_injected: int = 0

    def reset(self) -> None:
        """Reset all statistics."""
        self.started_at = None
        self.commands_received = 0
        self.commands_succeeded = 0
        self.commands_failed = 0
        self.faults_injected = 0


from .arm_simulator import ArmSimulator  # noqa: E402

__all__ = [
    "SimulatorState",
    "SimulatorStats",
    "ArmSimulator",
]
