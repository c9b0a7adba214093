"""
ARMVIZ Shared Type Definitions

Type aliases, data structures and the arm-handle protocol shared by the
synchronizer, the diagnostic reporter and the arm implementations.

Usage:
    from armviz.types import ArmHandle, Geometry, JointPositions
"""

from dataclasses import dataclass, field
from typing import (
    Any,
    Optional,
    Protocol,
    Sequence,
    TypeAlias,
    runtime_checkable,
)


# =============================================================================
# Basic Type Aliases
# =============================================================================

Meters: TypeAlias = float

# One value per controllable joint; units are defined by the arm device
JointPositions: TypeAlias = Sequence[float]

# Free-form per-call options forwarded to the device
Extra: TypeAlias = Optional[dict[str, Any]]


# =============================================================================
# Geometry
# =============================================================================

@dataclass(frozen=True)
class Geometry:
    """Spatial shape occupied by one part of an arm.

    Attributes:
        label: Name of the part (e.g. "link_2")
        kind: Shape kind ("box", "sphere", "capsule")
        center: Center of the shape in the arm's base frame (meters)
        dimensions: Shape dimensions in meters, meaning depends on ``kind``
    """
    label: str
    kind: str
    center: tuple[Meters, Meters, Meters]
    dimensions: tuple[Meters, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "label": self.label,
            "kind": self.kind,
            "center": list(self.center),
            "dimensions": list(self.dimensions),
        }


Geometries: TypeAlias = list[Geometry]


# =============================================================================
# Protocol Types
# =============================================================================

@runtime_checkable
class ArmHandle(Protocol):
    """Capability reference to one robotic arm.

    Every call may fail with any exception and may be interrupted by
    cancelling the task awaiting it. Implementations own their call timeouts.
    """

    async def get_joint_positions(self, extra: Extra = None) -> JointPositions:
        """Read the arm's current joint positions."""
        ...

    async def move_to_joint_positions(
        self, positions: JointPositions, extra: Extra = None
    ) -> None:
        """Command the arm to move to the given joint positions."""
        ...

    async def get_geometries(self, extra: Extra = None) -> Geometries:
        """Read the shapes the arm occupies at its current pose."""
        ...
