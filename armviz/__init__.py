"""
ARMVIZ - Arm Mirroring and Diagnostics Service

Mirrors the joint positions of a source robotic arm onto a destination arm
in a background loop, and logs both arms' joint positions and geometries on
demand.

Architecture:
    - Dependency registry: arms are resolved by name at construction
    - Sync service: one cancellable background task per service instance
    - Diagnostics: on-demand reads, independent of the mirroring loop
"""

__version__ = "0.1.0"

# Core exceptions (import base class for convenience)
from armviz.exceptions import ArmVizError

# Core types
from armviz.types import ArmHandle, Geometry, JointPositions

# Dependency registry
from armviz.registry import Dependencies
