"""
ARMVIZ Test Fixtures Package.

Provides a scriptable mock arm for testing the synchronizer, the diagnostic
reporter and the service without a simulator's timing.

Usage:
    from tests.fixtures import MockArm

    arm = MockArm("left", positions=[0.0, 1.0, 2.0])
    arm.inject_error("get_joint_positions")
"""

from tests.fixtures.helpers import wait_until
from tests.fixtures.mock_arm import MockArm

__all__ = ["MockArm", "wait_until"]
