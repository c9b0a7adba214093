"""
Pytest Fixtures for ARMVIZ Testing.

Usage:
    # In test files, fixtures are automatically available:
    async def test_mirror(source_arm, destination_arm, deps):
        ...
"""

import logging
from typing import List, Tuple

import pytest

from armviz.config import MirrorConfig
from armviz.registry import Dependencies
from tests.fixtures.mock_arm import MockArm


# Short enough to keep the suite fast, long enough for ordering to be observable
FAST_PERIOD_SEC = 0.01


@pytest.fixture
def call_log() -> List[Tuple[str, str]]:
    """Call log shared by the source and destination mock arms."""
    return []


@pytest.fixture
def source_arm(call_log) -> MockArm:
    """Mock source arm with six joints."""
    return MockArm("left_arm", positions=[10.0, 20.0, 30.0, 40.0, 50.0, 60.0], call_log=call_log)


@pytest.fixture
def destination_arm(call_log) -> MockArm:
    """Mock destination arm starting at zeros."""
    return MockArm("right_arm", call_log=call_log)


@pytest.fixture
def deps(source_arm, destination_arm) -> Dependencies:
    """Dependency registry holding both mock arms."""
    return Dependencies({"left_arm": source_arm, "right_arm": destination_arm})


@pytest.fixture
def mirror_config() -> MirrorConfig:
    """Mirror configuration using the mock arms and a fast period."""
    return MirrorConfig(
        src_arm_name="left_arm",
        dst_arm_name="right_arm",
        sync_period_sec=FAST_PERIOD_SEC,
        stop_timeout_sec=1.0,
    )


@pytest.fixture(autouse=True)
def _reset_armviz_logger():
    """Undo setup_logging() so one test's level does not hide another's records."""
    armviz_logger = logging.getLogger("armviz")
    level = armviz_logger.level
    handlers = list(armviz_logger.handlers)
    yield
    for handler in armviz_logger.handlers:
        if handler not in handlers:
            handler.close()
    armviz_logger.handlers[:] = handlers
    armviz_logger.setLevel(level)
