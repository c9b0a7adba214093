"""
ARMVIZ Test Suite

Test Organization:
    tests/
    ├── __init__.py          # This file
    ├── conftest.py          # Shared fixtures
    ├── fixtures/            # Mock arms
    ├── integration/         # Service running against simulated arms
    └── unit/                # Unit tests (no external dependencies)

Running Tests:
    # Run all tests
    pytest tests/

Requirements:
    pip install -e .[test]
"""
