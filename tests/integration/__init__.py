"""
ARMVIZ Integration Tests

Run the full service against ArmSimulator instances. No hardware or
external processes are required.
"""
