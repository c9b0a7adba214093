"""
ARMVIZ Services Package

Service modules used by the arm mirroring service, organized by function.

Mirroring (services.sync)
-------------------------
- Synchronizer: Background loop copying source joint positions to the
  destination arm
- SyncSession: Live state of one mirroring loop

Diagnostics (services.diagnostics)
----------------------------------
- DiagnosticReporter: On-demand snapshot of both arms' positions and
  geometries

Simulators (services.simulators)
--------------------------------
- ArmSimulator: Simulated arm implementing the ArmHandle protocol
"""
