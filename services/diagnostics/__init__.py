"""
ARMVIZ Diagnostics Service

On-demand logging of both mirrored arms' positions and geometries.
"""

from .reporter import ArmSnapshot, DiagnosticReporter, DiagnosticSnapshot

__all__ = ["ArmSnapshot", "DiagnosticReporter", "DiagnosticSnapshot"]
