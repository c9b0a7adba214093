"""
Diagnostic command model.

Hosts call the service with a free-form mapping; it is parsed into a
DiagnosticRequest at the boundary so the rest of the code works with an
enumerated command kind and a structured result.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, TYPE_CHECKING

from armviz.exceptions import UnsupportedCommandError

if TYPE_CHECKING:
    from services.diagnostics import DiagnosticSnapshot


class CommandKind(Enum):
    """Commands the service understands."""
    LOG = "log"


@dataclass(frozen=True)
class DiagnosticRequest:
    """A parsed command request. The value under the command key is not used."""
    kind: CommandKind


@dataclass
class CommandResult:
    """Outcome of a successfully executed command."""
    kind: CommandKind
    success: bool = True
    snapshot: Optional["DiagnosticSnapshot"] = None

    def to_dict(self) -> Dict[str, Any]:
        """Render the response returned to the host."""
        return {"success": self.success}


def parse_command(cmd: Mapping[str, Any]) -> DiagnosticRequest:
    """
    Parse a host command mapping.

    A mapping containing the key "log" (any value) requests a diagnostic
    report. Anything else, including an empty mapping, is rejected.

    Raises:
        UnsupportedCommandError: No recognized command key present
    """
    for kind in CommandKind:
        if kind.value in cmd:
            return DiagnosticRequest(kind=kind)
    raise UnsupportedCommandError(
        "unknown command", command=", ".join(sorted(str(k) for k in cmd)) or None
    )
