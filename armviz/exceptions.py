"""
ARMVIZ Custom Exceptions

Provides the exception hierarchy for the arm mirroring service. These
exceptions let the host tell configuration problems, dependency problems,
device failures and bad diagnostic requests apart without parsing messages.

Exception Hierarchy:
    ArmVizError (base)
    ├── ConfigurationError
    ├── DependencyResolutionError
    ├── DeviceError
    │   ├── DeviceReadError
    │   ├── DeviceWriteError
    │   └── DeviceTimeoutError
    └── CommandError
        └── UnsupportedCommandError
"""

from typing import Any, Optional, Sequence


class ArmVizError(Exception):
    """Base exception for all ARMVIZ errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional error context
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(ArmVizError):
    """Error in configuration file or settings.

    Raised when a required setting is missing, the configuration file cannot
    be read, or a value fails validation.
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
    ) -> None:
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_file:
            details["config_file"] = config_file
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


class DependencyResolutionError(ArmVizError):
    """A named dependency could not be resolved to a usable resource."""

    def __init__(
        self,
        message: str,
        dependency: Optional[str] = None,
        available: Optional[Sequence[str]] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if dependency:
            details["dependency"] = dependency
        if available is not None:
            details["available"] = sorted(available)
        super().__init__(message, details)
        self.dependency = dependency
        self.available = sorted(available) if available is not None else []


# =============================================================================
# Device Errors
# =============================================================================

class DeviceError(ArmVizError):
    """Base class for arm device operation errors."""

    def __init__(
        self,
        message: str,
        device_type: Optional[str] = None,
        device_id: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs
        if device_type:
            details["device_type"] = device_type
        if device_id:
            details["device_id"] = device_id
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
        self.device_type = device_type
        self.device_id = device_id
        self.operation = operation


class DeviceReadError(DeviceError):
    """Reading state (joint positions, geometries) from an arm failed."""
    pass


class DeviceWriteError(DeviceError):
    """Commanding an arm to move failed."""
    pass


class DeviceTimeoutError(DeviceError):
    """Device call exceeded its allowed time limit."""

    def __init__(
        self,
        message: str,
        device_type: Optional[str] = None,
        device_id: Optional[str] = None,
        operation: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        super().__init__(message, device_type, device_id, operation)
        if timeout_seconds is not None:
            self.details["timeout_seconds"] = timeout_seconds
        self.timeout_seconds = timeout_seconds


# =============================================================================
# Command Errors
# =============================================================================

class CommandError(ArmVizError):
    """Base class for command interface errors."""
    pass


class UnsupportedCommandError(CommandError):
    """The command request names nothing this service understands."""

    def __init__(self, message: str = "unknown command", command: Optional[str] = None) -> None:
        details: dict[str, Any] = {}
        if command:
            details["command"] = command
        super().__init__(message, details)
        self.command = command
