"""
Dependency registry for ARMVIZ.

The host registers every resource it has built under a name; the service
resolves the arms its configuration names from here at construction time.
"""

import logging
from typing import Any, Dict, List, Optional

from armviz.exceptions import DependencyResolutionError
from armviz.types import ArmHandle

logger = logging.getLogger(__name__)


class Dependencies:
    """
    Name-to-resource registry handed to the service constructor.

    Example:
        >>> deps = Dependencies()
        >>> deps.register("left_arm", left)
        >>> arm = deps.get_arm("left_arm")
    """

    def __init__(self, resources: Optional[Dict[str, Any]] = None):
        self._resources: Dict[str, Any] = dict(resources or {})

    def register(self, name: str, resource: Any) -> None:
        """
        Register a resource.

        Args:
            name: Resource identifier used in configuration
            resource: The resource instance
        """
        if name in self._resources:
            logger.warning(f"Replacing registered resource: {name}")
        self._resources[name] = resource
        logger.debug(f"Registered resource: {name}")

    def get(self, name: str) -> Optional[Any]:
        """Get a resource by name, or None if not registered."""
        return self._resources.get(name)

    def names(self) -> List[str]:
        """List all registered resource names."""
        return list(self._resources.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._resources

    def __len__(self) -> int:
        return len(self._resources)

    def get_arm(self, name: str) -> ArmHandle:
        """
        Resolve a registered arm.

        Args:
            name: Arm identifier

        Returns:
            The arm handle registered under ``name``

        Raises:
            DependencyResolutionError: Name unknown, or the resource is not an arm
        """
        if name not in self._resources:
            raise DependencyResolutionError(
                f"arm '{name}' not found in dependencies",
                dependency=name,
                available=self.names(),
            )
        resource = self._resources[name]
        if not isinstance(resource, ArmHandle):
            raise DependencyResolutionError(
                f"resource '{name}' is not an arm ({type(resource).__name__})",
                dependency=name,
            )
        return resource
