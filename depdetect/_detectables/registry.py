"""Detectable registry for managing ecosystem detectables."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..logging_config import logger
from .cargo import CargoDetectable
from .detectable import Detectable, DetectableEnvironment, DetectableOptions
from .dpkg import DpkgDetectable
from .gradle import GradleDetectable
from .yarn import YarnLockDetectable

DetectableFactory = Callable[[DetectableEnvironment], Detectable]


class DetectableRegistry:
    """
    Registry of detectable factories.

    A detectable instance inspects a single directory, so the registry holds
    factories and creates fresh detectables for every directory scanned.

    Example:
        registry = DetectableRegistry()
        registry.register("yarn", YarnLockDetectable)
        detectables = registry.create_detectables(Path("."))
    """

    def __init__(self) -> None:
        self._factories: Dict[str, DetectableFactory] = {}

    def register(self, name: str, factory: DetectableFactory) -> None:
        """
        Register a detectable factory.

        Args:
            name: Unique key for the detectable (e.g., "yarn")
            factory: Callable creating the detectable for an environment
        """
        if name in self._factories:
            logger.debug(f"Replacing registered detectable: {name}")
        self._factories[name] = factory
        logger.debug(f"Registered detectable: {name}")

    def names(self) -> List[str]:
        return list(self._factories)

    def factories(self, only: Optional[List[str]] = None) -> Dict[str, DetectableFactory]:
        """
        Registered factories, in registration order.

        Args:
            only: Restrict to these registered names

        Returns:
            Mapping of detectable name to factory
        """
        return {name: factory for name, factory in self._factories.items() if only is None or name in only}

    def create_detectables(self, directory: Path) -> List[Detectable]:
        """Create one detectable per registered factory for ``directory``."""
        environment = DetectableEnvironment(directory=Path(directory))
        return [factory(environment) for factory in self._factories.values()]


def create_default_registry(options: Optional[DetectableOptions] = None) -> DetectableRegistry:
    """
    Create a registry with all built-in detectables.

    Args:
        options: Options shared by the detectables

    Returns:
        DetectableRegistry with the Gradle, Yarn, Cargo and Dpkg detectables
    """
    options = options or DetectableOptions()
    registry = DetectableRegistry()
    registry.register("gradle", lambda env: GradleDetectable(env, options=options))
    registry.register("yarn", lambda env: YarnLockDetectable(env, options=options))
    registry.register("cargo", CargoDetectable)
    registry.register("dpkg", DpkgDetectable)
    return registry
