"""Base class for ecosystem detectables.

A detectable wraps one ecosystem's marker-file checks and its parser behind a
three-phase lifecycle:

1. ``applicable()``: are the ecosystem's marker files present?
2. ``extractable()``: are the remaining preconditions met (companion files,
   executables)?
3. ``extract()``: parse the inputs and produce code locations.

``extract()`` is only called after both checks pass. Checks may remember what
they found (e.g., the lockfile path) for use by the later phases, so one
detectable instance serves exactly one directory.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from .extraction import Extraction, ExtractionEnvironment
from .result import DetectableResult


@dataclass
class DetectableEnvironment:
    """The directory a detectable is asked to inspect."""

    directory: Path


@dataclass
class DetectableOptions:
    """
    Options shared by the detectables of one run.

    Attributes:
        production_only: Skip development-only and optional dependencies
        gradle_tasks: Gradle tasks that print dependency trees
        gradle_excluded_configurations: Gradle configurations to leave out
    """

    production_only: bool = False
    gradle_tasks: tuple[str, ...] = ("dependencies",)
    gradle_excluded_configurations: tuple[str, ...] = field(default_factory=tuple)


class Detectable(ABC):
    """Lifecycle contract every ecosystem adapter implements."""

    name: ClassVar[str]
    language: ClassVar[str]
    forge: ClassVar[str]
    requirements: ClassVar[str]

    def __init__(self, environment: DetectableEnvironment):
        self.environment = environment

    @property
    def descriptive_name(self) -> str:
        return f"{self.name} - {self.language}"

    @abstractmethod
    def applicable(self) -> DetectableResult:
        """Check for the ecosystem's marker files."""

    @abstractmethod
    def extractable(self) -> DetectableResult:
        """Check the preconditions beyond the marker files.

        May raise ``DetectableError``; the caller converts it into a failed
        result.
        """

    @abstractmethod
    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        """Extract dependency graphs. Only called after both checks passed."""
