"""Extraction results produced by a detectable's extract phase."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from .._graph import DependencyGraph, ExternalId


class ExtractionResultType(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    EXCEPTION = "exception"


@dataclass
class CodeLocation:
    """Dependency data for one logical location (a project or sub-project).

    Attributes:
        dependency_graph: Resolved graph for this location
        external_id: Identity of the project owning the graph, if known
        source_path: Directory the graph was extracted from, if it differs
            from the scanned source path
    """

    dependency_graph: DependencyGraph
    external_id: Optional[ExternalId] = None
    source_path: Optional[Path] = None


@dataclass
class ExtractionEnvironment:
    """Scratch space handed to a detectable for its extract phase."""

    output_directory: Path


@dataclass
class Extraction:
    """
    Result of an extract phase.

    Attributes:
        result: SUCCESS, FAILURE or EXCEPTION
        code_locations: Code locations produced on success
        project_name: Project name discovered during extraction
        project_version: Project version discovered during extraction
        description: Failure description
        error: Exception captured by the detectable, if any
        metadata: Side artifacts keyed by name (e.g., the raw report file)
    """

    result: ExtractionResultType
    code_locations: List[CodeLocation] = field(default_factory=list)
    project_name: Optional[str] = None
    project_version: Optional[str] = None
    description: Optional[str] = None
    error: Optional[Exception] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate result state."""
        if self.result != ExtractionResultType.SUCCESS and self.code_locations:
            raise ValueError("Failed extraction must not carry code locations")
        if self.result != ExtractionResultType.SUCCESS and not self.description:
            raise ValueError("Failed extraction must have a description")

    @property
    def is_success(self) -> bool:
        return self.result == ExtractionResultType.SUCCESS

    def get_metadata(self, key: str) -> Optional[Any]:
        return self.metadata.get(key)

    @classmethod
    def success(
        cls,
        code_locations: List[CodeLocation],
        project_name: Optional[str] = None,
        project_version: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "Extraction":
        """Create a successful extraction."""
        return cls(
            result=ExtractionResultType.SUCCESS,
            code_locations=code_locations,
            project_name=project_name,
            project_version=project_version,
            metadata=metadata or {},
        )

    @classmethod
    def failure(cls, description: str) -> "Extraction":
        """Create a failed extraction."""
        return cls(result=ExtractionResultType.FAILURE, description=description)

    @classmethod
    def exception(cls, error: Exception) -> "Extraction":
        """Create a failed extraction caused by an exception the detectable caught."""
        return cls(result=ExtractionResultType.EXCEPTION, description=str(error) or type(error).__name__, error=error)
