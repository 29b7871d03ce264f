"""Conversion of extraction code locations into uploadable records."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .._detectables.extraction import Extraction
from .._graph import DependencyGraph, ExternalId
from ..logging_config import logger


@dataclass(frozen=True)
class DetectCodeLocation:
    """
    A code location ready for serialization and upload.

    Attributes:
        code_location_name: Unique name within the run
        dependency_graph: Resolved dependency graph
        external_id: Identity of the owning project (a path id when unknown)
        source_path: Directory the graph belongs to
        creator_name: Detector that produced the graph
    """

    code_location_name: str
    dependency_graph: DependencyGraph
    external_id: ExternalId
    source_path: Path
    creator_name: str


class CodeLocationConverter:
    """Names and normalizes the code locations of an extraction."""

    def to_detect_code_locations(
        self, source_path: Path, extraction: Extraction, creator_name: str
    ) -> Dict[str, DetectCodeLocation]:
        """
        Convert every code location of a successful extraction.

        Args:
            source_path: Scanned source directory
            extraction: Successful extraction
            creator_name: Name of the detector that produced it

        Returns:
            Mapping of code location name to DetectCodeLocation, in extraction order
        """
        source_path = Path(source_path)
        converted: Dict[str, DetectCodeLocation] = {}
        for code_location in extraction.code_locations:
            location_path = Path(code_location.source_path) if code_location.source_path else source_path
            external_id = code_location.external_id or ExternalId.path_id(str(location_path))
            name = self._unique_name(
                self._code_location_name(source_path, location_path, extraction.project_name, creator_name),
                converted,
            )
            converted[name] = DetectCodeLocation(
                code_location_name=name,
                dependency_graph=code_location.dependency_graph,
                external_id=external_id,
                source_path=location_path,
                creator_name=creator_name,
            )
        logger.debug(f"{creator_name}: converted {len(converted)} code location(s)")
        return converted

    @staticmethod
    def _code_location_name(
        source_path: Path, location_path: Path, project_name: Optional[str], creator_name: str
    ) -> str:
        base = project_name or source_path.name or str(source_path)
        try:
            relative = location_path.relative_to(source_path).as_posix()
        except ValueError:
            relative = location_path.as_posix()
        pieces = [base] if relative in ("", ".") else [base, relative]
        return "/".join(pieces) + f" {creator_name.lower()}"

    @staticmethod
    def _unique_name(name: str, existing: Dict[str, DetectCodeLocation]) -> str:
        if name not in existing:
            return name
        suffix = 2
        while f"{name} ({suffix})" in existing:
            suffix += 1
        return f"{name} ({suffix})"
