"""Ecosystem detectables.

Each detectable checks a directory for one ecosystem's marker files, verifies
its remaining preconditions and extracts dependency graphs.

Usage:
    from depdetect._detectables import DetectableOptions, create_default_registry

    registry = create_default_registry(DetectableOptions(production_only=True))
    detectables = registry.create_detectables(Path("."))
"""

from .cargo import CargoDetectable
from .detectable import Detectable, DetectableEnvironment, DetectableOptions
from .dpkg import DpkgDetectable, DpkgPkgDetailsResolver, PackageDetails
from .executable import ExecutableOutput, ExecutableResolver, ExecutableRunner
from .extraction import CodeLocation, Extraction, ExtractionEnvironment, ExtractionResultType
from .file_finder import FileFinder
from .gradle import GradleDetectable
from .registry import DetectableRegistry, create_default_registry
from .result import (
    CargoLockfileNotFoundDetectableResult,
    DetectableResult,
    ExceptionDetectableResult,
    ExecutableNotFoundDetectableResult,
    FileNotFoundDetectableResult,
    FilesNotFoundDetectableResult,
    PassedDetectableResult,
)
from .status_codes import DETECTOR_RESULT_STATUS_CODES, DetectorStatusCode, status_code_for
from .yarn import YarnLockDetectable

__all__ = [
    # Lifecycle
    "Detectable",
    "DetectableEnvironment",
    "DetectableOptions",
    "Extraction",
    "ExtractionEnvironment",
    "ExtractionResultType",
    "CodeLocation",
    # Results
    "DetectableResult",
    "PassedDetectableResult",
    "FilesNotFoundDetectableResult",
    "FileNotFoundDetectableResult",
    "CargoLockfileNotFoundDetectableResult",
    "ExecutableNotFoundDetectableResult",
    "ExceptionDetectableResult",
    "DetectorStatusCode",
    "DETECTOR_RESULT_STATUS_CODES",
    "status_code_for",
    # Collaborators
    "FileFinder",
    "ExecutableOutput",
    "ExecutableResolver",
    "ExecutableRunner",
    "DpkgPkgDetailsResolver",
    "PackageDetails",
    # Detectables
    "CargoDetectable",
    "DpkgDetectable",
    "GradleDetectable",
    "YarnLockDetectable",
    # Registry
    "DetectableRegistry",
    "create_default_registry",
]
