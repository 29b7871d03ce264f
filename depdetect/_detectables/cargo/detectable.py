"""Cargo detectable."""

from pathlib import Path
from typing import Optional

from ...exceptions import DetectableStateError
from ..detectable import Detectable, DetectableEnvironment
from ..extraction import Extraction, ExtractionEnvironment
from ..file_finder import FileFinder
from ..result import (
    CargoLockfileNotFoundDetectableResult,
    DetectableResult,
    FilesNotFoundDetectableResult,
    PassedDetectableResult,
)
from .extractor import CargoExtractor

CARGO_LOCK = "Cargo.lock"
CARGO_TOML = "Cargo.toml"


class CargoDetectable(Detectable):
    name = "Cargo"
    language = "Rust"
    forge = "crates"
    requirements = "Files: Cargo.lock, Cargo.toml"

    def __init__(
        self,
        environment: DetectableEnvironment,
        file_finder: Optional[FileFinder] = None,
        extractor: Optional[CargoExtractor] = None,
    ):
        super().__init__(environment)
        self.file_finder = file_finder or FileFinder()
        self.extractor = extractor or CargoExtractor()
        self.cargo_lock: Optional[Path] = None
        self.cargo_toml: Optional[Path] = None

    def applicable(self) -> DetectableResult:
        directory = self.environment.directory
        self.cargo_lock = self.file_finder.find_file(directory, CARGO_LOCK)
        self.cargo_toml = self.file_finder.find_file(directory, CARGO_TOML)
        if self.cargo_lock is None and self.cargo_toml is None:
            return FilesNotFoundDetectableResult(CARGO_LOCK, CARGO_TOML)
        return PassedDetectableResult()

    def extractable(self) -> DetectableResult:
        if self.cargo_lock is None:
            return CargoLockfileNotFoundDetectableResult(str(Path(self.environment.directory).resolve()))
        return PassedDetectableResult()

    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        if self.cargo_lock is None:
            raise DetectableStateError(f"{self.name}: extract() called before a passing extractable() check")
        return self.extractor.extract(self.cargo_lock, self.cargo_toml)
