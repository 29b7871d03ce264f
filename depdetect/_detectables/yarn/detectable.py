"""Yarn lockfile detectable."""

from pathlib import Path
from typing import Optional

from ...exceptions import DetectableStateError
from ..detectable import Detectable, DetectableEnvironment, DetectableOptions
from ..extraction import Extraction, ExtractionEnvironment
from ..file_finder import FileFinder
from ..result import (
    DetectableResult,
    FileNotFoundDetectableResult,
    FilesNotFoundDetectableResult,
    PassedDetectableResult,
)
from .extractor import YarnExtractor

YARN_LOCK = "yarn.lock"
PACKAGE_JSON = "package.json"


class YarnLockDetectable(Detectable):
    """Merges package.json with yarn.lock."""

    name = "Yarn"
    language = "Node JS"
    forge = "npmjs"
    requirements = "Files: yarn.lock and package.json."

    def __init__(
        self,
        environment: DetectableEnvironment,
        file_finder: Optional[FileFinder] = None,
        extractor: Optional[YarnExtractor] = None,
        options: Optional[DetectableOptions] = None,
    ):
        super().__init__(environment)
        options = options or DetectableOptions()
        self.file_finder = file_finder or FileFinder()
        self.extractor = extractor or YarnExtractor(production_only=options.production_only)
        self.yarn_lock: Optional[Path] = None
        self.package_json: Optional[Path] = None

    def applicable(self) -> DetectableResult:
        self.yarn_lock = self.file_finder.find_file(self.environment.directory, YARN_LOCK)
        if self.yarn_lock is None:
            return FilesNotFoundDetectableResult(YARN_LOCK)
        return PassedDetectableResult()

    def extractable(self) -> DetectableResult:
        self.package_json = self.file_finder.find_file(self.environment.directory, PACKAGE_JSON)
        if self.package_json is None:
            return FileNotFoundDetectableResult(PACKAGE_JSON)
        return PassedDetectableResult()

    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        if self.yarn_lock is None or self.package_json is None:
            raise DetectableStateError(f"{self.name}: extract() called before a passing extractable() check")
        return self.extractor.extract(self.yarn_lock, self.package_json)
