"""Gradle detectable."""

from typing import Optional

from ...exceptions import DetectableStateError
from ..detectable import Detectable, DetectableEnvironment, DetectableOptions
from ..executable import ExecutableResolver
from ..extraction import Extraction, ExtractionEnvironment
from ..file_finder import FileFinder
from ..result import (
    DetectableResult,
    ExecutableNotFoundDetectableResult,
    FilesNotFoundDetectableResult,
    PassedDetectableResult,
)
from .extractor import GradleExtractor

BUILD_GRADLE = "build.gradle"
BUILD_GRADLE_KTS = "build.gradle.kts"
GRADLE_WRAPPER = "gradlew"


class GradleDetectable(Detectable):
    """Runs the Gradle dependencies task and parses its tree output."""

    name = "Gradle Native Inspector"
    language = "various"
    forge = "Maven Central"
    requirements = "File: build.gradle or build.gradle.kts. Executable: gradlew or gradle."

    def __init__(
        self,
        environment: DetectableEnvironment,
        file_finder: Optional[FileFinder] = None,
        executable_resolver: Optional[ExecutableResolver] = None,
        extractor: Optional[GradleExtractor] = None,
        options: Optional[DetectableOptions] = None,
    ):
        super().__init__(environment)
        options = options or DetectableOptions()
        self.file_finder = file_finder or FileFinder()
        self.executable_resolver = executable_resolver or ExecutableResolver()
        self.extractor = extractor or GradleExtractor(
            tasks=options.gradle_tasks,
            excluded_configurations=options.gradle_excluded_configurations,
        )
        self.gradle_exe: Optional[str] = None

    def applicable(self) -> DetectableResult:
        directory = self.environment.directory
        build_file = self.file_finder.find_file(directory, BUILD_GRADLE) or self.file_finder.find_file(
            directory, BUILD_GRADLE_KTS
        )
        if build_file is None:
            return FilesNotFoundDetectableResult(BUILD_GRADLE, BUILD_GRADLE_KTS)
        return PassedDetectableResult()

    def extractable(self) -> DetectableResult:
        self.gradle_exe = self.executable_resolver.resolve(
            "gradle", wrapper_directory=self.environment.directory, wrapper_name=GRADLE_WRAPPER
        )
        if self.gradle_exe is None:
            return ExecutableNotFoundDetectableResult("gradle")
        return PassedDetectableResult()

    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        if self.gradle_exe is None:
            raise DetectableStateError(f"{self.name}: extract() called before a passing extractable() check")
        return self.extractor.extract(self.environment.directory, self.gradle_exe, extraction_environment)
