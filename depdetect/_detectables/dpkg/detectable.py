"""Debian source package detectable."""

from pathlib import Path
from typing import Optional

from ..._graph import DependencyId, ExternalId, Forge, LazyDependencyGraphBuilder
from ...exceptions import DetectableStateError, FileProcessingError
from ...logging_config import logger
from ..detectable import Detectable, DetectableEnvironment
from ..executable import ExecutableResolver
from ..extraction import CodeLocation, Extraction, ExtractionEnvironment
from ..file_finder import FileFinder
from ..result import (
    DetectableResult,
    ExecutableNotFoundDetectableResult,
    FilesNotFoundDetectableResult,
    PassedDetectableResult,
)
from .control import read_changelog_version, read_control
from .resolver import DPKG_COMMAND, DpkgPkgDetailsResolver

DEBIAN_CONTROL = "debian/control"
DEBIAN_CHANGELOG = "debian/changelog"


class DpkgDetectable(Detectable):
    """Resolves the packages a Debian source package depends on against the installed system."""

    name = "Dpkg"
    language = "C/C++"
    forge = "Debian"
    requirements = "File: debian/control. Executable: dpkg."

    def __init__(
        self,
        environment: DetectableEnvironment,
        file_finder: Optional[FileFinder] = None,
        executable_resolver: Optional[ExecutableResolver] = None,
        details_resolver: Optional[DpkgPkgDetailsResolver] = None,
    ):
        super().__init__(environment)
        self.file_finder = file_finder or FileFinder()
        self.executable_resolver = executable_resolver or ExecutableResolver()
        self.details_resolver = details_resolver or DpkgPkgDetailsResolver()
        self.control_file: Optional[Path] = None

    def applicable(self) -> DetectableResult:
        self.control_file = self.file_finder.find_file(self.environment.directory, DEBIAN_CONTROL)
        if self.control_file is None:
            return FilesNotFoundDetectableResult(DEBIAN_CONTROL)
        return PassedDetectableResult()

    def extractable(self) -> DetectableResult:
        if self.executable_resolver.resolve(DPKG_COMMAND) is None:
            return ExecutableNotFoundDetectableResult(DPKG_COMMAND)
        return PassedDetectableResult()

    def extract(self, extraction_environment: ExtractionEnvironment) -> Extraction:
        if self.control_file is None:
            raise DetectableStateError(f"{self.name}: extract() called before a passing extractable() check")
        directory = self.environment.directory
        try:
            control = read_control(self.control_file)
        except FileProcessingError as e:
            return Extraction.exception(e)

        builder = LazyDependencyGraphBuilder()
        omitted = 0
        for package_name in control.dependencies:
            details = self.details_resolver.resolve_package_details(directory, package_name)
            if details is None:
                omitted += 1
                continue
            dependency_id = DependencyId(f"{details.package_name}:{details.package_architecture}")
            builder.set_dependency_info(
                dependency_id,
                details.package_name,
                details.package_version,
                ExternalId.architecture_id(
                    Forge.DEBIAN, details.package_name, details.package_version, details.package_architecture
                ),
            )
            builder.add_child_to_root(dependency_id)

        if omitted:
            logger.warning(
                f"{omitted} of {len(control.dependencies)} Debian package(s) could not be resolved and were omitted"
            )

        changelog = self.file_finder.find_file(directory, DEBIAN_CHANGELOG)
        version = read_changelog_version(changelog) if changelog else None
        external_id = ExternalId.name_version(Forge.DEBIAN, control.source, version) if control.source else None
        return Extraction.success(
            [CodeLocation(builder.build(), external_id=external_id)],
            project_name=control.source,
            project_version=version,
        )
