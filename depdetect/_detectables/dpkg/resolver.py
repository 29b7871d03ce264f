"""Installed package lookups through ``dpkg -s``."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ...exceptions import ExecutableRunnerError
from ...logging_config import logger
from ..executable import ExecutableRunner

DPKG_COMMAND = "dpkg"
DPKG_STATUS_ARGS = ["-s"]

_FIELD_SEPARATOR = re.compile(r":\s+")


@dataclass(frozen=True)
class PackageDetails:
    package_name: str
    package_version: str
    package_architecture: str


class DpkgPkgDetailsResolver:
    """Asks dpkg for the installed version and architecture of a package."""

    def __init__(self, runner: Optional[ExecutableRunner] = None):
        self.runner = runner or ExecutableRunner()

    def resolve_package_details(self, working_directory: Path, package_name: str) -> Optional[PackageDetails]:
        """
        Look up an installed package.

        Args:
            working_directory: Directory to run dpkg in
            package_name: Debian package name

        Returns:
            PackageDetails, or None if the package is not installed, dpkg did not
            report a version and architecture, or dpkg could not be run
        """
        try:
            output = self.runner.execute(working_directory, DPKG_COMMAND, [*DPKG_STATUS_ARGS, package_name])
        except ExecutableRunnerError as e:
            logger.warning(f"Error executing dpkg to get package info: {e}")
            return None
        return self._parse_package_details(package_name, output.stdout)

    def _parse_package_details(self, package_name: str, output: str) -> Optional[PackageDetails]:
        architecture: Optional[str] = None
        version: Optional[str] = None

        for line in output.split("\n"):
            parts = _FIELD_SEPARATOR.split(line)
            label = parts[0].strip()
            value = parts[1].strip() if len(parts) > 1 else ""

            if label == "Status":
                if not value:
                    logger.warning(f"Missing value for Status field for package {package_name}")
                elif "installed" not in value:
                    logger.debug(f"Package {package_name} is not installed; Status is: {value}")
                    return None
            elif label == "Architecture" and architecture is None:
                architecture = self._field_value(package_name, label, value)
            elif label == "Version" and version is None:
                version = self._field_value(package_name, label, value)

        if version is None or architecture is None:
            logger.warning(
                f"Unable to determine all details for package {package_name} "
                f"(version: {version}; architecture: {architecture}); this package will be omitted from the output"
            )
            return None
        return PackageDetails(package_name, version, architecture)

    @staticmethod
    def _field_value(package_name: str, label: str, value: str) -> Optional[str]:
        if not value:
            logger.warning(f"Package {package_name}: {label} field value is missing")
            return None
        return value
