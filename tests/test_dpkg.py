"""Tests for debian/control parsing, dpkg lookups and the Dpkg detectable."""

import logging
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from depdetect._detectables import (
    DetectableEnvironment,
    ExecutableNotFoundDetectableResult,
    ExecutableOutput,
    ExtractionEnvironment,
    FilesNotFoundDetectableResult,
)
from depdetect._detectables.dpkg import (
    DpkgDetectable,
    DpkgPkgDetailsResolver,
    PackageDetails,
    parse_control,
    parse_relationship_field,
)
from depdetect._detectables.dpkg.control import read_changelog_version
from depdetect._graph import ExternalId, Forge
from depdetect.exceptions import ExecutableRunnerError

TEST_DATA_DIR = Path(__file__).parent / "test-data"

ZLIB_STATUS = """Package: zlib1g
Status: install ok installed
Priority: required
Section: libs
Architecture: amd64
Multi-Arch: same
Version: 1:1.2.13.dfsg-1
Description: compression library - runtime
"""


def runner_returning(stdout, return_code=0):
    runner = MagicMock()
    runner.execute.return_value = ExecutableOutput(stdout=stdout, stderr="", return_code=return_code)
    return runner


class TestDebianControl(unittest.TestCase):
    """Test the debian/control readers."""

    def test_relationship_field(self):
        value = "debhelper-compat (= 13), libssl-dev | libssl1.0-dev, pkg-config [linux-any], ${misc:Depends}"
        self.assertEqual(parse_relationship_field(value), ["debhelper-compat", "libssl-dev", "pkg-config"])

    def test_control_fixture(self):
        control = parse_control((TEST_DATA_DIR / "debian" / "debian" / "control").read_text())

        self.assertEqual(control.source, "libdemo")
        self.assertEqual(
            control.dependencies,
            ["debhelper-compat", "zlib1g-dev", "libssl-dev", "pkg-config", "zlib1g"],
        )

    def test_duplicate_dependencies_are_listed_once(self):
        control = parse_control("Source: x\nBuild-Depends: zlib1g-dev\n\nPackage: x\nDepends: zlib1g-dev\n")
        self.assertEqual(control.dependencies, ["zlib1g-dev"])

    def test_changelog_version_is_latest_entry(self):
        version = read_changelog_version(TEST_DATA_DIR / "debian" / "debian" / "changelog")
        self.assertEqual(version, "1.4.2-1")


class TestDpkgPkgDetailsResolver(unittest.TestCase):
    """Test DpkgPkgDetailsResolver.resolve_package_details()."""

    def test_installed_package(self):
        runner = runner_returning(ZLIB_STATUS)
        resolver = DpkgPkgDetailsResolver(runner=runner)

        details = resolver.resolve_package_details(Path("/src"), "zlib1g")

        self.assertEqual(details, PackageDetails("zlib1g", "1:1.2.13.dfsg-1", "amd64"))
        runner.execute.assert_called_once_with(Path("/src"), "dpkg", ["-s", "zlib1g"])

    def test_not_installed_package(self):
        output = "Package: libfoo\nStatus: deinstall ok config-files\nArchitecture: amd64\nVersion: 1.0\n"
        resolver = DpkgPkgDetailsResolver(runner=runner_returning(output))

        self.assertIsNone(resolver.resolve_package_details(Path("/src"), "libfoo"))

    def test_missing_architecture_omits_package(self):
        output = "Package: libfoo\nStatus: install ok installed\nVersion: 1.0\n"
        resolver = DpkgPkgDetailsResolver(runner=runner_returning(output))

        with self.assertLogs("depdetect", level=logging.WARNING) as logs:
            self.assertIsNone(resolver.resolve_package_details(Path("/src"), "libfoo"))

        self.assertIn("Unable to determine all details for package libfoo", logs.output[0])

    def test_unknown_package_omits_package(self):
        resolver = DpkgPkgDetailsResolver(runner=runner_returning("", return_code=1))
        self.assertIsNone(resolver.resolve_package_details(Path("/src"), "nope"))

    def test_runner_error_is_logged(self):
        runner = MagicMock()
        runner.execute.side_effect = ExecutableRunnerError("Failed to run dpkg: not found")
        resolver = DpkgPkgDetailsResolver(runner=runner)

        with self.assertLogs("depdetect", level=logging.WARNING) as logs:
            self.assertIsNone(resolver.resolve_package_details(Path("/src"), "zlib1g"))

        self.assertIn("Error executing dpkg to get package info", logs.output[0])


class TestDpkgDetectable:
    """Test the Dpkg detectable lifecycle."""

    def test_not_applicable_without_control_file(self, tmp_path):
        result = DpkgDetectable(DetectableEnvironment(tmp_path)).applicable()
        assert isinstance(result, FilesNotFoundDetectableResult)

    def test_not_extractable_without_dpkg(self):
        resolver = MagicMock()
        resolver.resolve.return_value = None
        detectable = DpkgDetectable(DetectableEnvironment(TEST_DATA_DIR / "debian"), executable_resolver=resolver)

        assert isinstance(detectable.extractable(), ExecutableNotFoundDetectableResult)

    def test_extract_resolves_installed_packages(self, tmp_path):
        details = {
            "zlib1g-dev": PackageDetails("zlib1g-dev", "1:1.2.13.dfsg-1", "amd64"),
            "zlib1g": PackageDetails("zlib1g", "1:1.2.13.dfsg-1", "amd64"),
            "pkg-config": PackageDetails("pkg-config", "1.8.1-1", "amd64"),
        }
        details_resolver = MagicMock()
        details_resolver.resolve_package_details.side_effect = lambda directory, name: details.get(name)
        executable_resolver = MagicMock()
        executable_resolver.resolve.return_value = "/usr/bin/dpkg"
        detectable = DpkgDetectable(
            DetectableEnvironment(TEST_DATA_DIR / "debian"),
            executable_resolver=executable_resolver,
            details_resolver=details_resolver,
        )

        assert detectable.applicable().passed
        assert detectable.extractable().passed
        extraction = detectable.extract(ExtractionEnvironment(tmp_path))

        assert extraction.is_success
        assert extraction.project_name == "libdemo"
        assert extraction.project_version == "1.4.2-1"
        code_location = extraction.code_locations[0]
        assert code_location.external_id == ExternalId.name_version(Forge.DEBIAN, "libdemo", "1.4.2-1")
        roots = {d.external_id for d in code_location.dependency_graph.root_dependencies()}
        assert roots == {
            ExternalId.architecture_id(Forge.DEBIAN, name, d.package_version, "amd64") for name, d in details.items()
        }
