"""Tests for Cargo.lock parsing and the Cargo detectable."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from depdetect._detectables import (
    CargoLockfileNotFoundDetectableResult,
    DetectableEnvironment,
    ExtractionEnvironment,
    FilesNotFoundDetectableResult,
)
from depdetect._detectables.cargo import CargoDetectable, CargoExtractor, CargoLockParser
from depdetect._graph import ExternalId, Forge
from depdetect.exceptions import MissingExternalIdError

TEST_DATA_DIR = Path(__file__).parent / "test-data"


def crate(name, version):
    return ExternalId.name_version(Forge.CARGO, name, version)


class TestCargoLockParser(unittest.TestCase):
    """Test CargoLockParser.parse()."""

    def test_local_package_dependencies_are_roots(self):
        lock_data = {
            "package": [
                {"name": "app", "version": "0.1.0", "dependencies": ["log"]},
                {"name": "log", "version": "0.4.17", "source": "registry+https://github.com/rust-lang/crates.io-index"},
            ]
        }

        graph = CargoLockParser().parse(lock_data)

        self.assertEqual(graph.edges(), frozenset({(None, crate("log", "0.4.17"))}))
        self.assertFalse(graph.has_dependency(crate("app", "0.1.0")))

    def test_versioned_references_select_between_versions(self):
        lock_data = {
            "package": [
                {"name": "app", "version": "0.1.0", "dependencies": ["bytes 1.4.0"]},
                {"name": "bytes", "version": "0.5.6", "source": "registry"},
                {"name": "bytes", "version": "1.4.0", "source": "registry"},
            ]
        }

        graph = CargoLockParser().parse(lock_data)

        self.assertIn((None, crate("bytes", "1.4.0")), graph.edges())
        # Locked but not referenced by anything
        self.assertIn((None, crate("bytes", "0.5.6")), graph.edges())

    def test_reference_with_source_suffix(self):
        lock_data = {
            "package": [
                {"name": "app", "version": "0.1.0", "dependencies": ["log 0.4.17 (registry+https://example.invalid)"]},
                {"name": "log", "version": "0.4.17", "source": "registry+https://example.invalid"},
            ]
        }

        graph = CargoLockParser().parse(lock_data)

        self.assertEqual(graph.root_dependencies()[0].external_id, crate("log", "0.4.17"))

    def test_unlocked_reference_fails(self):
        lock_data = {"package": [{"name": "app", "version": "0.1.0", "dependencies": ["ghost"]}]}

        with self.assertRaises(MissingExternalIdError):
            CargoLockParser().parse(lock_data)

    def test_empty_lockfile(self):
        self.assertEqual(len(CargoLockParser().parse({})), 0)


class TestCargoExtractor(unittest.TestCase):
    """Test CargoExtractor.extract() against the fixture project."""

    def setUp(self):
        self.directory = TEST_DATA_DIR / "cargo"

    def test_extract_fixture(self):
        extraction = CargoExtractor().extract(self.directory / "Cargo.lock", self.directory / "Cargo.toml")

        self.assertTrue(extraction.is_success)
        self.assertEqual(extraction.project_name, "demo")
        self.assertEqual(extraction.project_version, "0.1.0")

        code_location = extraction.code_locations[0]
        self.assertEqual(code_location.external_id, crate("demo", "0.1.0"))
        graph = code_location.dependency_graph
        self.assertEqual(
            {d.external_id for d in graph.root_dependencies()},
            {crate("rand", "0.8.5"), crate("serde", "1.0.150"), crate("rand", "0.7.3")},
        )
        self.assertEqual(graph.get_children(crate("serde", "1.0.150"))[0].external_id, crate("serde_derive", "1.0.150"))
        self.assertEqual(graph.get_children(crate("rand", "0.8.5"))[0].external_id, crate("rand_core", "0.6.4"))
        self.assertEqual(len(graph), 6)

    def test_extract_without_manifest(self):
        extraction = CargoExtractor().extract(self.directory / "Cargo.lock")

        self.assertTrue(extraction.is_success)
        self.assertIsNone(extraction.project_name)
        self.assertIsNone(extraction.code_locations[0].external_id)

    def test_unlocked_reference_is_failure(self):
        parser = CargoLockParser()
        extractor = CargoExtractor(parser=parser)
        with patch.object(parser, "parse", side_effect=MissingExternalIdError("ghost")):
            extraction = extractor.extract(self.directory / "Cargo.lock")

        self.assertFalse(extraction.is_success)
        self.assertEqual(extraction.description, "Cargo.lock references a crate that is not locked: ghost")

    def test_invalid_toml_is_exception(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            lock_file = Path(tmp_dir) / "Cargo.lock"
            lock_file.write_text("[[package]\nname = ")
            extraction = CargoExtractor().extract(lock_file)

        self.assertFalse(extraction.is_success)
        self.assertIsNotNone(extraction.error)

    def test_workspace_inherited_version_is_ignored(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            manifest = Path(tmp_dir) / "Cargo.toml"
            manifest.write_text('[package]\nname = "member"\nversion.workspace = true\n')
            extraction = CargoExtractor().extract(self.directory / "Cargo.lock", manifest)

        self.assertEqual(extraction.project_name, "member")
        self.assertIsNone(extraction.project_version)


class TestCargoDetectable:
    """Test the Cargo detectable lifecycle checks."""

    def test_not_applicable_in_empty_directory(self, tmp_path):
        result = CargoDetectable(DetectableEnvironment(tmp_path)).applicable()

        assert isinstance(result, FilesNotFoundDetectableResult)
        assert result.to_description() == "No files were found with any of the patterns: Cargo.lock, Cargo.toml"

    def test_manifest_without_lockfile_is_not_extractable(self, tmp_path):
        (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\n')
        detectable = CargoDetectable(DetectableEnvironment(tmp_path))

        assert detectable.applicable().passed
        result = detectable.extractable()

        assert isinstance(result, CargoLockfileNotFoundDetectableResult)
        assert str(tmp_path.resolve()) in result.to_description()
        assert "cargo generate-lockfile" in result.to_description()

    def test_full_lifecycle(self, tmp_path):
        detectable = CargoDetectable(DetectableEnvironment(TEST_DATA_DIR / "cargo"))

        assert detectable.applicable().passed
        assert detectable.extractable().passed
        extraction = detectable.extract(ExtractionEnvironment(tmp_path))

        assert extraction.is_success
        assert extraction.project_name == "demo"
