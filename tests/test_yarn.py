"""Tests for yarn.lock parsing, the package.json/yarn.lock merge and the Yarn detectable."""

import json
import logging
import unittest
from unittest.mock import patch

import pytest
import yaml

from depdetect._detectables import (
    DetectableEnvironment,
    DetectableOptions,
    ExtractionEnvironment,
    FileNotFoundDetectableResult,
    FilesNotFoundDetectableResult,
)
from depdetect._detectables.yarn import (
    PackageJson,
    YarnExtractor,
    YarnLockDetectable,
    YarnLockParser,
    YarnTransformer,
)
from depdetect._detectables.yarn.models import YarnLockDependency, YarnLockEntryId, split_dependency_key
from depdetect._graph import DependencyId, ExternalId, Forge
from depdetect.exceptions import FileProcessingError


def npm(name, version):
    return ExternalId.name_version(Forge.NPM, name, version)


class TestSplitDependencyKey(unittest.TestCase):
    """Test splitting name@range keys."""

    def test_plain_name(self):
        self.assertEqual(split_dependency_key("lib-a@^1.0"), ("lib-a", "^1.0"))

    def test_scoped_name_keeps_leading_at(self):
        self.assertEqual(split_dependency_key("@babel/core@^7.0.0"), ("@babel/core", "^7.0.0"))

    def test_key_without_range(self):
        self.assertEqual(split_dependency_key("lib-a"), ("lib-a", ""))
        self.assertEqual(split_dependency_key("@babel/core"), ("@babel/core", ""))


class TestYarnLockParser:
    """Test YarnLockParser against classic and berry lockfiles."""

    def test_classic_lockfile(self, test_data_dir):
        yarn_lock = YarnLockParser().parse_file(test_data_dir / "yarn-v1" / "yarn.lock")

        assert yarn_lock.path == test_data_dir / "yarn-v1" / "yarn.lock"
        assert len(yarn_lock.entries) == 6
        lib_a = next(e for e in yarn_lock.entries if e.version == "1.2.0")
        assert lib_a.ids == [YarnLockEntryId("lib-a", "^1.0"), YarnLockEntryId("lib-a", "^1.1")]
        assert lib_a.dependencies == [
            YarnLockDependency("lib-b", "^2.0"),
            YarnLockDependency("fsevents", "~2.3.1", optional=True),
        ]

    def test_classic_scoped_key(self, test_data_dir):
        yarn_lock = YarnLockParser().parse_file(test_data_dir / "yarn-v1" / "yarn.lock")
        assert yarn_lock.entries[0].ids == [YarnLockEntryId("@scope/util", "^3.1.0")]
        assert yarn_lock.entries[0].version == "3.1.4"

    def test_berry_lockfile(self, test_data_dir):
        yarn_lock = YarnLockParser().parse_file(test_data_dir / "yarn-berry" / "yarn.lock")

        # __metadata is not a package
        assert [str(e.ids[0]) for e in yarn_lock.entries] == [
            "@acme/berry-app@workspace:.",
            "lib-a@^1.0",
            "@types/node@^18.0.0",
            "fsevents@~2.3.1",
        ]
        lib_a = yarn_lock.entries[1]
        assert lib_a.version == "1.2.0"
        assert lib_a.dependencies == [
            YarnLockDependency("@types/node", "^18.0.0"),
            YarnLockDependency("fsevents", "~2.3.1", optional=True),
        ]

    def test_berry_lockfile_is_loaded_as_yaml(self, test_data_dir):
        with patch("depdetect._detectables.yarn.lock_parser.yaml.safe_load", wraps=yaml.safe_load) as safe_load:
            YarnLockParser().parse_file(test_data_dir / "yarn-berry" / "yarn.lock")
        safe_load.assert_called_once()

    def test_classic_lockfile_is_not_loaded_as_yaml(self, test_data_dir):
        with patch("depdetect._detectables.yarn.lock_parser.yaml.safe_load") as safe_load:
            YarnLockParser().parse_file(test_data_dir / "yarn-v1" / "yarn.lock")
        safe_load.assert_not_called()

    def test_berry_multi_key_entry(self):
        lines = [
            "__metadata:",
            "  version: 6",
            "",
            '"lib-a@npm:^1.0, lib-a@npm:^1.1":',
            "  version: 1.2.0",
            "  dependencies:",
            '    lib-b: "npm:^2.0"',
            "  dependenciesMeta:",
            "    lib-b:",
            "      optional: true",
        ]
        yarn_lock = YarnLockParser().parse(lines)
        [entry] = yarn_lock.entries
        assert entry.ids == [YarnLockEntryId("lib-a", "^1.0"), YarnLockEntryId("lib-a", "^1.1")]
        assert entry.version == "1.2.0"
        assert entry.dependencies == [YarnLockDependency("lib-b", "^2.0", optional=True)]

    def test_invalid_berry_lockfile_raises(self):
        lines = ["__metadata:", "  version: 6", '"lib-a@npm:^1.0":', "  version: [1.2.0"]
        with pytest.raises(FileProcessingError):
            YarnLockParser().parse(lines)

    def test_entry_without_version_is_skipped(self, caplog):
        lines = [
            "lib-a@^1.0:",
            '  resolved "https://example.invalid/lib-a.tgz"',
            "lib-b@^2.0:",
            '  version "2.0.0"',
        ]
        with caplog.at_level(logging.WARNING, logger="depdetect"):
            yarn_lock = YarnLockParser().parse(lines)

        assert [str(e.ids[0]) for e in yarn_lock.entries] == ["lib-b@^2.0"]
        assert any("without a version" in record.message for record in caplog.records)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileProcessingError):
            YarnLockParser().parse_file(tmp_path / "yarn.lock")


class TestYarnTransformer:
    """Test merging package.json with yarn.lock."""

    def test_lockfile_resolves_declared_ranges(self):
        package_json = PackageJson(dependencies={"lib-a": "^1.0"})
        yarn_lock = YarnLockParser().parse(
            [
                "lib-a@^1.0:",
                '  version "1.2.0"',
                "  dependencies:",
                '    lib-b "^2.0"',
                "lib-b@^2.0:",
                '  version "2.1.0"',
            ]
        )

        graph = YarnTransformer().transform(package_json, yarn_lock, production_only=False)

        assert graph.edges() == frozenset(
            {(None, npm("lib-a", "1.2.0")), (npm("lib-a", "1.2.0"), npm("lib-b", "2.1.0"))}
        )

    def test_all_dependencies(self, test_data_dir):
        package_json = PackageJson.from_file(test_data_dir / "yarn-v1" / "package.json")
        yarn_lock = YarnLockParser().parse_file(test_data_dir / "yarn-v1" / "yarn.lock")

        graph = YarnTransformer().transform(package_json, yarn_lock, production_only=False)

        assert {d.name for d in graph.root_dependencies()} == {"lib-a", "@scope/util", "test-runner"}
        assert (npm("lib-a", "1.2.0"), npm("fsevents", "2.3.2")) in graph.edges()
        # Both lib-a ranges collapse into the same node
        assert (npm("test-runner", "5.4.0"), npm("lib-a", "1.2.0")) in graph.edges()
        assert len(graph) == 6

    def test_production_only_drops_dev_and_optional(self, test_data_dir, caplog):
        package_json = PackageJson.from_file(test_data_dir / "yarn-v1" / "package.json")
        yarn_lock = YarnLockParser().parse_file(test_data_dir / "yarn-v1" / "yarn.lock")

        with caplog.at_level(logging.DEBUG, logger="depdetect"):
            graph = YarnTransformer().transform(package_json, yarn_lock, production_only=True)

        assert {d.external_id for d in graph} == {
            npm("lib-a", "1.2.0"),
            npm("lib-b", "2.1.0"),
            npm("@scope/util", "3.1.4"),
        }
        assert any("Eluding optional dependency: fsevents@~2.3.1" in r.message for r in caplog.records)

    def test_missing_dependency_degrades_with_one_warning(self, test_data_dir, caplog):
        package_json = PackageJson.from_file(test_data_dir / "yarn-berry" / "package.json")
        lock_file = test_data_dir / "yarn-berry" / "yarn.lock"
        yarn_lock = YarnLockParser().parse_file(lock_file)
        transformer = YarnTransformer()

        with caplog.at_level(logging.WARNING, logger="depdetect"):
            graph = transformer.transform(package_json, yarn_lock, production_only=False)

        warnings = [r.message for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings == [f"Missing yarn dependency. Dependency 'lib-missing@^4.0.0' is missing from {lock_file}."]
        assert transformer.missing_dependencies == [DependencyId("lib-missing@^4.0.0")]
        assert (None, npm("lib-missing", "^4.0.0")) in graph.edges()
        assert (None, npm("lib-a", "1.2.0")) in graph.edges()

    def test_missing_child_dependency_degrades(self):
        package_json = PackageJson(dependencies={"lib-a": "^1.0"})
        yarn_lock = YarnLockParser().parse(
            [
                "lib-a@^1.0:",
                '  version "1.2.0"',
                "  dependencies:",
                '    ghost "^0.1.0"',
            ]
        )

        graph = YarnTransformer().transform(package_json, yarn_lock, production_only=False)

        assert graph.get_children(npm("lib-a", "1.2.0"))[0].external_id == npm("ghost", "^0.1.0")

    def test_lockfile_label_without_path(self, caplog):
        package_json = PackageJson(dependencies={"lib-z": "^3.0"})

        with caplog.at_level(logging.WARNING, logger="depdetect"):
            YarnTransformer().transform(package_json, YarnLockParser().parse([]), production_only=False)

        assert "Dependency 'lib-z@^3.0' is missing from yarn.lock." in caplog.text


class TestYarnExtraction:
    """Test YarnExtractor and YarnLockDetectable."""

    def test_extract_sets_project_identity(self, test_data_dir):
        directory = test_data_dir / "yarn-v1"
        extraction = YarnExtractor().extract(directory / "yarn.lock", directory / "package.json")

        assert extraction.is_success
        assert extraction.project_name == "demo-app"
        assert extraction.project_version == "1.0.0"
        assert extraction.code_locations[0].external_id == npm("demo-app", "1.0.0")

    def test_invalid_package_json_is_exception_extraction(self, tmp_path):
        (tmp_path / "package.json").write_text("{not json")
        (tmp_path / "yarn.lock").write_text("")

        extraction = YarnExtractor().extract(tmp_path / "yarn.lock", tmp_path / "package.json")

        assert not extraction.is_success
        assert isinstance(extraction.error, FileProcessingError)

    def test_package_json_must_be_an_object(self, tmp_path):
        (tmp_path / "package.json").write_text(json.dumps(["lib-a"]))
        with pytest.raises(FileProcessingError):
            PackageJson.from_file(tmp_path / "package.json")

    def test_detectable_lifecycle(self, test_data_dir, tmp_path):
        detectable = YarnLockDetectable(
            DetectableEnvironment(test_data_dir / "yarn-v1"), options=DetectableOptions(production_only=True)
        )

        assert detectable.applicable().passed
        assert detectable.extractable().passed
        extraction = detectable.extract(ExtractionEnvironment(tmp_path))

        assert extraction.is_success
        assert len(extraction.code_locations[0].dependency_graph) == 3

    def test_not_applicable_without_lockfile(self, tmp_path):
        result = YarnLockDetectable(DetectableEnvironment(tmp_path)).applicable()
        assert isinstance(result, FilesNotFoundDetectableResult)

    def test_not_extractable_without_package_json(self, tmp_path):
        (tmp_path / "yarn.lock").write_text("")
        detectable = YarnLockDetectable(DetectableEnvironment(tmp_path))

        assert detectable.applicable().passed
        result = detectable.extractable()
        assert isinstance(result, FileNotFoundDetectableResult)
        assert result.to_description() == "A file was not found: package.json"
