"""Tests for the Click CLI interface.

These tests verify that:
1. CLI arguments are parsed correctly
2. Environment variables are used as fallbacks
3. CLI arguments take precedence over environment variables
4. Configuration errors exit with the configuration exit code
5. The run's winning exit code becomes the process exit code
"""

import json
import tempfile
import unittest
from importlib import import_module
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from depdetect import __version__
from depdetect._pipeline import ExitCodeType
from depdetect._upload import UploadResult
from depdetect.cli.main import build_config, cli, run_scan

# Import the module object explicitly so we can patch its attributes.
# depdetect.cli.__init__.py re-exports the `main` function, so
# `from depdetect.cli.main import main` would give us the function, not the module.
cli_main_module = import_module("depdetect.cli.main")

TEST_DATA_DIR = Path(__file__).parent / "test-data"


class TestCLIHelp(unittest.TestCase):
    """Test CLI help and version options."""

    def setUp(self):
        self.runner = CliRunner()

    def test_help_option(self):
        """Test that --help lists the commands."""
        result = self.runner.invoke(cli, ["--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Detect dependency graphs", result.output)
        self.assertIn("scan", result.output)
        self.assertIn("tools", result.output)

    def test_scan_help(self):
        """Test that -h shows the scan options."""
        result = self.runner.invoke(cli, ["scan", "-h"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("--source-path", result.output)
        self.assertIn("--production-only", result.output)
        self.assertIn("--parallelism", result.output)

    def test_version_option(self):
        """Test that --version shows version."""
        result = self.runner.invoke(cli, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("depdetect", result.output)
        self.assertIn(__version__, result.output)


class TestScanCommand(unittest.TestCase):
    """Test argument handling of the scan command."""

    def setUp(self):
        self.runner = CliRunner()
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.source_path = self.tmp_dir.name

    def tearDown(self):
        self.tmp_dir.cleanup()

    def invoke_scan(self, args, env=None, exit_code_type=ExitCodeType.SUCCESS):
        with patch.object(cli_main_module, "run_scan", return_value=exit_code_type) as mock_run_scan:
            result = self.runner.invoke(cli, ["scan", *args], env=env or {})
        return result, mock_run_scan

    def test_cli_arguments(self):
        """Test that CLI arguments reach the configuration."""
        result, mock_run_scan = self.invoke_scan(
            [
                "-s",
                self.source_path,
                "--production-only",
                "-o",
                "out.json",
                "-j",
                "4",
                "-d",
                "yarn",
                "-d",
                "cargo",
                "--gradle-excluded-configuration",
                "testRuntimeClasspath",
            ]
        )

        self.assertEqual(result.exit_code, 0, result.output)
        config = mock_run_scan.call_args[0][0]
        self.assertEqual(config.source_path, self.source_path)
        self.assertTrue(config.production_only)
        self.assertEqual(config.output_file, "out.json")
        self.assertEqual(config.parallelism, 4)
        self.assertEqual(config.detectors, ["yarn", "cargo"])
        self.assertEqual(config.gradle_excluded_configurations, ["testRuntimeClasspath"])

    def test_environment_fallback(self):
        """Test that environment variables are used when options are missing."""
        result, mock_run_scan = self.invoke_scan(
            [],
            env={
                "SOURCE_PATH": self.source_path,
                "PRODUCTION_ONLY": "yes",
                "PARALLELISM": "3",
                "DETECTORS": "yarn, gradle",
                "GRADLE_EXCLUDED_CONFIGURATIONS": "testCompileClasspath,testRuntimeClasspath",
            },
        )

        self.assertEqual(result.exit_code, 0, result.output)
        config = mock_run_scan.call_args[0][0]
        self.assertTrue(config.production_only)
        self.assertEqual(config.parallelism, 3)
        self.assertEqual(config.detectors, ["yarn", "gradle"])
        self.assertEqual(config.gradle_excluded_configurations, ["testCompileClasspath", "testRuntimeClasspath"])

    def test_cli_overrides_environment(self):
        """Test that CLI arguments take precedence over environment variables."""
        result, mock_run_scan = self.invoke_scan(
            ["-s", self.source_path, "--no-production-only", "-j", "2"],
            env={"PRODUCTION_ONLY": "true", "PARALLELISM": "8"},
        )

        self.assertEqual(result.exit_code, 0, result.output)
        config = mock_run_scan.call_args[0][0]
        self.assertFalse(config.production_only)
        self.assertEqual(config.parallelism, 2)

    def test_run_exit_code_is_process_exit_code(self):
        """Test that the winning exit code becomes the process exit code."""
        result, _ = self.invoke_scan(["-s", self.source_path], exit_code_type=ExitCodeType.FAILURE_GENERAL_ERROR)
        self.assertEqual(result.exit_code, 99)

    def test_missing_source_path_is_configuration_error(self):
        """Test that a missing source directory exits with code 7."""
        result, mock_run_scan = self.invoke_scan(["-s", str(Path(self.source_path) / "missing")])

        self.assertEqual(result.exit_code, ExitCodeType.FAILURE_CONFIGURATION.exit_code)
        mock_run_scan.assert_not_called()

    def test_unknown_detector_is_configuration_error(self):
        """Test that an unknown detector name is rejected."""
        result, _ = self.invoke_scan(["-s", self.source_path, "-d", "maven"])

        self.assertEqual(result.exit_code, 7)
        self.assertIn("Unknown detector(s): maven", result.output)

    def test_invalid_parallelism_env_is_configuration_error(self):
        """Test that a non-numeric PARALLELISM exits with code 7."""
        result, _ = self.invoke_scan(["-s", self.source_path], env={"PARALLELISM": "many"})
        self.assertEqual(result.exit_code, 7)

    def test_upload_requires_token(self):
        """Test that enabling upload without a token is rejected."""
        result, _ = self.invoke_scan(["-s", self.source_path, "--upload", "--api-base-url", "https://b.example.com"])

        self.assertEqual(result.exit_code, 7)
        self.assertIn("API token is not defined", result.output)


class TestToolsCommand(unittest.TestCase):
    """Test the tools command."""

    def test_tools_lists_external_tools(self):
        runner = CliRunner()
        with patch("depdetect.tool_checks.check_tool_available", return_value=(False, None)):
            result = runner.invoke(cli, ["tools", "--verbose"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("External Tools", result.output)
        self.assertIn("Gradle", result.output)
        self.assertIn("To enable this detector", result.output)


class TestRunScan:
    """Run complete scans against the fixture projects."""

    def test_yarn_project(self, tmp_path):
        output_file = tmp_path / "out.json"
        config = build_config(
            source_path=str(TEST_DATA_DIR / "yarn-v1"), output_file=str(output_file), detectors=["yarn"]
        )

        exit_code = run_scan(config)

        assert exit_code == ExitCodeType.SUCCESS
        document = json.loads(output_file.read_text())
        assert [c["name"] for c in document["codeLocations"]] == ["demo-app yarn"]
        assert document["project"] == {"name": "demo-app", "version": "1.0.0"}

    def test_all_detectors_on_cargo_project(self, tmp_path):
        output_file = tmp_path / "out.json"
        config = build_config(source_path=str(TEST_DATA_DIR / "cargo"), output_file=str(output_file), parallelism=2)

        exit_code = run_scan(config)

        assert exit_code == ExitCodeType.SUCCESS
        document = json.loads(output_file.read_text())
        assert [c["creator"] for c in document["codeLocations"]] == ["cargo"]

    def test_missing_executable_fails_with_install_hint(self, tmp_path):
        (tmp_path / "build.gradle").write_text("")
        config = build_config(source_path=str(tmp_path), output_file=str(tmp_path / "out.json"))

        with (
            patch("depdetect._detectables.executable.check_tool_available", return_value=(False, None)),
            patch.object(cli_main_module, "gha_warning") as mock_warning,
        ):
            exit_code = run_scan(config)

        assert exit_code == ExitCodeType.FAILURE_GENERAL_ERROR
        assert mock_warning.call_args.kwargs["title"] == "gradle: gradle not found"

    def test_output_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        config = build_config(source_path=str(TEST_DATA_DIR / "cargo"), output_file=str(blocker / "out.json"))

        assert run_scan(config) == ExitCodeType.FAILURE_GENERAL_ERROR

    def test_upload_failure(self, tmp_path):
        config = build_config(
            source_path=str(TEST_DATA_DIR / "cargo"),
            output_file=str(tmp_path / "out.json"),
            upload=True,
            token="test-token",
            api_base_url="https://backend.example.com",
        )
        failure = UploadResult.failure_result("backend", "Failed to connect to the backend API for upload")

        with patch.object(cli_main_module, "upload_code_locations", return_value=failure) as mock_upload:
            exit_code = run_scan(config)

        assert exit_code == ExitCodeType.FAILURE_BACKEND_CONNECTIVITY
        document = mock_upload.call_args[0][0]
        assert document["codeLocations"][0]["creator"] == "cargo"
        assert mock_upload.call_args.kwargs == {"token": "test-token", "api_base_url": "https://backend.example.com"}


if __name__ == "__main__":
    unittest.main()
