"""
Command-line interface for depdetect.

# Scan
``depdetect scan`` runs every registered detector against a source
directory. Each detector checks whether its ecosystem is present
(applicable), whether its preconditions are met (extractable) and then
extracts dependency graphs. The graphs are written to ``OUTPUT_FILE`` as
one JSON document and, when ``UPLOAD`` is enabled, posted to the backend.

The process exit code is the winning exit code of the run: any failure
beats success, and among failures the lowest code wins.

# Configuration
Every option can also be set through an environment variable. Command-line
arguments take precedence over the environment:
- SOURCE_PATH: Directory to scan (default: current directory)
- PRODUCTION_ONLY: Leave out development and optional dependencies
- OUTPUT_FILE: Path of the JSON document (default: depdetect_output.json)
- UPLOAD: Upload the document to the backend (default: false)
- TOKEN: Backend API token
- API_BASE_URL: Backend base URL
- PARALLELISM: Number of detectors to run at once (default: 1)
- GRADLE_EXCLUDED_CONFIGURATIONS: Comma-separated Gradle configurations to skip
- DETECTORS: Comma-separated detectors to run (default: all)
- LOG_LEVEL: DEBUG, INFO, WARNING or ERROR (default: INFO)
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from .._detectables import DetectableOptions, ExecutableNotFoundDetectableResult, create_default_registry
from .._pipeline import DetectRunner, ExitCodeType, RunResult
from ..console import (
    gha_error,
    gha_group,
    gha_warning,
    print_banner,
    print_detector_summary,
    print_summary_table,
    print_upload_summary,
)
from ..exceptions import ConfigurationError, FileProcessingError
from ..logging_config import logger, setup_logging
from ..serialization import serialize_code_locations, write_document
from ..tool_checks import EXTERNAL_TOOLS, check_all_tools, get_missing_tools, get_tool_install_message, log_tool_status
from ..upload import upload_code_locations

DEFAULT_OUTPUT_FILE = "depdetect_output.json"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
LOCALHOST_PATTERNS = ["127.0.0.1", "localhost", "0.0.0.0"]


@dataclass
class Config:
    """Configuration settings for a scan."""

    source_path: str = "."
    production_only: bool = False
    output_file: str = DEFAULT_OUTPUT_FILE
    upload: bool = False
    token: Optional[str] = None
    api_base_url: Optional[str] = None
    parallelism: int = 1
    gradle_excluded_configurations: list[str] = field(default_factory=list)
    detectors: Optional[list[str]] = None
    log_level: str = "INFO"
    structured_logs: bool = False

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if not Path(self.source_path).is_dir():
            raise ConfigurationError(f"Source path is not a directory: {self.source_path}")
        if self.parallelism < 1:
            raise ConfigurationError("PARALLELISM must be at least 1")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid LOG_LEVEL '{self.log_level}'. Expected one of: {', '.join(LOG_LEVELS)}")

        if self.detectors is not None:
            known = create_default_registry().names()
            unknown = [d for d in self.detectors if d not in known]
            if unknown:
                raise ConfigurationError(
                    f"Unknown detector(s): {', '.join(unknown)}. Available detectors: {', '.join(known)}"
                )

        if self.upload:
            if not self.token:
                raise ConfigurationError("API token is not defined (required when UPLOAD is enabled)")
            if not self.api_base_url:
                raise ConfigurationError("API_BASE_URL is not defined (required when UPLOAD is enabled)")
            self._validate_api_url()

    def _validate_api_url(self) -> None:
        """
        Validate and normalize the API base URL.

        Raises:
            ConfigurationError: If URL format is invalid
        """
        from urllib.parse import urlparse

        if not self.api_base_url:
            raise ConfigurationError("API base URL is not defined")
        parsed = urlparse(self.api_base_url)

        if not parsed.scheme or parsed.scheme not in ("http", "https"):
            raise ConfigurationError("API base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ConfigurationError("API base URL must include a valid hostname")

        # Security warning for HTTP on non-localhost
        if parsed.scheme == "http" and not any(localhost in parsed.netloc for localhost in LOCALHOST_PATTERNS):
            logger.warning("Using HTTP (not HTTPS) for API communication - consider using HTTPS in production")

        self.api_base_url = self.api_base_url.rstrip("/")


def evaluate_boolean(value: str) -> bool:
    """
    Evaluate string values as boolean.

    Args:
        value: String value to evaluate

    Returns:
        Boolean result
    """
    return value.lower() in ["true", "yes", "yeah", "1"]


def parse_list(value: Optional[str]) -> list[str]:
    """Split a comma-separated value, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_config(
    source_path: Optional[str] = None,
    production_only: Optional[bool] = None,
    output_file: Optional[str] = None,
    upload: Optional[bool] = None,
    token: Optional[str] = None,
    api_base_url: Optional[str] = None,
    parallelism: Optional[int] = None,
    gradle_excluded_configurations: Optional[list[str]] = None,
    detectors: Optional[list[str]] = None,
    log_level: Optional[str] = None,
    structured_logs: Optional[bool] = None,
) -> Config:
    """
    Build a validated Config, falling back to environment variables for
    every argument left as None.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    if parallelism is None:
        raw_parallelism = os.getenv("PARALLELISM", "1")
        try:
            parallelism = int(raw_parallelism)
        except ValueError:
            raise ConfigurationError(f"PARALLELISM must be an integer, got '{raw_parallelism}'")

    if detectors is None and os.getenv("DETECTORS"):
        detectors = parse_list(os.getenv("DETECTORS"))

    config = Config(
        source_path=source_path or os.getenv("SOURCE_PATH", "."),
        production_only=(
            production_only if production_only is not None else evaluate_boolean(os.getenv("PRODUCTION_ONLY", "False"))
        ),
        output_file=output_file or os.getenv("OUTPUT_FILE", DEFAULT_OUTPUT_FILE),
        upload=upload if upload is not None else evaluate_boolean(os.getenv("UPLOAD", "False")),
        token=token or os.getenv("TOKEN"),
        api_base_url=api_base_url or os.getenv("API_BASE_URL"),
        parallelism=parallelism,
        gradle_excluded_configurations=(
            gradle_excluded_configurations
            if gradle_excluded_configurations
            else parse_list(os.getenv("GRADLE_EXCLUDED_CONFIGURATIONS"))
        ),
        detectors=detectors or None,
        log_level=(log_level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        structured_logs=(
            structured_logs if structured_logs is not None else evaluate_boolean(os.getenv("STRUCTURED_LOGS", "False"))
        ),
    )
    config.validate()
    return config


def load_config() -> Config:
    """
    Load and validate configuration from environment variables only.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    return build_config()


def _report_missing_executables(run_result: RunResult) -> None:
    for name, tool_result in run_result.tool_results.items():
        if isinstance(tool_result.detectable_result, ExecutableNotFoundDetectableResult):
            executable = tool_result.detectable_result.executable_name
            if executable in EXTERNAL_TOOLS:
                gha_warning(get_tool_install_message([executable]), title=f"{name}: {executable} not found")


def run_scan(config: Config) -> ExitCodeType:
    """
    Run all detectors, write the document and optionally upload it.

    Args:
        config: Validated configuration

    Returns:
        Winning exit code of the run
    """
    options = DetectableOptions(
        production_only=config.production_only,
        gradle_excluded_configurations=tuple(config.gradle_excluded_configurations),
    )
    registry = create_default_registry(options)
    source_path = Path(config.source_path).resolve()

    with gha_group("Detection"):
        logger.info(f"Scanning {source_path}")
        run_result = DetectRunner().run(source_path, registry.factories(config.detectors), config.parallelism)

    print_detector_summary(run_result.statuses, run_result.issues)
    _report_missing_executables(run_result)
    exit_code = run_result.exit_code_type

    project_infos = run_result.project_infos
    document = serialize_code_locations(run_result.code_locations, project_infos[0] if project_infos else None)
    try:
        write_document(document, Path(config.output_file))
    except FileProcessingError as e:
        gha_error(str(e), title="Output")
        exit_code = ExitCodeType.get_winning_exit_code_type(exit_code, ExitCodeType.FAILURE_GENERAL_ERROR)

    print_summary_table(
        "Scan Summary",
        [
            ("Detectors applied", run_result.applicable_count),
            ("Code locations", len(run_result.code_locations)),
            ("Dependencies", sum(len(c.dependency_graph) for c in run_result.code_locations)),
        ],
        show_if_empty=True,
    )

    if config.upload:
        with gha_group("Upload"):
            upload_result = upload_code_locations(document, token=config.token, api_base_url=config.api_base_url)
        print_upload_summary(upload_result.destination_name, upload_result.success, upload_result.error_message)
        if not upload_result.success:
            exit_code = ExitCodeType.get_winning_exit_code_type(exit_code, ExitCodeType.FAILURE_BACKEND_CONNECTIVITY)

    logger.info(f"Finished with exit code {exit_code.exit_code} ({exit_code.name})")
    return exit_code


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, prog_name="depdetect")
def cli() -> None:
    """Detect dependency graphs across package-manager ecosystems."""


@cli.command()
@click.option("-s", "--source-path", default=None, help="Directory to scan [env: SOURCE_PATH]")
@click.option(
    "--production-only/--no-production-only",
    default=None,
    help="Leave out development and optional dependencies [env: PRODUCTION_ONLY]",
)
@click.option("-o", "--output-file", default=None, help="Output JSON document [env: OUTPUT_FILE]")
@click.option("--upload/--no-upload", default=None, help="Upload the document to the backend [env: UPLOAD]")
@click.option("--token", default=None, help="Backend API token [env: TOKEN]")
@click.option("--api-base-url", default=None, help="Backend base URL [env: API_BASE_URL]")
@click.option("-j", "--parallelism", type=int, default=None, help="Detectors to run at once [env: PARALLELISM]")
@click.option(
    "--gradle-excluded-configuration",
    "gradle_excluded_configurations",
    multiple=True,
    help="Gradle configuration to skip; may be repeated [env: GRADLE_EXCLUDED_CONFIGURATIONS]",
)
@click.option("-d", "--detector", "detectors", multiple=True, help="Detector to run; may be repeated [env: DETECTORS]")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level [env: LOG_LEVEL]",
)
@click.option("--structured-logs/--plain-logs", default=None, help="Emit JSON log lines [env: STRUCTURED_LOGS]")
def scan(
    source_path: Optional[str],
    production_only: Optional[bool],
    output_file: Optional[str],
    upload: Optional[bool],
    token: Optional[str],
    api_base_url: Optional[str],
    parallelism: Optional[int],
    gradle_excluded_configurations: tuple[str, ...],
    detectors: tuple[str, ...],
    log_level: Optional[str],
    structured_logs: Optional[bool],
) -> None:
    """Scan a directory and report its dependency graphs."""
    print_banner(__version__)
    try:
        config = build_config(
            source_path=source_path,
            production_only=production_only,
            output_file=output_file,
            upload=upload,
            token=token,
            api_base_url=api_base_url,
            parallelism=parallelism,
            gradle_excluded_configurations=list(gradle_excluded_configurations) or None,
            detectors=list(detectors) or None,
            log_level=log_level,
            structured_logs=structured_logs,
        )
    except ConfigurationError as e:
        gha_error(str(e), title="Configuration")
        logger.error(f"Configuration error: {e}")
        sys.exit(ExitCodeType.FAILURE_CONFIGURATION.exit_code)

    setup_logging(config.log_level, structured=config.structured_logs)
    exit_code = run_scan(config)
    sys.exit(exit_code.exit_code)


@cli.command()
@click.option("-v", "--verbose", is_flag=True, help="Show installation instructions for missing tools")
def tools(verbose: bool) -> None:
    """Show which package-manager executables are available."""
    statuses = check_all_tools()
    print_summary_table(
        "External Tools",
        [(status.name, status.path if status.available else "not found") for status in statuses.values()],
        show_if_empty=True,
    )
    log_tool_status(verbose=verbose)
    missing = get_missing_tools()
    if missing and verbose:
        click.echo(get_tool_install_message(missing))


def main() -> None:
    """Console entry point."""
    cli()
