"""Runs Gradle and turns its dependency report into code locations."""

from pathlib import Path
from typing import Iterable, Optional

from ...exceptions import ExecutableRunnerError
from ...logging_config import logger
from ..executable import ExecutableRunner
from ..extraction import CodeLocation, Extraction, ExtractionEnvironment
from .report_parser import GradleReport, GradleReportParser

REPORT_FILE_NAME = "gradle-dependencies.txt"


class GradleExtractor:
    """Extracts one code location per Gradle project section."""

    def __init__(
        self,
        runner: Optional[ExecutableRunner] = None,
        tasks: Iterable[str] = ("dependencies",),
        excluded_configurations: Iterable[str] = (),
    ):
        self.runner = runner or ExecutableRunner()
        self.tasks = tuple(tasks)
        self.parser = GradleReportParser(excluded_configurations=excluded_configurations)

    def extract(self, directory: Path, gradle: str, extraction_environment: ExtractionEnvironment) -> Extraction:
        args = ["--console=plain", "-q", *self.tasks]
        logger.info(f"Running {gradle} {' '.join(args)} in {directory}")
        try:
            output = self.runner.execute(directory, gradle, args)
        except ExecutableRunnerError as e:
            logger.error(f"Gradle could not be run: {e}")
            return Extraction.exception(e)

        if not output.succeeded:
            return Extraction.failure(
                f"Gradle returned a non-zero exit code ({output.return_code}): {output.stderr.strip()}"
            )

        report_file = self._write_report(output.stdout, extraction_environment.output_directory)
        reports = self.parser.parse(output.stdout_lines())
        code_locations = [self._to_code_location(directory, report) for report in reports]

        root_name = next((r.project_name for r in reports if r.is_root_project and r.project_name), None)
        logger.info(f"Gradle report produced {len(code_locations)} code location(s)")
        return Extraction.success(
            code_locations,
            project_name=root_name,
            metadata={"gradle_report": report_file} if report_file else None,
        )

    @staticmethod
    def _to_code_location(directory: Path, report: GradleReport) -> CodeLocation:
        if report.is_root_project:
            return CodeLocation(report.dependency_graph)
        relative = report.project_path.strip(":").replace(":", "/")
        return CodeLocation(report.dependency_graph, source_path=directory / relative)

    @staticmethod
    def _write_report(stdout: str, output_directory: Path) -> Optional[Path]:
        try:
            output_directory.mkdir(parents=True, exist_ok=True)
            report_file = output_directory / REPORT_FILE_NAME
            report_file.write_text(stdout, encoding="utf-8")
            return report_file
        except OSError as e:
            logger.warning(f"Could not save Gradle report: {e}")
            return None
