"""Runs every registered detectable against a source directory."""

import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .._detectables.extraction import ExtractionEnvironment
from .._detectables.registry import DetectableFactory
from ..logging_config import logger
from .code_location import CodeLocationConverter, DetectCodeLocation
from .events import DetectIssue, Event, EventSystem, ExitCodeManager, ExitCodeType, Status
from .tool import DetectableTool, DetectableToolResult, DetectToolProjectInfo


@dataclass
class RunResult:
    """
    Everything a run produced.

    Attributes:
        tool_results: Result per detectable name, in registration order
        code_locations: Code locations of every successful detectable
        statuses: Published status records
        issues: Published issues
        exit_code_type: Winning exit code of the run
    """

    tool_results: Dict[str, DetectableToolResult] = field(default_factory=dict)
    code_locations: List[DetectCodeLocation] = field(default_factory=list)
    statuses: List[Status] = field(default_factory=list)
    issues: List[DetectIssue] = field(default_factory=list)
    exit_code_type: ExitCodeType = ExitCodeType.SUCCESS

    @property
    def project_infos(self) -> List[DetectToolProjectInfo]:
        return [r.project_info for r in self.tool_results.values() if r.project_info is not None]

    @property
    def applicable_count(self) -> int:
        return sum(1 for r in self.tool_results.values() if not r.is_skipped)


class _ExtractionDirectories:
    """Hands out one fresh output directory per extraction."""

    def __init__(self, base_directory: Path):
        self.base_directory = base_directory
        self._lock = threading.Lock()
        self._counter = 0

    def __call__(self, name: str) -> ExtractionEnvironment:
        with self._lock:
            self._counter += 1
            counter = self._counter
        safe_name = "".join(c if c.isalnum() else "-" for c in name.lower())
        output_directory = self.base_directory / f"{safe_name}-{counter}"
        output_directory.mkdir(parents=True, exist_ok=True)
        return ExtractionEnvironment(output_directory=output_directory)


class DetectRunner:
    """
    Runs detectables and gathers their events and code locations.

    Each detectable gets its own DetectableTool (and so its own graph
    builder). Detectables may run in parallel; only the EventSystem is shared.
    A detectable that raises is recorded as a failure and never stops the
    others.

    Example:
        runner = DetectRunner()
        registry = create_default_registry()
        result = runner.run(Path("."), registry.factories(), parallelism=4)
        sys.exit(result.exit_code_type.exit_code)
    """

    def __init__(
        self,
        event_system: Optional[EventSystem] = None,
        code_location_converter: Optional[CodeLocationConverter] = None,
        output_directory: Optional[Path] = None,
    ):
        self.event_system = event_system or EventSystem()
        self.exit_code_manager = ExitCodeManager(self.event_system)
        self.code_location_converter = code_location_converter or CodeLocationConverter()
        self.output_directory = output_directory

    def run(self, source_path: Path, detectables: Mapping[str, DetectableFactory], parallelism: int = 1) -> RunResult:
        """
        Run every detectable against ``source_path``.

        Args:
            source_path: Directory to scan
            detectables: Detectable factories keyed by detector name
            parallelism: Number of detectables to run at once

        Returns:
            RunResult with tool results, code locations, events and the exit code
        """
        source_path = Path(source_path)
        output_directory = self.output_directory or Path(tempfile.mkdtemp(prefix="depdetect-"))
        provider = _ExtractionDirectories(output_directory)

        tools = {
            name: DetectableTool(factory, name, self.event_system, provider, self.code_location_converter)
            for name, factory in detectables.items()
        }
        results: Dict[str, DetectableToolResult] = {}

        if parallelism <= 1:
            for name, tool in tools.items():
                results[name] = self._execute_guarded(tool, source_path)
        else:
            with ThreadPoolExecutor(max_workers=parallelism) as executor:
                futures = {
                    executor.submit(self._execute_guarded, tool, source_path): name for name, tool in tools.items()
                }
                for future in as_completed(futures):
                    results[futures[future]] = future.result()

        run_result = RunResult(
            tool_results={name: results[name] for name in tools},
            statuses=self.event_system.history(Event.STATUS_SUMMARY),
            issues=self.event_system.history(Event.ISSUE),
            exit_code_type=self.exit_code_manager.get_winning_exit_code(),
        )
        for result in run_result.tool_results.values():
            run_result.code_locations.extend(result.code_locations)

        if run_result.applicable_count == 0:
            logger.warning(f"No detectors applied to {source_path}")
        logger.info(
            f"Run finished: {run_result.applicable_count} applicable detector(s), "
            f"{len(run_result.code_locations)} code location(s), exit code {run_result.exit_code_type.exit_code}"
        )
        return run_result

    @staticmethod
    def _execute_guarded(tool: DetectableTool, source_path: Path) -> DetectableToolResult:
        try:
            return tool.execute(source_path)
        except Exception as e:
            logger.error(f"{tool.name}: unexpected error: {e}", exc_info=True)
            return tool.abort(e)
