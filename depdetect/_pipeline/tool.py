"""Drives one detectable through its lifecycle and reports the outcome.

The lifecycle is an explicit state machine::

    CREATED --applicable passed--> APPLICABLE_CHECKED --extractable passed--> EXTRACTABLE_CHECKED --ok--> EXTRACTED
       |                                  |                                        |
       +--not applicable--> SKIPPED       +--not extractable--> FAILED             +--extraction failed--> FAILED

SKIPPED is silent. Every transition into FAILED publishes a FAILURE status, an
issue and a general-error exit-code request; the result records the gate that
failed.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional

from .._detectables.detectable import Detectable, DetectableEnvironment
from .._detectables.extraction import Extraction, ExtractionEnvironment
from .._detectables.result import DetectableResult, ExceptionDetectableResult
from ..exceptions import DetectableStateError
from ..logging_config import logger
from .code_location import CodeLocationConverter, DetectCodeLocation
from .events import (
    DetectIssue,
    DetectIssueId,
    DetectIssueType,
    Event,
    EventSystem,
    ExitCodeRequest,
    ExitCodeType,
    Status,
    StatusType,
)

DETECTOR_TOOL = "DETECTOR"


class DetectableState(Enum):
    CREATED = "created"
    APPLICABLE_CHECKED = "applicable_checked"
    EXTRACTABLE_CHECKED = "extractable_checked"
    EXTRACTED = "extracted"
    SKIPPED = "skipped"
    FAILED = "failed"


TRANSITIONS: Dict[DetectableState, FrozenSet[DetectableState]] = {
    DetectableState.CREATED: frozenset(
        {DetectableState.APPLICABLE_CHECKED, DetectableState.SKIPPED, DetectableState.FAILED}
    ),
    DetectableState.APPLICABLE_CHECKED: frozenset({DetectableState.EXTRACTABLE_CHECKED, DetectableState.FAILED}),
    DetectableState.EXTRACTABLE_CHECKED: frozenset({DetectableState.EXTRACTED, DetectableState.FAILED}),
    DetectableState.EXTRACTED: frozenset(),
    DetectableState.SKIPPED: frozenset(),
    DetectableState.FAILED: frozenset(),
}


class DetectableGate(Enum):
    APPLICABLE = "applicable"
    EXTRACTABLE = "extractable"
    EXTRACT = "extract"


# The gate evaluated next from each non-terminal state
_PENDING_GATE = {
    DetectableState.CREATED: DetectableGate.APPLICABLE,
    DetectableState.APPLICABLE_CHECKED: DetectableGate.EXTRACTABLE,
    DetectableState.EXTRACTABLE_CHECKED: DetectableGate.EXTRACT,
}


@dataclass(frozen=True)
class DetectToolProjectInfo:
    detect_tool: str
    name: Optional[str]
    version: Optional[str]


@dataclass
class DetectableToolResult:
    """
    Outcome of one DetectableTool execution.

    Attributes:
        state: Final lifecycle state (EXTRACTED, SKIPPED or FAILED)
        failed_gate: Gate that stopped the lifecycle, if any
        detectable_result: Result of the failing check, if a check failed
        extraction: Extraction, if the extract phase ran
        code_locations: Converted code locations on success
        project_info: Project name/version reported by the extraction
        error: Unexpected exception that aborted the lifecycle
    """

    state: DetectableState
    failed_gate: Optional[DetectableGate] = None
    detectable_result: Optional[DetectableResult] = None
    extraction: Optional[Extraction] = None
    code_locations: List[DetectCodeLocation] = field(default_factory=list)
    project_info: Optional[DetectToolProjectInfo] = None
    error: Optional[Exception] = None

    @property
    def is_success(self) -> bool:
        return self.state == DetectableState.EXTRACTED

    @property
    def is_skipped(self) -> bool:
        return self.state == DetectableState.SKIPPED

    @property
    def is_failure(self) -> bool:
        return self.state == DetectableState.FAILED


ExtractionEnvironmentProvider = Callable[[str], ExtractionEnvironment]


class DetectableTool:
    """Runs a single detectable against a source directory.

    A tool is single use: ``execute()`` walks the state machine from CREATED
    to a terminal state and a second call raises DetectableStateError.
    """

    def __init__(
        self,
        detectable_factory: Callable[[DetectableEnvironment], Detectable],
        name: str,
        event_system: EventSystem,
        extraction_environment_provider: ExtractionEnvironmentProvider,
        code_location_converter: Optional[CodeLocationConverter] = None,
    ):
        self.detectable_factory = detectable_factory
        self.name = name
        self.event_system = event_system
        self.extraction_environment_provider = extraction_environment_provider
        self.code_location_converter = code_location_converter or CodeLocationConverter()
        self.state = DetectableState.CREATED

    def _transition(self, target: DetectableState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise DetectableStateError(f"{self.name}: illegal transition {self.state.name} -> {target.name}")
        logger.debug(f"{self.name}: {self.state.name} -> {target.name}")
        self.state = target

    def execute(self, source_path: Path) -> DetectableToolResult:
        """
        Run the lifecycle.

        Exceptions raised by ``applicable()`` or ``extract()`` are not caught
        here; the caller guards them (see ``abort``).

        Args:
            source_path: Directory to scan

        Returns:
            DetectableToolResult with the final state and, on success, code locations
        """
        if self.state != DetectableState.CREATED:
            raise DetectableStateError(f"{self.name}: tool has already run (state {self.state.name})")
        source_path = Path(source_path)

        detectable = self.detectable_factory(DetectableEnvironment(directory=source_path))
        logger.debug(f"Initializing {detectable.descriptive_name}.")

        applicable = detectable.applicable()
        if not applicable.passed:
            logger.debug(f"{self.name}: was not applicable ({applicable.to_description()})")
            self._transition(DetectableState.SKIPPED)
            return DetectableToolResult(
                state=self.state, failed_gate=DetectableGate.APPLICABLE, detectable_result=applicable
            )
        self._transition(DetectableState.APPLICABLE_CHECKED)

        try:
            extractable = detectable.extractable()
        except Exception as e:
            logger.debug(f"{self.name}: extractable check raised {type(e).__name__}", exc_info=True)
            extractable = ExceptionDetectableResult(e)

        if not extractable.passed:
            description = extractable.to_description()
            logger.error(f"{self.name}: was not extractable: {description}")
            self._fail(DetectIssueId.DETECTOR_NOT_EXTRACTABLE, description)
            return DetectableToolResult(
                state=self.state, failed_gate=DetectableGate.EXTRACTABLE, detectable_result=extractable
            )
        self._transition(DetectableState.EXTRACTABLE_CHECKED)

        extraction = detectable.extract(self.extraction_environment_provider(self.name))
        if not extraction.is_success:
            description = extraction.description or "Extraction failed."
            logger.error(f"{self.name}: extraction was not successful: {description}")
            self._fail(DetectIssueId.DETECTOR_EXTRACTION_FAILED, description)
            return DetectableToolResult(state=self.state, failed_gate=DetectableGate.EXTRACT, extraction=extraction)

        converted = self.code_location_converter.to_detect_code_locations(source_path, extraction, self.name)
        self._transition(DetectableState.EXTRACTED)
        self.event_system.publish(Event.STATUS_SUMMARY, Status(self.name, StatusType.SUCCESS))

        project_info = None
        if extraction.project_name or extraction.project_version:
            project_info = DetectToolProjectInfo(DETECTOR_TOOL, extraction.project_name, extraction.project_version)

        logger.info(f"{self.name}: extracted {len(converted)} code location(s)")
        return DetectableToolResult(
            state=self.state,
            extraction=extraction,
            code_locations=list(converted.values()),
            project_info=project_info,
        )

    def abort(self, error: Exception) -> DetectableToolResult:
        """
        Record an unexpected exception raised during ``execute``.

        Moves the tool to FAILED and publishes a FAILURE status, an exception
        issue and an unknown-error exit-code request. A tool that already
        reached a terminal state is forced to FAILED without a transition.
        """
        failed_gate = _PENDING_GATE.get(self.state)
        if TRANSITIONS[self.state]:
            self._transition(DetectableState.FAILED)
        else:
            logger.debug(f"{self.name}: aborted after reaching {self.state.name}")
            self.state = DetectableState.FAILED
        message = f"{type(error).__name__}: {error}"
        self.event_system.publish(Event.STATUS_SUMMARY, Status(self.name, StatusType.FAILURE))
        DetectIssue.publish(self.event_system, DetectIssueType.EXCEPTION, DetectIssueId.DETECTOR_EXCEPTION, message)
        self.event_system.publish(Event.EXIT_CODE, ExitCodeRequest(ExitCodeType.FAILURE_UNKNOWN_ERROR, message))
        return DetectableToolResult(state=self.state, failed_gate=failed_gate, error=error)

    def _fail(self, issue_id: DetectIssueId, description: str) -> None:
        self._transition(DetectableState.FAILED)
        self.event_system.publish(Event.STATUS_SUMMARY, Status(self.name, StatusType.FAILURE))
        DetectIssue.publish(self.event_system, DetectIssueType.DETECTOR, issue_id, description)
        self.event_system.publish(Event.EXIT_CODE, ExitCodeRequest(ExitCodeType.FAILURE_GENERAL_ERROR, description))
