"""Run-wide event channel, status records and exit-code accounting.

Detectors running on separate threads publish into one shared EventSystem.
Each publish appends one complete record under a lock, so records from
different detectors interleave but never mix.
"""

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..logging_config import logger


class Event(Enum):
    STATUS_SUMMARY = "status_summary"
    ISSUE = "issue"
    EXIT_CODE = "exit_code"


class StatusType(Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


@dataclass(frozen=True)
class Status:
    """Per-detector outcome shown in the run summary."""

    name: str
    status_type: StatusType

    @property
    def is_success(self) -> bool:
        return self.status_type == StatusType.SUCCESS


class DetectIssueType(Enum):
    DETECTOR = "DETECTOR"
    EXCEPTION = "EXCEPTION"


class DetectIssueId(Enum):
    DETECTOR_NOT_EXTRACTABLE = "DETECTOR_NOT_EXTRACTABLE"
    DETECTOR_EXTRACTION_FAILED = "DETECTOR_EXTRACTION_FAILED"
    DETECTOR_EXCEPTION = "DETECTOR_EXCEPTION"


@dataclass(frozen=True)
class DetectIssue:
    issue_type: DetectIssueType
    issue_id: DetectIssueId
    messages: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def publish(
        cls, event_system: "EventSystem", issue_type: DetectIssueType, issue_id: DetectIssueId, *messages: str
    ) -> None:
        event_system.publish(Event.ISSUE, cls(issue_type, issue_id, tuple(messages)))


class ExitCodeType(Enum):
    """Process exit codes. Every value other than SUCCESS is a failure."""

    SUCCESS = 0
    FAILURE_BACKEND_CONNECTIVITY = 1
    FAILURE_TIMEOUT = 2
    FAILURE_POLICY_VIOLATION = 3
    FAILURE_PROXY_CONNECTIVITY = 4
    FAILURE_DETECTOR = 5
    FAILURE_SCAN = 6
    FAILURE_CONFIGURATION = 7
    FAILURE_DETECTOR_REQUIRED = 9
    FAILURE_GENERAL_ERROR = 99
    FAILURE_UNKNOWN_ERROR = 100

    @property
    def exit_code(self) -> int:
        return self.value

    @property
    def is_success(self) -> bool:
        return self == ExitCodeType.SUCCESS

    @classmethod
    def get_winning_exit_code_type(cls, first: "ExitCodeType", second: "ExitCodeType") -> "ExitCodeType":
        """Any failure beats success; between two failures the lower code wins."""
        if first.is_success:
            return second
        if second.is_success:
            return first
        return first if first.exit_code <= second.exit_code else second


@dataclass(frozen=True)
class ExitCodeRequest:
    exit_code_type: ExitCodeType
    reason: Optional[str] = None


Listener = Callable[[Any], None]


class EventSystem:
    """Append-only, thread-safe event channel.

    Every published payload is recorded in the history of its event and then
    handed to the listeners registered for that event.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: Dict[Event, List[Any]] = defaultdict(list)
        self._listeners: Dict[Event, List[Listener]] = defaultdict(list)

    def register_listener(self, event: Event, listener: Listener) -> None:
        with self._lock:
            self._listeners[event].append(listener)

    def publish(self, event: Event, payload: Any) -> None:
        with self._lock:
            self._history[event].append(payload)
            listeners = list(self._listeners[event])
        logger.debug(f"Event {event.value}: {payload}")
        for listener in listeners:
            listener(payload)

    def history(self, event: Event) -> List[Any]:
        with self._lock:
            return list(self._history[event])


class ExitCodeManager:
    """Collects exit-code requests and reports the winning one."""

    def __init__(self, event_system: Optional[EventSystem] = None):
        self._lock = threading.Lock()
        self._requests: List[ExitCodeRequest] = []
        if event_system is not None:
            event_system.register_listener(Event.EXIT_CODE, self.request_exit_code)

    def request_exit_code(self, request: ExitCodeRequest) -> None:
        with self._lock:
            self._requests.append(request)

    @property
    def requests(self) -> List[ExitCodeRequest]:
        with self._lock:
            return list(self._requests)

    def get_winning_exit_code(self) -> ExitCodeType:
        winning = ExitCodeType.SUCCESS
        for request in self.requests:
            winning = ExitCodeType.get_winning_exit_code_type(winning, request.exit_code_type)
        return winning
