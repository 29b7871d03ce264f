"""Detector pipeline: lifecycle driving, events and code locations.

Usage:
    from depdetect._pipeline import DetectRunner

    result = DetectRunner().run(Path("."), registry.factories(), parallelism=2)
"""

from .code_location import CodeLocationConverter, DetectCodeLocation
from .events import (
    DetectIssue,
    DetectIssueId,
    DetectIssueType,
    Event,
    EventSystem,
    ExitCodeManager,
    ExitCodeRequest,
    ExitCodeType,
    Status,
    StatusType,
)
from .runner import DetectRunner, RunResult
from .tool import (
    TRANSITIONS,
    DetectableGate,
    DetectableState,
    DetectableTool,
    DetectableToolResult,
    DetectToolProjectInfo,
)

__all__ = [
    # Events
    "DetectIssue",
    "DetectIssueId",
    "DetectIssueType",
    "Event",
    "EventSystem",
    "ExitCodeManager",
    "ExitCodeRequest",
    "ExitCodeType",
    "Status",
    "StatusType",
    # Lifecycle
    "TRANSITIONS",
    "DetectableGate",
    "DetectableState",
    "DetectableTool",
    "DetectableToolResult",
    "DetectToolProjectInfo",
    # Code locations
    "CodeLocationConverter",
    "DetectCodeLocation",
    # Runner
    "DetectRunner",
    "RunResult",
]
