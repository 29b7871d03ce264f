"""Detector status codes reported for each kind of check result."""

from enum import Enum

from .result import (
    CargoLockfileNotFoundDetectableResult,
    DetectableResult,
    ExceptionDetectableResult,
    ExecutableNotFoundDetectableResult,
    FileNotFoundDetectableResult,
    FilesNotFoundDetectableResult,
    PassedDetectableResult,
)


class DetectorStatusCode(Enum):
    PASSED = "PASSED"
    FILES_NOT_FOUND = "FILES_NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    CARGO_LOCKFILE_NOT_FOUND = "CARGO_LOCKFILE_NOT_FOUND"
    EXECUTABLE_NOT_FOUND = "EXECUTABLE_NOT_FOUND"
    EXCEPTION = "EXCEPTION"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    UNKNOWN = "UNKNOWN"


DETECTOR_RESULT_STATUS_CODES: dict[type[DetectableResult], DetectorStatusCode] = {
    PassedDetectableResult: DetectorStatusCode.PASSED,
    FilesNotFoundDetectableResult: DetectorStatusCode.FILES_NOT_FOUND,
    FileNotFoundDetectableResult: DetectorStatusCode.FILE_NOT_FOUND,
    CargoLockfileNotFoundDetectableResult: DetectorStatusCode.CARGO_LOCKFILE_NOT_FOUND,
    ExecutableNotFoundDetectableResult: DetectorStatusCode.EXECUTABLE_NOT_FOUND,
    ExceptionDetectableResult: DetectorStatusCode.EXCEPTION,
}


def status_code_for(result: DetectableResult) -> DetectorStatusCode:
    return DETECTOR_RESULT_STATUS_CODES.get(type(result), DetectorStatusCode.UNKNOWN)
