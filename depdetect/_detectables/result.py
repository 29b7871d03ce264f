"""Outcomes of the applicable and extractable lifecycle checks."""

from dataclasses import dataclass
from typing import ClassVar


class DetectableResult:
    """Base result of a detectable check."""

    passed: ClassVar[bool] = False

    def to_description(self) -> str:
        return "Passed." if self.passed else "Failed."


class PassedDetectableResult(DetectableResult):
    passed: ClassVar[bool] = True


class FilesNotFoundDetectableResult(DetectableResult):
    """None of the marker files a detectable looks for were found."""

    def __init__(self, *filenames: str):
        self.filenames = filenames

    def to_description(self) -> str:
        return f"No files were found with any of the patterns: {', '.join(self.filenames)}"


@dataclass
class FileNotFoundDetectableResult(DetectableResult):
    """A companion file required next to the marker file is missing."""

    filename: str

    def to_description(self) -> str:
        return f"A file was not found: {self.filename}"


@dataclass
class CargoLockfileNotFoundDetectableResult(DetectableResult):
    directory: str

    def to_description(self) -> str:
        return (
            f"A Cargo.toml was located in {self.directory}, but the Cargo.lock file was NOT located. "
            "Please run 'cargo generate-lockfile' in the appropriate directory and try again."
        )


@dataclass
class ExecutableNotFoundDetectableResult(DetectableResult):
    executable_name: str

    def to_description(self) -> str:
        return f"No {self.executable_name} executable was found."


@dataclass
class ExceptionDetectableResult(DetectableResult):
    """A check raised an exception; the exception becomes the failure reason."""

    exception: Exception

    def to_description(self) -> str:
        return f"Exception occurred: {self.exception}"
