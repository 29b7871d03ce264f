"""Custom exceptions for depdetect."""


class DepDetectError(Exception):
    """Base exception for all depdetect operations."""


class ConfigurationError(DepDetectError):
    """Raised when configuration validation fails."""


class DetectableError(DepDetectError):
    """Raised by a detectable when a lifecycle check cannot be completed."""


class MissingExternalIdError(DepDetectError):
    """Raised when a dependency id cannot be resolved while building a graph."""

    def __init__(self, dependency_id: object):
        self.dependency_id = dependency_id
        super().__init__(f"A dependency ({dependency_id}) was never given an external id.")


class GraphBuilderStateError(DepDetectError):
    """Raised when a graph builder is used after it has been built."""


class DetectableStateError(DepDetectError):
    """Raised when a detectable lifecycle transition is not allowed."""


class ExecutableRunnerError(DepDetectError):
    """Raised when an external executable cannot be started or does not finish."""


class FileProcessingError(DepDetectError):
    """Raised when file operations fail."""


class APIError(DepDetectError):
    """Raised when API operations fail."""
