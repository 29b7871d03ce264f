"""Running external executables on behalf of detectables."""

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import ExecutableRunnerError
from ..logging_config import logger
from ..tool_checks import check_tool_available, find_wrapper

# Default command timeout in seconds
DEFAULT_TIMEOUT = 1800  # 30 minutes (large Gradle builds can take a while)


@dataclass
class ExecutableOutput:
    """Captured output of a finished process."""

    stdout: str
    stderr: str
    return_code: int

    @property
    def succeeded(self) -> bool:
        return self.return_code == 0

    def stdout_lines(self) -> list[str]:
        return self.stdout.splitlines()


class ExecutableRunner:
    """Runs commands synchronously and captures their output.

    A non-zero exit code is returned in ``ExecutableOutput``; only a failure
    to run the process at all raises ``ExecutableRunnerError``.
    """

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def execute(self, working_directory: Path, command: str, args: list[str]) -> ExecutableOutput:
        """
        Run ``command`` with ``args`` inside ``working_directory``.

        Args:
            working_directory: Directory to run the command in
            command: Executable name or path
            args: Command arguments

        Returns:
            ExecutableOutput with stdout, stderr and the exit code

        Raises:
            ExecutableRunnerError: If the process cannot be started or times out
        """
        cmd = [command, *args]
        logger.debug(f"Running command: {' '.join(cmd)} (cwd: {working_directory})")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(working_directory),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise ExecutableRunnerError(f"{command} timed out after {self.timeout} seconds") from e
        except OSError as e:
            raise ExecutableRunnerError(f"Failed to run {command}: {e}") from e

        if result.returncode != 0:
            logger.debug(f"[{command}] exited with code {result.returncode}: {result.stderr.strip()}")
        return ExecutableOutput(stdout=result.stdout, stderr=result.stderr, return_code=result.returncode)


class ExecutableResolver:
    """Finds the executables detectables need."""

    def resolve(
        self, command: str, wrapper_directory: Optional[Path] = None, wrapper_name: Optional[str] = None
    ) -> Optional[str]:
        """
        Locate an executable, preferring a project wrapper script.

        Args:
            command: Command to look up on PATH
            wrapper_directory: Project directory that may hold a wrapper
            wrapper_name: File name of the wrapper (e.g., "gradlew")

        Returns:
            Path to the executable, or None if nothing was found
        """
        if wrapper_directory is not None and wrapper_name:
            wrapper = find_wrapper(wrapper_directory, wrapper_name)
            if wrapper:
                logger.debug(f"Using {wrapper_name} wrapper: {wrapper}")
                return wrapper

        available, path = check_tool_available(command)
        return path if available else None
