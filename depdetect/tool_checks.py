"""Tool availability checks for external package-manager executables.

Some detectables shell out to the ecosystem's own tooling (Gradle for the
dependency report, dpkg for installed package details). This module checks
whether those tools are on the system and produces installation hints when
they are missing.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .logging_config import logger


@dataclass
class ToolInfo:
    """Information about an external tool."""

    name: str
    command: str
    description: str
    install_instructions: str
    homepage: str
    required_for: list[str] = field(default_factory=list)


EXTERNAL_TOOLS: dict[str, ToolInfo] = {
    "gradle": ToolInfo(
        name="Gradle",
        command="gradle",
        description="Build tool used to produce the dependency tree of Gradle projects",
        install_instructions=(
            "Install via package manager or use the project's wrapper:\n"
            "  - macOS: brew install gradle\n"
            "  - Linux: sdk install gradle\n"
            "  - Or commit a gradlew wrapper to the project"
        ),
        homepage="https://gradle.org",
        required_for=["Gradle projects (build.gradle, build.gradle.kts)"],
    ),
    "dpkg": ToolInfo(
        name="dpkg",
        command="dpkg",
        description="Debian package manager used to look up installed package details",
        install_instructions="Available by default on Debian and Ubuntu systems",
        homepage="https://wiki.debian.org/dpkg",
        required_for=["Debian source packages (debian/control)"],
    ),
}


@dataclass
class ToolStatus:
    """Status of an external tool."""

    name: str
    available: bool
    path: Optional[str] = None
    info: Optional[ToolInfo] = None


def check_tool_available(command: str) -> tuple[bool, Optional[str]]:
    """
    Check if a command-line tool is available on the system.

    Args:
        command: The command to check (e.g., "gradle", "dpkg")

    Returns:
        Tuple of (is_available, path_if_found)
    """
    path = shutil.which(command)
    return (path is not None, path)


def find_wrapper(directory: Path, wrapper_name: str) -> Optional[str]:
    """
    Find an executable wrapper script (such as gradlew) inside a project directory.

    Args:
        directory: Project directory to look in
        wrapper_name: File name of the wrapper

    Returns:
        Path to the wrapper if it exists and is executable, None otherwise
    """
    return shutil.which(wrapper_name, path=str(directory))


def check_all_tools() -> dict[str, ToolStatus]:
    """
    Check availability of all external tools.

    Returns:
        Dictionary mapping tool ids to their status
    """
    results = {}
    for tool_id, info in EXTERNAL_TOOLS.items():
        available, path = check_tool_available(info.command)
        results[tool_id] = ToolStatus(
            name=info.name,
            available=available,
            path=path,
            info=info,
        )
    return results


def get_missing_tools() -> list[str]:
    """
    Get list of missing tool ids.

    Returns:
        List of tool ids that are not installed
    """
    statuses = check_all_tools()
    return [tool_id for tool_id, status in statuses.items() if not status.available]


def log_tool_status(verbose: bool = False) -> None:
    """
    Log the status of all external tools.

    Args:
        verbose: If True, show installation instructions for missing tools
    """
    statuses = check_all_tools()
    available = [s for s in statuses.values() if s.available]
    missing = [s for s in statuses.values() if not s.available]

    if available:
        logger.info(f"Available package-manager tools: {', '.join(s.name for s in available)}")

    if missing:
        logger.info(f"Missing package-manager tools: {', '.join(s.name for s in missing)}")
        if verbose:
            logger.info("Detectors that depend on them will report as not extractable.")
            for status in missing:
                if status.info:
                    logger.info(f"\n{status.info.name}:")
                    logger.info(f"  {status.info.install_instructions}")


def get_tool_install_message(tool_ids: list[str]) -> str:
    """
    Get a formatted message with installation instructions for specific tools.

    Args:
        tool_ids: List of tool ids to include

    Returns:
        Formatted installation instructions string
    """
    lines = ["To enable this detector, install the required tool(s):", ""]
    for tool_id in tool_ids:
        if tool_id in EXTERNAL_TOOLS:
            info = EXTERNAL_TOOLS[tool_id]
            lines.append(f"{info.name} ({info.homepage})")
            lines.append(info.install_instructions)
            lines.append("")
    return "\n".join(lines)
