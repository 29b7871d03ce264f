"""Rich console utilities for depdetect.

This module provides a shared Rich Console instance and helper functions
for CLI output, optimized for GitHub Actions and CI environments.
"""

import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generator, List, Optional, Tuple

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from ._pipeline.events import DetectIssue, Status

# Detect CI environments
IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"
IS_GITLAB_CI = os.getenv("GITLAB_CI") == "true"
IS_CI = os.getenv("CI") == "true" or IS_GITHUB_ACTIONS or IS_GITLAB_CI

custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "step": "bold blue",
        "highlight": "magenta",
    }
)

# Shared console instance
# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


def print_banner(version: str = "unknown") -> None:
    """Print a one-line banner with the tool version."""
    version_display = f"v{version}" if version and version[0:1].isdigit() else version
    console.print(f"[step]depdetect[/step] [highlight]{version_display}[/highlight] - dependency detection")


@contextmanager
def gha_group(title: str) -> Generator[None, None, None]:
    """
    Context manager for GitHub Actions collapsible groups.

    Args:
        title: Group title
    """
    if IS_GITHUB_ACTIONS:
        print(f"::group::{title}")
    else:
        console.rule(f"[step]{title}[/step]", style="blue")
    try:
        yield
    finally:
        if IS_GITHUB_ACTIONS:
            print("::endgroup::")


def gha_warning(message: str, title: Optional[str] = None) -> None:
    """
    Emit a warning that appears in GitHub Actions job summary.

    Args:
        message: Warning message
        title: Optional title for the warning
    """
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::warning title={title}::{message}")
        else:
            print(f"::warning::{message}")
    else:
        if title:
            console.print(f"[warning]Warning ({title}):[/warning] {message}")
        else:
            console.print(f"[warning]Warning:[/warning] {message}")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """
    Emit an error that appears in GitHub Actions job summary.

    Args:
        message: Error message
        title: Optional title for the error
    """
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::error title={title}::{message}")
        else:
            print(f"::error::{message}")
    else:
        if title:
            console.print(f"[error]Error ({title}):[/error] {message}")
        else:
            console.print(f"[error]Error:[/error] {message}")


def print_summary_table(
    title: str,
    data: List[Tuple[str, Any]],
    show_if_empty: bool = False,
) -> None:
    """
    Print a summary table.

    Args:
        title: Table title
        data: List of (label, value) tuples
        show_if_empty: Whether to show the table if all values are 0/empty
    """
    if not show_if_empty:
        data = [(label, value) for label, value in data if value]

    if not data:
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for label, value in data:
        table.add_row(label, str(value))

    console.print(table)


def print_detector_summary(statuses: List["Status"], issues: Optional[List["DetectIssue"]] = None) -> None:
    """
    Print the per-detector status table and any issues raised during the run.

    Args:
        statuses: Status records published by the detectors
        issues: Issue records published by the detectors
    """
    if statuses:
        table = Table(title="Detector Summary", show_header=True, header_style="bold")
        table.add_column("Detector", style="cyan")
        table.add_column("Status", justify="right")
        for status in statuses:
            style = "success" if status.is_success else "error"
            table.add_row(status.name, f"[{style}]{status.status_type.value}[/{style}]")
        console.print(table)

    for issue in issues or []:
        gha_warning("; ".join(issue.messages), title=f"{issue.issue_type.value}: {issue.issue_id.value}")


def print_upload_summary(destination: str, success: bool, error_message: Optional[str] = None) -> None:
    """
    Print upload result summary.

    Args:
        destination: Upload destination name
        success: Whether upload succeeded
        error_message: Optional error message if failed
    """
    if success:
        console.print(f"[success]✓ Uploaded to {destination}[/success]")
    else:
        console.print(f"[error]✗ Upload to {destination} failed[/error]")
        if error_message:
            console.print(f"  Error: {error_message}")
