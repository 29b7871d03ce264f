"""Readers for debian/control and debian/changelog."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ...exceptions import FileProcessingError
from ...logging_config import logger

DEPENDENCY_FIELDS = ("Build-Depends", "Build-Depends-Indep", "Build-Depends-Arch", "Depends", "Pre-Depends")

_PACKAGE_NAME = re.compile(r"^[a-z0-9][a-z0-9+.\-]+")
_CHANGELOG_HEADER = re.compile(r"^(?P<name>\S+) \((?P<version>[^)]+)\)")


@dataclass
class DebianControl:
    source: Optional[str] = None
    dependencies: list[str] = field(default_factory=list)


def parse_relationship_field(value: str) -> list[str]:
    """
    Extract package names from a relationship field such as Build-Depends.

    Version constraints, architecture and build-profile restrictions are
    dropped; for alternatives (``a | b``) only the first package is used.
    Substitution variables like ``${misc:Depends}`` are skipped.
    """
    names = []
    for relation in value.split(","):
        first = relation.split("|")[0].strip()
        if not first or first.startswith("$"):
            continue
        match = _PACKAGE_NAME.match(first)
        if match is None:
            logger.debug(f"Skipping unparseable relation: {relation.strip()}")
            continue
        names.append(match.group(0))
    return names


def parse_control(text: str) -> DebianControl:
    """Parse debian/control stanzas, collecting dependencies across all of them."""
    control = DebianControl()
    fields: list[tuple[str, str]] = []

    for line in text.splitlines():
        if line.startswith("#") or not line.strip():
            continue
        if line[0] in (" ", "\t"):
            if fields:
                name, value = fields[-1]
                fields[-1] = (name, f"{value} {line.strip()}")
            continue
        if ":" not in line:
            logger.debug(f"Skipping malformed debian/control line: {line}")
            continue
        name, value = line.split(":", 1)
        fields.append((name.strip(), value.strip()))

    for name, value in fields:
        if name == "Source" and control.source is None:
            control.source = value
        elif name in DEPENDENCY_FIELDS:
            for package in parse_relationship_field(value):
                if package not in control.dependencies:
                    control.dependencies.append(package)
    return control


def read_control(path: Path) -> DebianControl:
    try:
        return parse_control(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise FileProcessingError(f"Failed to read {path}: {e}") from e


def read_changelog_version(path: Path) -> Optional[str]:
    """Version of the most recent debian/changelog entry."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                match = _CHANGELOG_HEADER.match(line)
                if match:
                    return match.group("version")
    except OSError as e:
        logger.warning(f"Could not read {path}: {e}")
    return None
