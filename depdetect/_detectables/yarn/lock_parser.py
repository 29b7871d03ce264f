"""Parser for yarn.lock files.

Classic (v1) lockfiles use yarn's own ``key "value"`` syntax and are read
line by line::

    "lib-a@^1.0", lib-a@^1.1:
      version "1.2.0"
      dependencies:
        lib-b "^2.0"
      optionalDependencies:
        fsevents "~2.3.1"

Berry (v2+) lockfiles are YAML documents with a ``__metadata`` block and
are loaded with PyYAML::

    __metadata:
      version: 6

    "lib-a@npm:^1.0":
      version: 1.2.0
      dependencies:
        lib-b: "npm:^2.0"
      dependenciesMeta:
        fsevents:
          optional: true

Berry's ``npm:`` protocol prefix is dropped from ranges so keys line up with
the ranges written in package.json.
"""

import re
from pathlib import Path
from typing import Any, Iterable, Optional

import yaml

from ...exceptions import FileProcessingError
from ...logging_config import logger
from .models import YarnLock, YarnLockDependency, YarnLockEntry, YarnLockEntryId, split_dependency_key

INDENT = "  "
NPM_PROTOCOL = "npm:"
METADATA_KEY = "__metadata"

_BARE_KEY = re.compile(r"[^\s:]+")
_METADATA_LINE = re.compile(rf"^[\"']?{METADATA_KEY}[\"']?:")


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    return text


def _strip_protocol(version: str) -> str:
    return version[len(NPM_PROTOCOL) :] if version.startswith(NPM_PROTOCOL) else version


def _split_key_value(text: str) -> Optional[tuple[str, str]]:
    """Split a classic ``key "value"`` line."""
    text = text.strip()
    if text.startswith('"'):
        end = text.find('"', 1)
        if end < 0:
            return None
        key, rest = text[1:end], text[end + 1 :]
    else:
        match = _BARE_KEY.match(text)
        if match is None:
            return None
        key, rest = match.group(0), text[match.end() :]
    return key, _unquote(rest)


def _entry_ids(keys: Iterable[str], where: str) -> list[YarnLockEntryId]:
    ids = []
    for key in keys:
        name, version = split_dependency_key(key.strip().strip("\"'"))
        if not name or not version:
            logger.debug(f"Skipping malformed yarn.lock key {where}: {key}")
            continue
        ids.append(YarnLockEntryId(name, _strip_protocol(version)))
    return ids


class _EntryDraft:
    def __init__(self, ids: list[YarnLockEntryId]):
        self.ids = ids
        self.version: Optional[str] = None
        self.dependencies: list[tuple[str, str]] = []
        self.optional_dependencies: list[tuple[str, str]] = []
        self.optional_names: set[str] = set()

    def to_entry(self) -> Optional[YarnLockEntry]:
        if self.version is None:
            logger.warning(f"Skipping yarn.lock entry without a version: {', '.join(map(str, self.ids))}")
            return None
        dependencies = [
            YarnLockDependency(name, version, optional=name in self.optional_names)
            for name, version in self.dependencies
        ]
        dependencies.extend(
            YarnLockDependency(name, version, optional=True) for name, version in self.optional_dependencies
        )
        return YarnLockEntry(ids=self.ids, version=self.version, dependencies=dependencies)


class YarnLockParser:
    """Parses yarn.lock content into a YarnLock."""

    def parse_file(self, path: Path) -> YarnLock:
        """
        Parse a yarn.lock file from disk.

        Raises:
            FileProcessingError: If the file cannot be read or a berry lockfile is not valid YAML
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except OSError as e:
            raise FileProcessingError(f"Failed to read {path}: {e}") from e
        yarn_lock = self.parse(lines)
        yarn_lock.path = path
        return yarn_lock

    def parse(self, lines: Iterable[str]) -> YarnLock:
        lines = list(lines)
        if self.is_berry(lines):
            return self.parse_berry("\n".join(lines))
        return self.parse_classic(lines)

    @staticmethod
    def is_berry(lines: list[str]) -> bool:
        """Berry lockfiles always start with a ``__metadata`` block."""
        return any(_METADATA_LINE.match(line) for line in lines)

    def parse_berry(self, content: str) -> YarnLock:
        """
        Parse a berry (v2+) lockfile.

        Raises:
            FileProcessingError: If the content is not a YAML mapping
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise FileProcessingError(f"Failed to parse berry yarn.lock: {e}") from e
        if not isinstance(data, dict):
            raise FileProcessingError("Berry yarn.lock does not contain a YAML mapping")

        entries: list[YarnLockEntry] = []
        for key, body in data.items():
            if key == METADATA_KEY:
                continue
            ids = _entry_ids(str(key).split(","), "in berry lockfile")
            if not ids or not isinstance(body, dict):
                continue
            draft = _EntryDraft(ids)
            if body.get("version") is not None:
                draft.version = str(body["version"])
            draft.dependencies = self._berry_dependencies(body.get("dependencies"))
            draft.optional_dependencies = self._berry_dependencies(body.get("optionalDependencies"))
            draft.optional_names = self._berry_optional_names(body.get("dependenciesMeta"))
            entry = draft.to_entry()
            if entry is not None:
                entries.append(entry)

        logger.debug(f"Parsed {len(entries)} berry yarn.lock entries")
        return YarnLock(entries=entries)

    @staticmethod
    def _berry_dependencies(section: Any) -> list[tuple[str, str]]:
        if not isinstance(section, dict):
            return []
        dependencies = []
        for name, version in section.items():
            if version is None:
                logger.debug(f"Skipping yarn.lock dependency without a range: {name}")
                continue
            dependencies.append((str(name), _strip_protocol(str(version))))
        return dependencies

    @staticmethod
    def _berry_optional_names(section: Any) -> set[str]:
        if not isinstance(section, dict):
            return set()
        return {
            split_dependency_key(str(name))[0]
            for name, meta in section.items()
            if isinstance(meta, dict) and meta.get("optional") is True
        }

    def parse_classic(self, lines: Iterable[str]) -> YarnLock:
        """Parse a classic (v1) lockfile."""
        entries: list[YarnLockEntry] = []
        draft: Optional[_EntryDraft] = None
        section: Optional[str] = None

        def finish() -> None:
            if draft is not None:
                entry = draft.to_entry()
                if entry is not None:
                    entries.append(entry)

        for line_number, line in enumerate(lines, start=1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue

            depth = self._depth(line)
            text = line.strip()

            if depth == 0:
                finish()
                draft = self._start_entry(text, line_number)
                section = None
                continue

            if draft is None:
                continue

            if depth == 1:
                if text.endswith(":") and " " not in text:
                    section = text[:-1]
                    continue
                section = None
                pair = _split_key_value(text)
                if pair is None:
                    logger.debug(f"Skipping malformed yarn.lock line {line_number}: {text}")
                elif pair[0] == "version":
                    draft.version = pair[1]
                continue

            if depth == 2 and section in ("dependencies", "optionalDependencies"):
                pair = _split_key_value(text)
                if pair is None or not pair[1]:
                    logger.debug(f"Skipping malformed yarn.lock dependency on line {line_number}: {text}")
                    continue
                target = draft.dependencies if section == "dependencies" else draft.optional_dependencies
                target.append((pair[0], _strip_protocol(pair[1])))

        finish()
        logger.debug(f"Parsed {len(entries)} yarn.lock entries")
        return YarnLock(entries=entries)

    @staticmethod
    def _depth(line: str) -> int:
        indent = len(line) - len(line.lstrip(" "))
        return indent // len(INDENT)

    @staticmethod
    def _start_entry(text: str, line_number: int) -> Optional[_EntryDraft]:
        if not text.endswith(":"):
            logger.debug(f"Skipping malformed yarn.lock line {line_number}: {text}")
            return None
        ids = _entry_ids(text[:-1].split(","), f"on line {line_number}")
        if not ids:
            return None
        return _EntryDraft(ids)
