"""Data models for package.json manifests and yarn.lock files."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ...exceptions import FileProcessingError


def split_dependency_key(key: str) -> tuple[str, str]:
    """Split ``name@range`` into its parts, keeping the ``@`` of scoped names.

    Examples:
        ``lib-a@^1.0`` -> ("lib-a", "^1.0")
        ``@babel/core@^7.0.0`` -> ("@babel/core", "^7.0.0")
        ``lib-a`` -> ("lib-a", "")
    """
    at = key.rfind("@")
    if at <= 0:
        return key, ""
    return key[:at], key[at + 1 :]


@dataclass
class PackageJson:
    """The parts of package.json that declare direct dependencies."""

    name: Optional[str] = None
    version: Optional[str] = None
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageJson":
        return cls(
            name=data.get("name"),
            version=data.get("version"),
            dependencies=dict(data.get("dependencies") or {}),
            dev_dependencies=dict(data.get("devDependencies") or {}),
        )

    @classmethod
    def from_file(cls, path: Path) -> "PackageJson":
        """
        Load a package.json file.

        Raises:
            FileProcessingError: If the file cannot be read or is not a JSON object
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FileProcessingError(f"Failed to read {path}: {e}") from e
        if not isinstance(data, dict):
            raise FileProcessingError(f"{path} does not contain a JSON object")
        return cls.from_dict(data)


@dataclass(frozen=True)
class YarnLockEntryId:
    """One of the ``name@range`` keys an entry can be addressed by."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class YarnLockDependency:
    """A child dependency listed by a lock entry, with its requested range."""

    name: str
    version: str
    optional: bool = False

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class YarnLockEntry:
    """A resolved package in yarn.lock, addressable by one or more alias keys."""

    ids: list[YarnLockEntryId]
    version: str
    dependencies: list[YarnLockDependency] = field(default_factory=list)


@dataclass
class YarnLock:
    entries: list[YarnLockEntry] = field(default_factory=list)
    path: Optional[Path] = None
