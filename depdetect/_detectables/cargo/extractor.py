"""Cargo.lock extraction.

Cargo.lock lists every resolved crate as a ``[[package]]`` table. A
dependency is written as ``"name"`` when only one version of the crate is
locked, or ``"name version"`` (optionally followed by a source) when several
are. Local packages (the project and its workspace members) have no
``source`` key; their dependencies become the direct dependencies.
"""

import tomllib
from pathlib import Path
from typing import Any, Optional

from ..._graph import DependencyGraph, DependencyId, ExternalId, Forge, LazyDependencyGraphBuilder
from ...exceptions import MissingExternalIdError
from ...logging_config import logger
from ..extraction import CodeLocation, Extraction


def _package_id(name: str, version: str) -> DependencyId:
    return DependencyId(f"{name} {version}")


def _dependency_id(reference: str) -> Optional[DependencyId]:
    parts = reference.split()
    if not parts:
        return None
    if len(parts) == 1:
        return DependencyId(parts[0])
    return _package_id(parts[0], parts[1])


class CargoLockParser:
    """Builds a dependency graph from parsed Cargo.lock data."""

    def parse(self, lock_data: dict[str, Any]) -> DependencyGraph:
        """
        Build the graph.

        Raises:
            MissingExternalIdError: If a dependency references a crate that is not locked
        """
        packages = [
            p for p in lock_data.get("package", []) if isinstance(p, dict) and p.get("name") and p.get("version")
        ]
        builder = LazyDependencyGraphBuilder()

        versions_by_name: dict[str, list[str]] = {}
        for package in packages:
            versions_by_name.setdefault(package["name"], []).append(package["version"])

        referenced: set[DependencyId] = set()
        children: dict[DependencyId, list[DependencyId]] = {}
        for package in packages:
            package_id = _package_id(package["name"], package["version"])
            builder.set_dependency_info(
                package_id,
                package["name"],
                package["version"],
                ExternalId.name_version(Forge.CARGO, package["name"], package["version"]),
            )
            child_ids = [i for i in map(_dependency_id, package.get("dependencies", [])) if i is not None]
            children[package_id] = child_ids
            referenced.update(child_ids)

        # A bare crate name stands in for its only locked version
        for name, versions in versions_by_name.items():
            if len(versions) == 1:
                builder.set_dependency_as_alias(_package_id(name, versions[0]), DependencyId(name))

        for package in packages:
            package_id = _package_id(package["name"], package["version"])
            is_local = "source" not in package
            is_root = is_local or (package_id not in referenced and DependencyId(package["name"]) not in referenced)
            for child_id in children[package_id]:
                if is_local and is_root:
                    builder.add_child_to_root(child_id)
                else:
                    builder.add_child_with_parent(child_id, package_id)
            if is_root and not is_local:
                builder.add_child_to_root(package_id)

        return builder.build()


class CargoExtractor:
    def __init__(self, parser: Optional[CargoLockParser] = None):
        self.parser = parser or CargoLockParser()

    def extract(self, cargo_lock: Path, cargo_toml: Optional[Path] = None) -> Extraction:
        try:
            with open(cargo_lock, "rb") as f:
                lock_data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Failed to read {cargo_lock}: {e}")
            return Extraction.exception(e)

        try:
            graph = self.parser.parse(lock_data)
        except MissingExternalIdError as e:
            logger.error(f"Cargo.lock dependency graph is incomplete: {e}")
            return Extraction.failure(f"Cargo.lock references a crate that is not locked: {e.dependency_id}")

        project_name, project_version = self._read_project_info(cargo_toml)
        external_id = None
        if project_name:
            external_id = ExternalId.name_version(Forge.CARGO, project_name, project_version)
        return Extraction.success(
            [CodeLocation(graph, external_id=external_id)],
            project_name=project_name,
            project_version=project_version,
        )

    @staticmethod
    def _read_project_info(cargo_toml: Optional[Path]) -> tuple[Optional[str], Optional[str]]:
        if cargo_toml is None:
            return None, None
        try:
            with open(cargo_toml, "rb") as f:
                package = tomllib.load(f).get("package", {})
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not read project info from {cargo_toml}: {e}")
            return None, None
        # Workspace-inherited values are tables ({ workspace = true }), not strings
        name = package.get("name")
        version = package.get("version")
        return (name if isinstance(name, str) else None, version if isinstance(version, str) else None)
