"""Merges package.json and yarn.lock into a single dependency graph."""

from typing import Optional

from ..._graph import DependencyGraph, DependencyId, ExternalId, Forge, LazyDependencyGraphBuilder, LazyDependencyInfo
from ...logging_config import logger
from .models import PackageJson, YarnLock, YarnLockEntry, split_dependency_key


class YarnTransformer:
    """
    Builds the dependency graph of a Yarn project.

    Direct dependencies come from package.json as ``name@range`` keys; yarn.lock
    says which version each key resolved to and which children it has. Keys
    declared but absent from the lockfile do not abort the build: each one gets
    a best-effort npm identity, one warning, and an entry in
    ``missing_dependencies``.
    """

    def __init__(self) -> None:
        self.missing_dependencies: list[DependencyId] = []

    def transform(self, package_json: PackageJson, yarn_lock: YarnLock, production_only: bool) -> DependencyGraph:
        """
        Build the merged graph.

        Args:
            package_json: Declared direct dependencies
            yarn_lock: Resolved lockfile entries
            production_only: Leave out devDependencies and optional children

        Returns:
            DependencyGraph of npm identities
        """
        self.missing_dependencies = []
        builder = LazyDependencyGraphBuilder()

        root_ids = [DependencyId(f"{name}@{version}") for name, version in package_json.dependencies.items()]
        if not production_only:
            root_ids.extend(
                DependencyId(f"{name}@{version}") for name, version in package_json.dev_dependencies.items()
            )
        for root_id in root_ids:
            builder.add_child_to_root(root_id)

        reachable = self._reachable_ids(root_ids, yarn_lock) if production_only else None

        for entry in yarn_lock.entries:
            entry_ids = [DependencyId(str(entry_id)) for entry_id in entry.ids]
            for entry_id, dependency_id in zip(entry.ids, entry_ids):
                builder.set_dependency_info(
                    dependency_id,
                    entry_id.name,
                    entry.version,
                    ExternalId.name_version(Forge.NPM, entry_id.name, entry.version),
                )

            # In production mode entries only reachable through devDependencies add no edges
            if reachable is not None and not any(i in reachable for i in entry_ids):
                continue

            for dependency in entry.dependencies:
                child_id = DependencyId(str(dependency))
                if production_only and dependency.optional:
                    logger.debug(f"Eluding optional dependency: {child_id}")
                    continue
                for dependency_id in entry_ids:
                    builder.add_child_with_parent(child_id, dependency_id)

        lockfile_label = str(yarn_lock.path) if yarn_lock.path else "yarn.lock"
        return builder.build(lambda dependency_id, info: self._handle_missing_id(dependency_id, info, lockfile_label))

    def _handle_missing_id(
        self, dependency_id: DependencyId, info: Optional[LazyDependencyInfo], lockfile_label: str
    ) -> ExternalId:
        logged_id = info.alias_id if info is not None and info.alias_id is not None else dependency_id
        logger.warning(f"Missing yarn dependency. Dependency '{logged_id}' is missing from {lockfile_label}.")
        self.missing_dependencies.append(logged_id)
        # Synthetic identity: will not match a registry entry, but keeps the graph complete
        name, version = split_dependency_key(str(dependency_id))
        return ExternalId.name_version(Forge.NPM, name, version or None)

    @staticmethod
    def _reachable_ids(root_ids: list[DependencyId], yarn_lock: YarnLock) -> set[DependencyId]:
        """Draft ids reachable from the roots over non-optional edges."""
        entries_by_id: dict[DependencyId, YarnLockEntry] = {}
        for entry in yarn_lock.entries:
            for entry_id in entry.ids:
                entries_by_id[DependencyId(str(entry_id))] = entry

        reachable: set[DependencyId] = set()
        pending = list(root_ids)
        while pending:
            current = pending.pop()
            if current in reachable:
                continue
            reachable.add(current)
            entry = entries_by_id.get(current)
            if entry is None:
                continue
            for dependency in entry.dependencies:
                if not dependency.optional:
                    pending.append(DependencyId(str(dependency)))
        return reachable
