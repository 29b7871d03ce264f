"""Lazy dependency graph builder.

Parsers often meet a dependency before they know its identity: a lockfile
lists ``lib-b@^2.0`` as a child of one entry long before (or without ever)
reaching the entry that says which version ``lib-b@^2.0`` resolved to. The
builder therefore accumulates edges and node metadata keyed by draft
``DependencyId`` values and resolves every key exactly once, in ``build()``.

Keys the builder cannot resolve on its own are handed to a caller-supplied
``MissingIdResolver``. The resolver either returns a substitute
``ExternalId`` (degrade and keep going) or raises ``MissingExternalIdError``
(abort, no graph is produced).
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from ..exceptions import GraphBuilderStateError, MissingExternalIdError
from ..logging_config import logger
from .models import ROOT, Dependency, DependencyGraph, DependencyId, ExternalId, RootDependencyId


@dataclass
class LazyDependencyInfo:
    """Metadata attached to a draft id before resolution.

    Attributes:
        name: Resolved package name, if known
        version: Resolved package version, if known
        external_id: Fully resolved identity, if known at insertion time
        alias_id: Another draft id this one stands in for
    """

    name: Optional[str] = None
    version: Optional[str] = None
    external_id: Optional[ExternalId] = None
    alias_id: Optional[DependencyId] = None


# (draft id, metadata or None for a pure forward reference) -> substitute id
MissingIdResolver = Callable[[DependencyId, Optional[LazyDependencyInfo]], ExternalId]


def fail_on_missing_id(dependency_id: DependencyId, info: Optional[LazyDependencyInfo]) -> ExternalId:
    """Default resolver: every unresolved reference aborts the build."""
    raise MissingExternalIdError(dependency_id)


class LazyDependencyGraphBuilder:
    """Accumulates draft edges and metadata, then resolves them in one pass.

    The builder is single use. It is mutated only while a parser feeds it and
    is consumed by exactly one call to ``build()``; any later mutation or a
    second build raises ``GraphBuilderStateError``.

    Example:
        builder = LazyDependencyGraphBuilder()
        builder.add_child_to_root(DependencyId("lib-a@^1.0"))
        builder.set_dependency_info(
            DependencyId("lib-a@^1.0"),
            "lib-a",
            "1.2.0",
            ExternalId.name_version(Forge.NPM, "lib-a", "1.2.0"),
        )
        graph = builder.build()
    """

    def __init__(self) -> None:
        # Ordered sets (dicts with None values) keep iteration deterministic
        self._root_ids: dict[DependencyId, None] = {}
        self._children: dict[DependencyId, dict[DependencyId, None]] = {}
        self._known_ids: dict[DependencyId, None] = {}
        self._infos: dict[DependencyId, LazyDependencyInfo] = {}
        self._built = False

    def _check_mutable(self) -> None:
        if self._built:
            raise GraphBuilderStateError("The dependency graph has already been built; the builder is closed.")

    def _track(self, dependency_id: DependencyId) -> None:
        self._known_ids[dependency_id] = None

    def add_edge(self, parent: DependencyId | RootDependencyId, child: DependencyId) -> None:
        """Add an edge from ``parent`` (or ``ROOT``) to ``child``. Duplicate edges are ignored."""
        self._check_mutable()
        if parent is not ROOT and not isinstance(parent, DependencyId):
            raise TypeError(f"Edge parent must be ROOT or a DependencyId, got {type(parent).__name__}")
        self._track(child)
        if parent is ROOT:
            self._root_ids[child] = None
            return
        self._track(parent)
        self._children.setdefault(parent, {})[child] = None

    def add_child_to_root(self, child: DependencyId) -> None:
        self.add_edge(ROOT, child)

    def add_child_with_parent(self, child: DependencyId, parent: DependencyId) -> None:
        self.add_edge(parent, child)

    def add_child_with_parents(self, child: DependencyId, parents: Iterable[DependencyId]) -> None:
        for parent in parents:
            self.add_edge(parent, child)

    def set_dependency_info(
        self,
        dependency_id: DependencyId,
        name: Optional[str],
        version: Optional[str],
        external_id: Optional[ExternalId] = None,
    ) -> None:
        """Attach metadata to a draft id. The last write wins."""
        self._check_mutable()
        self._track(dependency_id)
        info = self._infos.setdefault(dependency_id, LazyDependencyInfo())
        info.name = name
        info.version = version
        info.external_id = external_id

    def set_dependency_as_alias(self, real_id: DependencyId, alias_id: DependencyId) -> None:
        """Make ``alias_id`` resolve to whatever ``real_id`` resolves to."""
        self._check_mutable()
        self._track(alias_id)
        self._infos.setdefault(alias_id, LazyDependencyInfo()).alias_id = real_id

    def get_dependency_info(self, dependency_id: DependencyId) -> Optional[LazyDependencyInfo]:
        return self._infos.get(dependency_id)

    def build(self, missing_id_resolver: Optional[MissingIdResolver] = None) -> DependencyGraph:
        """Resolve every draft id and return the finished graph.

        Args:
            missing_id_resolver: Called for each id without a known external id.
                Defaults to ``fail_on_missing_id``.

        Returns:
            The resolved DependencyGraph

        Raises:
            MissingExternalIdError: If the resolver refuses an id
            GraphBuilderStateError: If the builder was already built
        """
        self._check_mutable()
        self._built = True
        resolver = missing_id_resolver or fail_on_missing_id

        resolved: dict[DependencyId, Dependency] = {}
        for dependency_id in self._known_ids:
            external_id = self._resolve(dependency_id, resolver)
            resolved[dependency_id] = Dependency.from_external_id(external_id)

        graph = DependencyGraph()
        for child_id in self._root_ids:
            graph.add_child_to_root(resolved[child_id])
        for parent_id, children in self._children.items():
            for child_id in children:
                graph.add_parent_with_child(resolved[parent_id], resolved[child_id])

        logger.debug(
            f"Built dependency graph: {len(self._known_ids)} draft id(s) resolved to {len(graph)} node(s)"
        )
        return graph

    def _resolve(self, dependency_id: DependencyId, resolver: MissingIdResolver) -> ExternalId:
        # Follow aliases by table lookup; the visited set stops alias cycles
        current = dependency_id
        visited: set[DependencyId] = set()
        info = self._infos.get(current)
        while info is not None and info.external_id is None and info.alias_id is not None:
            if current in visited:
                break
            visited.add(current)
            current = info.alias_id
            info = self._infos.get(current)

        if info is not None and info.external_id is not None:
            return info.external_id

        return resolver(dependency_id, self._infos.get(dependency_id))
