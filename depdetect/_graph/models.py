"""Data models for dependency graphs.

A graph is assembled in two stages. While input is being parsed, nodes are
addressed by ``DependencyId`` keys built from whatever is known at that point
(usually ``name@requestedRange``). Once the whole input has been read, every
key is resolved to an ``ExternalId`` and the resolved nodes form the
``DependencyGraph`` that is handed to code-location conversion.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from packageurl import PackageURL


class Forge(Enum):
    """Namespace (registry) a resolved identity belongs to.

    Each member carries the separator used when rendering an external id as a
    string and the Package URL type used for upload.
    """

    NPM = ("npm", "/", "npm")
    MAVEN = ("maven", ":", "maven")
    CARGO = ("cargo", "/", "cargo")
    DEBIAN = ("debian", "/", "deb")
    PATH = ("path", "/", "generic")

    @property
    def forge_name(self) -> str:
        return self.value[0]

    @property
    def separator(self) -> str:
        return self.value[1]

    @property
    def purl_type(self) -> str:
        return self.value[2]

    def __str__(self) -> str:
        return self.forge_name


@dataclass(frozen=True)
class DependencyId:
    """Pre-resolution key for a dependency (a draft id).

    Equality is plain string equality on ``value``, so ``lib@^1.0`` and
    ``lib@1.x`` are different keys even when they end up resolving to the
    same package.
    """

    value: str

    def __str__(self) -> str:
        return self.value


class RootDependencyId:
    """Sentinel parent for a project's direct dependencies."""

    _instance: Optional["RootDependencyId"] = None

    def __new__(cls) -> "RootDependencyId":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ROOT"


ROOT = RootDependencyId()


@dataclass(frozen=True)
class ExternalId:
    """Canonical identity of a resolved dependency.

    The identity is the ``(forge, name, version)`` triple. Maven coordinates
    additionally carry a ``group`` and Debian packages an ``architecture``.
    """

    forge: Forge
    name: str
    version: Optional[str] = None
    group: Optional[str] = None
    architecture: Optional[str] = None

    @classmethod
    def name_version(cls, forge: Forge, name: str, version: Optional[str] = None) -> "ExternalId":
        return cls(forge=forge, name=name, version=version)

    @classmethod
    def maven(cls, group: str, name: str, version: Optional[str]) -> "ExternalId":
        return cls(forge=Forge.MAVEN, name=name, version=version, group=group)

    @classmethod
    def architecture_id(cls, forge: Forge, name: str, version: str, architecture: str) -> "ExternalId":
        return cls(forge=forge, name=name, version=version, architecture=architecture)

    @classmethod
    def path_id(cls, path: str) -> "ExternalId":
        return cls(forge=Forge.PATH, name=path)

    def to_purl(self) -> str:
        """Render this id as a Package URL string."""
        qualifiers = {"arch": self.architecture} if self.architecture else None
        namespace = self.group
        name = self.name
        if self.forge.purl_type == "npm" and name.startswith("@") and "/" in name:
            namespace, name = name.split("/", 1)
        purl = PackageURL(
            type=self.forge.purl_type,
            namespace=namespace,
            name=name,
            version=self.version,
            qualifiers=qualifiers,
        )
        return purl.to_string()

    def __str__(self) -> str:
        pieces = [p for p in (self.group, self.name, self.version, self.architecture) if p]
        return f"{self.forge.forge_name}{self.forge.separator}" + self.forge.separator.join(pieces)


@dataclass(frozen=True)
class Dependency:
    """A resolved node in a dependency graph."""

    name: str
    version: Optional[str]
    external_id: ExternalId

    @classmethod
    def from_external_id(cls, external_id: ExternalId) -> "Dependency":
        return cls(name=external_id.name, version=external_id.version, external_id=external_id)


@dataclass
class DependencyGraph:
    """Resolved dependency graph.

    Nodes are keyed by ``ExternalId`` so that several draft ids resolving to
    the same identity collapse into a single node. Edges form a set: adding
    the same edge twice has no effect. Cycles are allowed.
    """

    _nodes: dict[ExternalId, Dependency] = field(default_factory=dict)
    _root: dict[ExternalId, None] = field(default_factory=dict)
    _children: dict[ExternalId, dict[ExternalId, None]] = field(default_factory=dict)

    def _node(self, dependency: Dependency) -> ExternalId:
        self._nodes.setdefault(dependency.external_id, dependency)
        return dependency.external_id

    def add_child_to_root(self, child: Dependency) -> None:
        self._root[self._node(child)] = None

    def add_parent_with_child(self, parent: Dependency, child: Dependency) -> None:
        parent_id = self._node(parent)
        child_id = self._node(child)
        self._children.setdefault(parent_id, {})[child_id] = None

    def root_dependencies(self) -> list[Dependency]:
        return [self._nodes[external_id] for external_id in self._root]

    def get_children(self, parent: Dependency | ExternalId) -> list[Dependency]:
        parent_id = parent.external_id if isinstance(parent, Dependency) else parent
        return [self._nodes[external_id] for external_id in self._children.get(parent_id, {})]

    def get_dependencies(self) -> list[Dependency]:
        return list(self._nodes.values())

    def get_dependency(self, external_id: ExternalId) -> Optional[Dependency]:
        return self._nodes.get(external_id)

    def has_dependency(self, external_id: ExternalId) -> bool:
        return external_id in self._nodes

    def edges(self) -> frozenset[tuple[Optional[ExternalId], ExternalId]]:
        """All edges as ``(parent, child)`` pairs; ``None`` stands for the root."""
        result: set[tuple[Optional[ExternalId], ExternalId]] = {(None, child) for child in self._root}
        for parent, children in self._children.items():
            result.update((parent, child) for child in children)
        return frozenset(result)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)
