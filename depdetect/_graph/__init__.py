"""Dependency graph construction.

Parsers feed draft edges into a LazyDependencyGraphBuilder; build() resolves
every draft id once and returns a DependencyGraph keyed by external id.

Example usage:
    from depdetect._graph import ROOT, DependencyId, LazyDependencyGraphBuilder

    builder = LazyDependencyGraphBuilder()
    builder.add_edge(ROOT, DependencyId("lib-a@^1.0"))
    graph = builder.build(my_missing_id_resolver)
"""

from .builder import LazyDependencyGraphBuilder, LazyDependencyInfo, MissingIdResolver, fail_on_missing_id
from .models import ROOT, Dependency, DependencyGraph, DependencyId, ExternalId, Forge, RootDependencyId

__all__ = [
    # Builder
    "LazyDependencyGraphBuilder",
    "LazyDependencyInfo",
    "MissingIdResolver",
    "fail_on_missing_id",
    # Models
    "ROOT",
    "Dependency",
    "DependencyGraph",
    "DependencyId",
    "ExternalId",
    "Forge",
    "RootDependencyId",
]
