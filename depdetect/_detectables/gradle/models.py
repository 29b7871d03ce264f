"""Data models for Gradle dependency tree parsing."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..._graph import ExternalId


@dataclass(frozen=True)
class GradleGav:
    """A resolved ``group:artifact:version`` coordinate."""

    group: str
    name: str
    version: str

    def to_external_id(self) -> ExternalId:
        return ExternalId.maven(self.group, self.name, self.version)

    def __str__(self) -> str:
        return f"{self.group}:{self.name}:{self.version}"


@dataclass(frozen=True)
class ReplacedGradleGav:
    """The losing side of a ``requested -> selected`` conflict resolution."""

    group: str
    name: str
    version: Optional[str] = None


class NodeType(Enum):
    GAV = "gav"
    PROJECT = "project"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class GradleTreeNode:
    """One parsed line of a Gradle dependency tree."""

    node_type: NodeType
    level: int
    gav: Optional[GradleGav] = None
    replaced_gav: Optional[ReplacedGradleGav] = None
    project_name: Optional[str] = None

    @classmethod
    def new_project(cls, level: int, project_name: str) -> "GradleTreeNode":
        return cls(NodeType.PROJECT, level, project_name=project_name)

    @classmethod
    def new_gav(cls, level: int, gav: GradleGav, replaced_gav: Optional[ReplacedGradleGav] = None) -> "GradleTreeNode":
        return cls(NodeType.GAV, level, gav=gav, replaced_gav=replaced_gav)

    @classmethod
    def new_unknown(cls, level: int) -> "GradleTreeNode":
        return cls(NodeType.UNKNOWN, level)
