"""Parser for the full output of ``gradle dependencies``.

The report is split into project sections (``Root project 'demo'``,
``Project ':app'``), each listing one tree per configuration. Every project
section gets its own dependency graph; the trees of all included
configurations are merged into it.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..._graph import ROOT, DependencyGraph, DependencyId, ExternalId, LazyDependencyGraphBuilder, RootDependencyId
from ...logging_config import logger
from .line_parser import GradleReportLineParser
from .models import NodeType

ROOT_PROJECT_PATH = ":"

_PROJECT_BANNER = re.compile(r"^(?P<kind>Root project|Project) (?:'(?P<quoted>[^']+)'|(?P<bare>\S+))(?: - .*)?$")
_CONFIGURATION_HEADER = re.compile(r"^(?P<name>[A-Za-z][\w-]*)(?: - .*)?$")


@dataclass
class GradleReport:
    """Dependency graph of one Gradle project section.

    Attributes:
        project_name: Name from the section banner (the root project's name, or
            the project path such as ``:app`` for sub-projects)
        project_path: Gradle project path (``:`` for the root project)
        dependency_graph: Graph merged from every included configuration
        configurations: Configurations that contributed to the graph
    """

    project_name: Optional[str]
    project_path: str
    dependency_graph: DependencyGraph
    configurations: list[str] = field(default_factory=list)

    @property
    def is_root_project(self) -> bool:
        return self.project_path == ROOT_PROJECT_PATH


class _Section:
    def __init__(self, project_name: Optional[str], project_path: str):
        self.project_name = project_name
        self.project_path = project_path
        self.builder = LazyDependencyGraphBuilder()
        self.configurations: list[str] = []

    def to_report(self) -> GradleReport:
        # Every node carries its external id, so the default hard-fail
        # resolver never triggers here.
        return GradleReport(
            project_name=self.project_name,
            project_path=self.project_path,
            dependency_graph=self.builder.build(),
            configurations=self.configurations,
        )


class GradleReportParser:
    """Builds one GradleReport per project section of a dependency report."""

    def __init__(
        self,
        excluded_configurations: Iterable[str] = (),
        line_parser: Optional[GradleReportLineParser] = None,
    ):
        self.excluded_configurations = frozenset(excluded_configurations)
        self.line_parser = line_parser or GradleReportLineParser()

    def parse(self, lines: Iterable[str]) -> list[GradleReport]:
        """
        Parse report lines.

        Args:
            lines: Lines of ``gradle dependencies`` output

        Returns:
            One GradleReport per project section, in report order. Output with no
            project banner yields a single root-project report.
        """
        sections: list[_Section] = []
        section: Optional[_Section] = None
        configuration: Optional[str] = None
        included = False
        # history[level] holds the id of the last node seen at that level, or
        # None when that line was not a recognizable component
        history: list[Optional[DependencyId]] = []
        terminals = self.line_parser.tree_format.branch_terminals

        for raw_line in lines:
            line = raw_line.rstrip("\r\n")

            if not any(t in line for t in terminals):
                history = []
                stripped = line.strip()
                banner = _PROJECT_BANNER.match(stripped)
                if banner:
                    name = banner.group("quoted") or banner.group("bare")
                    section = self._new_section(banner.group("kind"), name)
                    sections.append(section)
                    configuration = None
                    continue
                header = _CONFIGURATION_HEADER.match(stripped)
                if header:
                    configuration = header.group("name")
                    included = configuration not in self.excluded_configurations
                    if not included:
                        logger.debug(f"Skipping excluded Gradle configuration: {configuration}")
                continue

            if configuration is None or not included:
                continue

            if section is None:
                section = _Section(project_name=None, project_path=ROOT_PROJECT_PATH)
                sections.append(section)
            if configuration not in section.configurations:
                section.configurations.append(configuration)

            self._add_tree_line(section.builder, line, history)

        if not sections:
            sections.append(_Section(project_name=None, project_path=ROOT_PROJECT_PATH))

        reports = [s.to_report() for s in sections]
        logger.debug(f"Parsed {len(reports)} Gradle project section(s)")
        return reports

    @staticmethod
    def _new_section(kind: str, name: str) -> _Section:
        if kind == "Root project":
            return _Section(project_name=name, project_path=ROOT_PROJECT_PATH)
        return _Section(project_name=name, project_path=name)

    def _add_tree_line(
        self, builder: LazyDependencyGraphBuilder, line: str, history: list[Optional[DependencyId]]
    ) -> None:
        node = self.line_parser.parse_line(line)
        level = node.level

        del history[level:]
        while len(history) < level:
            history.append(None)
        parent: DependencyId | RootDependencyId = next((h for h in reversed(history) if h is not None), ROOT)

        if node.node_type == NodeType.GAV and node.gav is not None:
            dependency_id = DependencyId(str(node.gav))
            builder.set_dependency_info(
                dependency_id, node.gav.name, node.gav.version, node.gav.to_external_id()
            )
            builder.add_edge(parent, dependency_id)
            history.append(dependency_id)
        elif node.node_type == NodeType.PROJECT and node.project_name:
            dependency_id = DependencyId(f"project {node.project_name}")
            builder.set_dependency_info(
                dependency_id, node.project_name, None, ExternalId.path_id(node.project_name)
            )
            builder.add_child_to_root(dependency_id)
            history.append(dependency_id)
        else:
            logger.debug(f"Unrecognized Gradle tree line kept as a placeholder: {line}")
            history.append(None)
