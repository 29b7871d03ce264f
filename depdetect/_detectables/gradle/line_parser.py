"""Parser for single lines of a Gradle dependency tree.

Gradle draws each dependency on one line, indented by its depth::

    +--- org.example:direct:1.0
    |    +--- org.example:child:2.0
    |    \\--- org.example:other:1.0 -> 1.2
    \\--- project :lib

The depth is recovered from the drawing characters in front of the component
text. Only the drawing is looked at; component names never affect the level.
"""

from dataclasses import dataclass

from ...logging_config import logger
from .models import GradleGav, GradleTreeNode, ReplacedGradleGav
from .replacement import apply_replacement


@dataclass(frozen=True)
class TreeFormat:
    """Markers of a text dependency tree."""

    branch_terminals: tuple[str, ...] = ("+---", "\\---")
    continuation_marker: str = "|"
    filler: str = "     "
    filler_replacement: str = "    |"
    component_prefix: str = "--- "
    project_indicators: tuple[str, ...] = ("--- project ",)
    removable_suffixes: tuple[str, ...] = (" (*)", " (c)", " (n)")
    winning_indicator: str = " -> "


GRADLE_TREE_FORMAT = TreeFormat()


class GradleReportLineParser:
    """Turns one line of ``gradle dependencies`` output into a GradleTreeNode."""

    def __init__(self, tree_format: TreeFormat = GRADLE_TREE_FORMAT):
        self.tree_format = tree_format

    def parse_line(self, line: str) -> GradleTreeNode:
        """
        Parse a tree line.

        Args:
            line: A raw line of the dependency report

        Returns:
            GradleTreeNode of type PROJECT, GAV or UNKNOWN. Lines that cannot be
            read as a component are UNKNOWN but still carry their level.
        """
        level = self.parse_tree_level(line)
        fmt = self.tree_format

        if fmt.component_prefix not in line:
            return GradleTreeNode.new_unknown(level)

        if any(indicator in line for indicator in fmt.project_indicators):
            return GradleTreeNode.new_project(level, self._parse_project_name(line))

        return self._parse_gav_node(line, level)

    def parse_tree_level(self, line: str) -> int:
        """Compute the depth of a tree line (0 for a direct dependency)."""
        fmt = self.tree_format
        if line.startswith(fmt.branch_terminals):
            return 0

        positions = [line.index(t) for t in fmt.branch_terminals if t in line]
        drawing = line[: min(positions)] if positions else line

        if drawing.startswith(" "):
            drawing = fmt.continuation_marker + drawing

        drawing = drawing.replace(fmt.filler, fmt.filler_replacement)
        drawing = drawing.replace(fmt.continuation_marker * 2, fmt.continuation_marker)
        if drawing.endswith(fmt.continuation_marker):
            drawing = drawing[: -len(fmt.filler_replacement)]

        return drawing.count(fmt.continuation_marker)

    def _remove_suffixes(self, text: str) -> str:
        # Suffixes can stack (e.g. "(c) (*)"), so strip until none match
        stripped = True
        while stripped:
            stripped = False
            for suffix in self.tree_format.removable_suffixes:
                if text.endswith(suffix):
                    text = text[: -len(suffix)]
                    stripped = True
        return text

    def _component_text(self, line: str, marker: str) -> str:
        text = line.strip()
        start = text.find(marker)
        if start >= 0:
            text = text[start + len(marker) :]
        return self._remove_suffixes(text).strip()

    def _parse_project_name(self, line: str) -> str:
        marker = next(i for i in self.tree_format.project_indicators if i in line)
        return self._component_text(line, marker)

    def _parse_gav_node(self, line: str, level: int) -> GradleTreeNode:
        fmt = self.tree_format
        text = self._component_text(line, fmt.component_prefix)
        pieces = text.split(":")
        replaced_gav = None

        if fmt.winning_indicator in text:
            losing, winning = text.split(fmt.winning_indicator, 1)
            replacement = apply_replacement(pieces, winning.strip(), fmt.winning_indicator)
            if replacement is None:
                logger.debug(f"No replacement rule matched Gradle line: {line}")
                return GradleTreeNode.new_unknown(level)
            rule_name, pieces = replacement
            logger.debug(f"Applied replacement rule '{rule_name}' to: {text}")
            replaced_gav = self._parse_replaced_gav(losing, line)

        if len(pieces) != 3 or not all(pieces):
            logger.debug(f"Could not parse a group:artifact:version from Gradle line: {line}")
            return GradleTreeNode.new_unknown(level)

        gav = GradleGav(group=pieces[0].strip(), name=pieces[1].strip(), version=pieces[2].strip())
        return GradleTreeNode.new_gav(level, gav, replaced_gav)

    def _parse_replaced_gav(self, losing: str, line: str) -> ReplacedGradleGav | None:
        pieces = losing.strip().split(":")
        if len(pieces) == 2:
            return ReplacedGradleGav(group=pieces[0], name=pieces[1])
        if len(pieces) == 3:
            return ReplacedGradleGav(group=pieces[0], name=pieces[1], version=pieces[2])
        logger.warning(f"Unknown replaced coordinate format in Gradle line: {line}")
        return None
