"""Gradle dependency tree parsing."""

from .detectable import GradleDetectable
from .extractor import GradleExtractor
from .line_parser import GRADLE_TREE_FORMAT, GradleReportLineParser, TreeFormat
from .models import GradleGav, GradleTreeNode, NodeType, ReplacedGradleGav
from .replacement import REPLACEMENT_RULES, ReplacementRule, apply_replacement
from .report_parser import GradleReport, GradleReportParser

__all__ = [
    "GRADLE_TREE_FORMAT",
    "GradleDetectable",
    "GradleExtractor",
    "GradleGav",
    "GradleReport",
    "GradleReportLineParser",
    "GradleReportParser",
    "GradleTreeNode",
    "NodeType",
    "REPLACEMENT_RULES",
    "ReplacedGradleGav",
    "ReplacementRule",
    "TreeFormat",
    "apply_replacement",
]
