"""Decision table for Gradle's ``requested -> selected`` version notation.

Gradle marks a dependency whose requested coordinate lost a conflict with an
arrow: everything after the arrow is the winning (selected) coordinate and
everything before it is the losing one. The winning side comes in several
shapes, each handled by one row of ``REPLACEMENT_RULES``:

============================  ===================================  ==========================
Line (after the prefix)       Match                                Fields taken from winner
============================  ===================================  ==========================
``g:a:1.0 -> g2:a2:2.0``      winner contains a colon              group, artifact, version
``g:a -> 2.0``                no colon before the arrow            version (artifact repaired)
``g:a:1.0 -> 2.0``            a version field exists               version
============================  ===================================  ==========================

Rows are tried in order and the first match wins. The arrow replacement always
takes precedence over the version produced by the plain colon split.
"""

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class ReplacementRule:
    """One row of the replacement decision table.

    ``matches`` and ``apply`` both receive the colon-split pieces of the whole
    coordinate, the winning section and the winning indicator.
    """

    name: str
    matches: Callable[[list[str], str, str], bool]
    apply: Callable[[list[str], str, str], list[str]]


def _winner_is_coordinate(pieces: list[str], winning: str, indicator: str) -> bool:
    return ":" in winning


def _take_winning_coordinate(pieces: list[str], winning: str, indicator: str) -> list[str]:
    return winning.split(":")


def _indicator_in_artifact(pieces: list[str], winning: str, indicator: str) -> bool:
    return len(pieces) == 2 and indicator in pieces[1]


def _repair_artifact_and_set_version(pieces: list[str], winning: str, indicator: str) -> list[str]:
    artifact = pieces[1][: pieces[1].index(indicator)]
    return [pieces[0], artifact, winning]


def _has_version_field(pieces: list[str], winning: str, indicator: str) -> bool:
    return len(pieces) >= 3


def _set_version(pieces: list[str], winning: str, indicator: str) -> list[str]:
    return [pieces[0], pieces[1], winning, *pieces[3:]]


REPLACEMENT_RULES: tuple[ReplacementRule, ...] = (
    ReplacementRule("winning-coordinate", _winner_is_coordinate, _take_winning_coordinate),
    ReplacementRule("version-without-separator", _indicator_in_artifact, _repair_artifact_and_set_version),
    ReplacementRule("winning-version", _has_version_field, _set_version),
)


def apply_replacement(pieces: list[str], winning: str, indicator: str) -> Optional[tuple[str, list[str]]]:
    """
    Apply the first matching replacement rule.

    Args:
        pieces: Colon-split pieces of the full coordinate text
        winning: Text after the winning indicator
        indicator: The winning indicator itself (e.g., " -> ")

    Returns:
        Tuple of (rule name, replaced pieces), or None if no rule applies
    """
    for rule in REPLACEMENT_RULES:
        if rule.matches(pieces, winning, indicator):
            return rule.name, rule.apply(pieces, winning, indicator)
    return None
