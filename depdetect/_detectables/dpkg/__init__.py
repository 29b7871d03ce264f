"""Debian package support."""

from .control import DebianControl, parse_control, parse_relationship_field
from .detectable import DpkgDetectable
from .resolver import DpkgPkgDetailsResolver, PackageDetails

__all__ = [
    "DebianControl",
    "DpkgDetectable",
    "DpkgPkgDetailsResolver",
    "PackageDetails",
    "parse_control",
    "parse_relationship_field",
]
