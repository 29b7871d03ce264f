"""Cargo (Rust) support."""

from .detectable import CargoDetectable
from .extractor import CargoExtractor, CargoLockParser

__all__ = ["CargoDetectable", "CargoExtractor", "CargoLockParser"]
