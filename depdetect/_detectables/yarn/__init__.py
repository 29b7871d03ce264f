"""Yarn lockfile support."""

from .detectable import YarnLockDetectable
from .extractor import YarnExtractor
from .lock_parser import YarnLockParser
from .models import PackageJson, YarnLock, YarnLockDependency, YarnLockEntry, YarnLockEntryId, split_dependency_key
from .transformer import YarnTransformer

__all__ = [
    "PackageJson",
    "YarnExtractor",
    "YarnLock",
    "YarnLockDependency",
    "YarnLockDetectable",
    "YarnLockEntry",
    "YarnLockEntryId",
    "YarnLockParser",
    "YarnTransformer",
    "split_dependency_key",
]
