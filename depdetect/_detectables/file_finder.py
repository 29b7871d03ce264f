"""File discovery used by detectable applicability checks."""

from pathlib import Path
from typing import Optional


class FileFinder:
    """Looks for marker files directly inside a directory (no recursion)."""

    def find_file(self, directory: Path, filename: str) -> Optional[Path]:
        candidate = Path(directory) / filename
        if candidate.is_file():
            return candidate
        return None

    def find_files(self, directory: Path, pattern: str) -> list[Path]:
        return sorted(p for p in Path(directory).glob(pattern) if p.is_file())
