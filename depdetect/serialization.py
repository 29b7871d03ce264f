"""
Serialization of detect code locations into the upload document.

The document is plain JSON. Each code location lists its nodes by Package
URL and its edges as parent/child purl pairs; edges from the root use the
code location's own identity as the parent.

Example document:
    {
      "tool": {"name": "depdetect", "version": "0.1.0"},
      "project": {"name": "demo", "version": "1.0.0"},
      "codeLocations": [
        {
          "name": "demo yarn",
          "creator": "yarn",
          "sourcePath": "/src/demo",
          "externalId": "pkg:npm/demo@1.0.0",
          "dependencies": [{"purl": "pkg:npm/lib-a@1.2.0", "name": "lib-a", "version": "1.2.0"}],
          "relationships": [{"parent": "pkg:npm/demo@1.0.0", "child": "pkg:npm/lib-a@1.2.0"}]
        }
      ]
    }
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from ._pipeline import DetectCodeLocation, DetectToolProjectInfo
from .exceptions import FileProcessingError
from .logging_config import logger

TOOL_NAME = "depdetect"


def serialize_code_location(code_location: DetectCodeLocation) -> Dict[str, Any]:
    """Render one code location as a JSON-compatible dict."""
    graph = code_location.dependency_graph
    owner = code_location.external_id.to_purl()

    dependencies = sorted(
        (
            {"purl": dependency.external_id.to_purl(), "name": dependency.name, "version": dependency.version}
            for dependency in graph.get_dependencies()
        ),
        key=lambda d: d["purl"],
    )
    relationships = sorted(
        (
            {"parent": parent.to_purl() if parent is not None else owner, "child": child.to_purl()}
            for parent, child in graph.edges()
        ),
        key=lambda r: (r["parent"], r["child"]),
    )
    return {
        "name": code_location.code_location_name,
        "creator": code_location.creator_name,
        "sourcePath": str(code_location.source_path),
        "externalId": owner,
        "dependencies": dependencies,
        "relationships": relationships,
    }


def serialize_code_locations(
    code_locations: List[DetectCodeLocation],
    project_info: Optional[DetectToolProjectInfo] = None,
) -> Dict[str, Any]:
    """
    Build the upload document for a run.

    Args:
        code_locations: Code locations of every successful detector
        project_info: Project name/version to record, if any detector found one

    Returns:
        JSON-compatible document
    """
    document: Dict[str, Any] = {
        "tool": {"name": TOOL_NAME, "version": __version__},
        "codeLocations": [serialize_code_location(c) for c in code_locations],
    }
    if project_info is not None:
        document["project"] = {"name": project_info.name, "version": project_info.version}
    logger.debug(f"Serialized {len(code_locations)} code location(s)")
    return document


def write_document(document: Dict[str, Any], output_file: Path) -> None:
    """
    Write a document to disk as indented JSON.

    Raises:
        FileProcessingError: If the file cannot be written
    """
    output_file = Path(output_file)
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with output_file.open("w", encoding="utf-8") as f:
            json.dump(document, f, indent=2)
            f.write("\n")
    except OSError as e:
        raise FileProcessingError(f"Failed to write {output_file}: {e}") from e
    logger.info(f"Wrote {len(document.get('codeLocations', []))} code location(s) to {output_file}")
