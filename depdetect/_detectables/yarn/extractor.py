"""Extraction for Yarn projects."""

from pathlib import Path
from typing import Optional

from ..._graph import ExternalId, Forge
from ...exceptions import FileProcessingError
from ...logging_config import logger
from ..extraction import CodeLocation, Extraction
from .lock_parser import YarnLockParser
from .models import PackageJson
from .transformer import YarnTransformer


class YarnExtractor:
    def __init__(
        self,
        lock_parser: Optional[YarnLockParser] = None,
        transformer: Optional[YarnTransformer] = None,
        production_only: bool = False,
    ):
        self.lock_parser = lock_parser or YarnLockParser()
        self.transformer = transformer or YarnTransformer()
        self.production_only = production_only

    def extract(self, yarn_lock_file: Path, package_json_file: Path) -> Extraction:
        try:
            package_json = PackageJson.from_file(package_json_file)
            yarn_lock = self.lock_parser.parse_file(yarn_lock_file)
        except FileProcessingError as e:
            logger.error(str(e))
            return Extraction.exception(e)

        graph = self.transformer.transform(package_json, yarn_lock, self.production_only)
        missing = len(self.transformer.missing_dependencies)
        if missing:
            logger.info(f"{missing} dependency(ies) could not be found in {yarn_lock_file}")

        external_id = None
        if package_json.name:
            external_id = ExternalId.name_version(Forge.NPM, package_json.name, package_json.version)
        code_location = CodeLocation(graph, external_id=external_id)
        return Extraction.success(
            [code_location],
            project_name=package_json.name,
            project_version=package_json.version,
        )
