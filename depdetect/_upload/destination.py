"""Backend API destination for code location uploads."""

import json
from typing import Any, Dict, Optional

import requests

from ..http_client import get_default_headers
from ..logging_config import logger
from .result import UploadResult

# Upload timeout in seconds
UPLOAD_TIMEOUT = 120

CODE_LOCATIONS_ENDPOINT = "/api/v1/code-locations"


class BackendDestination:
    """
    Uploads the serialized code location document to the backend API.

    Args:
        token: API token
        api_base_url: Backend base URL (e.g., https://backend.example.com)
    """

    def __init__(self, token: Optional[str] = None, api_base_url: Optional[str] = None):
        self._token = token
        self._api_base_url = (api_base_url or "").rstrip("/")

    @property
    def name(self) -> str:
        return "backend"

    def is_configured(self) -> bool:
        return bool(self._token and self._api_base_url)

    def upload(self, document: Dict[str, Any]) -> UploadResult:
        """
        Post a code location document.

        Args:
            document: Document produced by serialize_code_locations

        Returns:
            UploadResult with the backend's scan id if successful
        """
        if not self.is_configured():
            return UploadResult.failure_result(
                destination_name=self.name,
                error_message="Backend destination not configured (missing token or API base URL)",
            )

        url = f"{self._api_base_url}{CODE_LOCATIONS_ENDPOINT}"
        headers = get_default_headers(self._token, content_type="application/json")
        count = len(document.get("codeLocations", []))
        logger.info(f"Uploading {count} code location(s) to {self._api_base_url}")

        try:
            response = requests.post(url, headers=headers, data=json.dumps(document), timeout=UPLOAD_TIMEOUT)
        except requests.exceptions.ConnectionError:
            return UploadResult.failure_result(
                destination_name=self.name,
                error_message="Failed to connect to the backend API for upload",
            )
        except requests.exceptions.Timeout:
            return UploadResult.failure_result(
                destination_name=self.name, error_message="Code location upload timed out"
            )

        if not response.ok:
            err_msg = f"Failed to upload code locations. [{response.status_code}]"
            try:
                response_json = response.json()
                if "detail" in response_json:
                    err_msg += f" - {response_json['detail']}"
            except (ValueError, json.JSONDecodeError):
                pass
            return UploadResult.failure_result(destination_name=self.name, error_message=err_msg)

        scan_id = None
        response_metadata: Dict[str, Any] = {}
        try:
            response_data = response.json()
            scan_id = response_data.get("scan_id") or response_data.get("id")
            response_metadata = response_data
        except (ValueError, json.JSONDecodeError):
            logger.warning("Could not extract scan ID from upload response")

        logger.info("Code locations uploaded successfully")
        return UploadResult.success_result(destination_name=self.name, scan_id=scan_id, metadata=response_metadata)
