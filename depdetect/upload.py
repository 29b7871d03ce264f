"""
Public API for uploading code locations.

Usage:
    from depdetect.upload import upload_code_locations

    result = upload_code_locations(document, token="api-token", api_base_url="https://backend.example.com")
    if not result.success:
        print(result.error_message)
"""

from typing import Any, Dict, Optional

from ._upload import BackendDestination, UploadResult


def upload_code_locations(
    document: Dict[str, Any],
    token: Optional[str] = None,
    api_base_url: Optional[str] = None,
) -> UploadResult:
    """
    Upload a serialized code location document.

    Args:
        document: Document produced by serialization.serialize_code_locations
        token: Backend API token
        api_base_url: Backend base URL

    Returns:
        UploadResult with success status and scan id
    """
    return BackendDestination(token=token, api_base_url=api_base_url).upload(document)


__all__ = ["upload_code_locations", "UploadResult", "BackendDestination"]
