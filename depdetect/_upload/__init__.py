"""Upload of serialized code locations."""

from .destination import CODE_LOCATIONS_ENDPOINT, UPLOAD_TIMEOUT, BackendDestination
from .result import UploadResult

__all__ = ["BackendDestination", "CODE_LOCATIONS_ENDPOINT", "UPLOAD_TIMEOUT", "UploadResult"]
