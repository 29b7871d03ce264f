"""UploadResult dataclass for code location uploads."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class UploadResult:
    """
    Result of an upload operation.

    Attributes:
        success: Whether upload completed successfully
        destination_name: Name of the destination that handled the upload
        scan_id: ID the backend assigned to the upload, if it returned one
        error_message: Error message if upload failed
        metadata: Additional metadata from the response
    """

    success: bool
    destination_name: str
    scan_id: Optional[str] = None
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate result state."""
        if self.success and self.error_message:
            raise ValueError("Successful result should not have error_message")
        if not self.success and not self.error_message:
            raise ValueError("Failed result must have error_message")

    @classmethod
    def success_result(
        cls,
        destination_name: str,
        scan_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "UploadResult":
        """Create a successful upload result."""
        return cls(
            success=True,
            destination_name=destination_name,
            scan_id=scan_id,
            metadata=metadata or {},
        )

    @classmethod
    def failure_result(cls, destination_name: str, error_message: str) -> "UploadResult":
        """Create a failed upload result."""
        return cls(success=False, destination_name=destination_name, error_message=error_message)
