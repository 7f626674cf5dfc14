"""Deletion record model.

Individual resource deletion attempt with result and metadata.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class DeletionStatus(Enum):
    """Individual resource deletion status."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class DeletionRecord:
    """Deletion record entity.

    Each record belongs to a DeletionOperation and tracks the outcome for a
    single resource.

    Validation rules:
        - status=succeeded: no error_message
        - status=failed: requires error_message
        - attempts must be >= 1

    Attributes:
        record_id: Unique identifier for this record
        operation_id: Parent operation identifier
        resource_id: OpenStack resource ID
        resource_name: Display name (IP address for floating IPs)
        resource_kind: Resource kind value (e.g. "router")
        timestamp: When deletion finished (UTC)
        status: Deletion outcome
        attempts: Number of delete calls issued (default: 1)
        error_message: Human-readable error if failed (optional)
    """

    record_id: str
    operation_id: str
    resource_id: str
    resource_name: str
    resource_kind: str
    timestamp: datetime
    status: DeletionStatus
    attempts: int = 1
    error_message: Optional[str] = None

    def validate(self) -> bool:
        """Validate record invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == DeletionStatus.FAILED:
            if not self.error_message:
                raise ValueError("Failed status requires error_message")
        elif self.status == DeletionStatus.SUCCEEDED:
            if self.error_message:
                raise ValueError("Succeeded status cannot have an error message")

        if self.attempts < 1:
            raise ValueError("Attempts must be at least 1")

        return True

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "operation_id": self.operation_id,
            "resource_id": self.resource_id,
            "resource_name": self.resource_name,
            "resource_kind": self.resource_kind,
            "timestamp": self.timestamp.isoformat() + "Z",
            "status": self.status.value,
            "attempts": self.attempts,
            "error_message": self.error_message,
        }
