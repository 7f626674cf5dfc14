"""Deletion operation model.

Represents one reclamation run for a cluster signature.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class OperationMode(Enum):
    """Operation execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class OperationStatus(Enum):
    """Operation execution status with state transitions."""

    PLANNED = "planned"
    EXECUTING = "executing"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class DeletionOperation:
    """Deletion operation entity.

    Tracks overall progress and status of one reclamation run.

    State transitions:
        planned → executing → completed (all succeeded)
        planned → executing → partial (some failed)
        planned → executing → failed (all failed)

    Attributes:
        operation_id: Unique identifier for the operation
        signature: Cluster signature being reclaimed
        timestamp: When operation was initiated (UTC)
        mode: dry-run or execute
        status: Current execution status
        total_resources: Total resources in the plan
        succeeded_count: Number successfully deleted (default: 0)
        failed_count: Number that failed to delete (default: 0)
        cloud: OpenStack cloud profile used (optional)
        started_at: When execution started (optional, execute mode only)
        completed_at: When execution completed (optional)
        duration_seconds: Total execution duration (optional)
    """

    operation_id: str
    signature: str
    timestamp: datetime
    mode: OperationMode
    status: OperationStatus
    total_resources: int
    succeeded_count: int = 0
    failed_count: int = 0
    cloud: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    duration_seconds: Optional[float] = None

    @staticmethod
    def final_status(succeeded_count: int, failed_count: int) -> OperationStatus:
        """Derive the terminal status from deletion counts."""
        if failed_count > 0:
            if succeeded_count > 0:
                return OperationStatus.PARTIAL
            return OperationStatus.FAILED
        return OperationStatus.COMPLETED

    def validate(self) -> bool:
        """Validate operation invariants.

        Validation rules:
            - execute mode: succeeded_count + failed_count == total_resources
            - completed_at must be after started_at
            - dry-run mode must have planned status

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.mode == OperationMode.EXECUTE and self.status != OperationStatus.EXECUTING:
            if self.succeeded_count + self.failed_count != self.total_resources:
                raise ValueError("Resource counts don't match total")

        if self.completed_at and self.started_at:
            if self.completed_at < self.started_at:
                raise ValueError("Completion time before start time")

        if self.mode == OperationMode.DRY_RUN and self.status != OperationStatus.PLANNED:
            raise ValueError("Dry-run mode must have planned status")

        return True
