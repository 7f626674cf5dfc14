"""Tests for DeletionOperation model.

Test coverage for deletion operation entity with validation rules.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from src.models.deletion_operation import (
    DeletionOperation,
    OperationMode,
    OperationStatus,
)


class TestDeletionOperation:
    """Test suite for DeletionOperation model."""

    def test_create_minimal_operation(self) -> None:
        """Test creating operation with minimal required fields."""
        operation = DeletionOperation(
            operation_id="op_123",
            signature="ff9fw",
            timestamp=datetime(2025, 11, 11, 15, 30, 0),
            mode=OperationMode.DRY_RUN,
            status=OperationStatus.PLANNED,
            total_resources=10,
        )

        assert operation.operation_id == "op_123"
        assert operation.signature == "ff9fw"
        assert operation.mode == OperationMode.DRY_RUN
        assert operation.status == OperationStatus.PLANNED
        assert operation.total_resources == 10
        assert operation.succeeded_count == 0
        assert operation.failed_count == 0
        assert operation.cloud is None

    def test_create_full_operation(self) -> None:
        """Test creating operation with all optional fields."""
        started = datetime(2025, 11, 11, 15, 30, 0)
        completed = started + timedelta(seconds=85)

        operation = DeletionOperation(
            operation_id="op_456",
            signature="ab12c",
            timestamp=started,
            mode=OperationMode.EXECUTE,
            status=OperationStatus.PARTIAL,
            total_resources=10,
            succeeded_count=9,
            failed_count=1,
            cloud="shiftstack",
            started_at=started,
            completed_at=completed,
            duration_seconds=85.0,
        )

        assert operation.cloud == "shiftstack"
        assert operation.duration_seconds == 85.0
        assert operation.validate() is True

    def test_validate_execute_counts_must_match_total(self) -> None:
        """Test execute mode requires succeeded + failed == total."""
        operation = DeletionOperation(
            operation_id="op_789",
            signature="ff9fw",
            timestamp=datetime(2025, 11, 11),
            mode=OperationMode.EXECUTE,
            status=OperationStatus.COMPLETED,
            total_resources=5,
            succeeded_count=3,
            failed_count=1,
        )

        with pytest.raises(ValueError, match="Resource counts don't match total"):
            operation.validate()

    def test_validate_executing_status_skips_count_check(self) -> None:
        """Test counts are not checked while an operation is still executing."""
        operation = DeletionOperation(
            operation_id="op_790",
            signature="ff9fw",
            timestamp=datetime(2025, 11, 11),
            mode=OperationMode.EXECUTE,
            status=OperationStatus.EXECUTING,
            total_resources=5,
            succeeded_count=1,
        )

        assert operation.validate() is True

    def test_validate_completion_before_start_fails(self) -> None:
        """Test completed_at before started_at is rejected."""
        started = datetime(2025, 11, 11, 15, 30, 0)
        operation = DeletionOperation(
            operation_id="op_791",
            signature="ff9fw",
            timestamp=started,
            mode=OperationMode.EXECUTE,
            status=OperationStatus.COMPLETED,
            total_resources=0,
            started_at=started,
            completed_at=started - timedelta(seconds=1),
        )

        with pytest.raises(ValueError, match="Completion time before start time"):
            operation.validate()

    def test_validate_dry_run_requires_planned_status(self) -> None:
        """Test dry-run operations must stay in planned status."""
        operation = DeletionOperation(
            operation_id="op_792",
            signature="ff9fw",
            timestamp=datetime(2025, 11, 11),
            mode=OperationMode.DRY_RUN,
            status=OperationStatus.COMPLETED,
            total_resources=3,
        )

        with pytest.raises(ValueError, match="Dry-run mode must have planned status"):
            operation.validate()


class TestFinalStatus:
    """Test suite for deriving the terminal status from counts."""

    @pytest.mark.parametrize(
        "succeeded,failed,expected",
        [
            (5, 0, OperationStatus.COMPLETED),
            (0, 0, OperationStatus.COMPLETED),
            (4, 1, OperationStatus.PARTIAL),
            (0, 3, OperationStatus.FAILED),
        ],
    )
    def test_final_status(self, succeeded: int, failed: int, expected: OperationStatus) -> None:
        """Test status derivation for each outcome mix."""
        assert DeletionOperation.final_status(succeeded, failed) == expected
