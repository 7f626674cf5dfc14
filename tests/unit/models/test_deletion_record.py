"""Tests for DeletionRecord model."""

from __future__ import annotations

from datetime import datetime

import pytest

from src.models.deletion_record import DeletionRecord, DeletionStatus


def _record(**overrides) -> DeletionRecord:
    values = dict(
        record_id="rec_001",
        operation_id="op_123",
        resource_id="3f2a",
        resource_name="openshift-cluster-ff9fw-master-0",
        resource_kind="instance",
        timestamp=datetime(2025, 11, 11, 15, 31, 0),
        status=DeletionStatus.SUCCEEDED,
    )
    values.update(overrides)
    return DeletionRecord(**values)


class TestDeletionRecord:
    """Test suite for DeletionRecord model."""

    def test_succeeded_record_is_valid(self) -> None:
        """Test a succeeded record without error passes validation."""
        record = _record()

        assert record.attempts == 1
        assert record.validate() is True

    def test_failed_record_requires_error_message(self) -> None:
        """Test failed status without error_message is rejected."""
        with pytest.raises(ValueError, match="Failed status requires error_message"):
            _record(status=DeletionStatus.FAILED).validate()

    def test_succeeded_record_rejects_error_message(self) -> None:
        """Test succeeded status with an error_message is rejected."""
        with pytest.raises(ValueError, match="cannot have an error message"):
            _record(error_message="boom").validate()

    def test_attempts_must_be_positive(self) -> None:
        """Test attempts below 1 are rejected."""
        with pytest.raises(ValueError, match="Attempts must be at least 1"):
            _record(attempts=0).validate()

    def test_to_dict(self) -> None:
        """Test serialization used by audit logs and JSON summaries."""
        record = _record(
            resource_kind="router",
            status=DeletionStatus.FAILED,
            attempts=3,
            error_message="Conflict (resource in use) (after 3 attempts)",
        )

        data = record.to_dict()

        assert data["resource_kind"] == "router"
        assert data["status"] == "failed"
        assert data["attempts"] == 3
        assert data["timestamp"] == "2025-11-11T15:31:00Z"
        assert data["error_message"].endswith("(after 3 attempts)")
