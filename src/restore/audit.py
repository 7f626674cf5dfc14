"""Audit storage for reclamation operations.

Stores and retrieves audit logs in YAML format for troubleshooting and for
tracking which clusters were reclaimed.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml

from src.models.deletion_operation import DeletionOperation
from src.models.deletion_record import DeletionRecord


class AuditStorage:
    """Audit log storage and retrieval.

    Stores reclamation operation audit logs as YAML files organized by
    year/month. Supports querying operations by date range or signature.

    Storage structure:
        ~/.ocp-reclaim/audit-logs/
            2025/
                11/
                    operation-op_123.yaml
                    operation-op_456.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.ocp-reclaim/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".ocp-reclaim" / "audit-logs")

        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_operation(self, operation: DeletionOperation, records: list[DeletionRecord]) -> Path:
        """Log reclamation operation to audit storage.

        Creates YAML file with operation metadata and all deletion records.
        Overwrites existing log if operation ID already exists.

        Args:
            operation: Deletion operation to log
            records: List of deletion records for this operation

        Returns:
            Path of the written audit file
        """
        year = operation.timestamp.year
        month = operation.timestamp.month
        year_month_dir = self.storage_dir / str(year) / f"{month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "cluster_reclamation",
                "created_at": datetime.utcnow().isoformat() + "Z",
            },
            "operation": {
                "operation_id": operation.operation_id,
                "signature": operation.signature,
                "timestamp": operation.timestamp.isoformat() + "Z",
                "cloud": operation.cloud,
                "mode": operation.mode.value,
                "status": operation.status.value,
                "total_resources": operation.total_resources,
                "succeeded_count": operation.succeeded_count,
                "failed_count": operation.failed_count,
                "started_at": operation.started_at.isoformat() + "Z" if operation.started_at else None,
                "completed_at": operation.completed_at.isoformat() + "Z" if operation.completed_at else None,
                "duration_seconds": operation.duration_seconds,
            },
            "records": [record.to_dict() for record in records],
        }

        audit_file = year_month_dir / f"operation-{operation.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.dump(audit_data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

        return audit_file

    def get_operation(self, operation_id: str) -> Optional[dict]:
        """Retrieve operation audit log by ID.

        Args:
            operation_id: Operation ID to retrieve

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/operation-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)

        return None

    def query_operations(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        signature: Optional[str] = None,
    ) -> list[dict]:
        """Query operations within date range.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all
            signature: Only operations for this signature, None for all

        Returns:
            List of operation audit logs matching criteria, oldest first
        """
        results = []

        for year_dir in sorted(self.storage_dir.glob("*")):
            if not year_dir.is_dir():
                continue

            for month_dir in sorted(year_dir.glob("*")):
                if not month_dir.is_dir():
                    continue

                for audit_file in sorted(month_dir.glob("operation-*.yaml")):
                    with open(audit_file, "r") as f:
                        audit_data = yaml.safe_load(f)

                    operation = audit_data["operation"]
                    timestamp = datetime.fromisoformat(operation["timestamp"].rstrip("Z"))

                    if since and timestamp < since:
                        continue
                    if until and timestamp > until:
                        continue
                    if signature and operation.get("signature") != signature:
                        continue

                    results.append(audit_data)

        results.sort(key=lambda data: data["operation"]["timestamp"])
        return results
