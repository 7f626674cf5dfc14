"""Resource reclaimer.

Applies a ReclamationPlan: deletes every discovered resource in
dependency-safe order, tolerating individual failures.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from src.cloud.resource_client import CloudResourceClient
from src.models.deletion_operation import DeletionOperation, OperationMode, OperationStatus
from src.models.deletion_record import DeletionRecord, DeletionStatus
from src.models.reclamation_plan import ReclamationPlan
from src.models.resource_kind import ResourceKind
from src.models.resource_ref import ResourceRef
from src.restore.audit import AuditStorage
from src.restore.reporter import ReclamationReporter
from src.restore.router import RouterCleaner

logger = logging.getLogger(__name__)

# Kinds deleted before router preparation
PRE_ROUTER_KINDS = (ResourceKind.INSTANCE, ResourceKind.VOLUME)

# Kinds deleted after router preparation and before the routers themselves
ROUTER_DEPENDENT_KINDS = (ResourceKind.PORT, ResourceKind.SUBNET)

# Kinds deleted once routers are gone
POST_ROUTER_KINDS = (
    ResourceKind.NETWORK,
    ResourceKind.SECURITY_GROUP,
    ResourceKind.SERVER_GROUP,
    ResourceKind.IMAGE,
    ResourceKind.FLOATING_IP,
)


class ResourceReclaimer:
    """Resource reclaimer orchestrator.

    Deletes the resources of a plan in this order: instances (waiting for
    each), volumes, router gateway/interface removal, ports, subnets, routers
    (with retries), networks, security groups, server groups, images and
    floating IPs. A failure on one resource is recorded and never stops the
    remaining deletions.

    Attributes:
        client: Cloud resource client
        reporter: Status line output
        router_cleaner: Router preparation and retrying deletion
        audit_storage: Audit log storage (optional)
        cloud: Cloud profile name recorded on operations (optional)
    """

    def __init__(
        self,
        client: CloudResourceClient,
        reporter: Optional[ReclamationReporter] = None,
        audit_storage: Optional[AuditStorage] = None,
        router_max_attempts: int = 3,
        router_retry_delay: float = 2.0,
        cloud: Optional[str] = None,
    ) -> None:
        """Initialize resource reclaimer.

        Args:
            client: Cloud resource client
            reporter: Reporter for status lines (default: console reporter)
            audit_storage: Audit storage for logging executed operations
            router_max_attempts: Delete attempts per router (default: 3)
            router_retry_delay: Seconds between router attempts (default: 2.0)
            cloud: Cloud profile name
        """
        self.client = client
        self.reporter = reporter or ReclamationReporter()
        self.audit_storage = audit_storage
        self.cloud = cloud
        self.router_cleaner = RouterCleaner(
            client,
            self.reporter,
            max_attempts=router_max_attempts,
            retry_delay=router_retry_delay,
        )

    def preview(self, plan: ReclamationPlan) -> DeletionOperation:
        """Describe a plan without deleting anything (dry-run mode)."""
        return DeletionOperation(
            operation_id=f"op_{uuid.uuid4()}",
            signature=str(plan.signature),
            timestamp=datetime.utcnow(),
            mode=OperationMode.DRY_RUN,
            status=OperationStatus.PLANNED,
            total_resources=plan.total,
            cloud=self.cloud,
        )

    def execute(self, plan: ReclamationPlan, confirmed: bool = False) -> tuple[DeletionOperation, list[DeletionRecord]]:
        """Delete every resource of a plan.

        Args:
            plan: Plan produced by discovery; consumed by this call
            confirmed: Must be True to proceed with deletion

        Returns:
            Tuple of (operation, deletion records)

        Raises:
            ValueError: If not confirmed
            PlanAlreadyConsumedError: If the plan was already applied
        """
        if not confirmed:
            raise ValueError("Deletion requires explicit confirmation.")

        plan.consume()

        operation_id = f"op_{uuid.uuid4()}"
        started_at = datetime.utcnow()
        records: list[DeletionRecord] = []

        logger.info(f"Starting reclamation {operation_id} for signature {plan.signature}")
        self.reporter.console.print()
        self.reporter.info("Starting resource deletion...")

        for kind in PRE_ROUTER_KINDS:
            records.extend(self._delete_kind(operation_id, plan, kind))

        routers = plan.of_kind(ResourceKind.ROUTER)
        prepared: list[ResourceRef] = []
        if routers:
            self.reporter.info("Preparing routers for deletion...")
            for router in routers:
                prepared.append(self.router_cleaner.prepare(router).router)

        for kind in ROUTER_DEPENDENT_KINDS:
            records.extend(self._delete_kind(operation_id, plan, kind))

        if prepared:
            self.reporter.phase(ResourceKind.ROUTER)
            for router in prepared:
                records.append(self._delete_router(operation_id, router))

        for kind in POST_ROUTER_KINDS:
            records.extend(self._delete_kind(operation_id, plan, kind))

        completed_at = datetime.utcnow()
        succeeded_count = sum(1 for r in records if r.status == DeletionStatus.SUCCEEDED)
        failed_count = len(records) - succeeded_count

        operation = DeletionOperation(
            operation_id=operation_id,
            signature=str(plan.signature),
            timestamp=started_at,
            mode=OperationMode.EXECUTE,
            status=DeletionOperation.final_status(succeeded_count, failed_count),
            total_resources=plan.total,
            succeeded_count=succeeded_count,
            failed_count=failed_count,
            cloud=self.cloud,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )

        if self.audit_storage is not None:
            self.audit_storage.log_operation(operation, records)

        self.reporter.console.print()
        if failed_count:
            self.reporter.warning(
                f"Resource deletion finished with {failed_count} failure(s) for signature: {plan.signature}"
            )
        else:
            self.reporter.success(f"Resource deletion completed for signature: {plan.signature}")

        return operation, records

    def _delete_kind(self, operation_id: str, plan: ReclamationPlan, kind: ResourceKind) -> list[DeletionRecord]:
        refs = plan.of_kind(kind)
        if not refs:
            return []

        self.reporter.phase(kind)
        records = []
        for ref in refs:
            self.reporter.console.print(f"   Deleting {kind.label}: {ref.display_name}", highlight=False, markup=False)
            success, error = self.client.delete(kind, ref.resource_id, wait=(kind == ResourceKind.INSTANCE))
            records.append(self._record(operation_id, ref, success, error))
        return records

    def _delete_router(self, operation_id: str, router: ResourceRef) -> DeletionRecord:
        self.reporter.console.print(f"   Deleting router: {router.display_name}", highlight=False, markup=False)
        result = self.router_cleaner.delete(router)
        return self._record(operation_id, router, result.success, result.error_message, attempts=result.attempts)

    def _record(
        self,
        operation_id: str,
        ref: ResourceRef,
        success: bool,
        error: Optional[str],
        attempts: int = 1,
    ) -> DeletionRecord:
        label = ref.kind.label
        if success:
            self.reporter.success(f"Deleted {label}: {ref.display_name}", level=1)
        else:
            logger.warning(f"Failed to delete {ref.kind.value} {ref.display_name}: {error}")
            suffix = f" (after {attempts} attempts)" if attempts > 1 else ""
            self.reporter.error(f"Failed to delete {label}: {ref.display_name}{suffix}", level=1)

        return DeletionRecord(
            record_id=f"rec_{uuid.uuid4()}",
            operation_id=operation_id,
            resource_id=ref.resource_id,
            resource_name=ref.display_name,
            resource_kind=ref.kind.value,
            timestamp=datetime.utcnow(),
            status=DeletionStatus.SUCCEEDED if success else DeletionStatus.FAILED,
            attempts=attempts,
            error_message=None if success else (error or "Resource deletion failed"),
        )
