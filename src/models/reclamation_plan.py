"""Reclamation plan model.

The set of resources found for one signature in a single discovery pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from src.models.resource_kind import DISCOVERY_ORDER, ResourceKind
from src.models.resource_ref import ResourceRef
from src.models.signature import Signature


class PlanAlreadyConsumedError(RuntimeError):
    """Raised when a plan is applied a second time."""


@dataclass(frozen=True)
class ReclamationPlan:
    """Ordered, kind-partitioned resources discovered for a signature.

    The plan is immutable once built. A plan may be applied at most once;
    rerunning discovery produces a fresh plan.

    Attributes:
        signature: Cluster signature the plan was built for
        resources: Discovered resources, grouped in discovery order
        created_at: When discovery finished (UTC)
    """

    signature: Signature
    resources: tuple[ResourceRef, ...] = ()
    created_at: datetime = field(default_factory=datetime.utcnow)
    _consumed: bool = field(default=False, init=False, repr=False, compare=False)

    @classmethod
    def build(cls, signature: Signature, found: dict[ResourceKind, Iterable[ResourceRef]]) -> ReclamationPlan:
        """Build a plan from per-kind discovery results.

        Args:
            signature: Cluster signature
            found: Mapping of kind to resources found for that kind

        Returns:
            ReclamationPlan with resources ordered by discovery order
        """
        ordered: list[ResourceRef] = []
        for kind in DISCOVERY_ORDER:
            for ref in found.get(kind, ()):
                if ref.kind != kind:
                    raise ValueError(f"Resource {ref.resource_id} is a {ref.kind.value}, not a {kind.value}")
                ordered.append(ref)
        return cls(signature=signature, resources=tuple(ordered))

    def of_kind(self, kind: ResourceKind) -> tuple[ResourceRef, ...]:
        return tuple(r for r in self.resources if r.kind == kind)

    def counts(self) -> dict[ResourceKind, int]:
        """Resource count per kind, in discovery order, omitting empty kinds."""
        counts = {}
        for kind in DISCOVERY_ORDER:
            count = len(self.of_kind(kind))
            if count:
                counts[kind] = count
        return counts

    @property
    def total(self) -> int:
        return len(self.resources)

    @property
    def is_empty(self) -> bool:
        return not self.resources

    @property
    def consumed(self) -> bool:
        return self._consumed

    def in_deletion_order(self) -> list[ResourceRef]:
        return sorted(self.resources, key=lambda r: r.kind.deletion_rank)

    def consume(self) -> None:
        """Mark the plan as applied.

        Raises:
            PlanAlreadyConsumedError: If the plan was already applied
        """
        if self._consumed:
            raise PlanAlreadyConsumedError(
                f"Plan for signature {self.signature} was already applied; run discovery again"
            )
        object.__setattr__(self, "_consumed", True)

    def to_dict(self) -> dict:
        return {
            "signature": str(self.signature),
            "cluster_name": self.signature.cluster_name,
            "created_at": self.created_at.isoformat() + "Z",
            "total_resources": self.total,
            "counts": {kind.value: count for kind, count in self.counts().items()},
            "resources": [r.to_dict() for r in self.resources],
        }
