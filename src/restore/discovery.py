"""Resource discovery for a cluster signature.

Builds a ReclamationPlan by applying each resource kind's match rule against
the current state of the cloud.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from src.cloud.resource_client import CloudOperationError, CloudResourceClient
from src.models.reclamation_plan import ReclamationPlan
from src.models.resource_kind import DISCOVERY_ORDER, IMAGE_NAME_SUFFIXES, MatchRule, ResourceKind
from src.models.resource_ref import ResourceRef
from src.models.signature import Signature

logger = logging.getLogger(__name__)


class ResourceDiscovery:
    """Searches the cloud for resources belonging to a cluster signature.

    Each call to discover() performs a fresh scan and returns a new plan;
    nothing is carried over between calls.

    Attributes:
        client: Cloud resource client
        on_search: Optional callback invoked with each kind before it is searched
    """

    def __init__(
        self,
        client: CloudResourceClient,
        on_search: Optional[Callable[[ResourceKind], None]] = None,
    ) -> None:
        self.client = client
        self.on_search = on_search

    def discover(self, signature: Signature) -> ReclamationPlan:
        """Find every resource matching the signature.

        A failed list or show call for one kind is logged and treated as
        "nothing found" for that kind; the remaining kinds are still searched.

        Args:
            signature: Validated cluster signature

        Returns:
            ReclamationPlan (possibly empty)
        """
        logger.info(f"Searching for resources with signature: {signature}")

        found: dict[ResourceKind, list[ResourceRef]] = {}
        for kind in DISCOVERY_ORDER:
            if self.on_search:
                self.on_search(kind)
            try:
                found[kind] = self.find(kind, signature)
            except CloudOperationError as e:
                logger.warning(f"Search for {kind.spec.plural.lower()} failed, treating as none found: {e}")
                found[kind] = []

        plan = ReclamationPlan.build(signature, found)
        logger.info(f"Found {plan.total} resources for signature {signature}")
        return plan

    def find(self, kind: ResourceKind, signature: Signature) -> list[ResourceRef]:
        """Apply the match rule of one kind.

        Raises:
            CloudOperationError: If the underlying list or show call fails
        """
        rule = kind.match_rule

        if rule == MatchRule.NAME_PREFIX:
            return self.client.list_resources(kind, signature.name_prefix)

        if rule == MatchRule.NAME_EXACT:
            return self._lookup_names(kind, [f"{signature.name_prefix}{suffix}" for suffix in IMAGE_NAME_SUFFIXES])

        if rule == MatchRule.DESCRIPTION_CONTAINS:
            cluster_name = signature.cluster_name
            return self.client.list_resources(kind, lambda r: bool(r.description) and cluster_name in r.description)

        if rule == MatchRule.NAME_CONTAINS:
            # Router names come from a separate orchestration layer, e.g.
            # k8s-clusterapi-cluster-openshift-cluster-api-guests-openshift-cluster-ff9fw
            return self.client.list_resources(kind, lambda r: signature.value in r.name)

        raise ValueError(f"Unsupported match rule: {rule}")

    def _lookup_names(self, kind: ResourceKind, names: list[str]) -> list[ResourceRef]:
        """Look up exact names one by one, keeping the ones that exist."""
        refs = []
        for name in names:
            ref = self.client.show(kind, name)
            if ref is not None:
                refs.append(ref)
        return refs
