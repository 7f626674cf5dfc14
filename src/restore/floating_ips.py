"""Floating IP hygiene for a cluster's API and Ingress addresses.

The installer tags the floating IPs it allocates with descriptions of the
form ``API <cluster>.<domain>`` and ``Ingress <cluster>.<domain>``. Addresses
whose status is DOWN are no longer associated with a port and can be
released.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from src.cloud.resource_client import CloudResourceClient
from src.models.resource_kind import ResourceKind
from src.models.resource_ref import ResourceRef

logger = logging.getLogger(__name__)

FIP_ROLES = ("API", "Ingress")
UNUSED_STATUS = "DOWN"


@dataclass
class FloatingIPUsage:
    """Usage counts of one floating IP role.

    Attributes:
        role: "API" or "Ingress"
        addresses: Floating IPs carrying this role's description
    """

    role: str
    addresses: list[ResourceRef]

    @property
    def total(self) -> int:
        return len(self.addresses)

    @property
    def unused(self) -> list[ResourceRef]:
        return [fip for fip in self.addresses if fip.get("status") == UNUSED_STATUS]


class FloatingIPAuditor:
    """Finds and releases unused floating IPs of a cluster.

    Attributes:
        client: Cloud resource client
        cluster_name: Cluster name (e.g. "openshift-cluster")
        base_domain: Base domain (e.g. "example.com")
    """

    def __init__(self, client: CloudResourceClient, cluster_name: str, base_domain: str) -> None:
        self.client = client
        self.cluster_name = cluster_name
        self.base_domain = base_domain

    @property
    def fqdn(self) -> str:
        return f"{self.cluster_name}.{self.base_domain}"

    def description_for(self, role: str) -> str:
        return f"{role} {self.fqdn}"

    def usage(self) -> list[FloatingIPUsage]:
        """Group the cluster's floating IPs by role.

        Raises:
            CloudOperationError: If floating IPs cannot be listed
        """
        descriptions = {self.description_for(role): role for role in FIP_ROLES}
        fips = self.client.list_resources(ResourceKind.FLOATING_IP, lambda r: r.description in descriptions)

        by_role: dict[str, list[ResourceRef]] = {role: [] for role in FIP_ROLES}
        for fip in fips:
            by_role[descriptions[fip.description]].append(fip)

        return [FloatingIPUsage(role=role, addresses=by_role[role]) for role in FIP_ROLES]

    def find_unused(self, status: str = UNUSED_STATUS) -> list[ResourceRef]:
        """List the cluster's floating IPs in the given status (default DOWN)."""
        return [fip for usage in self.usage() for fip in usage.addresses if fip.get("status") == status]

    def release(self, fips: list[ResourceRef]) -> dict[str, Optional[str]]:
        """Delete floating IPs.

        Args:
            fips: Floating IPs to delete

        Returns:
            Mapping of floating IP address to error message (None on success)
        """
        results: dict[str, Optional[str]] = {}
        for fip in fips:
            success, error = self.client.delete(ResourceKind.FLOATING_IP, fip.resource_id)
            if not success:
                logger.warning(f"Failed to delete floating IP {fip.display_name}: {error}")
            results[fip.display_name] = None if success else (error or "deletion failed")
        return results
