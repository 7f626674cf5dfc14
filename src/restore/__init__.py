"""Cluster resource reclamation module.

This module finds the OpenStack resources left behind by an OpenShift cluster
deployment and deletes them in dependency-safe order.

Classes:
    ResourceDiscovery: Builds a reclamation plan for a signature
    ResourceReclaimer: Main orchestrator for deletion
    RouterCleaner: Router gateway/interface removal and retrying deletion
    FloatingIPAuditor: Unused API/Ingress floating IP cleanup
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

__all__ = [
    "ResourceDiscovery",
    "ResourceReclaimer",
    "RouterCleaner",
    "FloatingIPAuditor",
    "AuditStorage",
]
