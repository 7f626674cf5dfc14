"""Tests for FloatingIPAuditor."""

from __future__ import annotations

import pytest

from src.models.resource_kind import ResourceKind
from src.models.resource_ref import ResourceRef
from src.restore.floating_ips import FloatingIPAuditor
from tests.fixtures.openstack import FakeCloudClient, make_ref


def fip(address: str, description: str, status: str) -> ResourceRef:
    return make_ref(ResourceKind.FLOATING_IP, address, resource_id=f"fip-{address}", description=description, status=status)


class TestFloatingIPAuditor:
    """Test suite for API and Ingress floating IP hygiene."""

    @pytest.fixture
    def client(self) -> FakeCloudClient:
        """Create a cloud with used, unused and unrelated floating IPs."""
        return FakeCloudClient(
            [
                fip("192.0.2.10", "API openshift-cluster.example.com", "ACTIVE"),
                fip("192.0.2.11", "API openshift-cluster.example.com", "DOWN"),
                fip("192.0.2.20", "Ingress openshift-cluster.example.com", "DOWN"),
                fip("192.0.2.30", "API other-cluster.example.com", "DOWN"),
                fip("192.0.2.40", "", "DOWN"),
            ]
        )

    @pytest.fixture
    def auditor(self, client: FakeCloudClient) -> FloatingIPAuditor:
        return FloatingIPAuditor(client, cluster_name="openshift-cluster", base_domain="example.com")

    def test_usage_groups_by_role(self, auditor: FloatingIPAuditor) -> None:
        """Test API and Ingress addresses are counted separately."""
        api, ingress = auditor.usage()

        assert api.role == "API"
        assert api.total == 2
        assert [f.display_name for f in api.unused] == ["192.0.2.11"]
        assert ingress.role == "Ingress"
        assert ingress.total == 1

    def test_find_unused(self, auditor: FloatingIPAuditor) -> None:
        """Test only this cluster's DOWN addresses are returned."""
        unused = auditor.find_unused()

        assert [f.display_name for f in unused] == ["192.0.2.11", "192.0.2.20"]

    def test_release(self, auditor: FloatingIPAuditor, client: FakeCloudClient) -> None:
        """Test releasing addresses reports per-address outcomes."""
        client.failures["fip-192.0.2.20"] = 100

        results = auditor.release(auditor.find_unused())

        assert results["192.0.2.11"] is None
        assert results["192.0.2.20"].startswith("Conflict")
        assert client.deletes() == [
            (ResourceKind.FLOATING_IP, "fip-192.0.2.11"),
            (ResourceKind.FLOATING_IP, "fip-192.0.2.20"),
        ]

    def test_descriptions(self, auditor: FloatingIPAuditor) -> None:
        """Test the descriptions the installer assigns."""
        assert auditor.fqdn == "openshift-cluster.example.com"
        assert auditor.description_for("Ingress") == "Ingress openshift-cluster.example.com"
