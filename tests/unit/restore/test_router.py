"""Tests for RouterCleaner."""

from __future__ import annotations

from io import StringIO
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from src.cloud.resource_client import CloudResourceClient
from src.models.resource_kind import ResourceKind
from src.models.resource_ref import InterfaceRef
from src.restore.reporter import ReclamationReporter
from src.restore.router import InterfaceRemoval, RouterCleaner
from tests.fixtures.openstack import FakeCloudClient, make_ref, router_port

ROUTER = make_ref(ResourceKind.ROUTER, "k8s-clusterapi-cluster-openshift-cluster-ff9fw", resource_id="r1")


@pytest.fixture
def reporter() -> ReclamationReporter:
    """Create reporter writing to an in-memory console."""
    return ReclamationReporter(Console(file=StringIO(), width=200))


def output_of(reporter: ReclamationReporter) -> str:
    return reporter.console.file.getvalue()


class TestRouterPreparation:
    """Test suite for clearing router attachments."""

    def test_prepare_clears_gateway_and_interfaces(self, reporter: ReclamationReporter) -> None:
        """Test gateway and subnet interfaces are removed, router kept."""
        client = FakeCloudClient([ROUTER, router_port("r1", "s-nodes")], gateways={"r1"})

        result = RouterCleaner(client, reporter).prepare(ROUTER)

        assert result.gateway_cleared is True
        assert result.router.interfaces == (InterfaceRef(port_id="port-s-nodes", subnet_id="s-nodes"),)
        assert list(result.removals.values()) == [InterfaceRemoval.REMOVED]
        assert client.mutating_calls() == [("unset_gateway", "r1"), ("remove_interface", "r1", "s-nodes")]
        assert client.resources[ResourceKind.ROUTER] == [ROUTER]
        assert "Cleared external gateway" in output_of(reporter)
        assert "Removing interface for subnet: s-nodes" in output_of(reporter)

    def test_prepare_without_gateway_or_interfaces(self, reporter: ReclamationReporter) -> None:
        """Test a bare router is reported and left alone."""
        client = FakeCloudClient([ROUTER])

        result = RouterCleaner(client, reporter).prepare(ROUTER)

        assert result.gateway_cleared is False
        assert result.router.interfaces == ()
        assert "No external gateway to clear" in output_of(reporter)
        assert "No router interfaces found" in output_of(reporter)

    def test_prepare_ignores_non_interface_ports(self, reporter: ReclamationReporter) -> None:
        """Test only router_interface ports count as interfaces."""
        gateway_port = make_ref(
            ResourceKind.PORT, "", resource_id="gw-port", device_owner="network:router_gateway", device_id="r1"
        )
        client = FakeCloudClient([ROUTER, gateway_port])

        result = RouterCleaner(client, reporter).prepare(ROUTER)

        assert result.router.interfaces == ()

    def test_prepare_resolves_router_id_by_name(self, reporter: ReclamationReporter) -> None:
        """Test the router is looked up again by name before interface removal."""
        current = make_ref(ResourceKind.ROUTER, ROUTER.name, resource_id="r1-current")
        client = FakeCloudClient([current])

        result = RouterCleaner(client, reporter).prepare(ROUTER)

        assert result.router.resource_id == "r1-current"


class TestInterfaceRemoval:
    """Test suite for the two-step interface removal."""

    def test_falls_back_to_port_deletion(self, reporter: ReclamationReporter) -> None:
        """Test the port is deleted when the router call fails."""
        client = MagicMock(spec=CloudResourceClient)
        client.remove_router_interface.return_value = (False, "Router interface not found")
        client.delete.return_value = (True, None)

        outcome = RouterCleaner(client, reporter).remove_interface("r1", InterfaceRef("p1", "s1"))

        assert outcome == InterfaceRemoval.PORT_DELETED
        client.delete.assert_called_once_with(ResourceKind.PORT, "p1")

    def test_unknown_subnet_deletes_port(self, reporter: ReclamationReporter) -> None:
        """Test an interface without a subnet goes straight to port deletion."""
        client = MagicMock(spec=CloudResourceClient)
        client.delete.return_value = (True, None)

        outcome = RouterCleaner(client, reporter).remove_interface("r1", InterfaceRef("p1"))

        assert outcome == InterfaceRemoval.PORT_DELETED
        client.remove_router_interface.assert_not_called()

    def test_both_steps_fail(self, reporter: ReclamationReporter) -> None:
        """Test FAILED when neither step works."""
        client = MagicMock(spec=CloudResourceClient)
        client.remove_router_interface.return_value = (False, "nope")
        client.delete.return_value = (False, "Conflict (resource in use): busy")

        outcome = RouterCleaner(client, reporter).remove_interface("r1", InterfaceRef("p1", "s1"))

        assert outcome == InterfaceRemoval.FAILED


@patch("src.restore.router.time.sleep")
class TestRouterDeletion:
    """Test suite for deleting routers with retries."""

    def test_first_attempt_succeeds(self, mock_sleep: MagicMock, reporter: ReclamationReporter) -> None:
        """Test no retry when the first delete works."""
        client = FakeCloudClient([ROUTER])

        result = RouterCleaner(client, reporter).delete(ROUTER)

        assert result.success is True
        assert result.attempts == 1
        mock_sleep.assert_not_called()

    def test_retries_until_success(self, mock_sleep: MagicMock, reporter: ReclamationReporter) -> None:
        """Test two failures followed by success."""
        client = FakeCloudClient([ROUTER], failures={"r1": 2})

        result = RouterCleaner(client, reporter).delete(ROUTER)

        assert result.success is True
        assert result.attempts == 3
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(2.0)
        assert "retrying (1/3)" in output_of(reporter)
        assert "retrying (2/3)" in output_of(reporter)

    def test_attempts_are_bounded(self, mock_sleep: MagicMock, reporter: ReclamationReporter) -> None:
        """Test a router that never deletes gets exactly three attempts."""
        client = FakeCloudClient([ROUTER], failures={"r1": 100})

        result = RouterCleaner(client, reporter).delete(ROUTER)

        assert result.success is False
        assert result.attempts == 3
        assert client.deletes().count((ResourceKind.ROUTER, "r1")) == 3
        assert result.error_message.endswith("(after 3 attempts)")
        assert mock_sleep.call_count == 2

    def test_custom_attempts_and_delay(self, mock_sleep: MagicMock, reporter: ReclamationReporter) -> None:
        """Test configured attempt count and delay are honored."""
        client = FakeCloudClient([ROUTER], failures={"r1": 100})

        result = RouterCleaner(client, reporter, max_attempts=5, retry_delay=0.1).delete(ROUTER)

        assert result.attempts == 5
        assert mock_sleep.call_count == 4
        mock_sleep.assert_called_with(0.1)

    def test_retry_deletes_remaining_ports(self, mock_sleep: MagicMock, reporter: ReclamationReporter) -> None:
        """Test ports still bound to the router are deleted between attempts."""
        leftover = make_ref(
            ResourceKind.PORT, "", resource_id="gw-port", device_owner="network:router_gateway", device_id="r1"
        )
        client = FakeCloudClient([ROUTER, leftover], failures={"r1": 1})

        result = RouterCleaner(client, reporter).delete(ROUTER)

        assert result.success is True
        assert client.deletes() == [
            (ResourceKind.ROUTER, "r1"),
            (ResourceKind.PORT, "gw-port"),
            (ResourceKind.ROUTER, "r1"),
        ]

    def test_max_attempts_must_be_positive(self, mock_sleep: MagicMock, reporter: ReclamationReporter) -> None:
        """Test zero attempts is rejected."""
        with pytest.raises(ValueError, match="max_attempts"):
            RouterCleaner(FakeCloudClient(), reporter, max_attempts=0)
