"""Router preparation and deletion.

Routers are the only resource kind with removable attachments (external
gateway, subnet interfaces) that block deletion of the router itself and of
the networks behind it.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from src.cloud.resource_client import CloudOperationError, CloudResourceClient
from src.models.resource_kind import ROUTER_INTERFACE_OWNER_PREFIX, ResourceKind
from src.models.resource_ref import InterfaceRef, ResourceRef
from src.restore.reporter import ReclamationReporter

logger = logging.getLogger(__name__)


class InterfaceRemoval(Enum):
    """Outcome of detaching one router interface."""

    REMOVED = "removed"
    PORT_DELETED = "port-deleted"
    FAILED = "failed"


@dataclass
class RouterPreparation:
    """Result of clearing a router's attachments.

    Attributes:
        router: Router reference with interfaces filled in
        gateway_cleared: Whether the external gateway was unset
        removals: Outcome per interface
    """

    router: ResourceRef
    gateway_cleared: bool
    removals: dict[InterfaceRef, InterfaceRemoval] = field(default_factory=dict)


@dataclass
class RouterDeletion:
    """Result of deleting a router with retries."""

    router: ResourceRef
    success: bool
    attempts: int
    error_message: Optional[str] = None


class RouterCleaner:
    """Clears router attachments and deletes routers with bounded retries.

    Attributes:
        client: Cloud resource client
        reporter: Status line output
        max_attempts: Delete attempts per router (default: 3)
        retry_delay: Seconds to wait between attempts (default: 2.0)
    """

    def __init__(
        self,
        client: CloudResourceClient,
        reporter: ReclamationReporter,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.reporter = reporter
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay

    def resolve_id(self, router: ResourceRef) -> str:
        """Look the router up again by name, falling back to the known ID."""
        try:
            current = self.client.show(ResourceKind.ROUTER, router.name or router.resource_id)
        except CloudOperationError as e:
            logger.debug(f"Could not resolve router {router.display_name}: {e}")
            return router.resource_id

        if current is None:
            return router.resource_id
        return current.resource_id

    def find_interfaces(self, router_id: str) -> tuple[InterfaceRef, ...]:
        """Find subnet interface ports attached to a router.

        Subnet IDs are read from each port's first fixed IP; ports whose subnet
        cannot be resolved are returned with subnet_id None.
        """
        try:
            ports = self.client.list_resources(ResourceKind.PORT, device_id=router_id)
        except CloudOperationError as e:
            logger.warning(f"Could not list ports of router {router_id}: {e}")
            return ()

        interfaces = []
        for port in ports:
            owner = port.get("device_owner") or ""
            if not owner.startswith(ROUTER_INTERFACE_OWNER_PREFIX):
                continue
            interfaces.append(InterfaceRef(port_id=port.resource_id, subnet_id=self._subnet_of(port.resource_id)))
        return tuple(interfaces)

    def remove_interface(self, router_id: str, interface: InterfaceRef) -> InterfaceRemoval:
        """Detach one interface: remove it from the router, else delete its port.

        Returns:
            REMOVED if the router call succeeded, PORT_DELETED if the fallback
            port deletion succeeded, FAILED if both failed
        """
        if interface.subnet_id:
            success, error = self.client.remove_router_interface(router_id, interface.subnet_id)
            if success:
                return InterfaceRemoval.REMOVED
            logger.debug(f"Interface removal for subnet {interface.subnet_id} failed: {error}")

        success, error = self.client.delete(ResourceKind.PORT, interface.port_id)
        if success:
            return InterfaceRemoval.PORT_DELETED

        logger.warning(f"Failed to remove interface port {interface.port_id} from router {router_id}: {error}")
        return InterfaceRemoval.FAILED

    def prepare(self, router: ResourceRef) -> RouterPreparation:
        """Clear the external gateway and subnet interfaces of a router.

        Never deletes the router itself.
        """
        self.reporter.item(f"Processing router: {router.display_name}")

        gateway_cleared, error = self.client.unset_gateway(router.resource_id)
        if gateway_cleared:
            self.reporter.success("Cleared external gateway", level=2)
        else:
            logger.debug(f"Gateway of {router.display_name} not cleared: {error}")
            self.reporter.warning("No external gateway to clear", level=2)

        router_id = self.resolve_id(router)
        interfaces = self.find_interfaces(router_id)
        prepared = dataclasses.replace(router, resource_id=router_id, interfaces=interfaces)
        result = RouterPreparation(router=prepared, gateway_cleared=gateway_cleared)

        if not interfaces:
            self.reporter.item("No router interfaces found", level=2)
            return result

        for interface in interfaces:
            self.reporter.item(f"Removing interface for subnet: {interface.subnet_id or '(unknown)'}", level=2)
            outcome = self.remove_interface(router_id, interface)
            result.removals[interface] = outcome
            if outcome == InterfaceRemoval.REMOVED:
                self.reporter.success("Removed interface", level=3)
            elif outcome == InterfaceRemoval.PORT_DELETED:
                self.reporter.success("Removed interface port directly", level=3)
            else:
                self.reporter.warning("Failed to remove interface", level=3)

        return result

    def delete(self, router: ResourceRef) -> RouterDeletion:
        """Delete a router, clearing leftover ports between attempts.

        Returns:
            RouterDeletion with the number of delete calls issued
        """
        router_id = router.resource_id
        error: Optional[str] = None

        for attempt in range(1, self.max_attempts + 1):
            success, error = self.client.delete(ResourceKind.ROUTER, router_id)
            if success:
                return RouterDeletion(router=router, success=True, attempts=attempt)

            if attempt < self.max_attempts:
                self.reporter.warning(
                    f"Failed to delete router, retrying ({attempt}/{self.max_attempts})...", level=1
                )
                router_id = self.resolve_id(router)
                self._delete_remaining_ports(router_id)
                time.sleep(self.retry_delay)

        return RouterDeletion(
            router=router,
            success=False,
            attempts=self.max_attempts,
            error_message=f"{error} (after {self.max_attempts} attempts)",
        )

    def _delete_remaining_ports(self, router_id: str) -> None:
        try:
            ports = self.client.list_resources(ResourceKind.PORT, device_id=router_id)
        except CloudOperationError as e:
            logger.warning(f"Could not list remaining ports of router {router_id}: {e}")
            return

        if not ports:
            return

        self.reporter.item("Found remaining ports, attempting cleanup...", level=2)
        for port in ports:
            success, error = self.client.delete(ResourceKind.PORT, port.resource_id)
            if success:
                self.reporter.success(f"Deleted port: {port.resource_id}", level=3)
            else:
                logger.debug(f"Could not delete remaining port {port.resource_id}: {error}")

    def _subnet_of(self, port_id: str) -> Optional[str]:
        try:
            port = self.client.show(ResourceKind.PORT, port_id)
        except CloudOperationError as e:
            logger.debug(f"Could not show port {port_id}: {e}")
            return None

        if port is None:
            return None
        fixed_ips = port.get("fixed_ips") or []
        if not fixed_ips:
            return None
        return fixed_ips[0].get("subnet_id") or None
