"""OpenStack resource operations per resource kind.

Maps each resource kind to the openstacksdk proxy calls used to list, look up
and delete it. The client issues every call synchronously and reports the
raw outcome; retrying is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

from keystoneauth1 import exceptions as ks_exceptions
from openstack import exceptions as os_exceptions
from openstack.connection import Connection

from src.models.resource_kind import ResourceKind
from src.models.resource_ref import ResourceRef

logger = logging.getLogger(__name__)

ResourceFilter = Union[str, Callable[[ResourceRef], bool], None]

# keystoneauth transport and catalog errors are not wrapped by the SDK proxies
CLIENT_ERRORS = (os_exceptions.SDKException, ks_exceptions.ClientException)


class CloudOperationError(Exception):
    """Raised when a list or show call against the control plane fails."""

    def __init__(self, kind: ResourceKind, operation: str, message: str) -> None:
        super().__init__(f"Failed to {operation} {kind.spec.plural.lower()}: {message}")
        self.kind = kind
        self.operation = operation


class CloudResourceClient:
    """Thin capability set over the OpenStack control plane.

    Attributes:
        connection: openstacksdk connection
        delete_timeout: Seconds to wait for an instance to disappear
    """

    # resource kind -> (proxy, list method, find method, delete method)
    OPERATIONS = {
        ResourceKind.INSTANCE: ("compute", "servers", "find_server", "delete_server"),
        ResourceKind.IMAGE: ("image", "images", "find_image", "delete_image"),
        ResourceKind.SERVER_GROUP: ("compute", "server_groups", "find_server_group", "delete_server_group"),
        ResourceKind.SECURITY_GROUP: (
            "network",
            "security_groups",
            "find_security_group",
            "delete_security_group",
        ),
        ResourceKind.NETWORK: ("network", "networks", "find_network", "delete_network"),
        ResourceKind.SUBNET: ("network", "subnets", "find_subnet", "delete_subnet"),
        ResourceKind.PORT: ("network", "ports", "find_port", "delete_port"),
        ResourceKind.VOLUME: ("block_storage", "volumes", "find_volume", "delete_volume"),
        ResourceKind.FLOATING_IP: ("network", "ips", "find_ip", "delete_ip"),
        ResourceKind.ROUTER: ("network", "routers", "find_router", "delete_router"),
    }

    # Extra attributes copied onto ResourceRef.attributes
    ATTRIBUTES = {
        ResourceKind.INSTANCE: ("status",),
        ResourceKind.IMAGE: ("status",),
        ResourceKind.SUBNET: ("network_id", "cidr"),
        ResourceKind.PORT: ("device_owner", "device_id", "fixed_ips", "network_id", "status"),
        ResourceKind.VOLUME: ("status",),
        ResourceKind.FLOATING_IP: ("status", "fixed_ip_address", "port_id", "router_id"),
        ResourceKind.ROUTER: ("external_gateway_info", "status"),
    }

    def __init__(self, connection: Connection, delete_timeout: int = 600) -> None:
        """Initialize resource client.

        Args:
            connection: Authenticated openstacksdk connection
            delete_timeout: Seconds to wait for instance deletion (default: 600)
        """
        self.connection = connection
        self.delete_timeout = delete_timeout

    def list_resources(
        self,
        kind: ResourceKind,
        resource_filter: ResourceFilter = None,
        **query: Any,
    ) -> list[ResourceRef]:
        """List resources of a kind.

        Args:
            kind: Resource kind to list
            resource_filter: Name prefix string, or predicate over ResourceRef
            **query: Server-side filters passed to the SDK (e.g. device_id)

        Returns:
            Matching resources

        Raises:
            CloudOperationError: If the list call fails
        """
        proxy_name, list_method, _, _ = self.OPERATIONS[kind]

        try:
            proxy = getattr(self.connection, proxy_name)
            raw_resources = list(getattr(proxy, list_method)(**query))
        except CLIENT_ERRORS as e:
            raise CloudOperationError(kind, "list", str(e))

        refs = [self._to_ref(kind, raw) for raw in raw_resources]

        if isinstance(resource_filter, str):
            refs = [r for r in refs if r.name.startswith(resource_filter)]
        elif resource_filter is not None:
            refs = [r for r in refs if resource_filter(r)]

        logger.debug(f"Listed {len(refs)} of {len(raw_resources)} {kind.value} resources")
        return refs

    def show(self, kind: ResourceKind, name_or_id: str) -> Optional[ResourceRef]:
        """Look up a single resource by name or ID.

        Args:
            kind: Resource kind
            name_or_id: Resource name or ID

        Returns:
            ResourceRef with extended attributes, or None if it does not exist

        Raises:
            CloudOperationError: If the lookup fails for any other reason
        """
        proxy_name, _, find_method, _ = self.OPERATIONS[kind]

        try:
            proxy = getattr(self.connection, proxy_name)
            raw = getattr(proxy, find_method)(name_or_id, ignore_missing=True)
        except os_exceptions.ResourceNotFound:
            return None
        except CLIENT_ERRORS as e:
            raise CloudOperationError(kind, "show", str(e))

        if raw is None:
            return None
        return self._to_ref(kind, raw)

    def delete(self, kind: ResourceKind, resource_id: str, wait: bool = False) -> tuple[bool, Optional[str]]:
        """Delete a resource.

        Deleting a resource that no longer exists counts as success.

        Args:
            kind: Resource kind
            resource_id: Resource ID
            wait: Block until the resource is gone (instances only)

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        proxy_name, _, _, delete_method = self.OPERATIONS[kind]

        try:
            proxy = getattr(self.connection, proxy_name)

            if kind == ResourceKind.INSTANCE:
                server = proxy.get_server(resource_id)
                proxy.delete_server(server, ignore_missing=True)
                if wait:
                    proxy.wait_for_delete(server, interval=2, wait=self.delete_timeout)
            else:
                getattr(proxy, delete_method)(resource_id, ignore_missing=True)

            return (True, None)

        except os_exceptions.ResourceNotFound:
            logger.info(f"{kind.label.capitalize()} {resource_id} already deleted")
            return (True, None)

        except os_exceptions.ConflictException as e:
            logger.debug(f"Conflict deleting {kind.value} {resource_id}: {e}")
            return (False, f"Conflict (resource in use): {e}")

        except os_exceptions.ResourceTimeout as e:
            logger.error(f"Timed out waiting for {kind.value} {resource_id} to be deleted")
            return (False, f"Timed out waiting for deletion: {e}")

        except os_exceptions.SDKException as e:
            logger.error(f"Failed to delete {kind.value} {resource_id}: {e}")
            return (False, str(e))

        except Exception as e:
            error_msg = f"Unexpected error: {str(e)}"
            logger.error(f"Failed to delete {kind.value} {resource_id}: {error_msg}")
            return (False, error_msg)

    def unset_gateway(self, router_id: str) -> tuple[bool, Optional[str]]:
        """Clear a router's external gateway.

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        try:
            self.connection.network.update_router(router_id, external_gateway_info={})
            return (True, None)
        except CLIENT_ERRORS as e:
            logger.debug(f"Could not clear gateway of router {router_id}: {e}")
            return (False, str(e))

    def remove_router_interface(self, router_id: str, subnet_id: str) -> tuple[bool, Optional[str]]:
        """Detach a subnet from a router.

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        try:
            self.connection.network.remove_interface_from_router(router_id, subnet_id=subnet_id)
            return (True, None)
        except CLIENT_ERRORS as e:
            logger.debug(f"Could not remove subnet {subnet_id} from router {router_id}: {e}")
            return (False, str(e))

    def _to_ref(self, kind: ResourceKind, raw: Any) -> ResourceRef:
        """Convert an SDK resource into a ResourceRef."""
        if kind == ResourceKind.FLOATING_IP:
            name = getattr(raw, "floating_ip_address", None)
        else:
            name = getattr(raw, "name", None)

        attributes = {}
        for attr in self.ATTRIBUTES.get(kind, ()):
            attributes[attr] = getattr(raw, attr, None)

        return ResourceRef(
            resource_id=raw.id,
            name=name or "",
            kind=kind,
            description=getattr(raw, "description", None),
            attributes=attributes,
        )
