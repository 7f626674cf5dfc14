"""Cloud resource reference model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from src.models.resource_kind import ResourceKind


@dataclass(frozen=True)
class InterfaceRef:
    """A port attaching a router to a subnet.

    Attributes:
        port_id: ID of the router interface port
        subnet_id: ID of the subnet the port sits on (None if unresolved)
    """

    port_id: str
    subnet_id: Optional[str] = None


@dataclass(frozen=True)
class ResourceRef:
    """Reference to a single cloud resource.

    Attributes:
        resource_id: Opaque resource ID
        name: Display name (the floating IP address for floating IPs)
        kind: Resource kind
        description: Free-text description, when the kind has one
        attributes: Extended attributes (device_owner, fixed_ips, status, ...)
        interfaces: Router interfaces, filled in just before deletion
    """

    resource_id: str
    name: str
    kind: ResourceKind
    description: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)
    interfaces: Optional[tuple[InterfaceRef, ...]] = field(default=None, compare=False, hash=False)

    @property
    def display_name(self) -> str:
        return self.name or self.resource_id

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.resource_id,
            "name": self.name,
            "kind": self.kind.value,
        }
        if self.description:
            data["description"] = self.description
        if self.interfaces is not None:
            data["interfaces"] = [{"port_id": i.port_id, "subnet_id": i.subnet_id} for i in self.interfaces]
        return data
