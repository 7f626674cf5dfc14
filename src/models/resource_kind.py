"""Resource kinds handled by the reclaimer and how each one is matched."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MatchRule(Enum):
    """How a resource kind is associated with a cluster signature."""

    NAME_PREFIX = "name-prefix"
    NAME_EXACT = "name-exact"
    NAME_CONTAINS = "name-contains"
    DESCRIPTION_CONTAINS = "description-contains"


class ResourceKind(Enum):
    """OpenStack resource kinds created by an OpenShift cluster deployment."""

    INSTANCE = "instance"
    IMAGE = "image"
    SERVER_GROUP = "server-group"
    SECURITY_GROUP = "security-group"
    NETWORK = "network"
    SUBNET = "subnet"
    PORT = "port"
    VOLUME = "volume"
    FLOATING_IP = "floating-ip"
    ROUTER = "router"

    @property
    def spec(self) -> KindSpec:
        return KIND_SPECS[self]

    @property
    def label(self) -> str:
        return KIND_SPECS[self].label

    @property
    def match_rule(self) -> MatchRule:
        return KIND_SPECS[self].match_rule

    @property
    def deletion_rank(self) -> int:
        return DELETION_ORDER.index(self)


@dataclass(frozen=True)
class KindSpec:
    """Static description of a resource kind.

    Attributes:
        label: Singular human-readable name
        plural: Plural name used for section headers
        icon: Emoji shown next to section headers
        match_rule: How resources of this kind are tied to a signature
    """

    label: str
    plural: str
    icon: str
    match_rule: MatchRule


KIND_SPECS: dict[ResourceKind, KindSpec] = {
    ResourceKind.INSTANCE: KindSpec("instance", "Instances", "🖥️", MatchRule.NAME_PREFIX),
    ResourceKind.IMAGE: KindSpec("image", "Images", "💿", MatchRule.NAME_EXACT),
    ResourceKind.SERVER_GROUP: KindSpec("server group", "Server Groups", "👥", MatchRule.NAME_PREFIX),
    ResourceKind.SECURITY_GROUP: KindSpec("security group", "Security Groups", "🔒", MatchRule.NAME_PREFIX),
    ResourceKind.NETWORK: KindSpec("network", "Networks", "🌐", MatchRule.NAME_PREFIX),
    ResourceKind.SUBNET: KindSpec("subnet", "Subnets", "🔗", MatchRule.NAME_PREFIX),
    ResourceKind.PORT: KindSpec("port", "Ports", "🔌", MatchRule.NAME_PREFIX),
    ResourceKind.VOLUME: KindSpec("volume", "Volumes", "💾", MatchRule.NAME_PREFIX),
    ResourceKind.FLOATING_IP: KindSpec("floating IP", "Floating IPs", "🌍", MatchRule.DESCRIPTION_CONTAINS),
    ResourceKind.ROUTER: KindSpec("router", "Routers", "🔀", MatchRule.NAME_CONTAINS),
}

# Order in which kinds are searched and listed to the user
DISCOVERY_ORDER: tuple[ResourceKind, ...] = tuple(ResourceKind)

# Topological order of the cloud networking dependency graph: every kind is
# deleted only after the kinds that can hold it in use. Router preparation
# (gateway and interface removal) runs between VOLUME and PORT.
DELETION_ORDER: tuple[ResourceKind, ...] = (
    ResourceKind.INSTANCE,
    ResourceKind.VOLUME,
    ResourceKind.PORT,
    ResourceKind.SUBNET,
    ResourceKind.ROUTER,
    ResourceKind.NETWORK,
    ResourceKind.SECURITY_GROUP,
    ResourceKind.SERVER_GROUP,
    ResourceKind.IMAGE,
    ResourceKind.FLOATING_IP,
)

# Names looked up directly for images instead of listing the whole catalog
IMAGE_NAME_SUFFIXES: tuple[str, ...] = ("rhcos", "ignition")

ROUTER_INTERFACE_OWNER_PREFIX = "network:router_interface"
