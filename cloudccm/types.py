"""Cluster-level configuration objects used to render cloud provider resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

AZURE_STACK_CLOUD = "AzureStackCloud"


class PlatformType(str, Enum):
    """Infrastructure platform a cluster runs on."""

    AWS = "AWS"
    AZURE = "Azure"
    BARE_METAL = "BareMetal"
    GCP = "GCP"
    LIBVIRT = "Libvirt"
    OPENSTACK = "OpenStack"
    NONE = "None"
    VSPHERE = "VSphere"
    OVIRT = "oVirt"
    IBM_CLOUD = "IBMCloud"
    KUBEVIRT = "KubeVirt"
    EQUINIX_METAL = "EquinixMetal"
    POWER_VS = "PowerVS"
    ALIBABA_CLOUD = "AlibabaCloud"
    NUTANIX = "Nutanix"
    EXTERNAL = "External"


@dataclass
class PlatformStatus:
    """Observed platform of the cluster."""

    type: PlatformType
    azure_cloud_name: str | None = None


@dataclass
class ProxyStatus:
    """Cluster-wide proxy settings."""

    http_proxy: str = ""
    https_proxy: str = ""
    no_proxy: str = ""


@dataclass
class OperatorConfig:
    """Settings the operator renders resources with."""

    managed_namespace: str = ""
    platform_status: PlatformStatus | None = None
    infrastructure_name: str = ""
    cluster_proxy: ProxyStatus | None = None
    is_single_replica: bool = False

    def platform_name(self) -> str:
        """Return the platform type as a string, or an empty string if unknown."""
        if self.platform_status is None:
            return ""
        return PlatformType(self.platform_status.type).value


@dataclass
class VSphereNetworkSpec:
    """One side (internal or external) of vSphere node networking."""

    network: str = ""
    network_subnet_cidr: list[str] = field(default_factory=list)
    exclude_network_subnet_cidr: list[str] = field(default_factory=list)


@dataclass
class VSphereNodeNetworking:
    """Internal and external node networking of a vSphere cluster."""

    external: VSphereNetworkSpec = field(default_factory=VSphereNetworkSpec)
    internal: VSphereNetworkSpec = field(default_factory=VSphereNetworkSpec)


@dataclass
class VSphereVCenterSpec:
    """A vCenter server and the datacenters it serves."""

    server: str
    port: int = 0
    datacenters: list[str] = field(default_factory=list)


@dataclass
class VSphereTopology:
    """Placement of a failure domain inside vSphere."""

    datacenter: str = ""
    datastore: str = ""
    compute_cluster: str = ""
    networks: list[str] = field(default_factory=list)
    resource_pool: str = ""
    folder: str = ""


@dataclass
class VSphereFailureDomain:
    """A zone of a vSphere cluster."""

    name: str
    region: str = ""
    zone: str = ""
    server: str = ""
    topology: VSphereTopology = field(default_factory=VSphereTopology)


@dataclass
class VSpherePlatformSpec:
    """vSphere-specific part of the infrastructure spec."""

    vcenters: list[VSphereVCenterSpec] = field(default_factory=list)
    failure_domains: list[VSphereFailureDomain] = field(default_factory=list)
    node_networking: VSphereNodeNetworking = field(default_factory=VSphereNodeNetworking)


@dataclass
class Infrastructure:
    """Cluster infrastructure description."""

    platform_status: PlatformStatus | None = None
    vsphere: VSpherePlatformSpec | None = None
    name: str = "cluster"


@dataclass
class Network:
    """Cluster network description."""

    network_type: str = ""
    name: str = "cluster"


class PlatformNotFoundError(LookupError):
    """Raised for a platform that has no cloud controller manager support."""

    def __init__(self, platform: PlatformType | str) -> None:
        self.platform = platform
        value = platform.value if isinstance(platform, PlatformType) else platform
        super().__init__(f'unrecognized platform type "{value}" found in infrastructure')