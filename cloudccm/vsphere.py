"""Cloud configuration transformer for the vSphere cloud controller manager."""

from __future__ import annotations

from cloudccm.types import (
    Infrastructure,
    Network,
    PlatformType,
    VSphereNodeNetworking,
    VSpherePlatformSpec,
)
from cloudccm.vsphere_config.reader import ConfigReadError, marshal_config, read_config
from cloudccm.vsphere_config.yaml_config import CPIConfig, VirtualCenterConfig

# Well-known vSphere tag categories that map onto the topology node labels.
REGION_LABEL_VALUE = "openshift-region"
ZONE_LABEL_VALUE = "openshift-zone"


class TransformError(ValueError):
    """Raised when a cloud configuration cannot be transformed."""


def cloud_config_transformer(
    source: str, infra: Infrastructure, network: Network | None = None
) -> str:
    """Turn a legacy vSphere configuration into the external provider's YAML form.

    Node networking, vCenters and zone labels are filled in from the
    infrastructure's vSphere spec when one is present.
    """
    status = infra.platform_status
    if status is None or status.type != PlatformType.VSPHERE:
        raise TransformError(f"invalid platform, expected to be {PlatformType.VSPHERE.value}")

    try:
        config = read_config(source)
    except ConfigReadError as exc:
        raise TransformError(f"failed to read the cloud.conf: {exc}") from exc

    spec = infra.vsphere
    if spec is not None:
        _set_nodes(config, spec.node_networking)
        _set_virtual_centers(config, spec)
        # Labels only apply to zonal installs so that single-zone clusters keep working.
        if len(spec.failure_domains) > 1:
            config.labels.zone = ZONE_LABEL_VALUE
            config.labels.region = REGION_LABEL_VALUE

    try:
        return marshal_config(config)
    except ConfigReadError as exc:
        raise TransformError(str(exc)) from exc


def _set_nodes(config: CPIConfig, networking: VSphereNodeNetworking) -> None:
    nodes = config.nodes
    nodes.external_vm_network_name = networking.external.network
    nodes.external_network_subnet_cidr = ",".join(networking.external.network_subnet_cidr)
    nodes.exclude_external_network_subnet_cidr = ",".join(
        networking.external.exclude_network_subnet_cidr
    )
    nodes.internal_vm_network_name = networking.internal.network
    nodes.internal_network_subnet_cidr = ",".join(networking.internal.network_subnet_cidr)
    nodes.exclude_internal_network_subnet_cidr = ",".join(
        networking.internal.exclude_network_subnet_cidr
    )


def _set_virtual_centers(config: CPIConfig, spec: VSpherePlatformSpec) -> None:
    for vcenter in spec.vcenters:
        config.vcenter[vcenter.server] = VirtualCenterConfig(
            vcenter_ip=vcenter.server,
            vcenter_port=vcenter.port,
            datacenters=list(vcenter.datacenters),
        )

    for domain in spec.failure_domains:
        datacenter = domain.topology.datacenter
        entry = config.vcenter.get(domain.server)
        if entry is None:
            config.vcenter[domain.server] = VirtualCenterConfig(
                vcenter_ip=domain.server,
                datacenters=[datacenter],
            )
        elif datacenter not in entry.datacenters:
            entry.datacenters.append(datacenter)