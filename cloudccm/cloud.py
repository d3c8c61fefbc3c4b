"""Platform-dependent selection of cloud configuration handling."""

from __future__ import annotations

from collections.abc import Callable

from cloudccm import openstack, vsphere
from cloudccm.resources import no_op_transformer
from cloudccm.types import (
    AZURE_STACK_CLOUD,
    Infrastructure,
    Network,
    PlatformNotFoundError,
    PlatformStatus,
    PlatformType,
)

CloudConfigTransformer = Callable[[str, Infrastructure, Network], str]

_TRANSFORMERS: dict[PlatformType, CloudConfigTransformer | None] = {
    PlatformType.ALIBABA_CLOUD: no_op_transformer,
    # AWS and Azure deliberately have no transformer: callers handle them separately.
    PlatformType.AWS: None,
    PlatformType.AZURE: None,
    PlatformType.GCP: no_op_transformer,
    PlatformType.IBM_CLOUD: no_op_transformer,
    PlatformType.OPENSTACK: openstack.cloud_config_transformer,
    # Power VS uses the IBM cloud provider.
    PlatformType.POWER_VS: no_op_transformer,
    PlatformType.VSPHERE: vsphere.cloud_config_transformer,
    PlatformType.NUTANIX: no_op_transformer,
}


def get_cloud_config_transformer(
    platform_status: PlatformStatus,
) -> CloudConfigTransformer | None:
    """Return the transformer for the platform's cloud configuration.

    None is returned for platforms whose configuration is handled elsewhere;
    PlatformNotFoundError is raised for unsupported platforms.
    """
    try:
        platform = PlatformType(platform_status.type)
    except ValueError:
        raise PlatformNotFoundError(platform_status.type) from None
    if platform not in _TRANSFORMERS:
        raise PlatformNotFoundError(platform)
    return _TRANSFORMERS[platform]


def is_azure_stack_hub(platform_status: PlatformStatus) -> bool:
    """Tell whether an Azure platform runs on Azure Stack Hub."""
    return platform_status.azure_cloud_name == AZURE_STACK_CLOUD