"""Resources shared by every cloud provider."""

from __future__ import annotations

from typing import Any

from cloudccm.types import Infrastructure, Network, OperatorConfig

CLOUD_CONTROLLER_MANAGER_PROVIDER_LABEL = "infrastructure.openshift.io/cloud-controller-manager"
CLOUD_NODE_MANAGER_CLOUD_PROVIDER_LABEL = "infrastructure.openshift.io/cloud-node-manager"


def get_common_resources(config: OperatorConfig) -> list[dict[str, Any]]:
    """Return the provider-independent resources for the given configuration."""
    if config.is_single_replica:
        return []
    return [_pod_disruption_budget(config)]


def _pod_disruption_budget(config: OperatorConfig) -> dict[str, Any]:
    platform_name = config.platform_name()
    return {
        "kind": "PodDisruptionBudget",
        "apiVersion": "policy/v1",
        "metadata": {
            "name": f"{platform_name.lower()}-cloud-controller-manager",
            "namespace": config.managed_namespace,
        },
        "spec": {
            "minAvailable": 1,
            "selector": {
                "matchLabels": {CLOUD_CONTROLLER_MANAGER_PROVIDER_LABEL: platform_name},
            },
        },
    }


def no_op_transformer(source: str, infra: Infrastructure | None, network: Network | None) -> str:
    """Return the cloud configuration unchanged."""
    return source