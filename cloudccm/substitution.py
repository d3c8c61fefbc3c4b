"""Apply operator-wide settings to rendered resources."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from typing import Any

from cloudccm.types import OperatorConfig, ProxyStatus

log = logging.getLogger(__name__)


def proxy_env_vars(proxy: ProxyStatus | None) -> list[dict[str, str]]:
    """Convert cluster proxy settings into container environment variables."""
    if proxy is None:
        return []
    pairs = (
        ("HTTP_PROXY", proxy.http_proxy),
        ("HTTPS_PROXY", proxy.https_proxy),
        ("NO_PROXY", proxy.no_proxy),
    )
    return [{"name": name, "value": value} for name, value in pairs if value]


def set_proxy_settings(config: OperatorConfig, pod_spec: dict[str, Any]) -> dict[str, Any]:
    """Return a pod spec whose containers carry the cluster proxy settings.

    The given spec is returned as-is when there is no proxy to apply; otherwise
    a modified copy is returned and the original is left untouched.
    """
    env_vars = proxy_env_vars(config.cluster_proxy)
    if not env_vars:
        return pod_spec

    updated = copy.deepcopy(pod_spec)
    for container in updated.get("containers") or []:
        log.info("Substituting proxy settings for container %r", container.get("name"))
        container["env"] = list(container.get("env") or []) + copy.deepcopy(env_vars)
    return updated


def _pod_spec_of(obj: dict[str, Any]) -> dict[str, Any] | None:
    return (obj.get("spec") or {}).get("template", {}).get("spec")


def substitute_common_parts(
    config: OperatorConfig, objects: Iterable[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Return copies of the objects with namespace, proxy and replica settings applied."""
    result = []
    for original in objects:
        obj = copy.deepcopy(original)
        obj.setdefault("metadata", {})["namespace"] = config.managed_namespace

        kind = obj.get("kind")
        if kind in ("Deployment", "DaemonSet"):
            pod_spec = _pod_spec_of(obj)
            if pod_spec is not None:
                obj["spec"]["template"]["spec"] = set_proxy_settings(config, pod_spec)
            if kind == "Deployment" and config.is_single_replica:
                obj.setdefault("spec", {})["replicas"] = 1
        result.append(obj)
    return result