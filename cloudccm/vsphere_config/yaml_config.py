"""YAML form of the vSphere cloud provider configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any

import yaml

_STR = "str"
_BOOL = "bool"
_UINT = "uint"
_LIST = "list"

_DEFAULTS: dict[str, Any] = {_STR: "", _BOOL: False, _UINT: 0}


def _field(key: str, kind: str) -> Any:
    metadata = {"key": key, "kind": kind}
    if kind == _LIST:
        return field(default_factory=list, metadata=metadata)
    return field(default=_DEFAULTS[kind], metadata=metadata)


def _describe(value: Any) -> str:
    if isinstance(value, dict):
        return "!!map"
    if isinstance(value, list):
        return "!!seq"
    if isinstance(value, bool):
        return f"!!bool `{str(value).lower()}`"
    if isinstance(value, int):
        return f"!!int `{value}`"
    if isinstance(value, float):
        return f"!!float `{value}`"
    return f"!!str `{value}`"


def _mismatch(value: Any, target: str) -> ValueError:
    return ValueError(f"cannot unmarshal {_describe(value)} into {target}")


def _decode_str(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise _mismatch(value, f"string ({where})")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _decode_value(kind: str, value: Any, where: str) -> Any:
    if value is None:
        return [] if kind == _LIST else _DEFAULTS[kind]
    if kind == _STR:
        return _decode_str(value, where)
    if kind == _BOOL:
        if not isinstance(value, bool):
            raise _mismatch(value, f"bool ({where})")
        return value
    if kind == _UINT:
        if isinstance(value, bool):
            raise _mismatch(value, f"uint ({where})")
        if isinstance(value, int) and value >= 0:
            return value
        if isinstance(value, float) and value >= 0 and value.is_integer():
            return int(value)
        raise _mismatch(value, f"uint ({where})")
    if not isinstance(value, list):
        raise _mismatch(value, f"[]string ({where})")
    return [_decode_str(item, where) for item in value]


def _decode_struct(cls: type, data: Any, where: str) -> Any:
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise _mismatch(data, where)
    values = {}
    for f in fields(cls):
        key = f.metadata["key"]
        if key in data:
            values[f.name] = _decode_value(f.metadata["kind"], data[key], f"{where}.{key}")
    return cls(**values)


def _encode_struct(obj: Any) -> dict[str, Any]:
    """Encode a section, leaving out every empty value."""
    result: dict[str, Any] = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if not value:
            continue
        result[f.metadata["key"]] = list(value) if isinstance(value, list) else value
    return result


def _natural_key(text: str) -> list[tuple[int, Any]]:
    return [
        (0, int(part)) if part.isdigit() else (1, part)
        for part in re.split(r"(\d+)", text)
        if part
    ]


@dataclass
class Global:
    """Global values of the configuration."""

    user: str = _field("user", _STR)
    password: str = _field("password", _STR)
    vcenter_ip: str = _field("server", _STR)
    vcenter_port: int = _field("port", _UINT)
    insecure_flag: bool = _field("insecureFlag", _BOOL)
    datacenters: list[str] = _field("datacenters", _LIST)
    round_tripper_count: int = _field("soapRoundtripCount", _UINT)
    ca_file: str = _field("caFile", _STR)
    thumbprint: str = _field("thumbprint", _STR)
    secret_name: str = _field("secretName", _STR)
    secret_namespace: str = _field("secretNamespace", _STR)
    secrets_directory: str = _field("secretsDirectory", _STR)
    api_disable: bool = _field("apiDisable", _BOOL)
    api_binding: str = _field("apiBinding", _STR)
    ip_family_priority: list[str] = _field("ipFamily", _LIST)


@dataclass
class VirtualCenterConfig:
    """Access settings of one vCenter endpoint."""

    user: str = _field("user", _STR)
    password: str = _field("password", _STR)
    vcenter_ip: str = _field("server", _STR)
    vcenter_port: int = _field("port", _UINT)
    insecure_flag: bool = _field("insecureFlag", _BOOL)
    datacenters: list[str] = _field("datacenters", _LIST)
    round_tripper_count: int = _field("soapRoundtripCount", _UINT)
    ca_file: str = _field("caFile", _STR)
    thumbprint: str = _field("thumbprint", _STR)
    secret_name: str = _field("secretName", _STR)
    secret_namespace: str = _field("secretNamespace", _STR)
    ip_family_priority: list[str] = _field("ipFamily", _LIST)


@dataclass
class Labels:
    """Tag categories that map to the zone and region node labels."""

    zone: str = _field("zone", _STR)
    region: str = _field("region", _STR)


@dataclass
class Nodes:
    """Internal and external node networks."""

    internal_network_subnet_cidr: str = _field("internalNetworkSubnetCidr", _STR)
    external_network_subnet_cidr: str = _field("externalNetworkSubnetCidr", _STR)
    internal_vm_network_name: str = _field("internalVmNetworkName", _STR)
    external_vm_network_name: str = _field("externalVmNetworkName", _STR)
    exclude_internal_network_subnet_cidr: str = _field("excludeInternalNetworkSubnetCidr", _STR)
    exclude_external_network_subnet_cidr: str = _field("excludeExternalNetworkSubnetCidr", _STR)


@dataclass
class CPIConfig:
    """The whole vSphere cloud provider configuration."""

    global_: Global = field(default_factory=Global)
    vcenter: dict[str, VirtualCenterConfig] = field(default_factory=dict)
    labels: Labels = field(default_factory=Labels)
    nodes: Nodes = field(default_factory=Nodes)

    def to_dict(self) -> dict[str, Any]:
        """Return the YAML document structure, omitting empty values.

        The global section is always present; vcenter entries are ordered by name.
        """
        result: dict[str, Any] = {"global": _encode_struct(self.global_)}
        if self.vcenter:
            result["vcenter"] = {
                name: _encode_struct(self.vcenter[name])
                for name in sorted(self.vcenter, key=_natural_key)
            }
        labels = _encode_struct(self.labels)
        if labels:
            result["labels"] = labels
        nodes = _encode_struct(self.nodes)
        if nodes:
            result["nodes"] = nodes
        return result

    @classmethod
    def from_dict(cls, data: Any) -> CPIConfig:
        """Build a configuration from a decoded YAML document; unknown keys are ignored."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise _mismatch(data, "CPIConfig")

        vcenter_data = data.get("vcenter")
        vcenter: dict[str, VirtualCenterConfig] = {}
        if vcenter_data is not None:
            if not isinstance(vcenter_data, dict):
                raise _mismatch(vcenter_data, "map[string]*VirtualCenterConfig")
            for name, entry in vcenter_data.items():
                key = _decode_str(name, "vcenter")
                vcenter[key] = _decode_struct(VirtualCenterConfig, entry, f"vcenter.{key}")

        return cls(
            global_=_decode_struct(Global, data.get("global"), "global"),
            vcenter=vcenter,
            labels=_decode_struct(Labels, data.get("labels"), "labels"),
            nodes=_decode_struct(Nodes, data.get("nodes"), "nodes"),
        )


def read_cpi_config_yaml(data: bytes | str) -> CPIConfig:
    """Parse a YAML cloud configuration; raise ValueError if it is empty or invalid."""
    if not data:
        raise ValueError("empty YAML file")
    text = data.decode("utf-8") if isinstance(data, bytes) else data
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"yaml: {exc}") from exc
    return CPIConfig.from_dict(document)