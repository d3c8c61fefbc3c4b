"""Legacy INI form of the vSphere cloud provider configuration."""

from __future__ import annotations

import re
from typing import Any

from cloudccm.vsphere_config.yaml_config import (
    CPIConfig,
    Global,
    Labels,
    Nodes,
    VirtualCenterConfig,
)

_STR = "str"
_BOOL = "bool"
_UINT = "uint"

_DEFAULTS: dict[str, Any] = {_STR: "", _BOOL: False, _UINT: 0}

_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})

_GLOBAL_VARS = {
    "user": _STR,
    "password": _STR,
    "server": _STR,
    "port": _STR,
    "insecure-flag": _BOOL,
    "datacenters": _STR,
    "soap-roundtrip-count": _UINT,
    "ca-file": _STR,
    "thumbprint": _STR,
    "secret-name": _STR,
    "secret-namespace": _STR,
    "secrets-directory": _STR,
    "api-disable": _BOOL,
    "api-binding": _STR,
    "ip-family": _STR,
}

_VCENTER_VARS = {
    "user": _STR,
    "password": _STR,
    "server": _STR,
    "port": _STR,
    "insecure-flag": _BOOL,
    "datacenters": _STR,
    "soap-roundtrip-count": _UINT,
    "ca-file": _STR,
    "thumbprint": _STR,
    "secret-name": _STR,
    "secret-namespace": _STR,
    "ip-family": _STR,
}

_LABELS_VARS = {"zone": _STR, "region": _STR}

_NODES_VARS = {
    "internal-network-subnet-cidr": _STR,
    "external-network-subnet-cidr": _STR,
    "internal-vm-network-name": _STR,
    "external-vm-network-name": _STR,
    "exclude-internal-network-subnet-cidr": _STR,
    "exclude-external-network-subnet-cidr": _STR,
}

_SINGLE_SECTIONS = frozenset({"global", "labels", "nodes"})
_VCENTER_SECTION = "virtualcenter"

_SECTION_RE = re.compile(r'\[\s*([A-Za-z0-9.\-]+)\s*(?:"((?:[^"\\]|\\.)*)"\s*)?\]')
_VARIABLE_RE = re.compile(r"([A-Za-z][A-Za-z0-9\-]*)\s*(?:(=)(.*))?$")
_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")

_VALUE_ESCAPES = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "b": "\b"}

RawSection = dict[str, "str | None"]


class IniConfigError(ValueError):
    """Raised when an INI configuration cannot be parsed or converted."""


def parse_uint_or_zero(value: str) -> int:
    """Parse a non-negative integer; an empty string gives zero."""
    if value == "":
        return 0
    if not _INT_RE.fullmatch(value):
        raise IniConfigError(
            f"can not parse vCenter port from ini config: invalid syntax {value!r}"
        )
    parsed = int(value)
    if parsed < 0:
        raise IniConfigError("parsed int bigger than zero")
    return parsed


def split_datacenters(value: str) -> list[str]:
    """Split a comma-separated datacenter list, e.g. "DC0,DC1" -> ["DC0", "DC1"]."""
    return [part.strip(" ") for part in value.split(",") if part != ""]


def _parse_value(raw: str, line: int) -> str:
    out: list[str] = []
    pending_space = ""
    quoted = False
    chars = iter(raw)
    for char in chars:
        if char == "\\":
            escaped = next(chars, None)
            if escaped is None or escaped not in _VALUE_ESCAPES:
                raise IniConfigError(f"line {line}: invalid escape sequence in value")
            out.append(pending_space)
            pending_space = ""
            out.append(_VALUE_ESCAPES[escaped])
        elif quoted:
            if char == '"':
                quoted = False
            else:
                out.append(char)
        elif char in ";#":
            break
        elif char == '"':
            quoted = True
            out.append(pending_space)
            pending_space = ""
        elif char.isspace():
            if out:
                pending_space += char
        else:
            out.append(pending_space)
            pending_space = ""
            out.append(char)
    if quoted:
        raise IniConfigError(f"line {line}: unterminated quoted value")
    return "".join(out)


def _unescape_subsection(raw: str, line: int) -> str:
    out: list[str] = []
    chars = iter(raw)
    for char in chars:
        if char == "\\":
            escaped = next(chars, None)
            if escaped not in ("\\", '"'):
                raise IniConfigError(f"line {line}: invalid escape sequence in subsection name")
            out.append(escaped)
        else:
            out.append(char)
    return "".join(out)


def _start_section(
    text: str,
    line: int,
    sections: dict[str, RawSection],
    vcenters: dict[str, RawSection],
) -> RawSection | None:
    match = _SECTION_RE.match(text)
    if not match:
        raise IniConfigError(f"line {line}: invalid section header")
    rest = text[match.end():].strip()
    if rest and rest[0] not in ";#":
        raise IniConfigError(f"line {line}: expected EOL, EOF, or comment after section header")

    name = match.group(1).lower()
    subsection = match.group(2)
    if name in _SINGLE_SECTIONS:
        if subsection is not None:
            raise IniConfigError(f"line {line}: section {name!r} does not take a subsection")
        return sections.setdefault(name, {})
    if name == _VCENTER_SECTION:
        if subsection is None:
            raise IniConfigError(f"line {line}: section {name!r} requires a subsection")
        return vcenters.setdefault(_unescape_subsection(subsection, line), {})
    # Unknown sections are tolerated and skipped.
    return None


def _parse(text: str) -> tuple[dict[str, RawSection], dict[str, RawSection]]:
    sections: dict[str, RawSection] = {}
    vcenters: dict[str, RawSection] = {}
    current: RawSection | None = None
    seen_header = False

    for number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line[0] in ";#":
            continue
        if line.startswith("["):
            current = _start_section(line, number, sections, vcenters)
            seen_header = True
            continue
        if not seen_header:
            raise IniConfigError(f"line {number}: expected section header")
        match = _VARIABLE_RE.match(line)
        if not match:
            raise IniConfigError(f"line {number}: invalid variable syntax")
        name, equals, rest = match.groups()
        value = None if equals is None else _parse_value(rest, number)
        if current is not None:
            current[name.lower()] = value
    return sections, vcenters


def _convert(kind: str, name: str, value: str | None, where: str) -> Any:
    if kind == _BOOL:
        if value is None:
            return True
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise IniConfigError(f"{where}: invalid boolean value {value!r} for {name}")
    if value is None:
        raise IniConfigError(f"{where}: missing value for {name}")
    if kind == _UINT:
        if not _UINT_RE.fullmatch(value):
            raise IniConfigError(f"{where}: invalid unsigned integer {value!r} for {name}")
        return int(value)
    return value


def _section_values(raw: RawSection, spec: dict[str, str], where: str) -> dict[str, Any]:
    result = {name: _DEFAULTS[kind] for name, kind in spec.items()}
    for name, value in raw.items():
        kind = spec.get(name)
        if kind is not None:
            result[name] = _convert(kind, name, value, where)
    return result


def _create_config(
    sections: dict[str, RawSection], vcenters: dict[str, RawSection]
) -> CPIConfig:
    glob = _section_values(sections.get("global", {}), _GLOBAL_VARS, "Global")
    labels = _section_values(sections.get("labels", {}), _LABELS_VARS, "Labels")
    nodes = _section_values(sections.get("nodes", {}), _NODES_VARS, "Nodes")

    try:
        global_port = parse_uint_or_zero(glob["port"])
    except IniConfigError as exc:
        raise IniConfigError(
            f"can not create CPIConfig, invalid global port parameter: {exc}"
        ) from exc

    config = CPIConfig(
        global_=Global(
            user=glob["user"],
            password=glob["password"],
            vcenter_ip=glob["server"],
            vcenter_port=global_port,
            insecure_flag=glob["insecure-flag"],
            datacenters=split_datacenters(glob["datacenters"]),
            round_tripper_count=glob["soap-roundtrip-count"],
            ca_file=glob["ca-file"],
            thumbprint=glob["thumbprint"],
            secret_name=glob["secret-name"],
            secret_namespace=glob["secret-namespace"],
            secrets_directory=glob["secrets-directory"],
        ),
        labels=Labels(zone=labels["zone"], region=labels["region"]),
        nodes=Nodes(
            internal_network_subnet_cidr=nodes["internal-network-subnet-cidr"],
            external_network_subnet_cidr=nodes["external-network-subnet-cidr"],
            internal_vm_network_name=nodes["internal-vm-network-name"],
            external_vm_network_name=nodes["external-vm-network-name"],
            exclude_internal_network_subnet_cidr=nodes["exclude-internal-network-subnet-cidr"],
            exclude_external_network_subnet_cidr=nodes["exclude-external-network-subnet-cidr"],
        ),
    )

    for name, raw in vcenters.items():
        vc = _section_values(raw, _VCENTER_VARS, f"VirtualCenter {name!r}")
        try:
            port = parse_uint_or_zero(vc["port"])
        except IniConfigError as exc:
            raise IniConfigError(f"invalid port parameter for vc {name}: {exc}") from exc

        # Without an explicit server the section name is the vCenter address.
        vcenter_ip = vc["server"] or name
        ip_family = [vc["ip-family"]] if vc["ip-family"] else []

        config.vcenter[name] = VirtualCenterConfig(
            user=vc["user"],
            password=vc["password"],
            vcenter_ip=vcenter_ip,
            vcenter_port=port,
            insecure_flag=vc["insecure-flag"],
            datacenters=split_datacenters(vc["datacenters"]),
            round_tripper_count=vc["soap-roundtrip-count"],
            ca_file=vc["ca-file"],
            thumbprint=vc["thumbprint"],
            secret_name=vc["secret-name"],
            secret_namespace=vc["secret-namespace"],
            ip_family_priority=ip_family,
        )
    return config


def read_cpi_config_ini(data: bytes | str) -> CPIConfig:
    """Parse a legacy INI cloud configuration into a CPIConfig."""
    if not data:
        raise IniConfigError("empty INI file")
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
    except UnicodeDecodeError as exc:
        raise IniConfigError(f"INI file is not valid UTF-8: {exc}") from exc
    sections, vcenters = _parse(text)
    return _create_config(sections, vcenters)