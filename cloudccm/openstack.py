"""Cloud configuration transformer for the OpenStack cloud controller manager."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from cloudccm.types import Infrastructure, Network, PlatformType
from cloudccm.vsphere import TransformError

log = logging.getLogger(__name__)

KURYR_NETWORK_TYPE = "Kuryr"

_DEFAULT_SECTION = "DEFAULT"

# Legacy keys that may only be dropped while they still hold their defaults.
_LEGACY_GLOBAL_DEFAULTS = (
    ("secret-name", "openstack-credentials"),
    ("secret-namespace", "kube-system"),
    ("kubeconfig-path", ""),
)

_GLOBAL_SETTINGS = (
    ("use-clouds", "true"),
    ("clouds-file", "/etc/openstack/secret/clouds.yaml"),
    ("cloud", "openstack"),
)


class _IniError(ValueError):
    pass


@dataclass
class _Key:
    value: str
    comments: list[str] = field(default_factory=list)


@dataclass
class _Section:
    name: str
    keys: dict[str, _Key] = field(default_factory=dict)
    comments: list[str] = field(default_factory=list)

    def get(self, name: str) -> str:
        key = self.keys.get(name)
        return key.value if key is not None else ""

    def set(self, name: str, value: str) -> None:
        if name in self.keys:
            self.keys[name].value = value
        else:
            self.keys[name] = _Key(value)

    def delete(self, name: str) -> None:
        self.keys.pop(name, None)


def _parse_value(raw: str) -> str:
    value = raw.strip()
    if not value:
        return ""
    if len(value) >= 6 and value.startswith('"""') and value.endswith('"""'):
        return value[3:-3]
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '`"':
        return value[1:-1]
    cuts = [index for index in (value.find("#"), value.find(";")) if index >= 0]
    if cuts:
        value = value[: min(cuts)].strip()
    return value


def _format_value(value: str) -> str:
    if "\n" in value or "`" in value:
        return f'"""{value}"""'
    if "#" in value or ";" in value:
        return f"`{value}`"
    if value != value.strip():
        return f'"{value}"'
    return value


def _format_key(name: str) -> str:
    if any(char in name for char in '=:"'):
        return f"`{name}`"
    return name


class _IniDocument:
    """An ordered INI document that keeps sections, keys and comments."""

    def __init__(self) -> None:
        self.sections: dict[str, _Section] = {_DEFAULT_SECTION: _Section(_DEFAULT_SECTION)}

    @classmethod
    def parse(cls, text: str) -> _IniDocument:
        document = cls()
        current = document.sections[_DEFAULT_SECTION]
        comments: list[str] = []
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line:
                continue
            if line[0] in "#;":
                comments.append(line)
                continue
            if line.startswith("["):
                close = line.rfind("]")
                if close < 0:
                    raise _IniError(f"unclosed section: {line}")
                name = line[1:close].strip()
                if not name:
                    raise _IniError(f"empty section name: {line}")
                current = document.new_section(name)
                current.comments.extend(comments)
                comments = []
                continue
            delimiters = [index for index in (line.find("="), line.find(":")) if index >= 0]
            if not delimiters:
                raise _IniError(f"key-value delimiter not found: {line}")
            split_at = min(delimiters)
            name = line[:split_at].strip()
            if len(name) >= 2 and name[0] == name[-1] and name[0] in '`"':
                name = name[1:-1]
            if not name:
                raise _IniError(f"empty key name: {line}")
            current.set(name, _parse_value(line[split_at + 1:]))
            current.keys[name].comments.extend(comments)
            comments = []
        return document

    def section(self, name: str) -> _Section | None:
        return self.sections.get(name)

    def new_section(self, name: str) -> _Section:
        return self.sections.setdefault(name, _Section(name))

    def delete_section(self, name: str) -> None:
        self.sections.pop(name, None)

    def dump(self) -> str:
        lines: list[str] = []
        for index, section in enumerate(self.sections.values()):
            is_default = index == 0 and section.name == _DEFAULT_SECTION
            if is_default and not section.keys:
                continue
            lines.extend(section.comments)
            if not is_default:
                lines.append(f"[{section.name}]")
            names = {name: _format_key(name) for name in section.keys}
            width = max((len(shown) for shown in names.values()), default=0)
            for name, key in section.keys.items():
                lines.extend(key.comments)
                shown = names[name]
                lines.append(f"{shown.ljust(width)} = {_format_value(key.value)}")
            lines.append("")
        return "".join(f"{line}\n" for line in lines)


def _configure_load_balancer(section: _Section, network: Network) -> None:
    section.set("use-octavia", "true")
    if network.network_type == KURYR_NETWORK_TYPE:
        section.set("enabled", "false")


def cloud_config_transformer(source: str, infra: Infrastructure, network: Network) -> str:
    """Rework a legacy OpenStack cloud.conf for the external cloud provider.

    Legacy credential settings are dropped, clouds.yaml settings are added,
    the BlockStorage section is removed and Octavia load balancing is enabled.
    """
    status = infra.platform_status
    if status is None or status.type != PlatformType.OPENSTACK:
        raise TransformError(f"invalid platform, expected to be {PlatformType.OPENSTACK.value}")

    try:
        document = _IniDocument.parse(source)
    except _IniError as exc:
        raise TransformError(f"failed to read the cloud.conf: {exc}") from exc

    global_section = document.section("Global")
    if global_section is not None:
        log.info("[Global] section found; dropping any legacy settings...")
        for name, default in _LEGACY_GLOBAL_DEFAULTS:
            if global_section.get(name) != default:
                raise TransformError(f"'[Global] {name}' is set to a non-default value")
            global_section.delete(name)
    else:
        global_section = document.new_section("Global")

    for name, value in _GLOBAL_SETTINGS:
        global_section.set(name, value)

    if document.section("BlockStorage") is not None:
        log.info("[BlockStorage] section found; dropping section...")
        document.delete_section("BlockStorage")

    _configure_load_balancer(document.new_section("LoadBalancer"), network)

    return document.dump()