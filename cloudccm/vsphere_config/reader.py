"""Read vSphere cloud configurations in YAML or legacy INI form."""

from __future__ import annotations

import logging

import yaml

from cloudccm.vsphere_config.ini_config import IniConfigError, read_cpi_config_ini
from cloudccm.vsphere_config.yaml_config import CPIConfig, read_cpi_config_yaml

log = logging.getLogger(__name__)


class ConfigReadError(ValueError):
    """Raised when a vSphere configuration cannot be read or written."""


def read_config(data: bytes | str) -> CPIConfig:
    """Parse a configuration, trying YAML first and falling back to INI."""
    if not data:
        raise ConfigReadError("vSphere config is empty")

    log.debug("Try to parse vSphere config, yaml format first")
    try:
        config = read_cpi_config_yaml(data)
    except ValueError as yaml_exc:
        log.debug("Parsing yaml config failed, fallback to ini: %s", yaml_exc)
        try:
            config = read_cpi_config_ini(data)
        except IniConfigError as exc:
            raise ConfigReadError(f"ini config parsing failed: {exc}") from exc
        log.debug("ini config parsed successfully")
    else:
        log.debug("yaml config parsed successfully")
    return config


def marshal_config(config: CPIConfig) -> str:
    """Serialize a configuration into a YAML document."""
    try:
        return yaml.safe_dump(
            config.to_dict(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            width=2**31 - 1,
        )
    except yaml.YAMLError as exc:
        raise ConfigReadError(f"can not marshal config into yaml: {exc}") from exc