import pytest
import yaml

from cloudccm.vsphere_config.reader import ConfigReadError, marshal_config, read_config


def _q(value):
    return f'"{value}"'


def _ini(*sections):
    """Build an INI document from (header, {key: value}) pairs."""
    blocks = []
    for header, entries in sections:
        lines = [f"[{header}]"]
        lines.extend(f"{key} = {value}" for key, value in entries.items())
        blocks.append("\n".join(lines))
    return "\n" + "\n\n".join(blocks) + "\n"


def _assert_same_order(actual, expected):
    if isinstance(expected, dict):
        assert list(actual) == list(expected)
        for key, value in expected.items():
            _assert_same_order(actual[key], value)


def _assert_yaml_document(text, expected):
    assert not text.startswith("\n")
    assert text.endswith("\n")
    loaded = yaml.safe_load(text)
    assert loaded == expected
    _assert_same_order(loaded, expected)


CA_PATH = "/some/path/to/a/ca.pem"

BASIC_INI = _ini(
    (
        "Global",
        {
            "server": "0.0.0.0",
            "port": "443",
            "user": "user",
            "password": "password",
            "insecure-flag": "true",
            "datacenters": "us-west",
            "ca-file": CA_PATH,
        },
    )
)

BASIC_EXPECTED = {
    "global": {
        "user": "user",
        "password": "password",
        "server": "0.0.0.0",
        "port": 443,
        "insecureFlag": True,
        "datacenters": ["us-west"],
        "caFile": CA_PATH,
    }
}

VCENTER_SECTION_INI = _ini(
    ("Global", {"secret-name": _q("global-secret"), "secret-namespace": _q("global-secret-ns")}),
    ('VirtualCenter "vc.rh.com"', {"datacenters": _q("DC0,DC1")}),
    ("Labels", {"region": _q("k8s-region"), "zone": _q("k8s-zone")}),
)

VCENTER_SECTION_EXPECTED = {
    "global": {"secretName": "global-secret", "secretNamespace": "global-secret-ns"},
    "vcenter": {"vc.rh.com": {"server": "vc.rh.com", "datacenters": ["DC0", "DC1"]}},
    "labels": {"zone": "k8s-zone", "region": "k8s-region"},
}

MULTI_VC_INI = _ini(
    (
        "Global",
        {
            "port": "443",
            "insecure-flag": "true",
            "secret-name": _q("global-secret"),
            "secret-namespace": _q("global-secret-ns"),
        },
    ),
    (
        'VirtualCenter "t1"',
        {
            "server": _q("10.0.0.1"),
            "datacenters": _q("DC0,DC1,DC2"),
            "secret-name": _q("tenant1-secret"),
            "secret-namespace": _q("kube-system"),
        },
    ),
    ('VirtualCenter "10.0.0.2"', {"datacenters": _q("DC3")}),
    ('VirtualCenter "10.0.0.3"', {"datacenters": _q("DC5,DC6"), "ip-family": _q("ipv6")}),
)

BAD_GLOBAL_PORT_INI = _ini(("Global", {"port": "-443", "insecure-flag": "true"}))

BAD_VC_PORT_INI = _ini(
    ("Global", {"port": "443", "insecure-flag": "true"}),
    (
        'VirtualCenter "10.0.0.3"',
        {"datacenters": _q("DC5,DC6"), "port": "-1", "ip-family": _q("ipv6")},
    ),
)


def test_basic_config_yaml_conversion():
    config = read_config(BASIC_INI.encode())
    _assert_yaml_document(marshal_config(config), BASIC_EXPECTED)


def test_basic_config_yaml_conversion_with_vc_section():
    config = read_config(VCENTER_SECTION_INI.encode())
    _assert_yaml_document(marshal_config(config), VCENTER_SECTION_EXPECTED)


def test_multi_dcs_config_conversion():
    config = read_config(MULTI_VC_INI.encode())
    assert len(config.vcenter) == 3

    vc1 = config.vcenter["t1"]
    assert vc1.datacenters == ["DC0", "DC1", "DC2"]
    assert vc1.vcenter_ip == "10.0.0.1"
    assert vc1.secret_namespace == "kube-system"
    assert vc1.secret_name == "tenant1-secret"

    vc2 = config.vcenter["10.0.0.2"]
    assert vc2.datacenters == ["DC3"]
    assert vc2.vcenter_ip == "10.0.0.2"
    assert vc2.ip_family_priority == []

    vc3 = config.vcenter["10.0.0.3"]
    assert vc3.datacenters == ["DC5", "DC6"]
    assert vc3.ip_family_priority == ["ipv6"]

    assert "10.0.0.3" in marshal_config(config)


@pytest.mark.parametrize(
    ("data", "message"),
    [
        ("boom[]{}", "expected section header"),
        (BAD_GLOBAL_PORT_INI, "invalid global port parameter: parsed int bigger than zero"),
        (BAD_VC_PORT_INI, "invalid port parameter for vc 10.0.0.3: parsed int bigger than zero"),
        ("", "vSphere config is empty"),
    ],
    ids=["rubbish", "bad port", "bad vc port", "empty"],
)
def test_invalid_config(data, message):
    with pytest.raises(ConfigReadError) as excinfo:
        read_config(data.encode())
    assert message in str(excinfo.value)


@pytest.mark.parametrize(
    ("ini_text", "expected"),
    [(BASIC_INI, BASIC_EXPECTED), (VCENTER_SECTION_INI, VCENTER_SECTION_EXPECTED)],
    ids=["basic", "vcenter section"],
)
def test_yaml_and_ini_give_same_result(ini_text, expected):
    yaml_text = yaml.safe_dump(expected, sort_keys=False)
    assert read_config(yaml_text) == read_config(ini_text)


def test_marshal_round_trip():
    config = read_config(MULTI_VC_INI)
    assert read_config(marshal_config(config)) == config


def test_ini_failure_is_wrapped():
    with pytest.raises(ConfigReadError, match="ini config parsing failed"):
        read_config("boom[]{}")