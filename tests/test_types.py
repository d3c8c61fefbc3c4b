import pytest

from cloudccm.types import (
    OperatorConfig,
    PlatformNotFoundError,
    PlatformStatus,
    PlatformType,
    VSpherePlatformSpec,
)


@pytest.mark.parametrize("platform", list(PlatformType))
def test_platform_name_matches_platform_value(platform):
    config = OperatorConfig(platform_status=PlatformStatus(type=platform))
    assert config.platform_name() == platform.value


def test_platform_name_empty_without_status():
    assert OperatorConfig().platform_name() == ""


def test_platform_type_lookup_by_value():
    assert PlatformType(PlatformType.ALIBABA_CLOUD.value) is PlatformType.ALIBABA_CLOUD


def test_platform_not_found_error_message():
    err = PlatformNotFoundError(PlatformType.OVIRT)
    assert str(err) == f'unrecognized platform type "{PlatformType.OVIRT.value}" found in infrastructure'
    assert err.platform is PlatformType.OVIRT


def test_platform_not_found_error_with_plain_string():
    err = PlatformNotFoundError("Mystery")
    assert str(err) == 'unrecognized platform type "Mystery" found in infrastructure'


def test_platform_not_found_error_is_a_lookup_error():
    err = PlatformNotFoundError(PlatformType.NONE)
    assert isinstance(err, LookupError)
    assert err.platform is PlatformType.NONE
    assert str(err) == f'unrecognized platform type "{PlatformType.NONE.value}" found in infrastructure'


def test_vsphere_spec_defaults_are_independent():
    first = VSpherePlatformSpec()
    second = VSpherePlatformSpec()
    first.node_networking.external.network_subnet_cidr.append("10.0.0.0/8")
    assert second.node_networking.external.network_subnet_cidr == []