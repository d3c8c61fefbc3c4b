from cloudccm.resources import (
    CLOUD_CONTROLLER_MANAGER_PROVIDER_LABEL,
    get_common_resources,
    no_op_transformer,
)
from cloudccm.types import Infrastructure, Network, OperatorConfig, PlatformStatus, PlatformType


def _config(platform, single=False):
    return OperatorConfig(
        managed_namespace="openshift-cloud-controller-manager",
        platform_status=PlatformStatus(type=platform),
        is_single_replica=single,
    )


def test_single_replica_has_no_common_resources():
    assert get_common_resources(_config(PlatformType.AWS, single=True)) == []


def test_pdb_for_aws():
    resources = get_common_resources(_config(PlatformType.AWS))
    assert len(resources) == 1
    pdb = resources[0]
    assert pdb["kind"] == "PodDisruptionBudget"
    assert pdb["apiVersion"] == "policy/v1"
    assert pdb["metadata"]["name"] == "aws-cloud-controller-manager"
    assert pdb["metadata"]["namespace"] == "openshift-cloud-controller-manager"


def test_pdb_name_is_lowercased_platform():
    (pdb,) = get_common_resources(_config(PlatformType.ALIBABA_CLOUD))
    assert pdb["metadata"]["name"] == "alibabacloud-cloud-controller-manager"


def test_pdb_selector_and_min_available():
    (pdb,) = get_common_resources(_config(PlatformType.GCP))
    assert pdb["spec"]["minAvailable"] == 1
    assert pdb["spec"]["selector"]["matchLabels"] == {
        CLOUD_CONTROLLER_MANAGER_PROVIDER_LABEL: PlatformType.GCP.value
    }


def test_common_resources_are_fresh_each_call():
    config = _config(PlatformType.AZURE)
    first = get_common_resources(config)
    first[0]["metadata"]["name"] = "different"
    second = get_common_resources(config)
    assert second[0]["metadata"]["name"] != "different"
    assert second[0]["metadata"]["name"].endswith("-cloud-controller-manager")


def test_no_op_transformer_returns_source():
    source = "[Global]\nkey = value\n"
    assert no_op_transformer(source, Infrastructure(), Network()) == source