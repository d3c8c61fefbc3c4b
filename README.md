# cloudccm

A library of helpers for running external cloud controller managers (CCM)
on a cluster:

- build the resources every CCM installation shares, such as the
  PodDisruptionBudget for multi-replica clusters;
- substitute cluster-wide settings (namespace, proxy environment, single
  replica) into manifests without changing the input objects;
- render manifest templates into plain Kubernetes objects (dictionaries);
- transform legacy in-tree cloud-config files into the form an external
  cloud provider expects, for OpenStack and vSphere.

## Installation

```
pip install cloudccm
```

With the test dependencies:

```
pip install "cloudccm[test]"
```

## Configuration objects

`cloudccm.types` holds the dataclasses the other modules work with:
`OperatorConfig` (managed namespace, platform status, infrastructure name,
cluster proxy, single-replica flag), `PlatformStatus`, `PlatformType`,
`ProxyStatus`, `Infrastructure`, `Network` and the vSphere platform spec
types (`VSpherePlatformSpec`, `VSphereVCenterSpec`, `VSphereFailureDomain`,
`VSphereTopology`, `VSphereNodeNetworking`, `VSphereNetworkSpec`).
`OperatorConfig.platform_name()` returns the platform type as a string, or
an empty string when no platform status is set.

## Choosing a cloud-config transformer

```python
from cloudccm.cloud import get_cloud_config_transformer
from cloudccm.types import PlatformStatus, PlatformType

transformer = get_cloud_config_transformer(PlatformStatus(type=PlatformType.OPENSTACK))
```

The returned callable takes `(source, infra, network)` and returns the new
configuration text. Alibaba Cloud, GCP, IBM Cloud, Power VS and Nutanix get
`cloudccm.resources.no_op_transformer`, which returns the source unchanged;
AWS and Azure get `None`, telling the caller to leave the configuration to
another component. Any other platform raises `PlatformNotFoundError`.

`cloudccm.cloud.is_azure_stack_hub(platform_status)` tells whether the
platform status names the Azure Stack cloud.

## OpenStack

`cloudccm.openstack.cloud_config_transformer(source, infra, network)`
rewrites an INI `cloud.conf`:

- the legacy `[Global]` keys `secret-name`, `secret-namespace` and
  `kubeconfig-path` are dropped, and a `TransformError` is raised if any of
  them holds a non-default value;
- `use-clouds`, `clouds-file` and `cloud` are set in `[Global]`;
- `[BlockStorage]` is removed;
- `[LoadBalancer]` gets `use-octavia = true`, and `enabled = false` on
  Kuryr networks.

A non-OpenStack infrastructure raises `TransformError`.

## vSphere

`cloudccm.vsphere.cloud_config_transformer(source, infra, network)` reads
either the YAML or the legacy INI form of the vSphere cloud-config and
always writes YAML. When the infrastructure carries a vSphere spec, node
networking, vCenters and datacenters are filled in from it, and the zone and
region labels are set when more than one failure domain is defined.

Reading and writing are also available on their own:

```python
from cloudccm.vsphere_config.reader import read_config, marshal_config

config = read_config(b"[Global]\nserver = 0.0.0.0\nport = 443\n")
print(marshal_config(config))
```

`read_config` tries YAML first and falls back to INI, raising
`ConfigReadError` when both fail or the input is empty. The parsed result is
a `CPIConfig` (see `cloudccm.vsphere_config.yaml_config`), whose `to_dict()`
leaves out empty values and whose `from_dict()` builds one from a decoded
YAML document. The INI helpers `read_cpi_config_ini`, `parse_uint_or_zero`
and `split_datacenters` live in `cloudccm.vsphere_config.ini_config`.

## Common resources

```python
from cloudccm.resources import get_common_resources
from cloudccm.substitution import substitute_common_parts
```

`get_common_resources(config)` returns the PodDisruptionBudget unless the
cluster runs a single replica. `substitute_common_parts(config, objects)`
returns copies of the objects with the managed namespace set, proxy
environment variables appended to Deployment and DaemonSet containers, and
Deployment replicas set to 1 on single-replica clusters.

## Templates

`cloudccm.templates.read_templates(root, sources)` loads Jinja2 manifest
templates from a directory, one per `TemplateSource(kind, path)`, and
`render_templates(templates, values)` renders them in order. Rendering fails
with `TemplateError` on a missing value, on output that is not a mapping, or,
for the kinds it knows (Deployment, DaemonSet, PodDisruptionBudget, Pod,
ConfigMap), on a top-level field the kind does not allow.

## What this package does not do

It is a library only: there is no command, no controller loop and no
Kubernetes API client. It does not ship the per-provider CCM manifests
(Deployments, DaemonSets) nor render a full provider resource set; callers
supply their own templates and apply the resulting objects themselves.