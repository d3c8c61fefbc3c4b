import pytest

from cloudccm.templates import (
    ObjectTemplate,
    TemplateError,
    TemplateSource,
    read_templates,
    render_templates,
)

DEPLOYMENT_TEMPLATE = """\
apiVersion: apps/v1
kind: Deployment
metadata:
  name: {{ name }}
  labels:
    app: {{ someLabel }}
spec:
  template:
    spec:
      containers:
      - name: main
        image: {{ images.Foo }}
"""


@pytest.fixture
def root(tmp_path):
    assets = tmp_path / "_testdata" / "assets"
    assets.mkdir(parents=True)
    (assets / "deployment.yaml").write_text(DEPLOYMENT_TEMPLATE)
    (tmp_path / "_testdata" / "foo").write_text("foo\n")
    return tmp_path


def test_read_correct_template_sources(root):
    sources = [
        TemplateSource("Deployment", "_testdata/assets/deployment.yaml"),
        TemplateSource("Deployment", "_testdata/foo"),
    ]
    templates = read_templates(root, sources)
    assert len(templates) == len(sources)
    assert [t.source for t in templates] == sources
    assert all(isinstance(t, ObjectTemplate) for t in templates)


def test_read_non_existing_template_source(root):
    sources = [
        TemplateSource("Deployment", "_testdata/assets/deployment.yaml"),
        TemplateSource("Deployment", "kekeke"),
    ]
    with pytest.raises(TemplateError) as info:
        read_templates(root, sources)
    assert str(info.value) == "template: pattern matches no files: `kekeke`"


def test_read_accepts_string_root(root):
    templates = read_templates(str(root), [TemplateSource("Deployment", "_testdata/foo")])
    assert len(templates) == 1


def test_template_renders_successfully(root):
    templates = read_templates(root, [TemplateSource("Deployment", "_testdata/assets/deployment.yaml")])
    (obj,) = render_templates(
        templates, {"name": "foo", "someLabel": "bar", "images": {"Foo": "baz"}}
    )
    assert obj["kind"] == "Deployment"
    assert obj["metadata"]["name"] == "foo"
    assert obj["metadata"]["labels"] == {"app": "bar"}
    assert obj["spec"]["template"]["spec"]["containers"][0]["image"] == "baz"


def test_render_fails_if_template_value_missing(root):
    templates = read_templates(root, [TemplateSource("Deployment", "_testdata/assets/deployment.yaml")])
    with pytest.raises(TemplateError) as info:
        render_templates(templates, {"name": "foo", "images": {"Foo": "baz"}})
    message = str(info.value)
    assert message.startswith("can not render template:")
    assert "someLabel" in message


def test_render_fails_if_manifest_does_not_fit_reference_kind(root):
    templates = read_templates(root, [TemplateSource("ConfigMap", "_testdata/assets/deployment.yaml")])
    with pytest.raises(TemplateError, match='unknown field "spec"'):
        render_templates(templates, {"someLabel": "bar", "name": "foo", "images": {"Foo": "baz"}})


def test_render_fails_if_manifest_is_not_a_mapping(root):
    templates = read_templates(root, [TemplateSource("ConfigMap", "_testdata/foo")])
    with pytest.raises(TemplateError, match="cannot unmarshal string into ConfigMap"):
        render_templates(templates, {})


def test_render_keeps_template_order(root):
    (root / "cm.yaml").write_text("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: {{ name }}\n")
    templates = read_templates(
        root,
        [
            TemplateSource("ConfigMap", "cm.yaml"),
            TemplateSource("Deployment", "_testdata/assets/deployment.yaml"),
        ],
    )
    objects = render_templates(templates, {"name": "foo", "someLabel": "bar", "images": {"Foo": "baz"}})
    assert [o["kind"] for o in objects] == ["ConfigMap", "Deployment"]


def test_rendering_twice_gives_independent_objects(root):
    (template,) = read_templates(root, [TemplateSource("Deployment", "_testdata/assets/deployment.yaml")])
    values = {"name": "foo", "someLabel": "bar", "images": {"Foo": "baz"}}
    first = template.render(values)
    first["metadata"]["name"] = "different"
    second = template.render(values)
    assert second["metadata"]["name"] == "foo"