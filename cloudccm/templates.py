"""Load resource manifest templates and render them into objects."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2
import yaml

log = logging.getLogger(__name__)

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)

_WORKLOAD_FIELDS = frozenset({"apiVersion", "kind", "metadata", "spec", "status"})
_KNOWN_FIELDS = {
    "Deployment": _WORKLOAD_FIELDS,
    "DaemonSet": _WORKLOAD_FIELDS,
    "PodDisruptionBudget": _WORKLOAD_FIELDS,
    "Pod": _WORKLOAD_FIELDS,
    "ConfigMap": frozenset({"apiVersion", "kind", "metadata", "data", "binaryData", "immutable"}),
}

_YAML_TYPE_NAMES = {str: "string", bool: "bool", int: "number", float: "number", list: "array"}


class TemplateError(Exception):
    """Raised when a template cannot be read, rendered or decoded."""


@dataclass(frozen=True)
class TemplateSource:
    """Path of a template and the kind of object it must decode into."""

    kind: str
    path: str


@dataclass(frozen=True)
class ObjectTemplate:
    """A parsed template ready to be rendered."""

    source: TemplateSource
    template: jinja2.Template

    def render(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Render the template with the values and decode the result."""
        try:
            text = self.template.render(dict(values))
        except jinja2.TemplateError as exc:
            raise TemplateError(f"can not render template: {exc}") from exc

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            log.error("Cannot decode data from resource %s: %s", self.source.path, exc)
            raise TemplateError(f"error unmarshaling YAML: {exc}") from exc

        try:
            return _decode(document, self.source.kind)
        except TemplateError as exc:
            log.error("Cannot decode data from resource %s: %s", self.source.path, exc)
            raise


def _decode(document: Any, kind: str) -> dict[str, Any]:
    if document is None:
        return {}
    if not isinstance(document, dict):
        type_name = _YAML_TYPE_NAMES.get(type(document), type(document).__name__)
        raise TemplateError(f"cannot unmarshal {type_name} into {kind}")
    allowed = _KNOWN_FIELDS.get(kind)
    if allowed is not None:
        for field_name in document:
            if field_name not in allowed:
                raise TemplateError(f'unknown field "{field_name}" in {kind}')
    return document


def read_templates(
    root: str | os.PathLike[str] | Any, sources: Iterable[TemplateSource]
) -> list[ObjectTemplate]:
    """Read and parse each source's template relative to root."""
    base = Path(root) if isinstance(root, (str, os.PathLike)) else root
    templates = []
    for source in sources:
        location = base / source.path
        if not location.is_file():
            log.error("Cannot parse template from resource %s: not found", source.path)
            raise TemplateError(f"template: pattern matches no files: `{source.path}`")
        try:
            template = _ENV.from_string(location.read_text(encoding="utf-8"))
        except jinja2.TemplateSyntaxError as exc:
            log.error("Cannot parse template from resource %s: %s", source.path, exc)
            raise TemplateError(f"template: {source.path}: {exc}") from exc
        templates.append(ObjectTemplate(source=source, template=template))
    return templates


def render_templates(
    templates: Iterable[ObjectTemplate], values: Mapping[str, Any]
) -> list[dict[str, Any]]:
    """Render every template with the same values, keeping their order."""
    return [template.render(values) for template in templates]