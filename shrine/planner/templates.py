"""Checks of template outputs and template environment variables."""

from __future__ import annotations

import json

from shrine.manifest.template import TemplateSyntaxError, extract_field_refs
from shrine.manifest.types import ApplicationManifest, ResourceManifest

_RESOURCE_BUILTINS = ("team", "name", "host", "port")
_ENV_BUILTINS = ("team", "name")


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def _check(owner_label: str, item_label: str, name: str, template: str, valid: set[str]) -> list[str]:
    try:
        refs = extract_field_refs(template)
    except TemplateSyntaxError as exc:
        return [f"{owner_label}: template {item_label} {_q(name)} has invalid syntax: {exc}"]
    return [
        f"{owner_label}: template {item_label} {_q(name)} references unknown variable {_q(ref)}"
        for ref in refs
        if ref not in valid
    ]


def validate_templates(res: ResourceManifest) -> list[str]:
    """Check that each output template parses and references known names."""
    valid = {*_RESOURCE_BUILTINS, *(o.name for o in res.spec.outputs)}
    label = f"resource {_q(res.metadata.name)}"
    errs: list[str] = []
    for o in res.spec.outputs:
        if o.template:
            errs += _check(label, "output", o.name, o.template, valid)
    return errs


def validate_env_templates(app: ApplicationManifest) -> list[str]:
    """Check that each env template parses and references known names."""
    valid = {*_ENV_BUILTINS, *(e.name for e in app.spec.env)}
    label = f"app {_q(app.metadata.name)}"
    errs: list[str] = []
    for e in app.spec.env:
        if e.template:
            errs += _check(label, "env", e.name, e.template, valid)
    return errs