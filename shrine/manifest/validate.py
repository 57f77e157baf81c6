"""Structural validation of parsed manifests."""

from __future__ import annotations

import json

from shrine.manifest.parser import Manifest
from shrine.manifest.types import (
    APPLICATION_KIND,
    RESOURCE_KIND,
    TEAM_KIND,
    ApplicationSpec,
    ManifestError,
    Metadata,
    ResourceSpec,
    Routing,
    TeamSpec,
    VolumeMount,
)


class ValidationError(ManifestError):
    """Raised with every problem found in a manifest."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("validation failed:\n- " + "\n- ".join(self.errors))


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def validate(m: Manifest) -> None:
    """Raise ValidationError listing every problem in m."""
    errs = [*_type_meta(m), *_metadata(m), *_spec(m)]
    if errs:
        raise ValidationError(errs)


def _type_meta(m: Manifest) -> list[str]:
    errs = []
    if not m.kind:
        errs.append("kind is required")
    elif m.kind not in (TEAM_KIND, RESOURCE_KIND, APPLICATION_KIND):
        errs.append("kind must be one of: Team, Resource, Application")
    if not m.api_version:
        errs.append("apiVersion is required")
    return errs


def _metadata(m: Manifest) -> list[str]:
    if m.application is not None:
        return _metadata_with_owner(m.application.metadata)
    if m.resource is not None:
        return _metadata_with_owner(m.resource.metadata)
    if m.team is not None:
        return _metadata_name(m.team.metadata)
    return []


def _metadata_name(meta: Metadata) -> list[str]:
    errs = []
    if not meta.name:
        errs.append("metadata.name is required")
    return errs


def _metadata_with_owner(meta: Metadata) -> list[str]:
    errs = _metadata_name(meta)
    if not meta.owner:
        errs.append("metadata.owner is required")
    return errs


def _spec(m: Manifest) -> list[str]:
    if m.application is not None:
        return _application_spec(m.application.spec)
    if m.resource is not None:
        return _resource_spec(m.resource.spec)
    if m.team is not None:
        return _team_spec(m.team.spec)
    return []


def _exclusive(path: str, index: int, name: str, labels: str, count: int) -> list[str]:
    if count == 0:
        return [f"{path}[{index}] {_q(name)}: must set one of {labels}"]
    if count > 1:
        return [f"{path}[{index}] {_q(name)}: {labels} are mutually exclusive"]
    return []


def _application_spec(spec: ApplicationSpec) -> list[str]:
    errs = []
    if not spec.image:
        errs.append("spec.image is required")
    if spec.port <= 0:
        errs.append("spec.port must be greater than 0")
    for i, e in enumerate(spec.env):
        if not e.name:
            errs.append(f"spec.env[{i}].name is required")
            continue
        kinds = sum((bool(e.value), bool(e.value_from), bool(e.template)))
        errs += _exclusive("spec.env", i, e.name, "value/valueFrom/template", kinds)
    errs += _routing_aliases(spec.routing)
    errs += _volume_mounts(spec.volumes)
    return errs


def _resource_spec(spec: ResourceSpec) -> list[str]:
    errs = []
    if not spec.type:
        errs.append("spec.type is required")
    if not spec.version:
        errs.append("spec.version is required")
    seen: set[str] = set()
    for i, o in enumerate(spec.outputs):
        if not o.name:
            errs.append(f"spec.outputs[{i}].name is required")
            continue
        if o.name in seen:
            errs.append(f"spec.outputs has duplicate name {_q(o.name)}")
        seen.add(o.name)
        kinds = sum((bool(o.value), o.generated, bool(o.template)))
        if o.name in ("host", "port"):
            if kinds:
                errs.append(
                    f"spec.outputs[{i}]: {_q(o.name)} is a CLI built-in and must not set value/generated/template"
                )
            continue
        errs += _exclusive("spec.outputs", i, o.name, "value/generated/template", kinds)
    errs += _volume_mounts(spec.volumes)
    return errs


def _has_invalid_chars(s: str) -> bool:
    return any(c == " " or ord(c) < 0x20 or ord(c) == 0x7F for c in s)


def _norm(p: str) -> str:
    return p.rstrip("/")


def _routing_aliases(routing: Routing) -> list[str]:
    if not routing.aliases:
        return []
    errs = []
    if not routing.domain:
        errs.append("spec.routing.aliases is set but spec.routing.domain is empty")
    seen = {(routing.domain, _norm(routing.path_prefix))}
    for i, a in enumerate(routing.aliases):
        if not a.host:
            errs.append(f"spec.routing.aliases[{i}].host is required")
            continue
        if _has_invalid_chars(a.host):
            errs.append(f"spec.routing.aliases[{i}].host {_q(a.host)} contains invalid characters")
        norm = _norm(a.path_prefix)
        if a.path_prefix:
            if not a.path_prefix.startswith("/"):
                errs.append(f'spec.routing.aliases[{i}].pathPrefix {_q(a.path_prefix)} must start with "/"')
            elif not norm:
                errs.append(f'spec.routing.aliases[{i}].pathPrefix must not be just "/"')
            elif _has_invalid_chars(a.path_prefix):
                errs.append(
                    f"spec.routing.aliases[{i}].pathPrefix {_q(a.path_prefix)} contains invalid characters"
                )
        key = (a.host, norm)
        if key in seen:
            errs.append(f"spec.routing: duplicate route {a.host}{norm} declared on alias[{i}]")
        seen.add(key)
    return errs


def _volume_mounts(mounts: list[VolumeMount]) -> list[str]:
    errs = []
    names: set[str] = set()
    paths: set[str] = set()
    for i, m in enumerate(mounts):
        if not m.name:
            errs.append(f"spec.volumes[{i}].name is required")
            continue
        if m.name in names:
            errs.append(f"spec.volumes has duplicate name {_q(m.name)}")
        names.add(m.name)
        if not m.mount_path:
            errs.append(f"spec.volumes[{i}].mountPath is required")
        elif not m.mount_path.startswith("/"):
            errs.append(f"spec.volumes[{i}].mountPath {_q(m.mount_path)} must be absolute (starts with /)")
        elif m.mount_path in paths:
            errs.append(f"spec.volumes has duplicate mountPath {_q(m.mount_path)}")
        paths.add(m.mount_path)
    return errs


def _team_spec(spec: TeamSpec) -> list[str]:
    errs = []
    if not spec.display_name:
        errs.append("spec.displayName is required")
    if not spec.contact:
        errs.append("spec.contact is required")
    return errs