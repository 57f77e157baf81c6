"""Parsing of shrine manifest files into typed manifests."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

import yaml

from shrine.manifest.types import (
    APPLICATION_KIND,
    RESOURCE_KIND,
    TEAM_KIND,
    ApplicationManifest,
    ManifestError,
    ResourceManifest,
    TeamManifest,
    TypeMeta,
)


@dataclass
class Manifest:
    """A parsed manifest; exactly one of the kind-specific fields is set."""

    api_version: str = ""
    kind: str = ""
    resource: ResourceManifest | None = None
    application: ApplicationManifest | None = None
    team: TeamManifest | None = None


def parse(path) -> Manifest:
    """Read and parse the manifest file at path."""
    try:
        with open(os.fspath(path), "rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise ManifestError(f"reading manifest file: {exc}") from exc
    return parse_bytes(data)


def parse_bytes(data: bytes | str) -> Manifest:
    """Parse a manifest from in-memory YAML."""
    try:
        doc = yaml.safe_load(data)
        meta = TypeMeta.from_dict(doc)
    except (yaml.YAMLError, ManifestError) as exc:
        raise ManifestError(f"parsing manifest metadata: {exc}") from exc
    doc = doc or {}
    m = Manifest(api_version=meta.api_version, kind=meta.kind)

    if meta.kind == APPLICATION_KIND:
        m.application = _build(ApplicationManifest, doc, "Application")
        _reject_tls_outside_alias_entries(doc)
    elif meta.kind == RESOURCE_KIND:
        res = _build(ResourceManifest, doc, "Resource")
        if not res.spec.image and res.spec.type and res.spec.version:
            res.spec.image = f"{res.spec.type}:{res.spec.version}"
        m.resource = res
    elif meta.kind == TEAM_KIND:
        m.team = _build(TeamManifest, doc, "Team")
    else:
        raise ManifestError(f"unknown manifest kind: {json.dumps(meta.kind)}")
    return m


def _build(cls, doc: Any, label: str):
    try:
        return cls.from_dict(doc)
    except ManifestError as exc:
        raise ManifestError(f"parsing {label} manifest: {exc}") from exc


def _reject_tls_outside_alias_entries(doc: Any) -> None:
    """tls is only valid inside spec.routing.aliases[] entries."""
    spec = doc.get("spec") if isinstance(doc, dict) else None
    routing = spec.get("routing") if isinstance(spec, dict) else None
    if isinstance(routing, dict) and "tls" in routing:
        raise ManifestError(
            f"parsing Application manifest {json.dumps(_application_name(doc))}: "
            "field tls is not valid at spec.routing; tls is only valid inside an "
            "alias entry under spec.routing.aliases[]"
        )


def _application_name(doc: dict) -> str:
    meta = doc.get("metadata")
    if not isinstance(meta, dict):
        return "<unknown>"
    name = meta.get("name")
    if not isinstance(name, str) or not name:
        return "<unknown>"
    return name