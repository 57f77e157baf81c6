"""Loading of a project directory into an indexed set of manifests."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field

from shrine.manifest.parser import Manifest, parse
from shrine.manifest.scan import report_foreign_files, scan_dir
from shrine.manifest.types import (
    APPLICATION_KIND,
    RESOURCE_KIND,
    TEAM_KIND,
    ApplicationManifest,
    ManifestError,
    ResourceManifest,
)
from shrine.manifest.validate import ValidationError, validate


class PlannerError(Exception):
    """Raised when a deployment cannot be planned; errors lists each problem."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors) if errors else []


@dataclass
class ManifestSet:
    """Applications and resources of a project, keyed by metadata.name."""

    applications: dict[str, ApplicationManifest] = field(default_factory=dict)
    resources: dict[str, ResourceManifest] = field(default_factory=dict)

    def add(self, m: Manifest, path) -> None:
        """Index m by kind; teams are ignored, duplicates are rejected."""
        if m.kind == APPLICATION_KIND:
            name = m.application.metadata.name
            if name in self.applications:
                raise PlannerError(f"duplicate Application name found: {name}")
            self.applications[name] = m.application
        elif m.kind == RESOURCE_KIND:
            name = m.resource.metadata.name
            if name in self.resources:
                raise PlannerError(f"duplicate Resource name found: {name}")
            self.resources[name] = m.resource
        elif m.kind == TEAM_KIND:
            # Teams are platform-wide and handled by the team sync process.
            return
        else:
            raise PlannerError(
                f"unsupported manifest kind for deployment: "
                f"{json.dumps(m.kind, ensure_ascii=False)} (file: {os.fspath(path)})"
            )


def load_dir(directory) -> ManifestSet:
    """Parse and validate every shrine manifest found under directory."""
    manifest_set = ManifestSet()
    result = scan_dir(directory)
    for candidate in result.shrine:
        path = candidate.path
        try:
            m = parse(path)
        except ManifestError as exc:
            raise PlannerError(f"parsing manifest {path!r}: {exc}") from exc
        try:
            validate(m)
        except ValidationError as exc:
            raise PlannerError(f"validating manifest {path!r}: {exc}") from exc
        manifest_set.add(m, path)
    if result.foreign:
        report_foreign_files(directory, result.foreign)
    return manifest_set