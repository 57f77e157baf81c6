"""Deployment and teardown planning."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from shrine.manifest.parser import parse
from shrine.manifest.types import APPLICATION_KIND, RESOURCE_KIND, TEAM_KIND, ManifestError
from shrine.manifest.validate import ValidationError, validate
from shrine.planner.loader import ManifestSet, PlannerError, load_dir
from shrine.planner.order import PlannedStep, order
from shrine.planner.resolve import resolve


@dataclass
class PlanResult:
    """The ordered steps of a deployment and the manifests they come from."""

    steps: list[PlannedStep]
    manifest_set: ManifestSet


@dataclass
class PlanTeardownResult:
    """The ordered steps that tear down a team's deployments."""

    steps: list[PlannedStep] = field(default_factory=list)


def _check_resolution(manifest_set: ManifestSet, store) -> None:
    errs = resolve(manifest_set, store)
    if errs:
        raise PlannerError("resolution failed:\n- " + "\n- ".join(errs), errs)


def plan(directory, store) -> PlanResult:
    """Load, resolve and order every manifest under directory."""
    manifest_set = load_dir(directory)
    _check_resolution(manifest_set, store)
    return PlanResult(steps=order(manifest_set), manifest_set=manifest_set)


def plan_single(file, specs_dir, store) -> PlanResult:
    """Plan the deployment of one manifest file.

    With a specs_dir its manifests give the resolution context; otherwise the
    set holds only the target manifest.
    """
    file = os.fspath(file)
    try:
        m = parse(file)
    except ManifestError as exc:
        raise PlannerError(f"parsing manifest {file!r}: {exc}") from exc
    try:
        validate(m)
    except ValidationError as exc:
        raise PlannerError(f"validating manifest {file!r}: {exc}") from exc

    if m.kind == APPLICATION_KIND:
        name = m.application.metadata.name
    elif m.kind == RESOURCE_KIND:
        name = m.resource.metadata.name
    elif m.kind == TEAM_KIND:
        raise PlannerError(
            "team manifests cannot be applied with --file; use 'shrine apply teams' instead"
        )
    else:
        raise PlannerError(f"unsupported manifest kind {m.kind!r} for single-file apply")

    if specs_dir:
        manifest_set = load_dir(specs_dir)
        existing = manifest_set.applications if m.kind == APPLICATION_KIND else manifest_set.resources
        if name not in existing:
            manifest_set.add(m, file)
    else:
        manifest_set = ManifestSet()
        manifest_set.add(m, file)

    _check_resolution(manifest_set, store)
    return PlanResult(steps=[PlannedStep(kind=m.kind, name=name)], manifest_set=manifest_set)


def plan_teardown(team: str, store) -> PlanTeardownResult:
    """Order a team's deployments for removal: applications, then resources.

    store must provide list(team) returning items with kind and name.
    """
    apps: list[PlannedStep] = []
    resources: list[PlannedStep] = []
    for d in store.list(team):
        step = PlannedStep(kind=d.kind, name=d.name)
        if d.kind == APPLICATION_KIND:
            apps.append(step)
        elif d.kind == RESOURCE_KIND:
            resources.append(step)
    by_name = lambda s: s.name  # noqa: E731
    return PlanTeardownResult(steps=sorted(apps, key=by_name) + sorted(resources, key=by_name))