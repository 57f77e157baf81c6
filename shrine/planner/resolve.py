"""Dependency resolution, access control and quota enforcement."""

from __future__ import annotations

import json
from collections import Counter

from shrine.manifest.types import (
    APPLICATION_KIND,
    RESOURCE_KIND,
    ApplicationManifest,
    Dependency,
    TeamManifest,
)
from shrine.planner.loader import ManifestSet
from shrine.planner.templates import validate_env_templates, validate_templates


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def resolve(manifest_set: ManifestSet, store) -> list[str]:
    """Return every resolution problem in manifest_set.

    store must provide load_team(name) returning a TeamManifest or raising.
    """
    errs = _validate_unique_names(manifest_set)
    app_counts: Counter[str] = Counter()
    res_counts: Counter[str] = Counter()

    for app in manifest_set.applications.values():
        app_counts[app.metadata.owner] += 1
        errs += _resolve_dependencies(manifest_set, app)
        errs += _validate_value_from(manifest_set, app)
        errs += validate_env_templates(app)

    for res in manifest_set.resources.values():
        res_counts[res.metadata.owner] += 1
        errs += validate_templates(res)

    team_cache, quota_errs = _enforce_quota(store, app_counts, res_counts)
    errs += quota_errs
    errs += _allowed_resource_types(manifest_set, team_cache)
    return errs


def has_access(consumer: str, owner: str, access_list) -> bool:
    """Report whether consumer is the owner or is in the access list."""
    return owner == consumer or consumer in access_list


def _resolve_dependencies(s: ManifestSet, app: ApplicationManifest) -> list[str]:
    errs: list[str] = []
    for dep in app.spec.dependencies:
        if dep.kind == RESOURCE_KIND:
            errs += _validate_dep(s.resources, "resource", app, dep)
        elif dep.kind == APPLICATION_KIND:
            errs += _validate_dep(s.applications, "application", app, dep)
        else:
            errs.append(f"app {_q(app.metadata.name)}: unsupported dependency kind {_q(dep.kind)}")
    return errs


def _validate_dep(targets: dict, label: str, app: ApplicationManifest, dep: Dependency) -> list[str]:
    name, owner = app.metadata.name, app.metadata.owner
    target = targets.get(dep.name)
    if target is None:
        return [f"app {_q(name)}: depends on missing {label} {_q(dep.name)}"]
    t_owner = target.metadata.owner
    if t_owner != dep.owner:
        return [
            f"app {_q(name)}: depends on {label} {_q(dep.name)} owned by {_q(t_owner)}, "
            f"but manifest specifies owner {_q(dep.owner)}"
        ]
    errs = []
    if not has_access(owner, t_owner, target.metadata.access):
        errs.append(
            f"app {_q(name)} (team {_q(owner)}) does not have access to {label} "
            f"{_q(target.metadata.name)} (owned by {_q(t_owner)})"
        )
    if owner != t_owner and not target.spec.networking.expose_to_platform:
        errs.append(
            f"app {_q(name)} (team {_q(owner)}): {label} {_q(target.metadata.name)} "
            f"(team {_q(t_owner)}) is not reachable cross-team — set "
            f"networking.exposeToPlatform: true on the {label}"
        )
    return errs


def _enforce_quota(store, app_counts: Counter, res_counts: Counter) -> tuple[dict[str, TeamManifest], list[str]]:
    errs: list[str] = []
    cache: dict[str, TeamManifest] = {}
    owners = dict.fromkeys([*app_counts, *res_counts])
    for owner in owners:
        try:
            team = store.load_team(owner)
        except Exception as exc:  # any store failure is reported, not fatal
            errs.append(f"team {_q(owner)}: failed to load for quota check: {exc}")
            continue
        cache[owner] = team
        quotas = team.spec.quotas
        if quotas.max_apps > 0 and app_counts[owner] > quotas.max_apps:
            errs.append(
                f"team {_q(owner)}: deployment exceeds MaxApps quota "
                f"(deploying {app_counts[owner]}, limit {quotas.max_apps})"
            )
        if quotas.max_resources > 0 and res_counts[owner] > quotas.max_resources:
            errs.append(
                f"team {_q(owner)}: deployment exceeds MaxResources quota "
                f"(deploying {res_counts[owner]}, limit {quotas.max_resources})"
            )
    return cache, errs


def _allowed_resource_types(s: ManifestSet, cache: dict[str, TeamManifest]) -> list[str]:
    errs = []
    for res in s.resources.values():
        owner = res.metadata.owner
        team = cache.get(owner)
        if team is None or not team.spec.quotas.allowed_resource_types:
            continue
        if res.spec.type not in team.spec.quotas.allowed_resource_types:
            errs.append(
                f"team {_q(owner)}: resource type {_q(res.spec.type)} "
                f"(on {_q(res.metadata.name)}) is not allowed by quota"
            )
    return errs


def _validate_value_from(s: ManifestSet, app: ApplicationManifest) -> list[str]:
    errs: list[str] = []
    app_name = _q(app.metadata.name)
    for env in app.spec.env:
        if not env.value_from:
            continue
        parts = env.value_from.split(".")
        if len(parts) != 3:
            errs.append(
                f"app {app_name}: env {_q(env.name)} has invalid valueFrom format "
                f"{_q(env.value_from)} (expected <kind>.<name>.<output>)"
            )
            continue
        kind, name, output = parts
        if kind == "resource":
            res = s.resources.get(name)
            if res is None:
                errs.append(f"app {app_name}: env {_q(env.name)} references missing resource {_q(name)}")
            elif not any(o.name == output for o in res.spec.outputs):
                errs.append(
                    f"app {app_name}: env {_q(env.name)} references non-existent output "
                    f"{_q(output)} on resource {_q(name)}"
                )
        elif kind == "application":
            if name not in s.applications:
                errs.append(f"app {app_name}: env {_q(env.name)} references missing application {_q(name)}")
            elif output not in ("host", "port"):
                errs.append(
                    f"app {app_name}: env {_q(env.name)}: application {_q(name)} has no built-in "
                    f"output {_q(output)} (only host and port are supported)"
                )
        else:
            errs.append(
                f"app {app_name}: env {_q(env.name)} has invalid valueFrom format {_q(env.value_from)} "
                "(expected resource.<name>.<output> or application.<name>.<built-in>)"
            )
    return errs


def _validate_unique_names(s: ManifestSet) -> list[str]:
    # An Application and a Resource may share a name; keys must match metadata names.
    errs = [
        f"application {_q(key)} has metadata name mismatch: {_q(app.metadata.name)}"
        for key, app in s.applications.items()
        if app.metadata.name != key
    ]
    errs += [
        f"resource {_q(key)} has metadata name mismatch: {_q(res.metadata.name)}"
        for key, res in s.resources.items()
        if res.metadata.name != key
    ]
    return errs