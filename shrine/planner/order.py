"""Dependency-respecting execution order for a manifest set."""

from __future__ import annotations

import heapq
from dataclasses import dataclass

from shrine.manifest.types import APPLICATION_KIND, RESOURCE_KIND
from shrine.planner.loader import ManifestSet, PlannerError


@dataclass(frozen=True)
class PlannedStep:
    """One unit of execution in a deployment plan."""

    kind: str
    name: str


class DependencyCycleError(PlannerError):
    """Raised when manifests depend on each other in a cycle."""


def _topo_sort(deps: dict[str, set[str]]) -> list[str]:
    # Edges to unknown nodes are ignored; missing dependencies are reported by resolve.
    pending = {node: {d for d in ds if d in deps} for node, ds in deps.items()}
    dependents: dict[str, list[str]] = {node: [] for node in deps}
    for node, ds in pending.items():
        for d in ds:
            dependents[d].append(node)
    ready = [node for node, ds in pending.items() if not ds]
    heapq.heapify(ready)
    result: list[str] = []
    while ready:
        node = heapq.heappop(ready)
        result.append(node)
        for dependent in dependents[node]:
            pending[dependent].discard(node)
            if not pending[dependent]:
                heapq.heappush(ready, dependent)
    if len(result) != len(deps):
        remaining = sorted(set(deps) - set(result))
        raise DependencyCycleError(
            "dependency cycle in deployment plan: cycle detected among " + ", ".join(remaining)
        )
    return result


def order(manifest_set: ManifestSet) -> list[PlannedStep]:
    """Return the steps in an order where dependencies come first."""
    deps: dict[str, set[str]] = {f"{RESOURCE_KIND}:{name}": set() for name in manifest_set.resources}
    for name, app in manifest_set.applications.items():
        deps[f"{APPLICATION_KIND}:{name}"] = {f"{d.kind}:{d.name}" for d in app.spec.dependencies}
    steps = []
    for key in _topo_sort(deps):
        kind, name = key.split(":", 1)
        steps.append(PlannedStep(kind=kind, name=name))
    return steps