"""Detection of routing collisions between applications."""

from __future__ import annotations

import json

from shrine.manifest.types import Routing
from shrine.planner.loader import ManifestSet, PlannerError


class RoutingCollisionError(PlannerError):
    """Raised when two applications claim the same host and path prefix."""

    def __init__(self, errors: list[str]):
        super().__init__("routing validation failed:\n- " + "\n- ".join(errors), errors)


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


def _norm(p: str) -> str:
    return p.rstrip("/")


def detect_routing_collisions(manifest_set: ManifestSet) -> None:
    """Raise RoutingCollisionError if distinct apps share a route."""
    routings: dict[str, Routing] = {
        f"{app.metadata.owner}/{app.metadata.name}": app.spec.routing
        for app in manifest_set.applications.values()
    }
    seen: dict[tuple[str, str], str] = {}
    errs: list[str] = []

    def add(key: tuple[str, str], ref: str) -> None:
        existing = seen.get(key)
        if existing is None:
            seen[key] = ref
        elif existing != ref:
            a, b = sorted((existing, ref))
            errs.append(
                f"routing collision: host={_q(key[0])} pathPrefix={_q(key[1])} "
                f"declared by {_q(a)} and {_q(b)}"
            )

    for ref in sorted(routings):
        routing = routings[ref]
        if routing.domain:
            add((routing.domain, _norm(routing.path_prefix)), ref)
        for alias in routing.aliases:
            add((alias.host, _norm(alias.path_prefix)), ref)

    if errs:
        raise RoutingCollisionError(sorted(errs))