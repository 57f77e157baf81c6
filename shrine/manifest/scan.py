"""Recursive directory scanning for shrine and foreign YAML files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from shrine.manifest.classify import Class, classify
from shrine.manifest.types import ManifestError, TypeMeta


@dataclass
class ShrineCandidate:
    path: str
    type_meta: TypeMeta


@dataclass
class ScanResult:
    """Disjoint buckets of scanned YAML files, in walk order."""

    shrine: list[ShrineCandidate] = field(default_factory=list)
    foreign: list[str] = field(default_factory=list)


def _walk_files(directory: str):
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(entry.path)
        else:
            yield os.path.join(directory, entry.name)


def scan_dir(directory) -> ScanResult:
    """Walk directory recursively and classify every .yaml/.yml file."""
    directory = os.fspath(directory)
    result = ScanResult()
    for path in _walk_files(directory):
        if os.path.splitext(path)[1] not in (".yaml", ".yml"):
            continue
        try:
            cls, meta = classify(path)
        except ManifestError as exc:
            raise ManifestError(f"scanning manifest directory {directory!r}: {exc}") from exc
        if cls is Class.SHRINE:
            result.shrine.append(ShrineCandidate(path=path, type_meta=meta))
        else:
            result.foreign.append(path)
    return result


def report_foreign_files(directory, paths: list[str]) -> None:
    """Print the standard notice about ignored non-shrine YAML files."""
    print(
        f"shrine: ignored {len(paths)} non-shrine YAML file(s) under "
        f"{os.fspath(directory)}: {', '.join(paths)}"
    )