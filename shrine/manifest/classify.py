"""Classification of YAML files as shrine manifests or foreign documents."""

from __future__ import annotations

import enum
import os
import re

import yaml

from shrine.manifest.types import ManifestError, TypeMeta

_SHRINE_API_VERSION_RE = re.compile(r"shrine/v[0-9]+([a-z]+[0-9]+)?")


class Class(enum.Enum):
    SHRINE = "shrine"
    FOREIGN = "foreign"


def is_shrine_api_version(s: str) -> bool:
    """Report whether s is a shrine apiVersion such as shrine/v1beta1."""
    return _SHRINE_API_VERSION_RE.fullmatch(s) is not None


def classify(path) -> tuple[Class, TypeMeta | None]:
    """Return the class of the YAML file at path and its TypeMeta if shrine."""
    path = os.fspath(path)
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError as exc:
        raise ManifestError(f"reading manifest {path!r}: {exc}") from exc
    try:
        meta = TypeMeta.from_dict(yaml.safe_load(data))
    except (yaml.YAMLError, ManifestError) as exc:
        raise ManifestError(f"parsing manifest {path!r}: {exc}") from exc
    if not is_shrine_api_version(meta.api_version):
        return Class.FOREIGN, None
    return Class.SHRINE, meta