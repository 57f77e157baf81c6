"""Manifest data model: typed dataclasses built from decoded YAML documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

APPLICATION_KIND = "Application"
RESOURCE_KIND = "Resource"
TEAM_KIND = "Team"

IMAGE_PULL_POLICY_ALWAYS = "Always"
IMAGE_PULL_POLICY_IF_NOT_PRESENT = "IfNotPresent"

T = TypeVar("T")


class ManifestError(Exception):
    """Raised when a manifest cannot be read, decoded or parsed."""


def _tag(value: Any) -> str:
    if isinstance(value, bool):
        return "!!bool"
    if isinstance(value, int):
        return "!!int"
    if isinstance(value, float):
        return "!!float"
    if isinstance(value, str):
        return "!!str"
    if isinstance(value, list):
        return "!!seq"
    if isinstance(value, dict):
        return "!!map"
    return "!!" + type(value).__name__


def _mismatch(value: Any, target: str) -> ManifestError:
    if isinstance(value, (list, dict)):
        return ManifestError(f"cannot unmarshal {_tag(value)} into {target}")
    return ManifestError(f"cannot unmarshal {_tag(value)} `{value}` into {target}")


def _mapping(value: Any, target: str) -> dict:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    raise _mismatch(value, target)


def _str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        raise _mismatch(value, "string")
    return str(value)


def _int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise _mismatch(value, "int")


def _bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise _mismatch(value, "bool")


def _opt_bool(value: Any) -> bool | None:
    return None if value is None else _bool(value)


def _list(value: Any, convert: Callable[[Any], T]) -> list[T]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise _mismatch(value, "list")
    return [convert(item) for item in value]


@dataclass
class TypeMeta:
    api_version: str = ""
    kind: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "TypeMeta":
        d = _mapping(data, "TypeMeta")
        return cls(api_version=_str(d.get("apiVersion")), kind=_str(d.get("kind")))


@dataclass
class Metadata:
    name: str = ""
    owner: str = ""
    resource_id: str = ""
    access: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Metadata":
        d = _mapping(data, "Metadata")
        return cls(
            name=_str(d.get("name")),
            owner=_str(d.get("owner")),
            resource_id=_str(d.get("resourceId")),
            access=_list(d.get("access"), _str),
        )


@dataclass
class Dependency:
    kind: str = ""
    name: str = ""
    owner: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Dependency":
        d = _mapping(data, "Dependency")
        return cls(_str(d.get("kind")), _str(d.get("name")), _str(d.get("owner")))


@dataclass
class EnvVar:
    name: str = ""
    value: str = ""
    value_from: str = ""
    template: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "EnvVar":
        d = _mapping(data, "EnvVar")
        return cls(
            name=_str(d.get("name")),
            value=_str(d.get("value")),
            value_from=_str(d.get("valueFrom")),
            template=_str(d.get("template")),
        )


@dataclass
class RoutingAlias:
    host: str = ""
    path_prefix: str = ""
    strip_prefix: bool | None = None
    tls: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "RoutingAlias":
        d = _mapping(data, "RoutingAlias")
        return cls(
            host=_str(d.get("host")),
            path_prefix=_str(d.get("pathPrefix")),
            strip_prefix=_opt_bool(d.get("stripPrefix")),
            tls=_bool(d.get("tls")),
        )


@dataclass
class Routing:
    domain: str = ""
    path_prefix: str = ""
    aliases: list[RoutingAlias] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Routing":
        d = _mapping(data, "Routing")
        return cls(
            domain=_str(d.get("domain")),
            path_prefix=_str(d.get("pathPrefix")),
            aliases=_list(d.get("aliases"), RoutingAlias.from_dict),
        )


@dataclass
class Networking:
    expose_to_platform: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "Networking":
        d = _mapping(data, "Networking")
        return cls(expose_to_platform=_bool(d.get("exposeToPlatform")))


@dataclass
class VolumeMount:
    name: str = ""
    mount_path: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "VolumeMount":
        d = _mapping(data, "VolumeMount")
        return cls(name=_str(d.get("name")), mount_path=_str(d.get("mountPath")))


@dataclass
class ApplicationSpec:
    image: str = ""
    port: int = 0
    replicas: int = 0
    routing: Routing = field(default_factory=Routing)
    dependencies: list[Dependency] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)
    networking: Networking = field(default_factory=Networking)
    volumes: list[VolumeMount] = field(default_factory=list)
    image_pull_policy: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ApplicationSpec":
        d = _mapping(data, "ApplicationSpec")
        return cls(
            image=_str(d.get("image")),
            port=_int(d.get("port")),
            replicas=_int(d.get("replicas")),
            routing=Routing.from_dict(d.get("routing")),
            dependencies=_list(d.get("dependencies"), Dependency.from_dict),
            env=_list(d.get("env"), EnvVar.from_dict),
            networking=Networking.from_dict(d.get("networking")),
            volumes=_list(d.get("volumes"), VolumeMount.from_dict),
            image_pull_policy=_str(d.get("imagePullPolicy")),
        )


@dataclass
class Output:
    """A named value a Resource exposes: static, generated or templated."""

    name: str = ""
    value: str = ""
    generated: bool = False
    template: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "Output":
        d = _mapping(data, "Output")
        return cls(
            name=_str(d.get("name")),
            value=_str(d.get("value")),
            generated=_bool(d.get("generated")),
            template=_str(d.get("template")),
        )


@dataclass
class ResourceSpec:
    type: str = ""
    version: str = ""
    port: int = 0
    image: str = ""
    outputs: list[Output] = field(default_factory=list)
    networking: Networking = field(default_factory=Networking)
    volumes: list[VolumeMount] = field(default_factory=list)
    image_pull_policy: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ResourceSpec":
        d = _mapping(data, "ResourceSpec")
        return cls(
            type=_str(d.get("type")),
            version=_str(d.get("version")),
            port=_int(d.get("port")),
            image=_str(d.get("image")),
            outputs=_list(d.get("outputs"), Output.from_dict),
            networking=Networking.from_dict(d.get("networking")),
            volumes=_list(d.get("volumes"), VolumeMount.from_dict),
            image_pull_policy=_str(d.get("imagePullPolicy")),
        )


@dataclass
class Quotas:
    max_apps: int = 0
    max_resources: int = 0
    allowed_resource_types: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Quotas":
        d = _mapping(data, "Quotas")
        return cls(
            max_apps=_int(d.get("maxApps")),
            max_resources=_int(d.get("maxResources")),
            allowed_resource_types=_list(d.get("allowedResourceTypes"), _str),
        )


@dataclass
class TeamSpec:
    display_name: str = ""
    contact: str = ""
    quotas: Quotas = field(default_factory=Quotas)
    registry_user: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "TeamSpec":
        d = _mapping(data, "TeamSpec")
        return cls(
            display_name=_str(d.get("displayName")),
            contact=_str(d.get("contact")),
            quotas=Quotas.from_dict(d.get("quotas")),
            registry_user=_str(d.get("registryUser")),
        )


@dataclass
class ApplicationManifest:
    metadata: Metadata = field(default_factory=Metadata)
    spec: ApplicationSpec = field(default_factory=ApplicationSpec)
    api_version: str = ""
    kind: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ApplicationManifest":
        d = _mapping(data, "ApplicationManifest")
        return cls(
            metadata=Metadata.from_dict(d.get("metadata")),
            spec=ApplicationSpec.from_dict(d.get("spec")),
            api_version=_str(d.get("apiVersion")),
            kind=_str(d.get("kind")),
        )


@dataclass
class ResourceManifest:
    metadata: Metadata = field(default_factory=Metadata)
    spec: ResourceSpec = field(default_factory=ResourceSpec)
    api_version: str = ""
    kind: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ResourceManifest":
        d = _mapping(data, "ResourceManifest")
        return cls(
            metadata=Metadata.from_dict(d.get("metadata")),
            spec=ResourceSpec.from_dict(d.get("spec")),
            api_version=_str(d.get("apiVersion")),
            kind=_str(d.get("kind")),
        )


@dataclass
class TeamManifest:
    metadata: Metadata = field(default_factory=Metadata)
    spec: TeamSpec = field(default_factory=TeamSpec)
    api_version: str = ""
    kind: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "TeamManifest":
        d = _mapping(data, "TeamManifest")
        return cls(
            metadata=Metadata.from_dict(d.get("metadata")),
            spec=TeamSpec.from_dict(d.get("spec")),
            api_version=_str(d.get("apiVersion")),
            kind=_str(d.get("kind")),
        )


def effective_pull_policy(image: str, declared: str) -> str:
    """Return the declared pull policy, or derive one from the image tag."""
    if declared:
        return declared
    colon = image.rfind(":")
    if colon == -1:
        return IMAGE_PULL_POLICY_ALWAYS
    tag = image[colon + 1:]
    if tag in ("", "latest"):
        return IMAGE_PULL_POLICY_ALWAYS
    return IMAGE_PULL_POLICY_IF_NOT_PRESENT