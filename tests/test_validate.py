import pytest

from shrine.manifest.parser import Manifest, parse_bytes
from shrine.manifest.types import (
    APPLICATION_KIND,
    RESOURCE_KIND,
    ApplicationManifest,
    ApplicationSpec,
    EnvVar,
    Metadata,
    Output,
    ResourceManifest,
    ResourceSpec,
    Routing,
    RoutingAlias,
    VolumeMount,
)
from shrine.manifest.validate import ValidationError, validate

VALID_APP = """\
apiVersion: shrine/v1
kind: Application
metadata: {name: hello-api, owner: team-a}
spec:
  image: hello-api
  port: 8080
  env:
    - {name: DATABASE_URL, valueFrom: resource.hello-db.url}
    - {name: NODE_ENV, value: production}
"""

VALID_DB = """\
apiVersion: shrine/v1
kind: Resource
metadata: {name: hello-db, owner: team-a}
spec:
  type: postgres
  version: "16"
  outputs:
    - {name: host}
    - {name: port}
    - {name: password, generated: true}
    - {name: url, template: "{{.host}}"}
"""

VALID_TEAM = """\
apiVersion: shrine/v1
kind: Team
metadata: {name: team-a}
spec: {displayName: Team Alpha, contact: alice@example.com}
"""


@pytest.mark.parametrize("text", [VALID_APP, VALID_DB, VALID_TEAM])
def test_valid_manifests(text):
    assert validate(parse_bytes(text)) is None


@pytest.mark.parametrize(
    "text,expected",
    [
        (
            "apiVersion: shrine/v1\nkind: Application\nspec: {}\n",
            ["metadata.name is required", "metadata.owner is required",
             "spec.image is required", "spec.port must be greater than 0"],
        ),
        (
            "apiVersion: shrine/v1\nkind: Resource\nspec: {}\n",
            ["metadata.name is required", "metadata.owner is required",
             "spec.type is required", "spec.version is required"],
        ),
        (
            "apiVersion: shrine/v1\nkind: Team\nspec: {}\n",
            ["metadata.name is required", "spec.displayName is required", "spec.contact is required"],
        ),
    ],
)
def test_invalid_manifests(text, expected):
    with pytest.raises(ValidationError) as info:
        validate(parse_bytes(text))
    for e in expected:
        assert e in str(info.value)


def test_invalid_kind():
    with pytest.raises(ValidationError, match="kind must be one of: Team, Resource, Application"):
        validate(Manifest(kind="Deployment", api_version="shrine/v1"))


def _res(outputs):
    return Manifest(
        kind=RESOURCE_KIND, api_version="shrine/v1",
        resource=ResourceManifest(
            metadata=Metadata(name="r", owner="team-a"),
            spec=ResourceSpec(type="postgres", version="16", outputs=outputs),
        ),
    )


@pytest.mark.parametrize(
    "outputs,want",
    [
        ([Output(name="host", value="x")], "is a CLI built-in and must not set value/generated/template"),
        ([Output(name="host", template="{{.name}}")], "is a CLI built-in and must not set value/generated/template"),
        ([Output(name="mystery")], "must set one of value/generated/template"),
        ([Output(name="url", value="x", template="{{.name}}")], "value/generated/template are mutually exclusive"),
    ],
)
def test_resource_output_rules(outputs, want):
    with pytest.raises(ValidationError) as info:
        validate(_res(outputs))
    assert want in str(info.value)


def _app(**spec):
    spec.setdefault("image", "img")
    spec.setdefault("port", 80)
    return Manifest(
        kind=APPLICATION_KIND, api_version="shrine/v1",
        application=ApplicationManifest(
            metadata=Metadata(name="a", owner="team-a"), spec=ApplicationSpec(**spec)
        ),
    )


@pytest.mark.parametrize(
    "env,want",
    [
        ([EnvVar(name="X")], "must set one of value/valueFrom/template"),
        ([EnvVar(name="X", value="a", value_from="resource.db.url")], "value/valueFrom/template are mutually exclusive"),
        ([EnvVar(name="X", value="a", template="{{.Y}}")], "value/valueFrom/template are mutually exclusive"),
        ([EnvVar(name="X", value_from="resource.db.url", template="{{.Y}}")], "value/valueFrom/template are mutually exclusive"),
    ],
)
def test_env_rules(env, want):
    with pytest.raises(ValidationError) as info:
        validate(_app(env=env))
    assert want in str(info.value)


def test_env_template_only_valid():
    assert validate(_app(env=[EnvVar(name="X", template="{{.Y}}")])) is None


@pytest.mark.parametrize(
    "routing,want",
    [
        (Routing(domain="", aliases=[RoutingAlias(host="x.example.com")]), "aliases is set but spec.routing.domain is empty"),
        (Routing(domain="app.home.lab", aliases=[RoutingAlias(host="")]), "aliases[0].host is required"),
        (Routing(domain="app.home.lab", aliases=[RoutingAlias(host="bad host")]), "contains invalid characters"),
        (Routing(domain="app.home.lab", aliases=[RoutingAlias(host="x.example.com", path_prefix="finances")]), 'must start with "/"'),
        (Routing(domain="app.home.lab", aliases=[RoutingAlias(host="x.example.com", path_prefix="/")]), 'must not be just "/"'),
        (Routing(domain="app.home.lab", aliases=[RoutingAlias(host="x.example.com", path_prefix="/has\ttab")]), "contains invalid characters"),
        (Routing(domain="gateway.tail9a6ddb.ts.net", path_prefix="/finances",
                 aliases=[RoutingAlias(host="gateway.tail9a6ddb.ts.net", path_prefix="/finances")]), "duplicate route"),
        (Routing(domain="app.home.lab", aliases=[
            RoutingAlias(host="gateway.tail9a6ddb.ts.net", path_prefix="/finances"),
            RoutingAlias(host="gateway.tail9a6ddb.ts.net", path_prefix="/finances")]), "alias[1]"),
        (Routing(domain="app.home.lab", path_prefix="/x",
                 aliases=[RoutingAlias(host="app.home.lab", path_prefix="/x/")]), "duplicate route"),
        (Routing(domain="app.home.lab", aliases=[
            RoutingAlias(host="x.example.com", path_prefix="/api", tls=False),
            RoutingAlias(host="x.example.com", path_prefix="/api", tls=True)]), "alias[1]"),
    ],
)
def test_routing_alias_rules(routing, want):
    with pytest.raises(ValidationError) as info:
        validate(_app(routing=routing))
    assert want in str(info.value)


@pytest.mark.parametrize(
    "routing",
    [
        Routing(domain="app.home.lab", aliases=[RoutingAlias(host="gw.example.com", path_prefix="/api", strip_prefix=False)]),
        Routing(domain="app.home.lab", aliases=[RoutingAlias(host="a.example.com", tls=True), RoutingAlias(host="b.example.com", tls=True)]),
    ],
)
def test_valid_routing(routing):
    assert validate(_app(routing=routing)) is None


@pytest.mark.parametrize(
    "mounts,want",
    [
        ([VolumeMount(mount_path="/data")], "spec.volumes[0].name is required"),
        ([VolumeMount(name="data")], "spec.volumes[0].mountPath is required"),
        ([VolumeMount(name="data", mount_path="relative/path")], "must be absolute (starts with /)"),
        ([VolumeMount(name="data", mount_path="/a"), VolumeMount(name="data", mount_path="/b")], 'spec.volumes has duplicate name "data"'),
        ([VolumeMount(name="a", mount_path="/data"), VolumeMount(name="b", mount_path="/data")], 'spec.volumes has duplicate mountPath "/data"'),
    ],
)
def test_volume_rules(mounts, want):
    with pytest.raises(ValidationError) as info:
        validate(_app(volumes=mounts))
    assert want in str(info.value)


def test_errors_attribute_lists_all():
    with pytest.raises(ValidationError) as info:
        validate(Manifest())
    assert info.value.errors == ["kind is required", "apiVersion is required"]