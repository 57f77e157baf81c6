# shrine

This package reads shrine manifests (`apiVersion: shrine/v1` and similar) and
builds a deployment plan from them. It knows three kinds of manifest:
`Application`, `Resource` and `Team`.

It can:

- sort YAML files into shrine manifests and foreign ones, going by their `apiVersion`
- parse each manifest kind into dataclasses and validate it, reporting every problem at once
- load a directory of manifests into a `ManifestSet`
- check dependencies, access rules, team quotas, `valueFrom` references and
  template variables
- find routing collisions between applications
- order the deployment steps so that dependencies come first

## Installation

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Working with manifests

```python
from shrine.manifest.classify import classify, is_shrine_api_version
from shrine.manifest.parser import parse, parse_bytes
from shrine.manifest.validate import validate, ValidationError
from shrine.manifest.types import effective_pull_policy

is_shrine_api_version("shrine/v1beta1")   # True
is_shrine_api_version("Shrine/v1")        # False

m = parse("specs/hello-api.yml")          # Manifest; m.application is set
try:
    validate(m)
except ValidationError as exc:
    print(exc.errors)                     # one string per problem

effective_pull_policy("nginx:latest", "")  # "Always"
effective_pull_policy("nginx:1.27", "")    # "IfNotPresent"
```

- `classify(path)` returns `(Class.SHRINE, TypeMeta)` or `(Class.FOREIGN, None)`.
- `parse(path)` and `parse_bytes(data)` return a `Manifest`. Exactly one of its
  `application`, `resource` and `team` fields is set. Both functions raise
  `ManifestError` on malformed YAML, on values of the wrong type (for example
  `tls: "true"` on an alias), on an unknown `kind`, and on a `tls` key placed
  directly under `spec.routing`.
- If a `Resource` manifest has no `image`, the parser sets it to `<type>:<version>`.
- `scan_dir(directory)` in `shrine.manifest.scan` walks a directory tree in
  sorted order. It splits the `.yaml` and `.yml` files into `shrine` candidates
  and `foreign` paths, and never opens files with other extensions.
  `report_foreign_files(directory, paths)` prints a one-line notice.
- `extract_field_refs(text)` in `shrine.manifest.template` returns the root
  names used in `{{.name}}` actions. It raises `TemplateSyntaxError` on a
  malformed template.

## Planning a deployment

The planner needs a team store. This is any object with a `load_team(name)`
method that returns a `TeamManifest` and raises an exception when the team is
unknown.

```python
from shrine.planner.loader import PlannerError
from shrine.planner.plan import plan, plan_single

try:
    result = plan("specs", store)
except PlannerError as exc:
    print(exc)
    for problem in exc.errors:
        print(problem)
else:
    for step in result.steps:
        print(step.kind, step.name)
```

- `plan(directory, store)` loads and validates every shrine manifest under
  `directory`, resolves it and orders it. It returns a `PlanResult` with
  `steps` and `manifest_set`. Every failure raises `PlannerError`. When
  resolution fails, the error's `errors` holds one message per problem. A
  dependency cycle raises `DependencyCycleError`.
- `plan_single(file, specs_dir, store)` plans one `Application` or `Resource`
  manifest as a single step. If `specs_dir` is given, the manifests there give
  the resolution context. A `Team` manifest is refused.
- `plan_teardown(team, store)` returns a `PlanTeardownResult` whose `steps`
  are the team's applications first, then its resources, each group sorted by
  name. For this the store needs a `list(team)` method that returns records,
  each with a `kind` and a `name`.

The building blocks can also be used on their own:

- `load_dir(directory)` returns a `ManifestSet`.
- `resolve(manifest_set, store)` returns a list of problem messages.
- `has_access(consumer, owner, access_list)`.
- `order(manifest_set)` returns a list of `PlannedStep`.
- `validate_templates(res)` and `validate_env_templates(app)`.
- `detect_routing_collisions(manifest_set)` in `shrine.planner.collisions`
  raises `RoutingCollisionError` when two different applications claim the
  same host and path prefix. Trailing slashes are ignored in the comparison.

`load_dir` prints a notice to standard output when it skips foreign YAML files.

## What this package does not do

It only plans. It has no command-line program. It does not store teams or
deployment records; you supply the store objects. It does not start
containers, and it does not write gateway or routing configuration files.