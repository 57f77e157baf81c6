import os

import pytest

from shrine.manifest.scan import report_foreign_files, scan_dir
from shrine.manifest.types import ManifestError


def test_empty_directory(tmp_path):
    result = scan_dir(tmp_path)
    assert result.shrine == [] and result.foreign == []


def test_only_non_yaml(tmp_path):
    js = tmp_path / "config.json"
    js.write_text('{"note": "should not be opened"}')
    os.chmod(js, 0)
    (tmp_path / "README.md").write_text("# Readme")
    (tmp_path / "Makefile").write_text("all:\n\t@echo hi")
    result = scan_dir(tmp_path)
    assert result.shrine == [] and result.foreign == []


def test_valid_and_foreign(tmp_path):
    shrine_path = os.path.join(tmp_path, "app.yaml")
    foreign_path = os.path.join(tmp_path, "route.yaml")
    with open(shrine_path, "w") as fh:
        fh.write("apiVersion: shrine/v1\nkind: Application\nmetadata:\n  name: myapp\n  owner: team\n")
    with open(foreign_path, "w") as fh:
        fh.write("apiVersion: traefik.containo.us/v1alpha1\nkind: IngressRoute\n")
    result = scan_dir(str(tmp_path))
    assert len(result.shrine) == 1
    assert result.shrine[0].path == shrine_path
    assert result.shrine[0].type_meta.kind == "Application"
    assert result.shrine[0].type_meta.api_version == "shrine/v1"
    assert result.foreign == [foreign_path]


def test_malformed(tmp_path):
    broken = os.path.join(tmp_path, "broken.yaml")
    with open(broken, "w") as fh:
        fh.write("apiVersion: shrine/v1\nkind: [unclosed")
    with pytest.raises(ManifestError) as info:
        scan_dir(str(tmp_path))
    assert broken in str(info.value)


def test_nested_foreign(tmp_path):
    sub = tmp_path / "traefik"
    sub.mkdir()
    foreign = os.path.join(sub, "traefik.yml")
    with open(foreign, "w") as fh:
        fh.write('entryPoints:\n  web:\n    address: ":80"\n')
    result = scan_dir(str(tmp_path))
    assert result.shrine == []
    assert result.foreign == [foreign]


def test_report_foreign_files(capsys):
    report_foreign_files("/specs", ["/specs/a.yml", "/specs/b.yml"])
    assert capsys.readouterr().out == (
        "shrine: ignored 2 non-shrine YAML file(s) under /specs: /specs/a.yml, /specs/b.yml\n"
    )