import pytest

from shrine.manifest.template import TemplateSyntaxError, extract_field_refs


def test_simple_refs():
    assert extract_field_refs("{{.host}}:{{.port}}") == ["host", "port"]


def test_nested_yields_root():
    assert extract_field_refs("{{.foo.bar}}") == ["foo"]


def test_connection_string():
    tpl = "postgres://postgres:{{.password}}@{{.host}}:{{.port}}/{{.database}}"
    assert extract_field_refs(tpl) == ["password", "host", "port", "database"]


def test_plain_text_has_no_refs():
    assert extract_field_refs("no actions here") == []


def test_if_block_walked():
    refs = extract_field_refs("{{if .a}}{{.b}}{{else}}{{.c}}{{end}}")
    assert refs == ["a", "b", "c"]


def test_strings_ignored():
    assert extract_field_refs('{{printf "%s.x" .name}}') == ["name"]


@pytest.mark.parametrize("bad", ["{{.host", "{{if .a}}x", "{{end}}", "{{}}"])
def test_syntax_errors(bad):
    with pytest.raises(TemplateSyntaxError):
        extract_field_refs(bad)