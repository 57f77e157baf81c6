"""Field-reference extraction for text templates using {{ ... }} actions."""

from __future__ import annotations

import re

_BLOCK_KEYWORDS = {"if", "range", "with", "define", "block"}
_FIELD_RE = re.compile(r"(?<![\w$.)\]])\.([A-Za-z_][A-Za-z0-9_]*)")


class TemplateSyntaxError(ValueError):
    """Raised when a template cannot be parsed."""


def _find_close(text: str, pos: int) -> int:
    i = pos
    n = len(text)
    while i < n:
        c = text[i]
        if c in "\"'`":
            j = i + 1
            while j < n and text[j] != c:
                if c != "`" and text[j] == "\\":
                    j += 1
                j += 1
            if j >= n:
                raise TemplateSyntaxError("unterminated quoted string")
            i = j + 1
            continue
        if text.startswith("}}", i):
            return i
        i += 1
    raise TemplateSyntaxError("unclosed action")


def _strip_strings(body: str) -> str:
    return re.sub(r'"(?:\\.|[^"\\])*"|`[^`]*`|\'(?:\\.|[^\'\\])*\'', " ", body)


def _actions(text: str):
    pos = 0
    while True:
        start = text.find("{{", pos)
        if start == -1:
            return
        inner = start + 2
        if text.startswith("- ", inner):
            inner += 2
        if text.startswith("/*", inner.__index__() if False else inner):
            end_comment = text.find("*/", inner + 2)
            if end_comment == -1:
                raise TemplateSyntaxError("unclosed comment")
            close = text.find("}}", end_comment + 2)
            if close == -1:
                raise TemplateSyntaxError("unclosed action")
            pos = close + 2
            continue
        close = _find_close(text, inner)
        body = text[inner:close]
        if body.endswith(" -"):
            body = body[:-2]
        pos = close + 2
        yield body.strip()


def extract_field_refs(text: str) -> list[str]:
    """Return the root identifier of each field reference, in order.

    For "{{.host}}:{{.port}}" this is ["host", "port"]; "{{.foo.bar}}"
    yields only "foo". Raises TemplateSyntaxError on malformed input.
    """
    refs: list[str] = []
    depth: list[str] = []
    for body in _actions(text):
        cleaned = _strip_strings(body)
        words = cleaned.split()
        if not words:
            raise TemplateSyntaxError("missing value for command")
        keyword = words[0]
        if keyword == "end":
            if not depth:
                raise TemplateSyntaxError("unexpected {{end}}")
            depth.pop()
            continue
        if keyword == "else" and not depth:
            raise TemplateSyntaxError("unexpected {{else}}")
        if keyword in _BLOCK_KEYWORDS:
            depth.append(keyword)
        if cleaned.count("(") != cleaned.count(")"):
            raise TemplateSyntaxError("unbalanced parentheses in action")
        refs.extend(_FIELD_RE.findall(cleaned))
    if depth:
        raise TemplateSyntaxError(f"unexpected EOF: unclosed {{{{{depth[-1]}}}}}")
    return refs