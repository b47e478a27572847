"""Start-tag rewriting over raw HTML text.

Only well-formed start tags (and, for CSS, style bodies) are rewritten.
Comments, conditional comments included, end tags and everything between
tags are copied byte for byte.
"""

from __future__ import annotations

import re
from typing import Callable

# Whitespace, or nothing right after a quoted value
_SEPARATOR = r"""(?:\s+|(?<=["']))"""
_ATTR = r"""[^\s"'>/=]+(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>=`]+))?"""

_TOKEN = re.compile(
    r"(?P<comment><!--.*?-->)"
    r"|(?P<raw>(?P<raw_open><(?P<raw_name>script|style)\b(?:" + _SEPARATOR + _ATTR + r")*\s*>)"
    r"(?P<raw_body>.*?)(?P<raw_close></(?P=raw_name)\s*>))"
    r"|(?P<tag><[A-Za-z][^\s/>]*(?:" + _SEPARATOR + _ATTR + r")*\s*/?>)",
    re.DOTALL | re.IGNORECASE,
)

_TAG_NAME = re.compile(r"<([A-Za-z][^\s/>]*)")

_ATTRIBUTE = re.compile(
    r"""(?P<space>\s+|(?<=["']))(?P<name>[^\s"'>/=]+)"""
    r"""(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'>=`]+)))?"""
)

_BARE_AMPERSAND = re.compile(r"&(?!(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);)")
_CONDITIONAL = re.compile(r"<!--\s*\[if\b", re.IGNORECASE)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


def rewrite_start_tags(html: str, rewrite: Callable[[str], str]) -> str:
    """Apply ``rewrite`` to every start tag outside comments and raw text."""

    def _replace(match: re.Match[str]) -> str:
        tag = match.group("tag")
        if tag is None:
            return match.group(0)
        return rewrite(tag)

    return _TOKEN.sub(_replace, html)


def _split_tag(tag: str) -> tuple[str, list[re.Match[str]], str]:
    name = _TAG_NAME.match(tag)
    assert name is not None
    pos = name.end()
    attributes = []
    while True:
        attr = _ATTRIBUTE.match(tag, pos)
        if attr is None:
            break
        attributes.append(attr)
        pos = attr.end()
    return name.group(1), attributes, tag[pos:]


def _value(attr: re.Match[str]) -> str | None:
    for group in ("dq", "sq", "bare"):
        if attr.group(group) is not None:
            return attr.group(group)
    return None


def _spaced(attr: re.Match[str]) -> str:
    text = attr.group(0)
    return text if attr.group("space") else f" {text}"


def strip_empty_attributes(html: str, names: Callable[[str], bool]) -> str:
    """Remove attributes with an empty (or missing) value.

    Args:
        html: HTML document text
        names: Predicate over the lower-cased attribute name

    Returns:
        The document with matching empty attributes removed
    """

    def _strip(tag: str) -> str:
        name, attributes, tail = _split_tag(tag)
        kept = [
            _spaced(attr)
            for attr in attributes
            if _value(attr) or not names(attr.group("name").lower())
        ]
        if len(kept) == len(attributes):
            return tag
        return f"<{name}{''.join(kept)}{tail}"

    return rewrite_start_tags(html, _strip)


def remove_empty_styles(html: str) -> str:
    """Remove every ``style=""`` attribute, leaving all other bytes untouched."""
    return strip_empty_attributes(html, lambda name: name == "style")


def add_closing_slashes(html: str) -> str:
    """Write void elements in self-closing form (``<br/>``)."""

    def _close(tag: str) -> str:
        name, attributes, tail = _split_tag(tag)
        if name.lower() not in VOID_ELEMENTS or tail.strip() == "/>":
            return tag
        # An unquoted final value would swallow a bare slash
        separator = " " if attributes and attributes[-1].group("bare") else ""
        return f"{tag[: len(tag) - len(tail)]}{separator}/>"

    return rewrite_start_tags(html, _close)


def quote_attributes(html: str) -> str:
    """Quote every attribute value and escape bare ampersands in it.

    Tags inside conditional comments are rewritten too, since email clients
    parse them as markup. Tags that need no change are left as they are.
    """

    def _quote(tag: str) -> str:
        name, attributes, tail = _split_tag(tag)
        changed = False
        parts = []
        for attr in attributes:
            value = _value(attr)
            if value is None:
                parts.append(_spaced(attr))
                continue
            escaped = _BARE_AMPERSAND.sub("&amp;", value)
            if attr.group("bare") is None and escaped == value:
                parts.append(_spaced(attr))
                continue
            changed = True
            quote = "'" if attr.group("sq") is not None else '"'
            parts.append(f" {attr.group('name')}={quote}{escaped}{quote}")
        if not changed:
            return tag
        return f"<{name}{''.join(parts)}{tail}"

    def _replace(match: re.Match[str]) -> str:
        comment = match.group("comment")
        if comment is not None and _CONDITIONAL.match(comment):
            return f"<!--{rewrite_start_tags(comment[4:-3], _quote)}-->"
        if match.group("tag") is not None:
            return _quote(match.group("tag"))
        return match.group(0)

    return _TOKEN.sub(_replace, html)



def rewrite_css(html: str, minify: Callable[[str], str]) -> str:
    """Apply ``minify`` to ``<style>`` bodies and ``style`` attribute values.

    Comments, conditional ones included, are left untouched.
    """

    def _declarations(value: str) -> str:
        # A bare declaration list is minified inside a throwaway rule
        wrapped = minify(f"x{{{value}}}")
        if wrapped.startswith("x{") and wrapped.endswith("}"):
            return wrapped[2:-1]
        return value.strip()

    def _restyle(tag: str) -> str:
        name, attributes, tail = _split_tag(tag)
        parts = []
        for attr in attributes:
            value = _value(attr)
            if attr.group("name").lower() != "style" or not value:
                parts.append(attr.group(0))
                continue
            quote = "'" if attr.group("sq") is not None else '"'
            space = attr.group("space") or " "
            parts.append(
                f"{space}{attr.group('name')}={quote}{_declarations(value)}{quote}"
            )
        return f"<{name}{''.join(parts)}{tail}"

    def _replace(match: re.Match[str]) -> str:
        if match.group("raw") is not None and match.group("raw_name").lower() == "style":
            body = minify(match.group("raw_body"))
            return f"{match.group('raw_open')}{body}{match.group('raw_close')}"
        if match.group("tag") is not None:
            return _restyle(match.group("tag"))
        return match.group(0)

    return _TOKEN.sub(_replace, html)
