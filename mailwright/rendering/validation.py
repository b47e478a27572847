"""Strict structural validation of MJML documents.

mjml-python repairs broken markup silently, so under the strict level the
document is parsed as XML first and checked against the component
nesting rules and the common attribute types before it reaches the
compiler.
"""

from __future__ import annotations

import re

from lxml import etree

# Components whose body is raw HTML or CSS rather than MJML
ENDING_TAGS = (
    "mj-text",
    "mj-button",
    "mj-table",
    "mj-raw",
    "mj-navbar-link",
    "mj-accordion-title",
    "mj-accordion-text",
    "mj-social-element",
    "mj-style",
    "mj-title",
    "mj-preview",
)

_BODY_CONTENT = (
    "mj-accordion",
    "mj-button",
    "mj-carousel",
    "mj-divider",
    "mj-image",
    "mj-navbar",
    "mj-raw",
    "mj-social",
    "mj-spacer",
    "mj-table",
    "mj-text",
)

ALLOWED_CHILDREN: dict[str, frozenset[str]] = {
    "mjml": frozenset({"mj-head", "mj-body", "mj-raw"}),
    "mj-head": frozenset(
        {
            "mj-attributes",
            "mj-breakpoint",
            "mj-html-attributes",
            "mj-font",
            "mj-preview",
            "mj-style",
            "mj-title",
            "mj-raw",
        }
    ),
    "mj-body": frozenset({"mj-raw", "mj-section", "mj-wrapper", "mj-hero"}),
    "mj-wrapper": frozenset({"mj-hero", "mj-raw", "mj-section"}),
    "mj-section": frozenset({"mj-column", "mj-group", "mj-raw"}),
    "mj-group": frozenset({"mj-column", "mj-raw"}),
    "mj-column": frozenset(_BODY_CONTENT),
    "mj-hero": frozenset(_BODY_CONTENT),
    "mj-accordion": frozenset({"mj-accordion-element", "mj-raw"}),
    "mj-accordion-element": frozenset({"mj-accordion-title", "mj-accordion-text", "mj-raw"}),
    "mj-carousel": frozenset({"mj-carousel-image"}),
    "mj-navbar": frozenset({"mj-navbar-link", "mj-raw"}),
    "mj-social": frozenset({"mj-social-element", "mj-raw"}),
    "mj-attributes": frozenset(),
    "mj-html-attributes": frozenset(),
    "mj-breakpoint": frozenset(),
    "mj-font": frozenset(),
    "mj-carousel-image": frozenset(),
    "mj-divider": frozenset(),
    "mj-image": frozenset(),
    "mj-spacer": frozenset(),
    **{name: frozenset() for name in ENDING_TAGS},
}

# Children of these are free-form (default attributes, CSS selectors)
_UNCHECKED_SUBTREES = frozenset({"mj-attributes", "mj-html-attributes"})

_UNIT = r"-?\d+(?:\.\d+)?(?:px|%)?"
_SPACING = re.compile(rf"^{_UNIT}(?:\s+{_UNIT}){{0,3}}$")
_SIZE = re.compile(rf"^(?:{_UNIT}|auto)$")
_FONT_SIZE = re.compile(rf"^{_UNIT}$")
_COLOR = re.compile(
    r"^(?:#[0-9a-fA-F]{3}|#[0-9a-fA-F]{6}|#[0-9a-fA-F]{8}|rgba?\([^)]*\)|[a-zA-Z]+)$"
)


def _enum(*values: str) -> re.Pattern[str]:
    return re.compile(rf"^(?:{'|'.join(values)})$")


ATTRIBUTE_TYPES: dict[str, re.Pattern[str]] = {
    "padding": _SPACING,
    "padding-top": _SPACING,
    "padding-bottom": _SPACING,
    "padding-left": _SPACING,
    "padding-right": _SPACING,
    "inner-padding": _SPACING,
    "border-radius": _SPACING,
    "width": _SIZE,
    "height": _SIZE,
    "font-size": _FONT_SIZE,
    "color": _COLOR,
    "background-color": _COLOR,
    "container-background-color": _COLOR,
    "inner-background-color": _COLOR,
    "border-color": _COLOR,
    "align": _enum("left", "right", "center", "justify"),
    "text-align": _enum("left", "right", "center", "justify"),
    "vertical-align": _enum("top", "bottom", "middle"),
    "direction": _enum("ltr", "rtl"),
}

_ENDING_BODY = re.compile(
    r"<(?P<name>" + "|".join(ENDING_TAGS) + r")\b"
    r"""(?P<attrs>(?:[^>"']|"[^"]*"|'[^']*')*?)(?<!/)>"""
    r"(?P<body>(?:(?!</?mj-).)*?)"
    r"</(?P=name)\s*>",
    re.DOTALL,
)
_ROOT = re.compile(r"^\s*(?:<\?xml[^>]*\?>\s*)?<mjml[\s>]", re.IGNORECASE)


def _blank_bodies(markup: str) -> str:
    """Empty raw HTML bodies, keeping line numbers intact."""

    def _blank(match: re.Match[str]) -> str:
        lines = "\n" * match.group("body").count("\n")
        return f"<{match.group('name')}{match.group('attrs')}>{lines}</{match.group('name')}>"

    return _ENDING_BODY.sub(_blank, markup)


def _check_element(element: etree._Element, errors: list[str]) -> None:
    name = element.tag
    line = element.sourceline

    if name not in ALLOWED_CHILDREN:
        errors.append(f"line {line}: unknown element <{name}>")
        return

    for attribute, value in element.attrib.items():
        pattern = ATTRIBUTE_TYPES.get(attribute)
        if pattern is not None and not pattern.match(value.strip()):
            errors.append(
                f"line {line}: invalid value {value!r} for attribute "
                f"{attribute!r} on <{name}>"
            )

    if name in _UNCHECKED_SUBTREES:
        return

    allowed = ALLOWED_CHILDREN[name]
    for child in element:
        if not isinstance(child.tag, str):
            continue
        if child.tag in ALLOWED_CHILDREN and child.tag not in allowed:
            errors.append(
                f"line {child.sourceline}: <{child.tag}> is not allowed inside <{name}>"
            )
        _check_element(child, errors)


def validate_markup(markup: str) -> list[str]:
    """Check an MJML document the way the strict validation level requires.

    Args:
        markup: MJML source

    Returns:
        Every error found; empty when the document is valid
    """
    if not _ROOT.match(markup):
        return ["document root must be an <mjml> element"]

    parser = etree.XMLParser(recover=False, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(_blank_bodies(markup).encode("utf-8"), parser)
    except etree.XMLSyntaxError as exc:
        return [f"malformed markup: {exc}"]

    errors: list[str] = []
    _check_element(root, errors)
    if root.find("mj-body") is None:
        errors.append("document has no <mj-body> element")
    return errors
