"""CLI argument parsers and validators."""

from __future__ import annotations

import typer


def parse_font(value: str) -> tuple[str, str]:
    """Parse a font argument in format NAME=URL."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be NAME=URL, got: {value!r}")
    name, url = value.split("=", 1)
    if not name.strip() or not url.strip():
        raise typer.BadParameter(f"Font name and URL must be non-empty: {value!r}")
    return name.strip(), url.strip()


def parse_fonts(values: list[str]) -> dict[str, str]:
    return dict(map(parse_font, values))
