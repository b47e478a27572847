"""File size reporting."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def size_in_kb(content: bytes) -> float:
    return len(content) / 1024


def format_size(name: str, content: bytes) -> str:
    return f"{name}: {size_in_kb(content):.2f} Ko"


def report_size(path: Path, content: bytes | None = None) -> str:
    """Log the size of a file as ``<filename>: <KB> Ko``.

    Args:
        path: File being reported
        content: File bytes, read from ``path`` when omitted

    Returns:
        The logged line
    """
    if content is None:
        content = path.read_bytes()
    line = format_size(path.name, content)
    logger.info(line)
    return line
