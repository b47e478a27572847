"""Exceptions raised by pipeline stages."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable


class PipelineError(Exception):
    """Raised when a stage cannot complete."""

    def __init__(self, path: Path | None, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path is not None else message)


class TemplateRenderError(PipelineError):
    """A Pug template failed to render."""


class MarkupCompileError(PipelineError):
    """The MJML compiler rejected a document."""

    def __init__(self, path: Path, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        details = "; ".join(self.errors) or "unknown error"
        super().__init__(path, f"MJML compilation failed: {details}")


class MinifyError(PipelineError):
    """An HTML document could not be minified."""


class OutputDirectoryError(PipelineError):
    """The output directory could not be created."""


class CleanError(PipelineError):
    """Stale output could not be removed."""
