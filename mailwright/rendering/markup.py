"""MJML compilation (MJML -> HTML)."""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Mapping
from html import escape
from pathlib import Path
from typing import Any, Callable

from mjml import mjml_to_html
from pydantic import BaseModel, Field

from ..core.errors import MarkupCompileError
from ..core.models import (
    FileOutcome,
    MarkupCompilerOptions,
    MinifyPolicy,
    PipelineConfig,
    Stage,
    StageReport,
)
from ..transforms.attributes import remove_empty_styles
from .io import atomic_write_text, read_text, target_path
from .minify import minify_document
from .validation import validate_markup

logger = logging.getLogger(__name__)

HTML_SUFFIX = ".html"

_COMMENT = re.compile(r"<!--(?!\s*\[if)(?!\s*<!\[endif).*?-->", re.DOTALL)
_INCLUDE = re.compile(
    r"<mj-include\b[^>]*?(?:/>|>.*?</mj-include\s*>)", re.DOTALL | re.IGNORECASE
)
_HEAD = re.compile(r"<mj-head(?:\s[^>]*)?>", re.IGNORECASE)


class CompileResult(BaseModel):
    """Output of the MJML compiler boundary."""

    html: str = ""
    errors: list[str] = Field(default_factory=list)


MarkupEngine = Callable[[str, Path, MarkupCompilerOptions], CompileResult]


def _describe_error(error: Any) -> str:
    if isinstance(error, Mapping):
        message = error.get("formattedMessage") or error.get("message") or error
        return str(message)
    return str(error)


def _font_tags(fonts: Mapping[str, str]) -> str:
    return "".join(
        f'<mj-font name="{escape(name)}" href="{escape(href)}" />'
        for name, href in fonts.items()
    )


def prepare_markup(markup: str, options: MarkupCompilerOptions) -> str:
    """Apply the source-level compiler options before compilation."""
    for preprocess in options.preprocessors:
        markup = preprocess(markup)
    if not options.keep_comments:
        markup = _COMMENT.sub("", markup)
    if options.ignore_includes:
        markup = _INCLUDE.sub("", markup)
    if options.fonts:
        fonts = _font_tags(options.fonts)
        if _HEAD.search(markup):
            markup = _HEAD.sub(lambda m: m.group(0) + fonts, markup, count=1)
        else:
            markup = re.sub(
                r"(<mjml[^>]*>)",
                lambda m: f"{m.group(1)}<mj-head>{fonts}</mj-head>",
                markup,
                count=1,
            )
    return markup


def mjml_engine(
    markup: str, file_path: Path, options: MarkupCompilerOptions
) -> CompileResult:
    """Compile MJML with mjml-python.

    Args:
        markup: Prepared MJML source
        file_path: Source path, used to resolve relative includes
        options: Compiler options

    Returns:
        Compiled HTML and any validation errors reported by the compiler
    """
    kwargs: dict[str, Any] = {}
    if not options.ignore_includes:
        kwargs["template_dir"] = file_path.parent

    result = mjml_to_html(io.StringIO(markup), **kwargs)
    return CompileResult(
        html=result.html or "",
        errors=[_describe_error(e) for e in (result.errors or [])],
    )


def compile_markup(
    markup_path: Path,
    options: MarkupCompilerOptions,
    engine: MarkupEngine = mjml_engine,
    policy: MinifyPolicy | None = None,
) -> str:
    """Compile one MJML document to HTML without empty style attributes.

    Args:
        markup_path: Intermediate MJML document
        options: Compiler options
        engine: MJML compiler boundary
        policy: Minification policy used when ``options.minify`` is set

    Raises:
        MarkupCompileError: When the document cannot be read or the
            compiler rejects it
    """
    try:
        source = read_text(markup_path)
    except UnicodeDecodeError as exc:
        raise MarkupCompileError(markup_path, [f"not valid UTF-8: {exc}"]) from exc
    markup = prepare_markup(source, options)

    strict = options.validation_level == "strict"
    if strict:
        errors = validate_markup(markup)
        if errors:
            raise MarkupCompileError(markup_path, errors)

    try:
        result = engine(markup, markup_path, options)
    # mjml-python raises on markup it cannot parse instead of reporting it,
    # and KeyError for tags with no registered component
    except KeyError as exc:
        raise MarkupCompileError(
            markup_path, [f"unknown element <{exc.args[0] if exc.args else exc}>"]
        ) from exc
    except Exception as exc:
        raise MarkupCompileError(markup_path, [str(exc) or repr(exc)]) from exc

    if result.errors and strict:
        for error in result.errors:
            logger.error(f"MJML error in {markup_path}: {error}")
        raise MarkupCompileError(markup_path, result.errors)
    if result.errors and options.validation_level == "soft":
        for error in result.errors:
            logger.warning(f"MJML warning in {markup_path}: {error}")

    html = result.html
    if options.minify:
        html = minify_document(html, policy)
    elif options.beautify:
        logger.warning("beautify is not supported by mjml-python; emitting raw HTML")

    return remove_empty_styles(html)


def compile_task(
    markup_path: Path,
    config: PipelineConfig,
    engine: MarkupEngine = mjml_engine,
) -> Path:
    """Compile a single MJML document into the output directory."""
    logger.debug(f"Compiling markup: {markup_path}")

    html = compile_markup(markup_path, config.markup, engine, config.minify)

    output_path = target_path(markup_path, config.output_dir, HTML_SUFFIX)
    atomic_write_text(output_path, html)
    logger.info(f"Compiled {markup_path} → {output_path}")

    return output_path


def compile_all(
    config: PipelineConfig, engine: MarkupEngine = mjml_engine
) -> StageReport:
    """Compile every intermediate MJML document, stopping at the first failure."""
    documents = sorted(p for p in config.markup_dir.glob("*.mjml") if p.is_file())
    logger.info(f"Compiling {len(documents)} MJML document(s)")

    report = StageReport(stage=Stage.COMPILING)
    for markup_path in documents:
        output = compile_task(markup_path, config, engine)
        report.outcomes.append(FileOutcome(source=markup_path, output=output))

    logger.info(f"Successfully compiled {len(report.outputs)} file(s)")
    return report
