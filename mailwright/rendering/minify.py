"""Email-safe HTML minification (``<name>.html`` -> ``<name>.min.html``)."""

from __future__ import annotations

import logging
from pathlib import Path

import minify_html
import rcssmin

from ..core.errors import MinifyError
from ..core.models import FileOutcome, MinifyPolicy, PipelineConfig, Stage, StageReport
from ..transforms.attributes import (
    add_closing_slashes,
    quote_attributes,
    rewrite_css,
    strip_empty_attributes,
)
from .io import atomic_write_text, read_text

logger = logging.getLogger(__name__)

MIN_SUFFIX = ".min.html"

# Attributes that carry no meaning when empty
_DROPPABLE_WHEN_EMPTY = frozenset({"class", "id", "style", "title", "lang", "dir"})


def _droppable(name: str) -> bool:
    return name in _DROPPABLE_WHEN_EMPTY or name.startswith("on")


def minify_document(html: str, policy: MinifyPolicy | None = None) -> str:
    """Minify an HTML document for email clients.

    Comments are kept verbatim unless the policy removes them, since
    conditional comments target specific clients. Outside HTML5 mode every
    attribute value is quoted. The result is never larger than the input.

    Args:
        html: Source HTML
        policy: Minification policy (email-safe defaults when omitted)

    Returns:
        Minified HTML
    """
    policy = policy or MinifyPolicy()

    text = html
    if policy.remove_empty_attributes:
        text = strip_empty_attributes(text, _droppable)

    # minify-html rewrites media queries into range syntax email clients reject
    if policy.minify_css:
        text = rewrite_css(text, rcssmin.cssmin)

    text = minify_html.minify(
        text,
        minify_css=False,
        minify_js=policy.minify_js,
        keep_comments=not policy.remove_comments,
        # HTML4 parsers need the tags HTML5 allows to be omitted
        keep_closing_tags=not policy.html5,
        keep_html_and_head_opening_tags=not policy.html5,
    )

    if not policy.html5:
        text = quote_attributes(text)

    if policy.keep_closing_slash:
        text = add_closing_slashes(text)

    if len(text.encode("utf-8")) > len(html.encode("utf-8")):
        return html
    return text


def minified_path(html_path: Path) -> Path:
    return html_path.with_name(f"{html_path.stem}{MIN_SUFFIX}")


def is_minified(path: Path) -> bool:
    return path.name.endswith(MIN_SUFFIX)


def minify_task(html_path: Path, policy: MinifyPolicy) -> Path:
    """Minify one compiled document next to itself.

    Raises:
        MinifyError: If the document cannot be read, minified or written
    """
    output_path = minified_path(html_path)
    try:
        atomic_write_text(output_path, minify_document(read_text(html_path), policy))
    except Exception as exc:
        raise MinifyError(html_path, str(exc)) from exc
    logger.debug(f"Minified {html_path} → {output_path}")
    return output_path


def minify_all(config: PipelineConfig) -> StageReport:
    """Minify every compiled document in the output directory.

    A failing file is logged and skipped; the remaining files are still
    processed.
    """
    logger.info("Starting minify stage")
    documents = sorted(
        p for p in config.output_dir.glob("*.html") if p.is_file() and not is_minified(p)
    )

    report = StageReport(stage=Stage.MINIFYING)
    for html_path in documents:
        try:
            output = minify_task(html_path, config.minify)
        except MinifyError as exc:
            logger.error(f"Error minifying file: {exc}")
            report.outcomes.append(FileOutcome(source=html_path, error=exc.message))
            continue
        report.outcomes.append(FileOutcome(source=html_path, output=output))

    logger.info(
        f"Minify stage completed: {len(report.outputs)} minified, "
        f"{len(report.failures)} skipped"
    )
    return report
