"""Pug template rendering (Pug -> MJML)."""

from __future__ import annotations

import builtins
import logging
from pathlib import Path
from typing import Callable

from jinja2 import Environment, FileSystemLoader, Template
from pypugjs.ext.jinja import PyPugJSExtension

from ..core.errors import TemplateRenderError
from ..core.models import FileOutcome, PipelineConfig, Stage, StageReport, TemplateOptions
from .io import atomic_write_text, target_path

logger = logging.getLogger(__name__)

MARKUP_SUFFIX = ".mjml"

TemplateRenderer = Callable[[Path, TemplateOptions], str]


def build_environment(search_path: Path, options: TemplateOptions) -> Environment:
    """Create a Jinja2 environment that compiles ``.pug`` sources on load.

    Args:
        search_path: Directory used to resolve includes and extends
        options: Templating compiler options

    Returns:
        Configured Jinja2 environment
    """
    env = Environment(
        loader=FileSystemLoader(str(search_path)),
        extensions=[PyPugJSExtension],
        autoescape=False,
        keep_trailing_newline=True,
    )

    pug = env.extensions[PyPugJSExtension.identifier]
    # Instance-level copy; the extension declares its options on the class
    pug.options = {
        **getattr(pug, "options", {}),
        "pretty": options.pretty,
        "compileDebug": options.compile_debug,
    }

    for name in options.globals:
        env.globals[name] = getattr(builtins, name)

    if options.bind_self:
        logger.warning("bind_self is ignored: Jinja2 reserves `self` for the template")

    return env


def load_template(template_path: Path, options: TemplateOptions) -> Template:
    """Load a Pug template from a file path.

    Args:
        template_path: Path to the template file
        options: Templating compiler options

    Returns:
        Compiled Jinja2 template
    """
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")

    env = build_environment(template_path.parent, options)
    if options.debug:
        source, _, _ = env.loader.get_source(env, template_path.name)
        logger.debug(
            "Compiled %s:\n%s",
            template_path,
            env.preprocess(source, template_path.name, str(template_path)),
        )

    return env.get_template(template_path.name)


def render_template(template_path: Path, options: TemplateOptions) -> str:
    """Render one Pug template to MJML markup.

    Raises:
        TemplateRenderError: On any syntax or rendering error
    """
    try:
        template = load_template(template_path, options)
        return template.render()
    except FileNotFoundError as exc:
        raise TemplateRenderError(template_path, str(exc)) from exc
    # pypugjs reports lexer and parser errors as plain Exception subclasses
    except Exception as exc:
        location = getattr(exc, "lineno", None)
        message = f"line {location}: {exc}" if location else str(exc)
        raise TemplateRenderError(template_path, message) from exc


def discover_templates(config: PipelineConfig) -> list[Path]:
    return sorted(p for p in config.source_dir.glob(config.template_glob) if p.is_file())


def render_task(
    template_path: Path,
    config: PipelineConfig,
    renderer: TemplateRenderer = render_template,
) -> Path:
    """Render a single template into the markup directory.

    The markup is only written once rendering succeeded, so a broken
    template never overwrites its previous output.

    Returns:
        Output file path
    """
    logger.debug(f"Rendering template: {template_path}")

    markup = renderer(template_path, config.template)

    output_path = target_path(template_path, config.markup_dir, MARKUP_SUFFIX)
    atomic_write_text(output_path, markup)
    logger.info(f"Rendered {template_path} → {output_path}")

    return output_path


def render_all(
    config: PipelineConfig, renderer: TemplateRenderer = render_template
) -> StageReport:
    """Render all templates matching the configured glob.

    Stops at the first template that fails to render.
    """
    templates = discover_templates(config)
    logger.info(f"Rendering {len(templates)} template(s)")

    report = StageReport(stage=Stage.RENDERING)
    for template_path in templates:
        output = render_task(template_path, config, renderer)
        report.outcomes.append(FileOutcome(source=template_path, output=output))

    logger.info(f"Successfully rendered {len(report.outputs)} file(s)")
    return report
