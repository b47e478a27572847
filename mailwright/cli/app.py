"""Main CLI application."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from ..core.errors import PipelineError
from ..core.models import PipelineConfig
from ..core.settings import get_settings
from ..pipeline.orchestrator import Pipeline
from ..server.devserver import DevServer
from .parsers import parse_fonts

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="mailwright",
    help="Build Pug/MJML email templates into minified, email-safe HTML.",
)


@contextmanager
def _exit_on_failure() -> Iterator[None]:
    try:
        yield
    except PipelineError as exc:
        logger.error(str(exc))
        raise typer.Exit(code=1) from exc


def _config(ctx: typer.Context) -> PipelineConfig:
    return ctx.obj


def _pipeline(ctx: typer.Context) -> Pipeline:
    return Pipeline(_config(ctx))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging."),
    ] = False,
    source_dir: Annotated[
        Optional[Path],
        typer.Option("--source-dir", help="Directory holding *.pug templates.", metavar="DIR"),
    ] = None,
    markup_dir: Annotated[
        Optional[Path],
        typer.Option("--markup-dir", help="Directory for intermediate *.mjml files.", metavar="DIR"),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", help="Directory for compiled HTML.", metavar="DIR"),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", help="Dev server port (default: 8080).", metavar="PORT"),
    ] = None,
    no_open: Annotated[
        bool,
        typer.Option("--no-open", help="Do not open a browser when serving."),
    ] = False,
    fonts: Annotated[
        list[str],
        typer.Option(
            "--font",
            help="Register an MJML font (format: NAME=URL). Repeatable.",
            metavar="NAME=URL",
        ),
    ] = [],
) -> None:
    """Build Pug/MJML email templates. Runs the full pipeline when no command is given."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    ctx.obj = get_settings().to_config(
        source_dir=source_dir,
        markup_dir=markup_dir,
        output_dir=output_dir,
        port=port,
        open_browser=False if no_open else None,
        fonts=parse_fonts(fonts),
    )
    logger.debug(f"Config: {ctx.obj.model_dump()}")

    if ctx.invoked_subcommand is None:
        with _exit_on_failure():
            _pipeline(ctx).run()


@app.command()
def build(
    ctx: typer.Context,
    serve: Annotated[
        bool,
        typer.Option("--serve/--no-serve", help="Start the dev server after building."),
    ] = True,
    watch: Annotated[
        bool,
        typer.Option("--watch/--no-watch", help="Rebuild when templates change."),
    ] = True,
) -> None:
    """Clean, render, compile, minify and verify; then serve and watch."""
    with _exit_on_failure():
        _pipeline(ctx).run(serve=serve, watch=watch)


@app.command()
def clean(ctx: typer.Context) -> None:
    """Delete the output directory."""
    with _exit_on_failure():
        _pipeline(ctx).clean()


@app.command()
def render(ctx: typer.Context) -> None:
    """Render Pug templates to MJML."""
    with _exit_on_failure():
        _pipeline(ctx).render()


@app.command(name="compile")
def compile_(ctx: typer.Context) -> None:
    """Compile MJML documents to HTML."""
    with _exit_on_failure():
        pipeline = _pipeline(ctx)
        pipeline.ensure_output_dir()
        pipeline.compile()


@app.command()
def minify(ctx: typer.Context) -> None:
    """Write a minified .min.html next to every compiled document."""
    with _exit_on_failure():
        report = _pipeline(ctx).minify()
    if report.failures:
        logger.warning(f"{len(report.failures)} file(s) could not be minified")


@app.command()
def verify(ctx: typer.Context) -> None:
    """Log the size of every HTML output."""
    with _exit_on_failure():
        _pipeline(ctx).verify()


@app.command()
def serve(ctx: typer.Context) -> None:
    """Serve the output directory with live reload."""
    DevServer(_config(ctx).server).serve_forever()


@app.command()
def watch(ctx: typer.Context) -> None:
    """Rebuild whenever a template changes."""
    _pipeline(ctx).watch()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
