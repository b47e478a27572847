"""Domain models for pipeline configuration and stage results."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Stage(str, Enum):
    """States of the build pipeline, in full-build order."""

    IDLE = "idle"
    CLEANING = "cleaning"
    ENSURING_OUTPUT_DIR = "ensuring-output-dir"
    RENDERING = "rendering"
    COMPILING = "compiling"
    MINIFYING = "minifying"
    VERIFYING = "verifying"
    SERVING = "serving"
    WATCHING = "watching"


class TemplateOptions(BaseModel):
    """Options handed to the Pug templating compiler."""

    model_config = ConfigDict(frozen=True)

    pretty: bool = Field(default=True, description="Indent generated markup")
    debug: bool = Field(default=False, description="Log compiled template source")
    compile_debug: bool = Field(
        default=False, description="Embed source positions in compiled templates"
    )
    globals: tuple[str, ...] = Field(
        default=(), description="Builtin names exposed to templates"
    )
    bind_self: bool = Field(
        default=False,
        description="Accepted for Pug compatibility; ignored because Jinja2 reserves `self`",
    )


class MarkupCompilerOptions(BaseModel):
    """Options handed to the MJML compiler."""

    model_config = ConfigDict(frozen=True)

    beautify: bool = False
    minify: bool = False
    validation_level: Literal["strict", "soft", "skip"] = "strict"
    fonts: dict[str, str] = Field(
        default_factory=dict, description="Font name to stylesheet URL"
    )
    keep_comments: bool = False
    ignore_includes: bool = True
    preprocessors: tuple[Callable[[str], str], ...] = Field(
        default=(), description="Markup transforms applied before compilation"
    )


class MinifyPolicy(BaseModel):
    """Email-client-safe HTML minification policy."""

    model_config = ConfigDict(frozen=True)

    collapse_whitespace: bool = True
    remove_comments: bool = False
    remove_empty_attributes: bool = True
    minify_css: bool = True
    minify_js: bool = True
    conservative_collapse: bool = False
    keep_closing_slash: bool = True
    case_sensitive: bool = True
    html5: bool = False

    @model_validator(mode="after")
    def _check_backend_support(self) -> MinifyPolicy:
        # minify-html always collapses aggressively and never rewrites name case
        if not self.collapse_whitespace or self.conservative_collapse:
            raise ValueError(
                "minify-html only supports aggressive whitespace collapsing"
            )
        if not self.case_sensitive:
            raise ValueError("minify-html preserves tag and attribute name case")
        return self


class ServerOptions(BaseModel):
    """Options for the live-reload development server."""

    model_config = ConfigDict(frozen=True)

    port: int = Field(default=8080, ge=1, le=65535)
    root: Path = Field(default=Path("dist"), description="Directory to serve")
    open_browser: bool = True
    entry_file: str = "index.html"
    startup_wait_ms: int = Field(default=500, ge=0)
    log_level: int = Field(
        default=2, ge=0, le=3, description="0 off, 1 errors, 2 info, 3 debug"
    )


class PipelineConfig(BaseModel):
    """Immutable configuration passed to every pipeline stage."""

    model_config = ConfigDict(frozen=True)

    source_dir: Path = Field(default=Path("src"), description="Pug templates")
    markup_dir: Path = Field(
        default=Path("src/mjml"), description="Intermediate MJML documents"
    )
    output_dir: Path = Field(default=Path("dist"), description="Compiled HTML")
    template_glob: str = "*.pug"
    template: TemplateOptions = Field(default_factory=TemplateOptions)
    markup: MarkupCompilerOptions = Field(default_factory=MarkupCompilerOptions)
    minify: MinifyPolicy = Field(default_factory=MinifyPolicy)
    server: ServerOptions = Field(default_factory=ServerOptions)
    tolerate_output_dir_errors: bool = Field(
        default=False,
        description="Log output directory creation failures instead of aborting",
    )
    watch_debounce_ms: int = Field(default=300, ge=0)


class FileOutcome(BaseModel):
    """Result of one per-file transformation inside a stage."""

    source: Path
    output: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class StageReport(BaseModel):
    """Completion signal returned once every file of a stage has settled."""

    stage: Stage
    outcomes: list[FileOutcome] = Field(default_factory=list)

    @property
    def outputs(self) -> list[Path]:
        return [o.output for o in self.outcomes if o.output is not None]

    @property
    def failures(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]
