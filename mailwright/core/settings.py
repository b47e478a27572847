"""Environment-driven settings, converted into a frozen PipelineConfig."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import (
    MarkupCompilerOptions,
    MinifyPolicy,
    PipelineConfig,
    ServerOptions,
    TemplateOptions,
)


class ServerSettings(BaseModel):
    port: int = 8080
    root: Path | None = None
    open_browser: bool = True
    entry_file: str = "index.html"
    startup_wait_ms: int = 500
    log_level: int = 2


class Settings(BaseSettings):
    """Pipeline settings read from MAILWRIGHT_* variables and `.env`."""

    model_config = SettingsConfigDict(
        env_prefix="MAILWRIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    source_dir: Path = Path("src")
    markup_dir: Path = Path("src/mjml")
    output_dir: Path = Path("dist")
    template_glob: str = "*.pug"
    tolerate_output_dir_errors: bool = False
    watch_debounce_ms: int = 300

    # MJML
    validation_level: Literal["strict", "soft", "skip"] = "strict"
    keep_comments: bool = False
    ignore_includes: bool = True
    fonts: dict[str, str] = Field(default_factory=dict)

    pretty: bool = True
    server: ServerSettings = Field(default_factory=ServerSettings)

    def to_config(self, **overrides: Any) -> PipelineConfig:
        """Build the pipeline configuration, applying non-None overrides.

        Recognised overrides are the top-level PipelineConfig paths plus
        ``port`` and ``open_browser`` for the dev server.
        """
        values = {k: v for k, v in overrides.items() if v is not None}

        output_dir = Path(values.pop("output_dir", self.output_dir))
        server = ServerOptions(
            port=values.pop("port", self.server.port),
            root=self.server.root or output_dir,
            open_browser=values.pop("open_browser", self.server.open_browser),
            entry_file=self.server.entry_file,
            startup_wait_ms=self.server.startup_wait_ms,
            log_level=self.server.log_level,
        )
        markup = MarkupCompilerOptions(
            validation_level=self.validation_level,
            keep_comments=self.keep_comments,
            ignore_includes=self.ignore_includes,
            fonts={**self.fonts, **values.pop("fonts", {})},
        )

        return PipelineConfig(
            source_dir=Path(values.pop("source_dir", self.source_dir)),
            markup_dir=Path(values.pop("markup_dir", self.markup_dir)),
            output_dir=output_dir,
            template_glob=values.pop("template_glob", self.template_glob),
            template=TemplateOptions(pretty=self.pretty),
            markup=markup,
            minify=MinifyPolicy(),
            server=server,
            tolerate_output_dir_errors=self.tolerate_output_dir_errors,
            watch_debounce_ms=self.watch_debounce_ms,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
