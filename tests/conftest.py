from __future__ import annotations

from pathlib import Path

import pytest

from mailwright.core.models import PipelineConfig, ServerOptions
from mailwright.core.settings import get_settings

from tests.samples import MJML_DOCUMENT


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(name="config")
def config_fixture(tmp_path: Path) -> PipelineConfig:
    """Pipeline configuration rooted in a temporary project."""
    source_dir = tmp_path / "src"
    source_dir.mkdir()
    return PipelineConfig(
        source_dir=source_dir,
        markup_dir=source_dir / "mjml",
        output_dir=tmp_path / "dist",
        server=ServerOptions(root=tmp_path / "dist", open_browser=False),
    )


@pytest.fixture(name="write_template")
def write_template_fixture(config: PipelineConfig):
    def _write(name: str, text: str = MJML_DOCUMENT) -> Path:
        path = config.source_dir / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write
