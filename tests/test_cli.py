"""Tests for mailwright/cli/app.py."""

from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from mailwright.cli.app import app
from mailwright.cli.parsers import parse_font, parse_fonts

from tests.samples import COMPILED_HTML, MJML_DOCUMENT, fake_engine, fake_renderer

runner = CliRunner()


@pytest.fixture(name="project")
def project_fixture(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "src").mkdir()
    return tmp_path


def test_parse_font():
    assert parse_font("Lato=https://fonts.example/lato") == ("Lato", "https://fonts.example/lato")


def test_parse_font_rejects_missing_separator():
    with pytest.raises(typer.BadParameter):
        parse_font("Lato")


def test_parse_fonts_builds_mapping():
    assert parse_fonts(["A=a", "B=b"]) == {"A": "a", "B": "b"}


def test_build_without_serving(project):
    (project / "src" / "a.pug").write_text(MJML_DOCUMENT)

    with patch("mailwright.pipeline.orchestrator.render_template", fake_renderer), patch(
        "mailwright.pipeline.orchestrator.mjml_engine", fake_engine
    ):
        result = runner.invoke(app, ["build", "--no-serve", "--no-watch"])

    assert result.exit_code == 0, result.output
    assert (project / "src" / "mjml" / "a.mjml").exists()
    assert (project / "dist" / "a.html").exists()
    assert (project / "dist" / "a.min.html").exists()


def test_render_failure_exits_non_zero(project):
    (project / "src" / "a.pug").write_text("SYNTAX ERROR")

    with patch("mailwright.pipeline.orchestrator.render_template", fake_renderer):
        result = runner.invoke(app, ["render"])

    assert result.exit_code == 1
    assert not (project / "src" / "mjml" / "a.mjml").exists()


def test_minify_and_verify_commands(project):
    (project / "dist").mkdir()
    (project / "dist" / "a.html").write_text(COMPILED_HTML)

    assert runner.invoke(app, ["minify"]).exit_code == 0
    assert (project / "dist" / "a.min.html").exists()
    assert runner.invoke(app, ["verify"]).exit_code == 0


def test_clean_command(project):
    (project / "dist").mkdir()
    (project / "dist" / "old.html").write_text("<p></p>")

    result = runner.invoke(app, ["clean"])

    assert result.exit_code == 0
    assert not (project / "dist").exists()


def test_output_dir_option(project):
    (project / "build").mkdir()
    (project / "build" / "a.html").write_text(COMPILED_HTML)

    result = runner.invoke(app, ["--output-dir", "build", "minify"])

    assert result.exit_code == 0
    assert (project / "build" / "a.min.html").exists()
