"""Tests for mailwright/rendering/templates.py."""

import pytest

from mailwright.core.errors import TemplateRenderError
from mailwright.core.models import Stage, TemplateOptions
from mailwright.rendering.templates import render_all, render_template

from tests.samples import fake_renderer

PUG_TEMPLATE = """mjml
  mj-body
    mj-section
      mj-column
        mj-text Hello from Pug
"""


class TestRenderTemplate:
    def test_renders_pug_to_mjml(self, tmp_path):
        path = tmp_path / "welcome.pug"
        path.write_text(PUG_TEMPLATE)

        markup = render_template(path, TemplateOptions())

        assert "<mjml>" in markup
        assert "<mj-body>" in markup
        assert "Hello from Pug" in markup
        assert markup.index("<mj-body>") < markup.index("Hello from Pug")

    def test_syntax_error_raises_with_path(self, tmp_path):
        path = tmp_path / "broken.pug"
        path.write_text("mjml\n  p {% endfor %}\n")

        with pytest.raises(TemplateRenderError) as excinfo:
            render_template(path, TemplateOptions())

        assert excinfo.value.path == path
        assert str(path) in str(excinfo.value)

    def test_missing_template_raises(self, tmp_path):
        with pytest.raises(TemplateRenderError):
            render_template(tmp_path / "missing.pug", TemplateOptions())

    def test_bind_self_is_ignored_with_warning(self, tmp_path, caplog):
        path = tmp_path / "welcome.pug"
        path.write_text(PUG_TEMPLATE)

        markup = render_template(path, TemplateOptions(bind_self=True))

        assert markup == render_template(path, TemplateOptions())
        assert any("bind_self is ignored" in m for m in caplog.messages)


class TestRenderAll:
    def test_writes_one_markup_file_per_template(self, config, write_template):
        write_template("a.pug")
        write_template("b.pug")
        (config.source_dir / "notes.txt").write_text("ignored")

        report = render_all(config, fake_renderer)

        assert report.stage is Stage.RENDERING
        assert report.outputs == [
            config.markup_dir / "a.mjml",
            config.markup_dir / "b.mjml",
        ]
        assert (config.markup_dir / "a.mjml").read_text().startswith("<mjml>")

    def test_syntax_error_fails_stage_without_overwriting(self, config, write_template):
        config.markup_dir.mkdir(parents=True)
        previous = config.markup_dir / "a.mjml"
        previous.write_text("<mjml>previous</mjml>")
        write_template("a.pug", "SYNTAX ERROR")

        with pytest.raises(TemplateRenderError):
            render_all(config, fake_renderer)

        assert previous.read_text() == "<mjml>previous</mjml>"

    def test_syntax_error_writes_nothing_for_new_template(self, config, write_template):
        write_template("a.pug", "SYNTAX ERROR")

        with pytest.raises(TemplateRenderError):
            render_all(config, fake_renderer)

        assert not (config.markup_dir / "a.mjml").exists()

    def test_renders_with_real_pug_compiler(self, config, write_template):
        write_template("welcome.pug", PUG_TEMPLATE)

        render_all(config)

        assert "Hello from Pug" in (config.markup_dir / "welcome.mjml").read_text()
