"""Tests for mailwright/pipeline/stages.py."""

import logging

import pytest

from mailwright.core.errors import OutputDirectoryError
from mailwright.pipeline.stages import clean_output, ensure_output_dir, verify_outputs


def test_clean_removes_stale_output(config):
    config.output_dir.mkdir()
    (config.output_dir / "stale.html").write_text("<p>old</p>")

    clean_output(config)

    assert not config.output_dir.exists()


def test_clean_without_output_is_noop(config):
    clean_output(config)
    assert not config.output_dir.exists()


def test_ensure_output_dir_creates_directory(config):
    report = ensure_output_dir(config)

    assert config.output_dir.is_dir()
    assert report.failures == []


def test_ensure_output_dir_raises_by_default(config):
    config.output_dir.write_text("not a directory")

    with pytest.raises(OutputDirectoryError) as excinfo:
        ensure_output_dir(config)

    assert excinfo.value.path == config.output_dir


def test_ensure_output_dir_can_tolerate_failure(config, caplog):
    config.output_dir.write_text("not a directory")
    tolerant = config.model_copy(update={"tolerate_output_dir_errors": True})

    report = ensure_output_dir(tolerant)

    assert len(report.failures) == 1
    assert any("Error creating directory" in m for m in caplog.messages)


def test_verify_logs_size_of_every_html_file(config, caplog):
    config.output_dir.mkdir()
    (config.output_dir / "a.html").write_bytes(b"x" * 2048)
    (config.output_dir / "a.min.html").write_bytes(b"x" * 512)
    (config.output_dir / "notes.txt").write_bytes(b"x")

    with caplog.at_level(logging.INFO):
        report = verify_outputs(config)

    assert "a.html: 2.00 Ko" in caplog.messages
    assert "a.min.html: 0.50 Ko" in caplog.messages
    assert [o.source.name for o in report.outcomes] == ["a.html", "a.min.html"]
    assert (config.output_dir / "a.html").read_bytes() == b"x" * 2048
