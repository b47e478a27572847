"""Output-directory stages and the verification report."""

from __future__ import annotations

import logging

from ..core.errors import CleanError, OutputDirectoryError
from ..core.models import FileOutcome, PipelineConfig, Stage, StageReport
from ..rendering.io import remove_tree
from ..transforms.filesize import report_size

logger = logging.getLogger(__name__)


def clean_output(config: PipelineConfig) -> StageReport:
    """Delete the output directory so no stale file survives a rebuild."""
    output_dir = config.output_dir
    try:
        removed = remove_tree(output_dir)
    except OSError as exc:
        raise CleanError(output_dir, f"cannot remove stale output: {exc}") from exc

    if removed:
        logger.info(f"Removed {output_dir}")
    else:
        logger.debug(f"Nothing to clean at {output_dir}")
    return StageReport(stage=Stage.CLEANING)


def ensure_output_dir(config: PipelineConfig) -> StageReport:
    """Create the output directory if it is missing.

    Raises:
        OutputDirectoryError: If creation fails and the configuration does
            not tolerate it
    """
    output_dir = config.output_dir
    report = StageReport(stage=Stage.ENSURING_OUTPUT_DIR)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        if not config.tolerate_output_dir_errors:
            raise OutputDirectoryError(output_dir, str(exc)) from exc
        logger.error(f'Error creating directory "{output_dir}": {exc}')
        report.outcomes.append(FileOutcome(source=output_dir, error=str(exc)))
        return report

    logger.info(f'Directory "{output_dir}" created or already exists.')
    report.outcomes.append(FileOutcome(source=output_dir, output=output_dir))
    return report


def verify_outputs(config: PipelineConfig) -> StageReport:
    """Log the size of every HTML file in the output directory."""
    logger.info("Starting verification stage")
    report = StageReport(stage=Stage.VERIFYING)
    for html_path in sorted(config.output_dir.glob("*.html")):
        if not html_path.is_file():
            continue
        report_size(html_path)
        report.outcomes.append(FileOutcome(source=html_path, output=html_path))
    logger.info("Verification stage completed")
    return report
