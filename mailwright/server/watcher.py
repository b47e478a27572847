"""Template change detection."""

from __future__ import annotations

import logging
import threading
from fnmatch import fnmatch
from pathlib import Path
from typing import Callable, Iterable, Iterator

from watchfiles import Change, watch

from ..core.models import PipelineConfig

logger = logging.getLogger(__name__)

TemplateWatcher = Callable[[PipelineConfig], Iterable[set[Path]]]


def template_filter(pattern: str) -> Callable[[Change, str], bool]:
    def _matches(change: Change, path: str) -> bool:
        return fnmatch(Path(path).name, pattern)

    return _matches


def watch_templates(
    config: PipelineConfig, stop_event: threading.Event | None = None
) -> Iterator[set[Path]]:
    """Yield batches of changed template paths under the source directory.

    Changes that happen while the caller is busy with a batch are buffered
    and delivered together as the next batch.
    """
    logger.info(f"Watching {config.source_dir} for {config.template_glob} changes")
    for changes in watch(
        config.source_dir,
        watch_filter=template_filter(config.template_glob),
        debounce=config.watch_debounce_ms,
        stop_event=stop_event,
        raise_interrupt=False,
    ):
        yield {Path(path) for _, path in changes}
