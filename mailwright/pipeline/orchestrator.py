"""Pipeline orchestration: full builds, watch-triggered rebuilds and serving."""

from __future__ import annotations

import logging
from typing import Callable

from ..core.errors import PipelineError
from ..core.models import PipelineConfig, ServerOptions, Stage, StageReport
from ..rendering.markup import MarkupEngine, compile_all, mjml_engine
from ..rendering.minify import minify_all
from ..rendering.templates import TemplateRenderer, render_all, render_template
from ..server.devserver import DevServer
from ..server.watcher import TemplateWatcher, watch_templates
from .stages import clean_output, ensure_output_dir, verify_outputs

logger = logging.getLogger(__name__)


class Pipeline:
    """Sequences the build stages over one immutable configuration.

    Each stage returns a StageReport only after all of its files are
    written, and the next stage starts only then.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        renderer: TemplateRenderer | None = None,
        engine: MarkupEngine | None = None,
        watcher: TemplateWatcher | None = None,
        server_factory: Callable[[ServerOptions], DevServer] | None = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or render_template
        self.engine = engine or mjml_engine
        self.watcher = watcher or watch_templates
        self.server_factory = server_factory or DevServer
        self.state = Stage.IDLE
        self.history: list[Stage] = []
        self.server: DevServer | None = None

    def _enter(self, stage: Stage) -> None:
        logger.debug(f"{self.state.value} → {stage.value}")
        self.state = stage
        self.history.append(stage)

    def clean(self) -> StageReport:
        self._enter(Stage.CLEANING)
        return clean_output(self.config)

    def ensure_output_dir(self) -> StageReport:
        self._enter(Stage.ENSURING_OUTPUT_DIR)
        return ensure_output_dir(self.config)

    def render(self) -> StageReport:
        self._enter(Stage.RENDERING)
        return render_all(self.config, self.renderer)

    def compile(self) -> StageReport:
        self._enter(Stage.COMPILING)
        return compile_all(self.config, self.engine)

    def minify(self) -> StageReport:
        self._enter(Stage.MINIFYING)
        return minify_all(self.config)

    def verify(self) -> StageReport:
        self._enter(Stage.VERIFYING)
        return verify_outputs(self.config)

    def rebuild(self) -> list[StageReport]:
        """Run the stages re-entered on every template change."""
        return [self.render(), self.compile(), self.minify(), self.verify()]

    def build(self) -> list[StageReport]:
        """Run a clean full build. Any stage failure propagates."""
        reports = [self.clean(), self.ensure_output_dir()]
        reports.extend(self.rebuild())
        return reports

    def serve(self) -> DevServer:
        """Start the dev server once; later calls return the running one."""
        if self.server is None:
            self._enter(Stage.SERVING)
            self.server = self.server_factory(self.config.server)
            self.server.start()
        return self.server

    def watch(self) -> int:
        """Rebuild on every batch of template changes until the watcher stops.

        Failures are logged and the loop keeps watching.

        Returns:
            Number of rebuilds that failed
        """
        self._enter(Stage.WATCHING)
        failures = 0
        for changed in self.watcher(self.config):
            names = ", ".join(sorted(str(p) for p in changed)) or "templates"
            logger.info(f"Change detected in {names}; rebuilding")
            if not self._rebuild_safely():
                failures += 1
            self.state = Stage.WATCHING
        return failures

    def _rebuild_safely(self) -> bool:
        try:
            self.rebuild()
        except (PipelineError, OSError) as exc:
            logger.error(f"Rebuild failed: {exc}")
            return False
        return True

    def run(self, *, serve: bool = True, watch: bool = True) -> None:
        """Full build, then serve and watch."""
        self.build()
        if serve:
            self.serve()
        if watch:
            self.watch()
