"""Live-reload development server for the output directory."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable

from livereload import Server

from ..core.models import ServerOptions

logger = logging.getLogger(__name__)

# 0 off, 1 errors, 2 info, 3 debug
_LOG_LEVELS = {
    0: logging.CRITICAL + 1,
    1: logging.ERROR,
    2: logging.INFO,
    3: logging.DEBUG,
}


class DevServer:
    """Serve a directory over HTTP and reload browsers when it changes."""

    def __init__(
        self,
        options: ServerOptions,
        server_factory: Callable[[], Any] = Server,
    ) -> None:
        self.options = options
        self._server_factory = server_factory
        self._thread: threading.Thread | None = None

    @property
    def url(self) -> str:
        return f"http://127.0.0.1:{self.options.port}/{self.options.entry_file}"

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _build(self) -> Any:
        logging.getLogger("livereload").setLevel(_LOG_LEVELS[self.options.log_level])
        server = self._server_factory()
        server.watch(str(self.options.root), delay=self.options.startup_wait_ms / 1000)
        return server

    def serve_forever(self) -> None:
        """Serve on the calling thread until interrupted."""
        server = self._build()
        open_delay = self.options.startup_wait_ms / 1000 if self.options.open_browser else None
        logger.info(f"Live Server started on port {self.options.port}")
        server.serve(
            port=self.options.port,
            root=str(self.options.root),
            open_url_delay=open_delay,
            default_filename=self.options.entry_file,
        )

    def _run(self) -> None:
        # Tornado needs an event loop on the serving thread
        asyncio.set_event_loop(asyncio.new_event_loop())
        try:
            self.serve_forever()
        except Exception:
            logger.exception("Error starting Live Server")

    def start(self) -> threading.Thread:
        """Serve from a daemon thread. Starting twice is a no-op."""
        if self._thread is not None:
            return self._thread
        self._thread = threading.Thread(
            target=self._run, name="mailwright-devserver", daemon=True
        )
        self._thread.start()
        return self._thread
