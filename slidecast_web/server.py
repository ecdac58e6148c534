"""
SlideCast presenter server
==========================

Embedded HTTP server that serves generated slide decks over the loopback
interface, plus the lifecycle objects the host application uses to start it,
stop it and build presenter URLs.

    host = PresentServerHost(config)
    server = host.get_instance(workspace_root)
    port = server.ensure_running()      # idempotent
    url = server.url_for("my-deck", "output/my-deck")
    ...
    host.stop_if_running()              # on shutdown

One listener serves every deck for the lifetime of the instance. Stopping it
releases the host's reference so the next ``get_instance`` call can pick up a
different workspace root.
"""

import asyncio
import socket
import threading
import time
import logging
from http import HTTPStatus
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from slidecast_core.config import PresenterConfig, SlideCastConfig
from slidecast_core.ports import find_available_port
from slidecast_core.version import __version__ as SLIDECAST_VERSION
from slidecast_web.presenter_page import PresenterOptions
from slidecast_web.routers import files_router, presenter_router
from slidecast_web.routers.files import request_guard

logger = logging.getLogger(__name__)


# =============================================================================
# Application
# =============================================================================

def create_app(workspace_root: Path, presenter: Optional[PresenterConfig] = None) -> FastAPI:
    """
    Build the FastAPI application for one workspace root.

    Args:
        workspace_root: Directory whose output/ and .slide-builder/ trees are served
        presenter: Presenter page settings (defaults if None)
    """
    presenter = presenter or PresenterConfig()

    app = FastAPI(
        title="SlideCast Presenter",
        version=SLIDECAST_VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.workspace_root = Path(workspace_root).resolve()
    app.state.presenter = presenter
    app.state.presenter_options = PresenterOptions(
        slide_width=presenter.slide_width,
        slide_height=presenter.slide_height,
        build_duration_ms=presenter.build_duration_ms,
    )

    app.middleware("http")(request_guard)

    @app.exception_handler(StarletteHTTPException)
    async def plain_http_error(request, exc: StarletteHTTPException):
        # Generic plain-text bodies, never request details
        return PlainTextResponse(HTTPStatus(exc.status_code).phrase, status_code=exc.status_code)

    app.include_router(files_router)
    app.include_router(presenter_router)

    return app


# =============================================================================
# Lifecycle
# =============================================================================

def _bind_socket(host: str, port: int) -> socket.socket:
    """Bind and listen synchronously so bind errors reach the caller."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(128)
    except OSError:
        sock.close()
        raise
    return sock


class PresentServer:
    """
    HTTP server for one workspace root, running uvicorn on a daemon thread.

    Args:
        workspace_root: Directory served under /output/ and /.slide-builder/
        config: Full configuration (defaults if None)
        host: Owning PresentServerHost, told when this server stops
    """

    def __init__(
        self,
        workspace_root: Path,
        config: Optional[SlideCastConfig] = None,
        host: Optional["PresentServerHost"] = None,
    ):
        self.workspace_root = Path(workspace_root).resolve()
        self.config = config or SlideCastConfig()
        self.app = create_app(self.workspace_root, self.config.presenter)
        self.port: Optional[int] = None
        self._owner = host
        self._server: Optional[uvicorn.Server] = None
        self._socket: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._server is not None and self.port is not None

    @property
    def host(self) -> str:
        return self.config.server.host

    def ensure_running(self) -> int:
        """
        Start the server unless it already runs. Idempotent.

        Returns:
            The port the server listens on

        Raises:
            NoPortAvailableError: Every port of the configured range is taken
            OSError: The chosen port could not be bound
            RuntimeError: uvicorn did not come up in time, or the owning host
                already holds a different server
        """
        with self._lock:
            if self.is_running:
                return self.port
            return self._start()

    def _start(self) -> int:
        if self._owner is not None:
            self._owner._adopt(self)
        settings = self.config.server
        port = find_available_port(settings.port_range_start, settings.port_range_end, settings.host)
        sock = _bind_socket(settings.host, port)

        uv_config = uvicorn.Config(
            app=self.app,
            host=settings.host,
            port=port,
            log_level="warning",
            access_log=False,
            lifespan="off",
        )
        server = uvicorn.Server(uv_config)
        thread = threading.Thread(
            target=self._serve, args=(server, sock), name=f"slidecast-{port}", daemon=True
        )
        thread.start()

        deadline = time.monotonic() + settings.startup_timeout
        while not server.started and thread.is_alive() and time.monotonic() < deadline:
            time.sleep(0.01)

        if not server.started:
            server.should_exit = True
            thread.join(timeout=settings.startup_timeout)
            sock.close()
            raise RuntimeError(f"Server failed to start on port {port}")

        self._server, self._socket, self._thread = server, sock, thread
        self.port = port
        logger.info(f"Server started on {settings.host}:{port} for {self.workspace_root}")
        return port

    @staticmethod
    def _serve(server: uvicorn.Server, sock: socket.socket) -> None:
        asyncio.run(server.serve(sockets=[sock]))

    def stop(self) -> None:
        """Stop the server, release the port and detach from the owning host."""
        with self._lock:
            if self._server is not None:
                self._server.should_exit = True
                if self._thread is not None:
                    self._thread.join(timeout=self.config.server.startup_timeout)
                if self._socket is not None:
                    self._socket.close()
                logger.info(f"Server stopped on port {self.port}")
            self._server = None
            self._socket = None
            self._thread = None
            self.port = None

        if self._owner is not None:
            self._owner._release(self)

    def url_for(self, deck_id: str, deck_path: Optional[str] = None) -> str:
        """Presenter URL for a deck on the running server."""
        if not self.is_running:
            raise RuntimeError("Server is not running; call ensure_running() first")
        url = f"http://{self.host}:{self.port}/present/{quote(deck_id, safe='')}"
        if deck_path:
            url += f"?deckPath={quote(deck_path, safe='')}"
        return url


class PresentServerHost:
    """
    Owner of the process' presenter server.

    Created once by the host application and passed to whoever needs the
    server. Keeps at most one PresentServer alive.
    """

    def __init__(self, config: Optional[SlideCastConfig] = None):
        self.config = config or SlideCastConfig()
        self._instance: Optional[PresentServer] = None
        self._lock = threading.Lock()

    @property
    def instance(self) -> Optional[PresentServer]:
        return self._instance

    def get_instance(self, workspace_root: Path) -> PresentServer:
        """Existing server, or a new one for ``workspace_root`` if none exists."""
        with self._lock:
            if self._instance is None:
                self._instance = PresentServer(workspace_root, self.config, host=self)
            return self._instance

    def stop_if_running(self) -> None:
        """Stop the current server; a no-op when there is none."""
        with self._lock:
            server = self._instance
        if server is not None:
            server.stop()

    def _adopt(self, server: PresentServer) -> None:
        """Register a released server again when it restarts."""
        with self._lock:
            if self._instance is None:
                self._instance = server
            elif self._instance is not server:
                raise RuntimeError("Host already owns another presenter server; stop it first")

    def _release(self, server: PresentServer) -> None:
        with self._lock:
            if self._instance is server:
                self._instance = None
