# backend/server.py
import logging
import threading
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import ServerConfig
from main import create_app

logger = logging.getLogger(__name__)


class SalonServer:
    """
    Handle on one HTTP server instance.

    ``start`` runs uvicorn on a background thread and returns once the socket
    is accepting connections; ``serve`` blocks the calling thread instead.
    """

    def __init__(self, config: ServerConfig, app: Optional[FastAPI] = None):
        self.config = config
        self.app = app or create_app(config)
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    def _build_server(self) -> uvicorn.Server:
        return uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=self.config.host,
                port=self.config.port,
                log_level=self.config.log_level.lower(),
            )
        )

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def bound_port(self) -> Optional[int]:
        """Port actually listened on, useful when configured with port 0"""
        if not self._server or not self._server.started:
            return None
        return self._server.servers[0].sockets[0].getsockname()[1]

    def start(self, timeout: float = 10.0):
        if self.is_running:
            logger.warning("Server is already running")
            return

        self._server = self._build_server()
        self._thread = threading.Thread(target=self._server.run, name="salon-server", daemon=True)
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not self._thread.is_alive():
                self._thread = None
                raise RuntimeError(f"Server failed to start on {self.config.host}:{self.config.port}")
            if time.monotonic() > deadline:
                self.stop()
                raise TimeoutError(f"Server did not start within {timeout} seconds")
            time.sleep(0.05)

        logger.info(f"Salon Manager API listening at port: {self.bound_port}")

    def stop(self, timeout: float = 10.0):
        if not self.is_running:
            return

        self._server.should_exit = True
        self._thread.join(timeout)
        self._thread = None
        logger.info("Salon Manager API stopped")

    def serve(self):
        """Run in the foreground until interrupted"""
        self._server = self._build_server()
        self._server.run()


def create_server(config: Optional[ServerConfig] = None) -> SalonServer:
    return SalonServer(config or ServerConfig.from_env())
