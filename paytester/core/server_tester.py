"""
Server-under-test lifecycle.

Optionally launches the payment server in a subprocess, waits for its health
endpoint to answer, and exposes the services the browser harness needs: the
base URI, per-asset networks, the explorer node RPC client and the merchant
lightning endpoints.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import shutil
import signal
import subprocess
import time
from pathlib import Path
from typing import IO, Optional

import httpx

from paytester.config import settings
from paytester.connectors.explorer_rpc import ExplorerNodeClient, create_default_client
from paytester.core.lightning import LightningEndpoints
from paytester.core.networks import NetworkProvider
from paytester.errors import ServerStartupError

logger = logging.getLogger(__name__)

_OUTPUT_TAIL_CHARS = 4000


class ServerTester:
    """
    Owns one server-under-test instance for one test scope.

    When ``SERVER_COMMAND`` is unset the server is expected to be running
    already and ``start()`` only waits for it to become ready.
    """

    def __init__(
        self,
        scope: str,
        new_db: bool = False,
        *,
        server_uri: str | None = None,
        command: str | None = None,
        health_path: str | None = None,
        startup_timeout: float | None = None,
        explorer_node: ExplorerNodeClient | None = None,
        lightning: LightningEndpoints | None = None,
        network_provider: NetworkProvider | None = None,
    ):
        self.scope = scope
        self.new_db = new_db
        uri = server_uri or settings.SERVER_URL
        self.server_uri = uri if uri.endswith("/") else uri + "/"
        self.command = command if command is not None else settings.SERVER_COMMAND
        self.health_path = health_path or settings.SERVER_HEALTH_PATH
        self.startup_timeout = (
            startup_timeout if startup_timeout is not None else settings.SERVER_STARTUP_TIMEOUT
        )
        self.explorer_node = explorer_node or create_default_client()
        self.lightning = lightning or LightningEndpoints.from_settings()
        self.network_provider = network_provider or NetworkProvider(settings.CHAIN)
        self.data_dir = Path(settings.SERVER_DATA_DIR) / scope

        self._process: Optional[subprocess.Popen] = None
        self._output: Optional[IO[bytes]] = None

    @classmethod
    def create(cls, scope: str, new_db: bool = False) -> "ServerTester":
        return cls(scope, new_db)

    @property
    def in_container(self) -> bool:
        return settings.TESTS_IN_CONTAINER

    @property
    def health_url(self) -> str:
        return self.server_uri.rstrip("/") + "/" + self.health_path.lstrip("/")

    async def start(self) -> None:
        """
        Start the server (if a command is configured) and wait until it is ready.

        Raises:
            ServerStartupError: the health endpoint never answered 200.
        """
        if self.new_db and self.data_dir.exists():
            shutil.rmtree(self.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        if self.command:
            self._launch()

        await self._wait_until_ready()
        logger.info(f"[{self.scope}] Server ready at {self.server_uri}")

    def _launch(self) -> None:
        env = os.environ.copy()
        env["PAYTESTER_SCOPE"] = self.scope
        env["PAYTESTER_DATA_DIR"] = str(self.data_dir.resolve())
        env["PAYTESTER_NEW_DB"] = "1" if self.new_db else "0"

        self._output = open(self.data_dir / "server.log", "wb")
        logger.info(f"[{self.scope}] Launching server: {self.command}")
        self._process = subprocess.Popen(
            shlex.split(self.command),
            env=env,
            stdout=self._output,
            stderr=subprocess.STDOUT,
        )

    async def _wait_until_ready(self) -> None:
        deadline = time.monotonic() + self.startup_timeout
        async with httpx.AsyncClient(timeout=1) as client:
            while time.monotonic() < deadline:
                try:
                    response = await client.get(self.health_url)
                    if response.status_code == 200:
                        return
                except (httpx.ConnectError, httpx.TimeoutException):
                    pass
                if self._process is not None and self._process.poll() is not None:
                    break
                await asyncio.sleep(0.5)

        exit_code = self._process.poll() if self._process is not None else None
        await self._stop_process()
        reason = (
            f"Server exited with code {exit_code} before becoming ready"
            if exit_code is not None
            else f"Server failed to become ready within {self.startup_timeout}s"
        )
        raise ServerStartupError(
            f"{reason} ({self.health_url})", stdout=self._read_output_tail()
        )

    def _read_output_tail(self) -> str:
        log_path = self.data_dir / "server.log"
        if not log_path.exists():
            return ""
        return log_path.read_text(errors="replace")[-_OUTPUT_TAIL_CHARS:]

    async def _stop_process(self) -> None:
        process = self._process
        self._process = None
        if process is not None and process.poll() is None:
            process.send_signal(signal.SIGTERM)
            try:
                await asyncio.to_thread(process.wait, 5)
            except subprocess.TimeoutExpired:
                process.kill()
        if self._output is not None:
            self._output.close()
            self._output = None

    async def dispose(self) -> None:
        """Stop the server process (if launched) and close clients."""
        try:
            await self._stop_process()
        finally:
            await self.explorer_node.aclose()
        logger.info(f"[{self.scope}] Server disposed")
