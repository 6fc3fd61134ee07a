#!/usr/bin/env python3

from __future__ import annotations
import asyncio
import email.utils
from http import HTTPStatus
from typing import Any, Optional
from urllib.parse import urlsplit

import typer
import websockets
from rich.console import Console
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from server.page import render_home
from shared.config import EchoConfig, load_config
from shared.errors import ConfigError
from shared.log import configure_root_logging, get_logger
from shared.message import Message
from shared.signals import install_interrupt_handler

# Configure logging
logger = get_logger(__name__)

app = typer.Typer(help="WebSocket echo server", add_completion=False)
console = Console()


def format_peer(address: Any) -> str:
    """Render a socket address tuple as host:port."""
    if isinstance(address, tuple) and len(address) >= 2:
        host, port = address[0], address[1]
        if ":" in str(host):
            return f"[{host}]:{port}"
        return f"{host}:{port}"
    return str(address)


class EchoServer:
    """
    Echo server: ``/echo`` upgrades to a WebSocket whose messages are sent
    straight back; every other path serves the HTML test page.
    """

    def __init__(self, config: EchoConfig):
        self.config = config

    def serve(self) -> websockets.serve:
        """Return the ``websockets.serve`` context manager for this server."""
        return websockets.serve(
            self.handle_connection,
            self.config.listen_host,
            self.config.port,
            process_request=self.process_request,
            process_response=self.process_response,
        )

    async def start_server(self, stop: Optional[asyncio.Event] = None) -> None:
        """Serve until ``stop`` is set, or forever when no event is given."""
        logger.info(f"Starting echo server on {self.config.addr}")

        async with self.serve():
            logger.info(f"Echo server listening on http://{self.config.addr}/ (WebSocket at {self.config.echo_path})")
            if stop is None:
                await asyncio.Future()  # Run forever
            else:
                await stop.wait()
            logger.info("Echo server shutting down")

    # ========================================
    #           HTTP ROUTING
    # ========================================

    def _is_echo_path(self, request: Request) -> bool:
        return urlsplit(request.path).path == self.config.echo_path

    def process_request(
        self, connection: websockets.ServerConnection, request: Request
    ) -> Optional[Response]:
        """Let echo-path requests through to the handshake; answer the rest with the page."""
        if self._is_echo_path(request):
            return None

        host = request.headers.get("Host") or self.config.addr
        body = render_home(host, self.config.echo_path).encode("utf-8")
        headers = Headers(
            [
                ("Date", email.utils.formatdate(usegmt=True)),
                ("Connection", "close"),
                ("Content-Length", str(len(body))),
                ("Content-Type", "text/html; charset=utf-8"),
            ]
        )
        logger.debug(f"GET {request.path} from {format_peer(connection.remote_address)}")
        return Response(HTTPStatus.OK.value, HTTPStatus.OK.phrase, headers, body)

    def process_response(
        self,
        connection: websockets.ServerConnection,
        request: Request,
        response: Response,
    ) -> None:
        """Log echo-path handshakes that did not switch protocols."""
        if self._is_echo_path(request) and response.status_code != HTTPStatus.SWITCHING_PROTOCOLS:
            logger.warning(
                "upgrade: %d %s",
                response.status_code,
                response.reason_phrase,
                extra={"remote": format_peer(connection.remote_address)},
            )
        return None

    # ========================================
    #           ECHO LOOP
    # ========================================

    async def handle_connection(self, websocket: websockets.ServerConnection) -> None:
        """
        Echo every message back to the peer until the first I/O error.

        Reads and writes strictly alternate. A read or write failure ends the
        loop for this connection only; the connection is closed on every path.
        """
        context = {"remote": format_peer(websocket.remote_address)}
        logger.info("Connection opened", extra=context)
        echoed = 0

        try:
            while True:
                try:
                    message = Message.from_frame(await websocket.recv())
                except websockets.exceptions.ConnectionClosedOK as e:
                    logger.info(f"read: {e}", extra=context)
                    break
                except websockets.exceptions.ConnectionClosed as e:
                    logger.warning(f"read: {e}", extra=context)
                    break

                logger.info(f"recv: {message}", extra={**context, "msg_type": message.type.value})

                try:
                    await websocket.send(message.to_frame())
                except websockets.exceptions.ConnectionClosed as e:
                    logger.warning(f"write: {e}", extra=context)
                    break
                logger.debug(f"send: {message}", extra={**context, "msg_type": message.type.value})
                echoed += 1
        finally:
            await websocket.close()
            logger.info(f"Connection closed after {echoed} messages", extra=context)


async def run_server(config: EchoConfig) -> None:
    """Serve until SIGINT/SIGTERM."""
    stop = asyncio.Event()
    install_interrupt_handler(stop)
    await EchoServer(config).start_server(stop)


@app.command()
def serve(
    addr: Optional[str] = typer.Option(None, help="http service address (default localhost:8080)"),
):
    """Run the echo server."""
    configure_root_logging()
    try:
        config = load_config(addr)
    except ConfigError as e:
        logger.critical(f"config: {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold green]wsecho server[/] on http://{config.addr}/")
    try:
        asyncio.run(run_server(config))
    except OSError as e:
        logger.critical(f"listen: {e}")
        raise typer.Exit(code=1)


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
