#!/usr/bin/env python3

from __future__ import annotations
import asyncio
from typing import Optional

import typer
from rich.console import Console

from shared.config import EchoConfig, load_config
from shared.errors import ConfigError, DialError
from shared.log import configure_root_logging, get_logger
from shared.signals import install_interrupt_handler
from .ws_client import EchoClient

app = typer.Typer(help="WebSocket echo client", add_completion=False)
console = Console()
logger = get_logger(__name__)


async def run_client(config: EchoConfig) -> None:
    """Dial, then heartbeat until the server goes away or the process is interrupted."""
    interrupt = asyncio.Event()
    install_interrupt_handler(interrupt)

    async with EchoClient(config, interrupt) as client:
        await client.run()
    logger.info(f"sent {client.sent} heartbeats, received {client.received} messages")


@app.command()
def run(
    addr: Optional[str] = typer.Option(None, help="http service address (default localhost:8080)"),
):
    """Connect to the echo server and send a timestamp every few seconds."""
    configure_root_logging()
    try:
        config = load_config(addr)
    except ConfigError as e:
        logger.critical(f"config: {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold green]wsecho client[/] dialing {config.url}")
    try:
        asyncio.run(run_client(config))
    except DialError as e:
        logger.critical(f"dial: {e}")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
