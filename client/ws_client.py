from __future__ import annotations
import asyncio
from contextlib import suppress
from datetime import datetime
from typing import Optional

import websockets
from websockets.frames import CloseCode

from client.ticker import Ticker
from shared.config import EchoConfig
from shared.errors import DialError
from shared.log import get_logger
from shared.message import Message

logger = get_logger(__name__)


class EchoClient:
    """
    Heartbeat client for the echo server.

    One background task drains incoming messages (``read_loop``); the control
    loop (``run``) is the only writer. The two share nothing but ``done``,
    which the reader sets once when it stops.

    Usage:
        async with EchoClient(config, interrupt) as client:
            await client.run()
    """

    def __init__(self, config: EchoConfig, interrupt: Optional[asyncio.Event] = None) -> None:
        self.config = config
        self.interrupt = interrupt if interrupt is not None else asyncio.Event()
        self.done = asyncio.Event()
        self.websocket: Optional[websockets.ClientConnection] = None
        self._reader: Optional[asyncio.Task] = None
        self.sent = 0
        self.received = 0
        self.last_received: Optional[Message] = None

    async def __aenter__(self) -> "EchoClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def connect(self) -> None:
        """Dial the echo endpoint. Raises DialError on any handshake or socket failure."""
        url = self.config.url
        logger.info(f"connecting to {url}")
        try:
            self.websocket = await websockets.connect(url, close_timeout=self.config.close_timeout)
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
            raise DialError(url, e) from e

    def start_reader(self) -> asyncio.Task:
        assert self.websocket is not None
        if self._reader is None:
            self._reader = asyncio.create_task(self.read_loop())
        return self._reader

    async def read_loop(self) -> None:
        """Log every incoming message until the first read error, then set ``done``."""
        assert self.websocket is not None
        try:
            while True:
                try:
                    frame = await self.websocket.recv()
                except websockets.exceptions.ConnectionClosed as e:
                    logger.info(f"read: {e}")
                    return
                message = Message.from_frame(frame)
                self.received += 1
                self.last_received = message
                logger.info(f"recv: {message}")
        finally:
            self.done.set()

    async def run(self) -> None:
        """
        Control loop: wait for the first of reader-done, heartbeat tick or
        interrupt, handle exactly that one, repeat.

        Returns when the reader stops, a heartbeat write fails, or after the
        interrupt shutdown sequence. Never closes the connection itself
        except through the close frame sent on interrupt.
        """
        assert self.websocket is not None
        self.start_reader()

        ticker = Ticker(self.config.heartbeat_interval)
        done_wait = asyncio.create_task(self.done.wait())
        interrupt_wait = asyncio.create_task(self.interrupt.wait())
        tick_wait: Optional[asyncio.Task] = None

        try:
            while True:
                if tick_wait is None:
                    tick_wait = asyncio.create_task(ticker.tick())

                await asyncio.wait(
                    {done_wait, interrupt_wait, tick_wait},
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if done_wait.done():
                    return
                if interrupt_wait.done():
                    await self._shutdown()
                    return

                tick = tick_wait.result()
                tick_wait = None
                if not await self._heartbeat(tick):
                    return
        finally:
            ticker.stop()
            for task in (done_wait, interrupt_wait, tick_wait):
                if task is not None and not task.done():
                    task.cancel()
                    with suppress(asyncio.CancelledError):
                        await task

    async def _heartbeat(self, tick: datetime) -> bool:
        """Send the tick timestamp as text. Returns False when the write failed."""
        assert self.websocket is not None
        message = Message.text(str(tick))
        try:
            await self.websocket.send(message.to_frame())
        except websockets.exceptions.ConnectionClosed as e:
            logger.warning(f"write: {e}")
            return False
        self.sent += 1
        logger.info(f"send: {message}")
        return True

    async def _shutdown(self) -> None:
        """
        Send a normal-closure close frame, then wait up to ``close_timeout``
        for the reader to see the peer's close.
        """
        assert self.websocket is not None
        logger.info("interrupt")

        loop = asyncio.get_running_loop()
        timeout = self.config.close_timeout
        deadline = loop.time() + timeout

        try:
            await asyncio.wait_for(
                self.websocket.close(code=CloseCode.NORMAL_CLOSURE, reason=""),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.info(f"close timed out after {timeout}s")
            return
        except (OSError, websockets.exceptions.WebSocketException) as e:
            logger.error(f"write close: {e}")
            return

        if not self.done.is_set():
            remaining = deadline - loop.time()
            try:
                await asyncio.wait_for(self.done.wait(), timeout=max(remaining, 0.001))
            except asyncio.TimeoutError:
                logger.info(f"close timed out after {timeout}s")
                return
        logger.info("<-done: server acknowledged close")

    async def close(self) -> None:
        """Stop the reader and release the connection. Safe to call twice."""
        if self._reader is not None and not self._reader.done():
            self._reader.cancel()
            with suppress(asyncio.CancelledError):
                await self._reader
        if self.websocket is not None:
            await self.websocket.close()
            logger.debug(f"Connection to {self.config.url} released")
