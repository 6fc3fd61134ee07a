import asyncio
from contextlib import asynccontextmanager
from typing import Any, List, Optional

import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK
from websockets.frames import Close

from server.server import EchoServer
from shared.config import EchoConfig


class DummyWebSocket:
    """In-memory stand-in for a websockets connection.

    Frames queued with ``feed`` are returned by ``recv``; ``feed_close``
    makes the next ``recv`` raise the matching ConnectionClosed. ``close``
    records the close frame and, when ``ack_close`` is set, makes the peer
    answer it.
    """

    def __init__(self, *frames: Any, ack_close: bool = True) -> None:
        self.incoming: asyncio.Queue = asyncio.Queue()
        self.sent: List[Any] = []
        self.close_calls: List[tuple] = []
        self.closed = False
        self.close_code: Optional[int] = None
        self.close_reason: Optional[str] = None
        self.ack_close = ack_close
        self.fail_send = False
        self.fail_close = False
        self.remote_address = ("127.0.0.1", 50000)
        for frame in frames:
            self.feed(frame)

    def feed(self, frame: Any) -> None:
        self.incoming.put_nowait(frame)

    def feed_close(self, code: int = 1000, reason: str = "") -> None:
        frame = Close(code, reason)
        if code == 1000:
            self.incoming.put_nowait(ConnectionClosedOK(frame, frame, True))
        else:
            self.incoming.put_nowait(ConnectionClosedError(frame, None))

    async def recv(self) -> Any:
        item = await self.incoming.get()
        if isinstance(item, BaseException):
            # stay closed for any later reader
            self.incoming.put_nowait(item)
            raise item
        return item

    async def send(self, data: Any) -> None:
        if self.fail_send:
            raise ConnectionClosedError(None, None)
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.close_calls.append((code, reason))
        if self.fail_close:
            raise ConnectionClosedError(None, None)
        if self.closed:
            return
        self.closed = True
        self.close_code = code
        self.close_reason = reason
        if self.ack_close:
            self.feed_close(code, reason)


@pytest.fixture
def dummy_websocket():
    return DummyWebSocket


@pytest.fixture
def echo_server():
    """Factory for a running EchoServer on an ephemeral port.

    Usage:
        async with echo_server() as (server, port):
            ...
    """

    @asynccontextmanager
    async def _running(config: Optional[EchoConfig] = None):
        server = EchoServer(config or EchoConfig(addr="127.0.0.1:0"))
        async with server.serve() as ws_server:
            port = ws_server.sockets[0].getsockname()[1]
            yield server, port

    return _running

