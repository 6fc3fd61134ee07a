from __future__ import annotations


class WsEchoError(Exception):
    """Base class for errors raised by the echo server and client."""
    pass


class ConfigError(WsEchoError, ValueError):
    """Raised when an address or configuration value is invalid."""
    pass


class DialError(WsEchoError):
    """Raised when the client cannot open the WebSocket connection."""

    def __init__(self, url: str, reason: Exception):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
