#!/usr/bin/env python3
"""
Runtime configuration for the echo server and client.

The configuration is read once at startup and handed to the component as an
immutable ``EchoConfig``. Sources, lowest precedence first:

    1. built-in defaults
    2. YAML file named by ``WSECHO_CONFIG``
    3. ``WSECHO_ADDR`` environment variable
    4. the ``--addr`` command-line flag

Example YAML:

    addr: "localhost:9000"
    echo_path: "/echo"
    heartbeat_interval: 5
    close_timeout: 10
"""

from __future__ import annotations
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from shared.errors import ConfigError
from shared.log import get_logger
from shared.utils import split_hostport

logger = get_logger(__name__)

DEFAULT_ADDR = "localhost:8080"
DEFAULT_ECHO_PATH = "/echo"
DEFAULT_HEARTBEAT_INTERVAL = 5.0
DEFAULT_CLOSE_TIMEOUT = 10.0

ADDR_ENV = "WSECHO_ADDR"
CONFIG_ENV = "WSECHO_CONFIG"


@dataclass(frozen=True)
class EchoConfig:
    addr: str = DEFAULT_ADDR
    echo_path: str = DEFAULT_ECHO_PATH
    heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL   # seconds between client heartbeats
    close_timeout: float = DEFAULT_CLOSE_TIMEOUT             # grace period after sending close

    def __post_init__(self) -> None:
        split_hostport(self.addr)
        if not isinstance(self.echo_path, str) or not self.echo_path.startswith("/"):
            raise ConfigError(f"echo_path {self.echo_path!r} must start with '/'")
        for name in ("heartbeat_interval", "close_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"{name} must be a positive number, got {value!r}")

    @property
    def host(self) -> str:
        return split_hostport(self.addr)[0]

    @property
    def port(self) -> int:
        return split_hostport(self.addr)[1]

    @property
    def listen_host(self) -> Optional[str]:
        """Host to bind; ``None`` listens on every interface."""
        return self.host or None

    @property
    def url(self) -> str:
        """WebSocket URL the client dials."""
        host = self.host or "localhost"
        if ":" in host:
            host = f"[{host}]"
        return f"ws://{host}:{self.port}{self.echo_path}"

    def with_addr(self, addr: Optional[str]) -> "EchoConfig":
        return replace(self, addr=addr) if addr else self


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Load the YAML config file. Returns an empty dict for an empty document."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    known = {f.name for f in fields(EchoConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown config keys in {path}: {', '.join(map(str, unknown))}")
    return data


def load_config(
    addr: Optional[str] = None,
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EchoConfig:
    """
    Build the process configuration.

    Args:
        addr: value of the ``--addr`` flag, if given
        path: explicit YAML file; defaults to ``WSECHO_CONFIG`` when unset
        environ: environment mapping, ``os.environ`` by default

    Raises:
        ConfigError: on unreadable files, unknown keys or invalid values.
    """
    env = os.environ if environ is None else environ

    values: Dict[str, Any] = {}
    if path is None and env.get(CONFIG_ENV):
        path = Path(env[CONFIG_ENV]).expanduser()
    if path is not None:
        values.update(_read_yaml(path))
        logger.debug("Loaded config from %s", path)

    if env.get(ADDR_ENV):
        values["addr"] = env[ADDR_ENV]

    config = EchoConfig(**values)
    return config.with_addr(addr)
