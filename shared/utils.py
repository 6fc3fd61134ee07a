from __future__ import annotations
from typing import Tuple

from shared.errors import ConfigError

# ========================================
#           ADDRESS HELPERS
# ========================================


def split_hostport(s: str) -> Tuple[str, int]:
    """
    Split 'host:port' into ``(host, port)``.

    - rsplit on the last colon so a bracketed IPv6 host like '[::1]:8080' works
    - brackets are stripped from the host
    - port must be an integer between 0 and 65535; 0 lets the OS pick one when listening

    Raises:
        ConfigError: when the string is not a valid host:port pair.
    """
    if not isinstance(s, str) or ':' not in s:
        raise ConfigError(f"address {s!r} must be host:port")
    host, port_s = s.rsplit(':', 1)
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    try:
        port = int(port_s)
    except ValueError:
        raise ConfigError(f"address {s!r} has a non-numeric port") from None
    if not 0 <= port <= 65535:
        raise ConfigError(f"address {s!r} has port out of range 0-65535")
    return host, port
