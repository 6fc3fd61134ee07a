from __future__ import annotations
import asyncio
import signal
from typing import Tuple

from shared.log import get_logger

logger = get_logger(__name__)

INTERRUPT_SIGNALS: Tuple[signal.Signals, ...] = tuple(
    sig for sig in (signal.SIGINT, getattr(signal, "SIGTERM", None)) if sig is not None
)


def install_interrupt_handler(event: asyncio.Event) -> None:
    """Set ``event`` when the process receives SIGINT or SIGTERM.

    Must be called from inside the running event loop.
    """
    loop = asyncio.get_running_loop()
    for sig in INTERRUPT_SIGNALS:
        try:
            loop.add_signal_handler(sig, event.set)
        except NotImplementedError:
            # Windows event loops have no add_signal_handler
            signal.signal(sig, lambda _signum, _frame: loop.call_soon_threadsafe(event.set))
        logger.debug("Installed handler for %s", sig.name)
