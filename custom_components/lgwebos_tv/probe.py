"""TCP reachability probe for the TV control port."""

from __future__ import annotations

import asyncio
import logging

from .const import PROBE_TIMEOUT

_LOGGER = logging.getLogger(__name__)


async def async_probe(host: str, port: int, timeout: float = PROBE_TIMEOUT) -> bool:
    """Return True if host:port accepts a TCP connection within timeout.

    A failed probe is a routine liveness signal, not an error.
    """
    try:
        _reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout,
        )
    except (asyncio.TimeoutError, OSError) as ex:
        _LOGGER.debug("TCP probe to %s:%d failed: %s", host, port, ex)
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError as ex:
        _LOGGER.debug("Error closing probe connection to %s:%d: %s", host, port, ex)
    return True
