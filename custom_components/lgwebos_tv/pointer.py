"""Pointer input socket used to send remote-control buttons."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from .const import EP_POINTER_SOCKET
from .errors import ConnectionClosedError, PointerUnavailableError
from .session import SessionTransport

_LOGGER = logging.getLogger(__name__)


class PointerChannel:
    """Secondary socket for discrete button events.

    Valid for one control session only; the supervisor drops it on every
    disconnect and acquires a new one after every reconnect.
    """

    def __init__(self, ws: Any) -> None:
        """Initialize pointer channel."""
        self._ws = ws

    @property
    def is_open(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def async_send_button(self, name: str) -> None:
        """Send one button press."""
        if not self.is_open:
            raise PointerUnavailableError("pointer channel closed")
        try:
            await self._ws.send_str(f"type:button\nname:{name}\n\n")
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as ex:
            raise ConnectionClosedError(f"pointer send failed: {ex}") from ex
        _LOGGER.debug("Sent button %s", name)

    async def async_close(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is not None and not ws.closed:
            try:
                await ws.close()
            except (aiohttp.ClientError, OSError) as ex:
                _LOGGER.debug("Error closing pointer socket: %s", ex)


async def async_acquire_pointer_channel(session: SessionTransport) -> PointerChannel:
    """Obtain the pointer socket for the current session."""
    ws = await session.async_get_socket(EP_POINTER_SOCKET)
    return PointerChannel(ws)
