"""LG webOS TV control session over WebSocket (SSAP)."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

import aiohttp

from .const import (
    CLIENT_MANIFEST,
    CONNECTION_TIMEOUT,
    HEARTBEAT_INTERVAL,
    RECONNECT_INTERVAL,
)
from .errors import ConnectionClosedError, LgWebOsError, PairingRequiredError, ProtocolError
from .models import SessionEvent
from .multiplexer import RequestMultiplexer

_LOGGER = logging.getLogger(__name__)

REGISTER_ID = "register_0"

EventCallback = Callable[[SessionEvent, Any], None]
KeyCallback = Callable[[str], Awaitable[None]]


def _redact_key(message: dict[str, Any]) -> dict[str, Any]:
    """Copy of a handshake message with the client key masked for logging."""
    payload = message.get("payload")
    if isinstance(payload, dict) and "client-key" in payload:
        return {**message, "payload": {**payload, "client-key": "***"}}
    return message


class SessionTransport:
    """One control-channel connection to the TV.

    Owns the connect/register handshake, the pairing key exchange, the
    WebSocket heartbeat and the fixed-interval reconnect loop. Lifecycle is
    reported through event_callback; request and subscription traffic goes
    through the multiplexer once the session is registered.
    """

    def __init__(
        self,
        url: str,
        client_session: aiohttp.ClientSession,
        multiplexer: RequestMultiplexer,
        *,
        client_key: str | None = None,
        key_callback: KeyCallback | None = None,
        event_callback: EventCallback | None = None,
        reconnect_interval: float = RECONNECT_INTERVAL,
        connection_timeout: float = CONNECTION_TIMEOUT,
        heartbeat: float = HEARTBEAT_INTERVAL,
    ) -> None:
        """Initialize session transport."""
        self.url = url
        self.client_key = client_key
        self.multiplexer = multiplexer
        self.reconnect_interval = reconnect_interval
        self.connection_timeout = connection_timeout
        self.heartbeat = heartbeat

        self._client_session = client_session
        self._key_callback = key_callback
        self._event_callback = event_callback
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._run_task: asyncio.Task | None = None
        self._registered = False
        self._connect_attempts = 0

    @property
    def is_running(self) -> bool:
        """Return True while the connect/reconnect loop is active."""
        return self._run_task is not None and not self._run_task.done()

    @property
    def is_connected(self) -> bool:
        """Return True once the session is registered."""
        return self._registered

    @property
    def connect_attempts(self) -> int:
        return self._connect_attempts

    def set_event_callback(self, callback: EventCallback | None) -> None:
        self._event_callback = callback

    async def async_connect(self) -> None:
        """Start the connect loop. No-op while it is already running."""
        if self.is_running:
            _LOGGER.debug("Connect to %s ignored, session loop already running", self.url)
            return
        self._run_task = asyncio.create_task(self._async_run())

    async def async_disconnect(self) -> None:
        """Stop the connect loop and close the session."""
        task = self._run_task
        self._run_task = None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._async_teardown()

    async def async_get_socket(self, uri: str) -> aiohttp.ClientWebSocketResponse:
        """Request a secondary socket path from uri and open it."""
        payload = await self.multiplexer.async_request(uri)
        socket_path = payload.get("socketPath")
        if not socket_path:
            raise ProtocolError("reply carries no socketPath", uri)
        try:
            return await asyncio.wait_for(
                self._client_session.ws_connect(socket_path),
                timeout=self.connection_timeout,
            )
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as ex:
            raise ConnectionClosedError(f"could not open {socket_path}: {ex}") from ex

    def _emit(self, event: SessionEvent, detail: Any = None) -> None:
        if self._event_callback is None:
            return
        try:
            self._event_callback(event, detail)
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Error handling session event %s", event.value)

    async def _async_run(self) -> None:
        """Connect, serve until the socket closes, wait, repeat.

        A rejected registration ends the loop: retrying would only make the TV
        show the pairing prompt again. The next async_connect starts over.
        """
        while True:
            self._connect_attempts += 1
            self._emit(SessionEvent.CONNECTING)
            rejected: PairingRequiredError | None = None
            try:
                await self._async_serve_once()
            except asyncio.CancelledError:
                raise
            except PairingRequiredError as ex:
                rejected = ex
            except (aiohttp.ClientError, OSError, asyncio.TimeoutError, LgWebOsError) as ex:
                _LOGGER.debug("Session to %s failed: %s (%s)", self.url, ex, type(ex).__name__)
                self._emit(SessionEvent.ERROR, ex)
            finally:
                await self._async_teardown()

            if rejected is not None:
                _LOGGER.info("Not reconnecting to %s until pairing is retried", self.url)
                self._emit(SessionEvent.PROMPT, rejected)
                return

            self._emit(SessionEvent.CLOSE)
            _LOGGER.debug("Reconnecting to %s in %.1fs", self.url, self.reconnect_interval)
            await asyncio.sleep(self.reconnect_interval)

    async def _async_serve_once(self) -> None:
        """Open the socket, register, and read until it closes."""
        _LOGGER.debug(
            "Connecting to %s (client key present=%s)", self.url, self.client_key is not None
        )
        ws = await asyncio.wait_for(
            self._client_session.ws_connect(self.url, heartbeat=self.heartbeat),
            timeout=self.connection_timeout,
        )
        self._ws = ws
        await ws.send_json(self._register_message())

        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    message = json.loads(msg.data)
                except ValueError:
                    _LOGGER.debug("Ignoring malformed frame from %s: %s", self.url, msg.data)
                    continue
                if not isinstance(message, dict):
                    _LOGGER.debug("Ignoring non-object frame from %s", self.url)
                    continue
                if message.get("id") == REGISTER_ID:
                    await self._async_handle_register_reply(message)
                else:
                    self.multiplexer.handle_message(message)
            elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.CLOSING):
                break
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise ConnectionClosedError(f"socket error: {ws.exception()}")

        _LOGGER.debug("Session to %s closed by peer", self.url)

    def _register_message(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "forcePairing": False,
            "pairingType": "PROMPT",
            "manifest": CLIENT_MANIFEST,
        }
        if self.client_key:
            payload["client-key"] = self.client_key
        return {"id": REGISTER_ID, "type": "register", "payload": payload}

    async def _async_handle_register_reply(self, message: dict[str, Any]) -> None:
        msg_type = message.get("type")
        payload = message.get("payload") or {}

        if msg_type == "registered":
            key = payload.get("client-key")
            if key and key != self.client_key:
                self.client_key = key
                _LOGGER.info("TV at %s issued a new pairing key", self.url)
                await self._async_save_key(key)
            self._registered = True
            self.multiplexer.attach(self._async_send_json)
            _LOGGER.info("Registered with TV at %s", self.url)
            self._emit(SessionEvent.CONNECT)
        elif msg_type == "response" and payload.get("pairingType") == "PROMPT":
            _LOGGER.info("TV at %s is waiting for the pairing prompt to be confirmed", self.url)
            self._emit(SessionEvent.PROMPT)
        elif msg_type == "error":
            _LOGGER.warning("TV at %s rejected registration: %s", self.url, message.get("error"))
            raise PairingRequiredError(str(message.get("error") or "registration rejected"))
        else:
            _LOGGER.debug("Unhandled register reply: %s", _redact_key(message))

    async def _async_save_key(self, key: str) -> None:
        if self._key_callback is None:
            return
        try:
            await self._key_callback(key)
        except Exception as ex:  # noqa: BLE001
            _LOGGER.warning("Error saving pairing key: %s", ex)

    async def _async_send_json(self, message: dict[str, Any]) -> None:
        ws = self._ws
        if ws is None or ws.closed:
            raise ConnectionClosedError("socket closed")
        try:
            await ws.send_json(message)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as ex:
            raise ConnectionClosedError(str(ex)) from ex

    async def _async_teardown(self) -> None:
        self._registered = False
        self.multiplexer.reset("connection closed")
        ws = self._ws
        self._ws = None
        if ws is not None and not ws.closed:
            try:
                await ws.close()
            except (aiohttp.ClientError, OSError) as ex:
                _LOGGER.debug("Error closing session socket: %s", ex)
