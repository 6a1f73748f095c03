"""Request/response correlation and subscriptions over one control session."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Awaitable, Callable

from .const import REQUEST_TIMEOUT
from .errors import ConnectionClosedError, ProtocolError, RequestTimeoutError

_LOGGER = logging.getLogger(__name__)

Sender = Callable[[dict[str, Any]], Awaitable[None]]
PushHandler = Callable[[dict[str, Any]], None]


def reply_payload(uri: str, message: dict[str, Any]) -> dict[str, Any]:
    """Return the payload of a reply or raise ProtocolError if it reports a failure."""
    if message.get("type") == "error":
        raise ProtocolError(str(message.get("error") or "error reply"), uri)
    payload = message.get("payload")
    if not isinstance(payload, dict):
        raise ProtocolError(f"malformed payload: {payload!r}", uri)
    if "errorCode" in payload or payload.get("returnValue") is False:
        text = payload.get("errorText") or payload.get("errorCode") or "returnValue false"
        raise ProtocolError(str(text), uri)
    return payload


class _Subscription:
    """A durable registration for pushes from one endpoint."""

    __slots__ = ("uri", "handler")

    def __init__(self, uri: str, handler: PushHandler) -> None:
        self.uri = uri
        self.handler = handler


class RequestMultiplexer:
    """Multiplex one-shot requests and subscriptions over the session transport.

    The transport attaches a sender once the session is registered and resets
    the multiplexer when the session drops. Subscriptions never survive a
    reset; they are re-issued by the next bootstrap.
    """

    def __init__(self, request_timeout: float = REQUEST_TIMEOUT) -> None:
        self.request_timeout = request_timeout
        self._sender: Sender | None = None
        self._ids = itertools.count(1)
        self._pending: dict[str, tuple[str, asyncio.Future]] = {}
        self._subscriptions: dict[str, _Subscription] = {}

    @property
    def is_connected(self) -> bool:
        return self._sender is not None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def attach(self, sender: Sender) -> None:
        """Start routing outbound messages through sender."""
        self._sender = sender

    def reset(self, reason: str = "connection closed") -> None:
        """Fail every pending request and drop every subscription."""
        self._sender = None
        pending = list(self._pending.values())
        self._pending.clear()
        for _uri, future in pending:
            if not future.done():
                future.set_exception(ConnectionClosedError(reason))
        if self._subscriptions:
            _LOGGER.debug("Dropping %d subscription(s): %s", len(self._subscriptions), reason)
        self._subscriptions.clear()

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._ids)}"

    async def _send(self, message: dict[str, Any]) -> None:
        if self._sender is None:
            raise ConnectionClosedError("not connected")
        await self._sender(message)

    async def async_request(
        self,
        uri: str,
        payload: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Send a one-shot request and wait for its correlated reply."""
        if self._sender is None:
            raise ConnectionClosedError("not connected")

        message_id = self._next_id("request")
        message: dict[str, Any] = {"id": message_id, "type": "request", "uri": uri}
        if payload is not None:
            message["payload"] = payload

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[message_id] = (uri, future)
        try:
            await self._send(message)
            reply = await asyncio.wait_for(future, timeout=timeout or self.request_timeout)
        except asyncio.TimeoutError as ex:
            raise RequestTimeoutError(f"no reply to {uri}") from ex
        finally:
            self._pending.pop(message_id, None)

        return reply_payload(uri, reply)

    async def async_subscribe(
        self,
        uri: str,
        handler: PushHandler,
        payload: dict[str, Any] | None = None,
    ) -> str:
        """Register handler for every push from uri. Returns the subscription id.

        Does not wait for the first push.
        """
        if self._sender is None:
            raise ConnectionClosedError("not connected")

        subscription_id = self._next_id("subscribe")
        message: dict[str, Any] = {"id": subscription_id, "type": "subscribe", "uri": uri}
        if payload is not None:
            message["payload"] = payload

        # Register before sending so the first push cannot be missed.
        self._subscriptions[subscription_id] = _Subscription(uri, handler)
        try:
            await self._send(message)
        except Exception:
            self._subscriptions.pop(subscription_id, None)
            raise
        _LOGGER.debug("Subscribed to %s (%s)", uri, subscription_id)
        return subscription_id

    async def async_unsubscribe(self, subscription_id: str) -> None:
        """Cancel a subscription."""
        subscription = self._subscriptions.pop(subscription_id, None)
        if subscription is None or self._sender is None:
            return
        try:
            await self._send({"id": subscription_id, "type": "unsubscribe", "uri": subscription.uri})
        except ConnectionClosedError:
            _LOGGER.debug("Connection closed while unsubscribing from %s", subscription.uri)

    def handle_message(self, message: dict[str, Any]) -> None:
        """Dispatch one inbound message by id."""
        message_id = message.get("id")

        subscription = self._subscriptions.get(message_id) if message_id else None
        if subscription is not None:
            self._deliver(subscription, message)
            return

        entry = self._pending.get(message_id) if message_id else None
        if entry is not None:
            _uri, future = entry
            if not future.done():
                future.set_result(message)
            return

        _LOGGER.debug("Unmatched message: id=%s type=%s", message_id, message.get("type"))

    def _deliver(self, subscription: _Subscription, message: dict[str, Any]) -> None:
        try:
            payload = reply_payload(subscription.uri, message)
        except ProtocolError as ex:
            _LOGGER.warning("Error push from %s: %s", subscription.uri, ex)
            return
        try:
            subscription.handler(payload)
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Error handling push from %s", subscription.uri)
