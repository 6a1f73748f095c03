from __future__ import annotations

import asyncio

import pytest

from custom_components.lgwebos_tv.errors import (
    ConnectionClosedError,
    ProtocolError,
    RequestTimeoutError,
)
from custom_components.lgwebos_tv.multiplexer import RequestMultiplexer


class RecordingSender:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def __call__(self, message: dict) -> None:
        self.sent.append(message)


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def mux(sender) -> RequestMultiplexer:
    multiplexer = RequestMultiplexer(request_timeout=0.2)
    multiplexer.attach(sender)
    return multiplexer


async def test_request_correlates_reply(mux, sender) -> None:
    task = asyncio.create_task(mux.async_request("ssap://audio/getVolume"))
    await asyncio.sleep(0)

    message = sender.sent[0]
    assert message["type"] == "request"
    assert message["uri"] == "ssap://audio/getVolume"
    assert "payload" not in message

    mux.handle_message({"id": "unknown", "type": "response", "payload": {"volume": 1}})
    mux.handle_message({"id": message["id"], "type": "response", "payload": {"returnValue": True, "volume": 9}})
    assert (await task)["volume"] == 9
    assert mux.pending_count == 0


async def test_concurrent_requests_get_their_own_replies(mux, sender) -> None:
    first = asyncio.create_task(mux.async_request("ssap://a", {"x": 1}))
    second = asyncio.create_task(mux.async_request("ssap://b"))
    await asyncio.sleep(0)
    first_id, second_id = (m["id"] for m in sender.sent)
    assert first_id != second_id

    mux.handle_message({"id": second_id, "type": "response", "payload": {"which": "b"}})
    mux.handle_message({"id": first_id, "type": "response", "payload": {"which": "a"}})
    assert (await first)["which"] == "a"
    assert (await second)["which"] == "b"


@pytest.mark.parametrize(
    "reply",
    [
        {"type": "error", "error": "404 no such service"},
        {"type": "response", "payload": {"returnValue": False, "errorText": "denied"}},
        {"type": "response", "payload": {"errorCode": -1000}},
        {"type": "response", "payload": "nope"},
    ],
)
async def test_error_replies_raise_protocol_error(mux, sender, reply) -> None:
    task = asyncio.create_task(mux.async_request("ssap://system.launcher/launch"))
    await asyncio.sleep(0)
    mux.handle_message({"id": sender.sent[0]["id"], **reply})
    with pytest.raises(ProtocolError) as err:
        await task
    assert err.value.uri == "ssap://system.launcher/launch"


async def test_request_times_out(mux) -> None:
    with pytest.raises(RequestTimeoutError):
        await mux.async_request("ssap://slow", timeout=0.01)
    assert mux.pending_count == 0


async def test_reset_fails_pending_requests(mux) -> None:
    task = asyncio.create_task(mux.async_request("ssap://a"))
    await asyncio.sleep(0)
    mux.reset("socket dropped")
    with pytest.raises(ConnectionClosedError):
        await task
    assert not mux.is_connected


async def test_requests_fail_fast_without_session() -> None:
    mux = RequestMultiplexer()
    with pytest.raises(ConnectionClosedError):
        await mux.async_request("ssap://a")
    with pytest.raises(ConnectionClosedError):
        await mux.async_subscribe("ssap://a", lambda payload: None)


async def test_subscription_receives_pushes_in_order(mux, sender) -> None:
    received: list[int] = []
    subscription_id = await mux.async_subscribe("ssap://audio/getVolume", lambda p: received.append(p["volume"]))
    assert sender.sent[0] == {"id": subscription_id, "type": "subscribe", "uri": "ssap://audio/getVolume"}

    for volume in (1, 2, 3):
        mux.handle_message({"id": subscription_id, "type": "response", "payload": {"volume": volume}})
    assert received == [1, 2, 3]


async def test_subscription_survives_bad_push_and_handler_errors(mux) -> None:
    received: list[int] = []

    def handler(payload: dict) -> None:
        if payload["volume"] == 2:
            raise ValueError("boom")
        received.append(payload["volume"])

    subscription_id = await mux.async_subscribe("ssap://audio/getVolume", handler)
    mux.handle_message({"id": subscription_id, "type": "error", "error": "500"})
    mux.handle_message({"id": subscription_id, "type": "response", "payload": {"volume": 2}})
    mux.handle_message({"id": subscription_id, "type": "response", "payload": {"volume": 3}})
    assert received == [3]


async def test_reset_drops_subscriptions(mux) -> None:
    received: list[dict] = []
    subscription_id = await mux.async_subscribe("ssap://a", received.append)
    mux.reset()
    mux.handle_message({"id": subscription_id, "type": "response", "payload": {"x": 1}})
    assert received == []
    assert mux.subscription_count == 0


async def test_unsubscribe(mux, sender) -> None:
    received: list[dict] = []
    subscription_id = await mux.async_subscribe("ssap://a", received.append)
    await mux.async_unsubscribe(subscription_id)
    assert sender.sent[-1] == {"id": subscription_id, "type": "unsubscribe", "uri": "ssap://a"}
    mux.handle_message({"id": subscription_id, "type": "response", "payload": {"x": 1}})
    assert received == []
