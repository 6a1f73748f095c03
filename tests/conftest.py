from __future__ import annotations

import asyncio
import copy
import json
from typing import Any, Callable

import aiohttp
import pytest

from custom_components.lgwebos_tv.const import (
    EP_APP_LIST,
    EP_CURRENT_CHANNEL,
    EP_FOREGROUND_APP,
    EP_POINTER_SOCKET,
    EP_POWER_STATE,
    EP_SERVICE_LIST,
    EP_SOFTWARE_INFO,
    EP_SYSTEM_INFO,
    EP_VOLUME,
)
from custom_components.lgwebos_tv.device import LgWebOsTvDevice
from custom_components.lgwebos_tv.errors import PointerUnavailableError
from custom_components.lgwebos_tv.models import DeviceProfile, InputCatalog
from custom_components.lgwebos_tv.multiplexer import RequestMultiplexer
from custom_components.lgwebos_tv.storage import DeviceStorage

HOST = "192.168.1.5"
MAC = "AA:BB:CC:DD:EE:FF"
POINTER_PATH = f"ws://{HOST}:3000/resources/pointer"
INPUTS = [
    {"reference": "com.webos.app.livetv", "name": "Live TV"},
    {"reference": "com.webos.app.hdmi1", "name": "HDMI 1"},
    "netflix",
]


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.001)


class FakeStore:
    def __init__(self, key: str, files: dict[str, Any], fail: bool = False) -> None:
        self.key = key
        self.files = files
        self.fail = fail

    async def async_load(self) -> Any:
        if self.fail:
            raise OSError("disk unavailable")
        return copy.deepcopy(self.files.get(self.key))

    async def async_save(self, data: Any) -> None:
        if self.fail:
            raise OSError("disk unavailable")
        self.files[self.key] = copy.deepcopy(data)


class FakeStoreFactory:
    def __init__(self, files: dict[str, Any], fail: bool = False) -> None:
        self.files = files
        self.fail = fail

    def __call__(self, key: str) -> FakeStore:
        return FakeStore(key, self.files, fail=self.fail)


class FakeMessage:
    def __init__(self, msg_type: aiohttp.WSMsgType, data: Any = None) -> None:
        self.type = msg_type
        self.data = data


class FakeWebSocket:
    """Enough of aiohttp.ClientWebSocketResponse for the session and pointer."""

    def __init__(self, tv: FakeTV, url: str) -> None:
        self.tv = tv
        self.url = url
        self.sent: list[Any] = []
        self.closed = False
        self._inbox: asyncio.Queue[FakeMessage] = asyncio.Queue()

    async def send_json(self, message: dict[str, Any]) -> None:
        if self.closed:
            raise ConnectionResetError("socket closed")
        self.sent.append(message)
        self.tv.handle(self, message)

    async def send_str(self, data: str) -> None:
        if self.closed:
            raise ConnectionResetError("socket closed")
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True
        self._inbox.put_nowait(FakeMessage(aiohttp.WSMsgType.CLOSED))

    def exception(self) -> Exception | None:
        return None

    def push(self, message: dict[str, Any]) -> None:
        self._inbox.put_nowait(FakeMessage(aiohttp.WSMsgType.TEXT, json.dumps(message)))

    def drop(self) -> None:
        """Peer closes the socket."""
        self._inbox.put_nowait(FakeMessage(aiohttp.WSMsgType.CLOSED))

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> FakeMessage:
        msg = await self._inbox.get()
        if msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.CLOSING):
            self.closed = True
            raise StopAsyncIteration
        return msg


class FakeTV:
    """Scripted SSAP peer."""

    def __init__(self) -> None:
        self.mode = "registered"
        self.issued_key = "KEY-1"
        self.refuse = False
        self.responses: dict[str, dict[str, Any]] = {
            EP_SYSTEM_INFO: {"returnValue": True, "modelName": "OLED55C1"},
            EP_SOFTWARE_INFO: {
                "returnValue": True,
                "product_name": "webOSTV 6.0",
                "device_id": "a8:23:fe:00:00:01",
                "minor_ver": "03.20.50",
            },
            EP_SERVICE_LIST: {"returnValue": True, "services": [{"name": "tv", "version": 1}]},
            EP_APP_LIST: {"returnValue": True, "apps": [{"id": "netflix"}]},
            EP_POINTER_SOCKET: {"returnValue": True, "socketPath": POINTER_PATH},
        }
        self.initial_pushes: dict[str, dict[str, Any]] = {
            EP_POWER_STATE: {"returnValue": True, "state": "Active"},
            EP_FOREGROUND_APP: {"returnValue": True, "appId": "com.webos.app.livetv"},
            EP_VOLUME: {"returnValue": True, "muted": False, "volume": 12},
            EP_CURRENT_CHANNEL: {"returnValue": True, "channelNumber": "7", "channelName": "BBC One"},
        }
        self.silent: set[str] = set()
        self.control_sockets: list[FakeWebSocket] = []
        self.pointer_sockets: list[FakeWebSocket] = []
        self.register_messages: list[dict[str, Any]] = []
        self.requests: list[tuple[str, dict[str, Any] | None]] = []
        self.subscriptions: dict[str, tuple[FakeWebSocket, str]] = {}

    def requests_to(self, uri: str) -> list[dict[str, Any] | None]:
        return [payload for request_uri, payload in self.requests if request_uri == uri]

    def handle(self, ws: FakeWebSocket, message: dict[str, Any]) -> None:
        msg_type = message.get("type")
        message_id = message.get("id")
        uri = message.get("uri")

        if msg_type == "register":
            self.register_messages.append(message)
            if self.mode == "prompt":
                ws.push({"id": message_id, "type": "response", "payload": {"pairingType": "PROMPT"}})
            elif self.mode == "error":
                ws.push({"id": message_id, "type": "error", "error": "403 user denied access"})
            else:
                ws.push({"id": message_id, "type": "registered", "payload": {"client-key": self.issued_key}})
        elif msg_type == "request":
            self.requests.append((uri, message.get("payload")))
            if uri in self.silent:
                return
            payload = self.responses.get(uri, {"returnValue": True})
            ws.push({"id": message_id, "type": "response", "payload": payload})
        elif msg_type == "subscribe":
            self.subscriptions[uri] = (ws, message_id)
            initial = self.initial_pushes.get(uri)
            if initial is not None:
                ws.push({"id": message_id, "type": "response", "payload": initial})

    def push(self, uri: str, payload: dict[str, Any]) -> None:
        ws, message_id = self.subscriptions[uri]
        ws.push({"id": message_id, "type": "response", "payload": payload})

    def confirm_pairing(self) -> None:
        self.control_sockets[-1].push(
            {"id": "register_0", "type": "registered", "payload": {"client-key": self.issued_key}}
        )

    @property
    def buttons(self) -> list[str]:
        return [data for ws in self.pointer_sockets for data in ws.sent]


class FakeClientSession:
    def __init__(self, tv: FakeTV) -> None:
        self.tv = tv
        self.urls: list[str] = []

    async def ws_connect(self, url: str, **kwargs: Any) -> FakeWebSocket:
        self.urls.append(url)
        if self.tv.refuse:
            raise aiohttp.ClientConnectionError("connection refused")
        ws = FakeWebSocket(self.tv, url)
        if url == POINTER_PATH:
            self.tv.pointer_sockets.append(ws)
        else:
            self.tv.control_sockets.append(ws)
        return ws


class FakeProber:
    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable
        self.calls = 0

    async def __call__(self, host: str, port: int) -> bool:
        self.calls += 1
        return self.reachable


class FakeWolSender:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str | None]] = []

    def __call__(self, mac: str, ip_address: str | None = None) -> None:
        self.calls.append((mac, ip_address))


class FakePointer:
    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False

    @property
    def is_open(self) -> bool:
        return not self.closed

    async def async_send_button(self, name: str) -> None:
        if self.closed:
            raise PointerUnavailableError("pointer channel closed")
        self.sent.append(name)

    async def async_close(self) -> None:
        self.closed = True


class FakeSession:
    """Session transport stand-in driven by emit()."""

    def __init__(self) -> None:
        self.multiplexer = RequestMultiplexer(request_timeout=0.05)
        self.connect_calls = 0
        self.disconnect_calls = 0
        self._callback = None

    def set_event_callback(self, callback) -> None:
        self._callback = callback

    async def async_connect(self) -> None:
        self.connect_calls += 1

    async def async_disconnect(self) -> None:
        self.disconnect_calls += 1

    def emit(self, event, detail=None) -> None:
        self._callback(event, detail)


@pytest.fixture
def store_files() -> dict[str, Any]:
    return {}


@pytest.fixture
def storage(store_files) -> DeviceStorage:
    return DeviceStorage(HOST, FakeStoreFactory(store_files))


@pytest.fixture
def tv() -> FakeTV:
    return FakeTV()


@pytest.fixture
def profile() -> DeviceProfile:
    return DeviceProfile(name="Living Room TV", host=HOST, mac=MAC)


@pytest.fixture
async def make_device(tv, storage, profile):
    created: list[LgWebOsTvDevice] = []

    def _make(**kwargs: Any) -> LgWebOsTvDevice:
        kwargs.setdefault("prober", FakeProber(True))
        kwargs.setdefault("wol_sender", FakeWolSender())
        catalog = kwargs.pop("catalog", None) or InputCatalog.from_config(INPUTS)
        device = LgWebOsTvDevice(profile, catalog, storage, FakeClientSession(tv), **kwargs)
        device.session.reconnect_interval = 0.01
        device.multiplexer.request_timeout = 0.2
        created.append(device)
        return device

    yield _make

    for device in created:
        await device.async_stop()


async def connect(device: LgWebOsTvDevice) -> None:
    """Run one reachable probe and wait for the bootstrap to finish."""
    await device.supervisor.async_probe_tick()
    await wait_until(lambda: device.supervisor.ready)


@pytest.fixture
async def connected_device(make_device):
    device = make_device()
    await connect(device)
    return device
