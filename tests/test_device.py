from __future__ import annotations

import asyncio

from conftest import (
    HOST,
    INPUTS,
    MAC,
    FakeClientSession,
    FakeProber,
    FakeWolSender,
    connect,
    wait_until,
)

from custom_components.lgwebos_tv.const import (
    EP_LAUNCH,
    EP_OPEN_CHANNEL,
    EP_POWER_STATE,
    EP_SET_MUTE,
    EP_SET_VOLUME,
    EP_SYSTEM_INFO,
    EP_TURN_OFF,
    EP_VOLUME,
    WAKE_GRACE_PROBES,
)
from custom_components.lgwebos_tv.device import LgWebOsTvDevice
from custom_components.lgwebos_tv.errors import (
    ConnectionClosedError,
    PointerUnavailableError,
    ProtocolError,
)
from custom_components.lgwebos_tv.models import (
    ConnectionState,
    DeviceProfile,
    InputCatalog,
    RemoteKey,
    VolumeSelector,
)


async def test_connect_bootstraps_state_and_metadata(connected_device, tv, store_files) -> None:
    device = connected_device
    snapshot = device.snapshot

    assert device.connection_state is ConnectionState.CONNECTED
    assert snapshot.power_on is True
    assert snapshot.foreground_app_id == "com.webos.app.livetv"
    assert (snapshot.muted, snapshot.volume) == (False, 12)
    assert (snapshot.channel_number, snapshot.channel_name) == ("7", "BBC One")
    assert device.supervisor.pointer is not None

    assert device.profile.model == "OLED55C1"
    assert device.profile.firmware_revision == "03.20.50"
    assert store_files["lgwebos_tv.key_19216815"] == {"client_key": "KEY-1"}
    assert store_files["lgwebos_tv.system_19216815"] == {"modelName": "OLED55C1"}
    assert "returnValue" not in store_files["lgwebos_tv.apps_19216815"]


async def test_set_input_sends_one_launch(connected_device, tv) -> None:
    device = connected_device
    value, error = await device.async_set_input("com.webos.app.hdmi1")

    assert (value, error) == ("com.webos.app.hdmi1", None)
    assert tv.requests_to(EP_LAUNCH) == [{"id": "com.webos.app.hdmi1"}]
    assert device.snapshot.foreground_app_id == "com.webos.app.hdmi1"
    assert await device.async_get_input() == (1, None)


async def test_unchanged_values_send_nothing(connected_device, tv) -> None:
    device = connected_device
    sent_before = len(tv.requests)

    assert await device.async_set_power(True) == (True, None)
    assert await device.async_set_mute(False) == (False, None)
    assert await device.async_set_volume(12) == (12, None)
    assert await device.async_set_input("com.webos.app.livetv") == ("com.webos.app.livetv", None)
    assert await device.async_set_channel("7") == ("7", None)
    assert len(tv.requests) == sent_before


async def test_audio_commands(connected_device, tv) -> None:
    device = connected_device
    assert await device.async_set_mute(True) == (True, None)
    assert await device.async_set_volume(150) == (100, None)
    assert tv.requests_to(EP_SET_MUTE) == [{"mute": True}]
    assert tv.requests_to(EP_SET_VOLUME) == [{"volume": 100}]
    assert await device.async_get_volume() == (100, None)

    assert await device.async_volume_selector(VolumeSelector.INCREMENT) == (VolumeSelector.INCREMENT, None)
    assert tv.buttons == ["type:button\nname:VOLUMEUP\n\n"]


async def test_audio_push_only_touches_changed_key(connected_device, tv) -> None:
    device = connected_device
    tv.push(EP_VOLUME, {"returnValue": True, "changed": ["volume"], "volume": 30, "muted": True})
    await wait_until(lambda: device.snapshot.volume == 30)
    assert device.snapshot.muted is False


async def test_power_push_from_standby(connected_device, tv) -> None:
    device = connected_device
    updates: list[bool] = []
    device.add_listener(lambda: updates.append(device.snapshot.power_on))

    tv.push(EP_POWER_STATE, {"returnValue": True, "state": "Active", "processing": "Active Standby"})
    await wait_until(lambda: not device.snapshot.power_on)
    assert updates == [False]
    assert await device.async_get_input() == (None, None)
    assert await device.async_get_channel() == (None, None)


async def test_rejected_command_leaves_cache_untouched(connected_device, tv) -> None:
    device = connected_device
    tv.responses[EP_LAUNCH] = {"returnValue": False, "errorCode": -101, "errorText": "app not found"}

    value, error = await device.async_set_input("youtube.leanback.v4")
    assert isinstance(error, ProtocolError)
    assert value == "com.webos.app.livetv"
    assert device.snapshot.foreground_app_id == "com.webos.app.livetv"


async def test_set_input_index_and_channel(connected_device, tv) -> None:
    device = connected_device
    assert await device.async_set_input_index(2) == ("netflix", None)
    value, error = await device.async_set_input_index(9)
    assert value is None and error is not None

    assert await device.async_set_channel(12) == ("12", None)
    assert tv.requests_to(EP_OPEN_CHANNEL) == [{"channelNumber": "12"}]


async def test_remote_keys(make_device, tv) -> None:
    device = make_device(switch_info_menu=True)
    await connect(device)

    assert await device.async_remote_key(RemoteKey.ARROW_UP) == (RemoteKey.ARROW_UP, None)
    await device.async_remote_key(RemoteKey.PLAY_PAUSE)
    await device.async_remote_key(RemoteKey.PLAY_PAUSE)
    await device.async_remote_key(RemoteKey.INFORMATION)
    # No button for track skipping: accepted, nothing sent.
    assert await device.async_remote_key(RemoteKey.NEXT_TRACK) == (RemoteKey.NEXT_TRACK, None)

    assert tv.buttons == [
        "type:button\nname:UP\n\n",
        "type:button\nname:PAUSE\n\n",
        "type:button\nname:PLAY\n\n",
        "type:button\nname:MENU\n\n",
    ]


async def test_info_overlay_toggles(connected_device, tv) -> None:
    device = connected_device
    assert await device.async_toggle_info_overlay() == (True, None)
    assert await device.async_toggle_info_overlay() == (False, None)
    assert tv.buttons == ["type:button\nname:INFO\n\n", "type:button\nname:BACK\n\n"]


async def test_power_on_uses_wake_on_lan(make_device, tv) -> None:
    wol = FakeWolSender()
    device = make_device(wol_sender=wol, wol_broadcast="192.168.1.255")

    assert await device.async_set_power(True) == (True, None)
    assert wol.calls == [(MAC, "192.168.1.255")]
    assert tv.requests == []
    assert device.snapshot.power_on is True


async def test_power_on_without_mac_fails(tv, storage) -> None:
    device = LgWebOsTvDevice(
        DeviceProfile(name="TV", host=HOST),
        InputCatalog.from_config([]),
        storage,
        FakeClientSession(tv),
        wol_sender=FakeWolSender(),
    )
    value, error = await device.async_set_power(True)
    assert value is False
    assert error is not None


async def test_power_off_tears_down_session(connected_device, tv) -> None:
    device = connected_device
    assert await device.async_set_power(False) == (False, None)
    assert len(tv.requests_to(EP_TURN_OFF)) == 1
    assert device.connection_state is ConnectionState.DISCONNECTED
    assert device.supervisor.pointer is None
    assert tv.control_sockets[0].closed


async def test_unreachable_mid_session(make_device, tv) -> None:
    prober = FakeProber(True)
    device = make_device(prober=prober)
    await connect(device)
    pointer_ws = tv.pointer_sockets[0]
    sent_before = len(tv.requests)

    prober.reachable = False
    await device.supervisor.async_probe_tick()

    assert device.connection_state is ConnectionState.DISCONNECTED
    assert device.supervisor.pointer is None
    assert device.snapshot.power_on is False

    _, error = await device.async_remote_key(RemoteKey.ARROW_UP)
    assert isinstance(error, PointerUnavailableError)
    _, error = await device.async_set_mute(True)
    assert isinstance(error, ConnectionClosedError)
    assert len(tv.requests) == sent_before
    assert pointer_ws.sent == []


async def test_peer_close_reconnects_and_rebootstraps(connected_device, tv) -> None:
    device = connected_device
    tv.control_sockets[0].drop()

    await wait_until(lambda: len(tv.control_sockets) == 2 and device.supervisor.ready)
    assert device.supervisor.status_attributes["connect_count"] == 2
    await wait_until(lambda: tv.pointer_sockets[0].closed)
    assert len(tv.pointer_sockets) == 2
    # The saved key is presented on the second handshake.
    assert tv.register_messages[1]["payload"]["client-key"] == "KEY-1"


async def test_metadata_is_not_overwritten(connected_device, tv, store_files) -> None:
    device = connected_device
    tv.responses[EP_SYSTEM_INFO] = {"returnValue": True, "modelName": "OLED65G2"}
    tv.control_sockets[0].drop()
    await wait_until(lambda: len(tv.control_sockets) == 2 and device.supervisor.ready)

    assert device.profile.model == "OLED65G2"
    assert store_files["lgwebos_tv.system_19216815"] == {"modelName": "OLED55C1"}


async def test_rename_input_persists_override(connected_device, storage, store_files, tv) -> None:
    device = connected_device
    assert await device.async_rename_input("com.webos.app.hdmi1", "Game Console") == ("Game Console", None)
    assert store_files["lgwebos_tv.inputs_19216815"] == {"com.webos.app.hdmi1": "Game Console"}

    _, error = await device.async_rename_input("missing", "Nope")
    assert error is not None

    reloaded = await LgWebOsTvDevice.async_create(
        DeviceProfile(name="TV", host=HOST, mac=MAC),
        INPUTS,
        storage,
        FakeClientSession(tv),
    )
    assert reloaded.catalog.names == ["Live TV", "Game Console", "netflix"]
    assert reloaded.session.client_key == "KEY-1"


async def test_pairing_prompt_flow(make_device, tv, store_files) -> None:
    tv.mode = "prompt"
    device = make_device()
    await device.supervisor.async_probe_tick()
    await wait_until(lambda: device.connection_state is ConnectionState.AWAITING_PAIRING)
    assert device.snapshot.power_on is False

    tv.confirm_pairing()
    await wait_until(lambda: device.supervisor.ready)
    assert device.connection_state is ConnectionState.CONNECTED
    assert store_files["lgwebos_tv.key_19216815"] == {"client_key": "KEY-1"}


async def test_rejected_pairing_waits_instead_of_retrying(make_device, tv) -> None:
    tv.mode = "error"
    device = make_device()
    await device.supervisor.async_probe_tick()
    await wait_until(lambda: not device.session.is_running)

    assert device.connection_state is ConnectionState.AWAITING_PAIRING
    assert "denied" in device.supervisor.status_attributes["last_error"]

    await asyncio.sleep(0.05)
    await device.supervisor.async_probe_tick()
    assert device.connection_state is ConnectionState.AWAITING_PAIRING
    assert len(tv.register_messages) == 1


async def test_wake_that_never_arrives_expires(make_device, tv) -> None:
    wol = FakeWolSender()
    device = make_device(prober=FakeProber(False), wol_sender=wol)

    assert await device.async_set_power(True) == (True, None)
    for _ in range(WAKE_GRACE_PROBES - 1):
        await device.supervisor.async_probe_tick()
    assert device.snapshot.power_on is True

    await device.supervisor.async_probe_tick()
    assert device.connection_state is ConnectionState.DISCONNECTED
    assert device.snapshot.power_on is False

    assert await device.async_set_power(True) == (True, None)
    assert len(wol.calls) == 2
