"""LG webOS TV device: state cache, connection supervisor and command handlers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import aiohttp
from wakeonlan import send_magic_packet

from .const import (
    DEFAULT_WOL_BROADCAST,
    EP_CURRENT_CHANNEL,
    EP_FOREGROUND_APP,
    EP_LAUNCH,
    EP_OPEN_CHANNEL,
    EP_POWER_STATE,
    EP_SET_MUTE,
    EP_SET_VOLUME,
    EP_TURN_OFF,
    EP_VOLUME,
)
from .decision import (
    apply_audio_push,
    apply_channel_push,
    apply_foreground_app_push,
    apply_power_push,
    info_overlay_button,
    remote_key_button,
    volume_selector_button,
)
from .errors import LgWebOsError, PointerUnavailableError, ProtocolError, TransientNetworkError
from .models import (
    ConnectionState,
    DeviceProfile,
    DeviceStateSnapshot,
    InputCatalog,
    RemoteKey,
    VolumeSelector,
)
from .multiplexer import RequestMultiplexer
from .pointer import async_acquire_pointer_channel
from .probe import async_probe
from .session import SessionTransport
from .storage import DeviceStorage
from .supervisor import ConnectionSupervisor, PointerFactory, Prober

_LOGGER = logging.getLogger(__name__)

Result = tuple[Any, LgWebOsError | None]


class LgWebOsTvDevice:
    """One TV: the owned aggregate of profile, state cache and connection.

    Every command handler returns a (value, error) pair and never raises.
    Handlers read the cached value, skip the network when nothing would
    change, and update the cache optimistically after a successful command.
    """

    def __init__(
        self,
        profile: DeviceProfile,
        catalog: InputCatalog,
        storage: DeviceStorage,
        client_session: aiohttp.ClientSession,
        *,
        client_key: str | None = None,
        switch_info_menu: bool = False,
        wol_broadcast: str = DEFAULT_WOL_BROADCAST,
        prober: Prober = async_probe,
        pointer_factory: PointerFactory = async_acquire_pointer_channel,
        wol_sender: Callable[..., None] = send_magic_packet,
    ) -> None:
        """Initialize device."""
        self.profile = profile
        self.catalog = catalog
        self.storage = storage
        self.switch_info_menu = switch_info_menu
        self.wol_broadcast = wol_broadcast
        self.snapshot = DeviceStateSnapshot()

        self.multiplexer = RequestMultiplexer()
        self.session = SessionTransport(
            profile.url,
            client_session,
            self.multiplexer,
            client_key=client_key,
            key_callback=storage.async_save_pairing_key,
        )
        self.supervisor = ConnectionSupervisor(
            profile,
            self.snapshot,
            self.session,
            storage,
            subscriptions=(
                (EP_POWER_STATE, self._on_power_push),
                (EP_FOREGROUND_APP, self._on_foreground_app_push),
                (EP_VOLUME, self._on_audio_push),
                (EP_CURRENT_CHANNEL, self._on_channel_push),
            ),
            prober=prober,
            pointer_factory=pointer_factory,
        )

        self._wol_sender = wol_sender
        self._command_lock = asyncio.Lock()
        self._listeners: list[Callable[[], None]] = []
        self.supervisor.add_listener(self._notify)

    @classmethod
    async def async_create(
        cls,
        profile: DeviceProfile,
        inputs: list[Any] | None,
        storage: DeviceStorage,
        client_session: aiohttp.ClientSession,
        **kwargs: Any,
    ) -> LgWebOsTvDevice:
        """Build a device from configuration and persisted state."""
        client_key = await storage.async_load_pairing_key()
        if client_key:
            _LOGGER.info("Loaded saved pairing key for %s", profile.host)
        else:
            _LOGGER.info("No saved pairing key for %s - the TV will ask to pair", profile.host)
        overrides = await storage.async_load_input_names()
        catalog = InputCatalog.from_config(inputs, overrides)
        return cls(profile, catalog, storage, client_session, client_key=client_key, **kwargs)

    async def async_start(self) -> None:
        """Start probing for the TV."""
        await self.supervisor.async_start()

    async def async_stop(self) -> None:
        """Stop probing and close every socket."""
        await self.supervisor.async_stop()

    @property
    def connection_state(self) -> ConnectionState:
        """Connection state owned by the supervisor."""
        return self.supervisor.state

    @property
    def available(self) -> bool:
        """True while the control session is up."""
        return self.supervisor.is_connected

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call listener whenever cached or connection state changes."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Error in device state listener")

    # Subscription handlers

    def _on_power_push(self, payload: dict[str, Any]) -> None:
        if apply_power_push(self.snapshot, payload):
            _LOGGER.info("TV %s power: %s", self.profile.host, "ON" if self.snapshot.power_on else "STANDBY")
            self._notify()

    def _on_foreground_app_push(self, payload: dict[str, Any]) -> None:
        if apply_foreground_app_push(self.snapshot, payload):
            _LOGGER.debug("TV %s foreground app: %s", self.profile.host, self.snapshot.foreground_app_id)
            self._notify()

    def _on_audio_push(self, payload: dict[str, Any]) -> None:
        if apply_audio_push(self.snapshot, payload):
            _LOGGER.debug(
                "TV %s audio: muted=%s, volume=%s", self.profile.host, self.snapshot.muted, self.snapshot.volume
            )
            self._notify()

    def _on_channel_push(self, payload: dict[str, Any]) -> None:
        if apply_channel_push(self.snapshot, payload):
            _LOGGER.debug(
                "TV %s channel: %s (%s)",
                self.profile.host,
                self.snapshot.channel_number,
                self.snapshot.channel_name,
            )
            self._notify()

    # Transport helpers

    async def _async_request(self, uri: str, payload: dict[str, Any] | None = None) -> LgWebOsError | None:
        try:
            await self.multiplexer.async_request(uri, payload)
        except ProtocolError as ex:
            _LOGGER.warning("TV %s rejected %s: %s", self.profile.host, uri, ex)
            return ex
        except LgWebOsError as ex:
            _LOGGER.debug("Request %s to %s failed: %s", uri, self.profile.host, ex)
            return ex
        return None

    async def _async_send_button(self, name: str) -> LgWebOsError | None:
        pointer = self.supervisor.pointer
        if pointer is None:
            _LOGGER.debug("Button %s dropped, pointer channel unavailable for %s", name, self.profile.host)
            return PointerUnavailableError("pointer channel unavailable")
        try:
            await pointer.async_send_button(name)
        except LgWebOsError as ex:
            _LOGGER.debug("Button %s failed for %s: %s", name, self.profile.host, ex)
            return ex
        return None

    # Power

    async def async_get_power(self) -> Result:
        """Cached power flag."""
        return self.snapshot.power_on, None

    async def async_set_power(self, on: bool) -> Result:
        """Wake-on-LAN for on (the control port is closed while off), turnOff for off."""
        async with self._command_lock:
            if on == self.snapshot.power_on:
                return on, None

            if on:
                if not self.profile.mac:
                    return self.snapshot.power_on, LgWebOsError("no MAC address configured")
                try:
                    await asyncio.to_thread(self._wol_sender, self.profile.mac, ip_address=self.wol_broadcast)
                except (OSError, ValueError) as ex:
                    _LOGGER.warning("Failed to send WOL packet to %s: %s", self.profile.mac, ex)
                    return self.snapshot.power_on, TransientNetworkError(str(ex))
                _LOGGER.info("Sent WOL packet to %s (broadcast: %s)", self.profile.mac, self.wol_broadcast)
                self.snapshot.power_on = True
                self.supervisor.expect_wake()
                self._notify()
                return True, None

            error = await self._async_request(EP_TURN_OFF)
            if error:
                return self.snapshot.power_on, error
            _LOGGER.info("TV %s power: STANDBY", self.profile.host)
            self.snapshot.power_on = False
            await self.supervisor.async_disconnect_session("power off")
            self._notify()
            return False, None

    # Audio

    async def async_get_mute(self) -> Result:
        """Cached mute flag."""
        return self.snapshot.muted, None

    async def async_set_mute(self, muted: bool) -> Result:
        async with self._command_lock:
            if muted == self.snapshot.muted:
                return muted, None
            error = await self._async_request(EP_SET_MUTE, {"mute": muted})
            if error:
                return self.snapshot.muted, error
            self.snapshot.muted = muted
            self._notify()
            return muted, None

    async def async_get_volume(self) -> Result:
        """Cached absolute volume, 0..100."""
        return self.snapshot.volume, None

    async def async_set_volume(self, volume: int) -> Result:
        """Absolute volume."""
        volume = max(0, min(100, int(volume)))
        async with self._command_lock:
            if volume == self.snapshot.volume:
                return volume, None
            error = await self._async_request(EP_SET_VOLUME, {"volume": volume})
            if error:
                return self.snapshot.volume, error
            self.snapshot.volume = volume
            self._notify()
            return volume, None

    async def async_volume_selector(self, selector: VolumeSelector | str) -> Result:
        """Relative volume via VOLUMEUP/VOLUMEDOWN buttons."""
        button = volume_selector_button(selector)
        if not button:
            _LOGGER.debug("Ignoring unknown volume selector: %s", selector)
            return selector, None
        error = await self._async_send_button(button)
        return selector, error

    # Inputs

    async def async_get_input(self) -> Result:
        """Catalog index of the foreground app, None while off or not in the catalog."""
        if not self.snapshot.power_on:
            return None, None
        return self.catalog.index_of(self.snapshot.foreground_app_id), None

    async def async_set_input(self, reference: str) -> Result:
        async with self._command_lock:
            if reference == self.snapshot.foreground_app_id:
                return reference, None
            error = await self._async_request(EP_LAUNCH, {"id": reference})
            if error:
                return self.snapshot.foreground_app_id, error
            _LOGGER.info("TV %s input: %s", self.profile.host, reference)
            self.snapshot.foreground_app_id = reference
            self._notify()
            return reference, None

    async def async_set_input_index(self, index: int) -> Result:
        reference = self.catalog.reference_at(index)
        if reference is None:
            return None, LgWebOsError(f"no input configured at index {index}")
        return await self.async_set_input(reference)

    async def async_rename_input(self, reference: str, name: str) -> Result:
        """Rename an input and persist the override."""
        try:
            overrides = self.catalog.rename(reference, name)
        except KeyError:
            return None, LgWebOsError(f"unknown input {reference}")
        if await self.storage.async_save_input_names(overrides):
            _LOGGER.info("Saved input name %s for %s", name, reference)
        self._notify()
        return name, None

    # Channels

    async def async_get_channel(self) -> Result:
        """Current channel number, None while off."""
        if not self.snapshot.power_on:
            return None, None
        return self.snapshot.channel_number, None

    async def async_set_channel(self, channel_number: str) -> Result:
        channel_number = str(channel_number)
        async with self._command_lock:
            if channel_number == self.snapshot.channel_number:
                return channel_number, None
            error = await self._async_request(EP_OPEN_CHANNEL, {"channelNumber": channel_number})
            if error:
                return self.snapshot.channel_number, error
            self.snapshot.channel_number = channel_number
            self._notify()
            return channel_number, None

    # Remote keys

    async def async_remote_key(self, key: RemoteKey | str) -> Result:
        async with self._command_lock:
            button = remote_key_button(
                key,
                paused=self.snapshot.paused,
                switch_info_menu=self.switch_info_menu,
            )
            if not button:
                _LOGGER.debug("Remote key %s has no button on this TV", key)
                return key, None
            error = await self._async_send_button(button)
            if error:
                return key, error
            if key == RemoteKey.PLAY_PAUSE:
                self.snapshot.paused = not self.snapshot.paused
            return key, None

    async def async_toggle_info_overlay(self) -> Result:
        """Power-mode selection: show the info overlay, or close it if shown."""
        async with self._command_lock:
            button = info_overlay_button(
                overlay_visible=self.snapshot.info_overlay_visible,
                switch_info_menu=self.switch_info_menu,
            )
            error = await self._async_send_button(button)
            if error:
                return self.snapshot.info_overlay_visible, error
            self.snapshot.info_overlay_visible = not self.snapshot.info_overlay_visible
            self._notify()
            return self.snapshot.info_overlay_visible, None

    @property
    def status_attributes(self) -> dict[str, Any]:
        """Supervisor status merged with the cached device state."""
        return {
            **self.supervisor.status_attributes,
            **self.snapshot.as_dict(),
        }
