"""Manager for LG webOS TV integration."""

from __future__ import annotations

import logging
from typing import Callable

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_MAC, CONF_NAME
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers import device_registry as dr
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .const import (
    CONF_INPUTS,
    CONF_SWITCH_INFO_MENU,
    CONF_WOL_BROADCAST,
    DEFAULT_NAME,
    DEFAULT_SWITCH_INFO_MENU,
    DEFAULT_WOL_BROADCAST,
    DOMAIN,
    EVENT_CONNECTION_STATE,
)
from .device import LgWebOsTvDevice
from .models import ConnectionState, DeviceProfile
from .storage import DeviceStorage, ha_store_factory

_LOGGER = logging.getLogger(__name__)


class LgWebOsTvManager:
    """Manager for an LG webOS TV config entry."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize manager."""
        self.hass = hass
        self.entry = entry
        self.device: LgWebOsTvDevice | None = None
        self.device_id: str | None = None
        self._last_state: ConnectionState | None = None
        self._unsubs: list[Callable[[], None]] = []

    async def async_setup(self) -> None:
        """Set up the manager."""
        config = {**self.entry.data, **(self.entry.options or {})}

        profile = DeviceProfile(
            name=config.get(CONF_NAME, DEFAULT_NAME),
            host=config[CONF_HOST],
            mac=config.get(CONF_MAC) or None,
        )
        storage = DeviceStorage(profile.host, ha_store_factory(self.hass))

        self.device = await LgWebOsTvDevice.async_create(
            profile,
            config.get(CONF_INPUTS),
            storage,
            async_get_clientsession(self.hass),
            switch_info_menu=config.get(CONF_SWITCH_INFO_MENU, DEFAULT_SWITCH_INFO_MENU),
            wol_broadcast=config.get(CONF_WOL_BROADCAST, DEFAULT_WOL_BROADCAST),
        )

        # Create device
        device_registry = dr.async_get(self.hass)
        connections = {(dr.CONNECTION_NETWORK_MAC, dr.format_mac(profile.mac))} if profile.mac else set()
        device = device_registry.async_get_or_create(
            config_entry_id=self.entry.entry_id,
            identifiers={(DOMAIN, self.entry.entry_id)},
            connections=connections,
            name=profile.name,
            manufacturer=profile.manufacturer,
            model=profile.model,
        )
        self.device_id = device.id

        self._unsubs.append(self.device.supervisor.add_metadata_listener(self._handle_metadata))
        self._unsubs.append(self.device.supervisor.add_listener(self._handle_connection_state))

        await self.device.async_start()

    @callback
    def _handle_metadata(self) -> None:
        """Refresh the device registry from the metadata the TV reported."""
        if self.device is None or self.device_id is None:
            return
        profile = self.device.profile
        dr.async_get(self.hass).async_update_device(
            self.device_id,
            manufacturer=profile.manufacturer,
            model=profile.model,
            sw_version=profile.firmware_revision,
            serial_number=profile.serial_number,
        )

    @callback
    def _handle_connection_state(self) -> None:
        if self.device is None:
            return
        state = self.device.connection_state
        if state is self._last_state:
            return
        self._last_state = state
        self.hass.bus.async_fire(
            EVENT_CONNECTION_STATE,
            {
                "entry_id": self.entry.entry_id,
                "device_id": self.device_id,
                "state": state.value,
            },
        )

    async def async_cleanup(self) -> None:
        """Clean up the manager."""
        while self._unsubs:
            self._unsubs.pop()()
        if self.device:
            await self.device.async_stop()
