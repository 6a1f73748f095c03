"""Remote entity for LG webOS TV."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from homeassistant.components.remote import ATTR_NUM_REPEATS, DEFAULT_NUM_REPEATS, RemoteEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from ..const import DOMAIN
from ..entity_helpers import LgWebOsTvEntity, log_command_error
from ..manager import LgWebOsTvManager
from ..models import RemoteKey

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up remote entity."""
    manager: LgWebOsTvManager = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([LgWebOsTvRemote(hass, entry, manager)])


class LgWebOsTvRemote(LgWebOsTvEntity, RemoteEntity):
    """Remote control keys sent over the pointer channel."""

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        manager: LgWebOsTvManager,
    ) -> None:
        """Initialize remote."""
        super().__init__(hass, entry, manager, "remote")
        self._attr_name = "Remote"
        self._attr_icon = "mdi:remote-tv"

    @property
    def is_on(self) -> bool:
        return bool(self.device and self.device.snapshot.power_on)

    async def async_turn_on(self, **kwargs: Any) -> None:
        _, error = await self.device.async_set_power(True)
        log_command_error(self.name, "turn on", error)

    async def async_turn_off(self, **kwargs: Any) -> None:
        _, error = await self.device.async_set_power(False)
        log_command_error(self.name, "turn off", error)

    async def async_send_command(self, command: Iterable[str], **kwargs: Any) -> None:
        """Send abstract key names, e.g. arrow_up or play_pause."""
        num_repeats = kwargs.get(ATTR_NUM_REPEATS, DEFAULT_NUM_REPEATS)
        for _ in range(num_repeats):
            for name in command:
                try:
                    key = RemoteKey(name)
                except ValueError:
                    _LOGGER.warning("%s: unknown remote key %s", self.name, name)
                    continue
                _, error = await self.device.async_remote_key(key)
                log_command_error(self.name, f"key {name}", error)
