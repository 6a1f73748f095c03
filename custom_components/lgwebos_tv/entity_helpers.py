"""Entity helper functions."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.entity import DeviceInfo, Entity

from .const import DOMAIN
from .device import LgWebOsTvDevice
from .manager import LgWebOsTvManager

_LOGGER = logging.getLogger(__name__)


def log_command_error(entity_name: str | None, command: str, error: Exception | None) -> None:
    """Log a failed command result; handlers report errors instead of raising."""
    if error is not None:
        _LOGGER.warning("%s: %s failed: %s", entity_name, command, error)


class LgWebOsTvEntity(Entity):
    """Base entity for LG webOS TV."""

    _attr_should_poll = False

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        manager: LgWebOsTvManager,
        entity_id_suffix: str,
    ) -> None:
        """Initialize base entity."""
        self.hass = hass
        self.entry = entry
        self.manager = manager
        self.device: LgWebOsTvDevice | None = manager.device
        self._attr_unique_id = f"{entry.entry_id}_{entity_id_suffix}"
        profile = self.device.profile if self.device else None
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=profile.name if profile else entry.title,
            manufacturer=profile.manufacturer if profile else None,
            model=profile.model if profile else None,
        )
        self._attr_has_entity_name = True

    async def async_added_to_hass(self) -> None:
        """Subscribe to device state changes."""
        await super().async_added_to_hass()
        if self.device:
            self.async_on_remove(self.device.add_listener(self._handle_device_update))

    @callback
    def _handle_device_update(self) -> None:
        self.async_write_ha_state()
