"""Sensor entities for LG webOS TV."""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from ..const import DOMAIN
from ..entity_helpers import LgWebOsTvEntity
from ..manager import LgWebOsTvManager
from ..models import ConnectionState


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities."""
    manager: LgWebOsTvManager = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([
        LgWebOsTvConnectionStateSensor(hass, entry, manager),
        LgWebOsTvRecentEventsSensor(hass, entry, manager),
    ])


class LgWebOsTvConnectionStateSensor(LgWebOsTvEntity, SensorEntity):
    """Connection state sensor."""

    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [state.value for state in ConnectionState]
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        manager: LgWebOsTvManager,
    ) -> None:
        """Initialize sensor."""
        super().__init__(hass, entry, manager, "connection_state")
        self._attr_name = "Connection State"
        self._attr_icon = "mdi:lan-connect"

    @property
    def native_value(self) -> str | None:
        if not self.device:
            return None
        return self.device.connection_state.value

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        if not self.device:
            return {}
        return self.device.status_attributes


class LgWebOsTvRecentEventsSensor(LgWebOsTvEntity, SensorEntity):
    """Recent connection events sensor."""

    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        manager: LgWebOsTvManager,
    ) -> None:
        """Initialize sensor."""
        super().__init__(hass, entry, manager, "recent_events")
        self._attr_name = "Recent Events"
        self._attr_icon = "mdi:history"

    @property
    def native_value(self) -> str:
        """Return the latest event message."""
        if not self.device:
            return "none"
        events = self.device.supervisor.recent_events
        if not events:
            return "none"
        return events[-1]["message"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        if not self.device:
            return {}
        return {"events": self.device.supervisor.recent_events}
