"""Binary sensor entities for LG webOS TV."""

from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorDeviceClass, BinarySensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from ..const import DOMAIN
from ..entity_helpers import LgWebOsTvEntity
from ..manager import LgWebOsTvManager


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up binary sensor entities."""
    manager: LgWebOsTvManager = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([
        LgWebOsTvConnectedBinarySensor(hass, entry, manager),
        LgWebOsTvPointerBinarySensor(hass, entry, manager),
    ])


class LgWebOsTvConnectedBinarySensor(LgWebOsTvEntity, BinarySensorEntity):
    """Binary sensor for the control session."""

    _attr_device_class = BinarySensorDeviceClass.CONNECTIVITY
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        manager: LgWebOsTvManager,
    ) -> None:
        """Initialize binary sensor."""
        super().__init__(hass, entry, manager, "connected")
        self._attr_name = "Connected"

    @property
    def is_on(self) -> bool:
        """Return if the control session is registered."""
        return bool(self.device and self.device.available)


class LgWebOsTvPointerBinarySensor(LgWebOsTvEntity, BinarySensorEntity):
    """Binary sensor for the pointer/button channel."""

    _attr_device_class = BinarySensorDeviceClass.CONNECTIVITY
    _attr_entity_category = EntityCategory.DIAGNOSTIC

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        manager: LgWebOsTvManager,
    ) -> None:
        """Initialize binary sensor."""
        super().__init__(hass, entry, manager, "pointer_channel")
        self._attr_name = "Button Channel"
        self._attr_icon = "mdi:gesture-tap-button"

    @property
    def is_on(self) -> bool:
        return bool(self.device and self.device.supervisor.pointer is not None)
