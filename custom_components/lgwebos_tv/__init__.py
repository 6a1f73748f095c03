"""LG webOS TV integration for Home Assistant."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant

from .const import DOMAIN
from .manager import LgWebOsTvManager
from .services import async_setup_services, async_unload_services

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.MEDIA_PLAYER,
    Platform.REMOTE,
    Platform.SENSOR,
    Platform.BINARY_SENSOR,
]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up LG webOS TV from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    # Set up services once
    if DOMAIN not in hass.data.get("_lgwebos_tv_services_setup", set()):
        await async_setup_services(hass)
        hass.data.setdefault("_lgwebos_tv_services_setup", set()).add(DOMAIN)

    manager = LgWebOsTvManager(hass, entry)
    await manager.async_setup()
    hass.data[DOMAIN][entry.entry_id] = manager

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if entry.entry_id in hass.data[DOMAIN]:
        manager = hass.data[DOMAIN][entry.entry_id]
        await manager.async_cleanup()
        hass.data[DOMAIN].pop(entry.entry_id)

    # Clean up services if last entry
    if not hass.data.get(DOMAIN):
        await async_unload_services(hass)
        hass.data.pop("_lgwebos_tv_services_setup", None)

    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload config entry."""
    _LOGGER.debug("Options changed for %s, reloading", entry.title)
    await hass.config_entries.async_reload(entry.entry_id)
