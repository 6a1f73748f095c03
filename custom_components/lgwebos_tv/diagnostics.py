"""Diagnostics for LG webOS TV."""

from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_MAC
from homeassistant.core import HomeAssistant

from .const import DOMAIN

REDACT_KEYS = {
    CONF_HOST,
    CONF_MAC,
    "client_key",
    "client-key",
    "serial_number",
    "device_id",
}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    manager = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if not manager or not manager.device:
        return {}

    device = manager.device
    profile = device.profile
    session = device.session

    return {
        "entry": {
            "entry_id": entry.entry_id,
            "title": entry.title,
            "data": async_redact_data(entry.data, REDACT_KEYS),
            "options": async_redact_data(entry.options, REDACT_KEYS),
        },
        "profile": async_redact_data(
            {
                "name": profile.name,
                "host": profile.host,
                "mac": profile.mac,
                "manufacturer": profile.manufacturer,
                "model": profile.model,
                "product_name": profile.product_name,
                "serial_number": profile.serial_number,
                "firmware_revision": profile.firmware_revision,
            },
            REDACT_KEYS,
        ),
        "supervisor": device.supervisor.status_attributes,
        "session": {
            "running": session.is_running,
            "registered": session.is_connected,
            "connect_attempts": session.connect_attempts,
            "has_client_key": session.client_key is not None,
        },
        "state": device.snapshot.as_dict(),
        "inputs": [
            {"reference": source.reference, "name": source.name}
            for source in device.catalog.sources
        ],
        "recent_events": device.supervisor.recent_events,
    }
