"""Services for LG webOS TV."""

from __future__ import annotations

import asyncio
import logging

import voluptuous as vol

from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.helpers import device_registry as dr

from .const import (
    ATTR_DISPLAY_NAME,
    ATTR_KEY,
    ATTR_REFERENCE,
    DOMAIN,
    SERVICE_RENAME_INPUT,
    SERVICE_SEND_KEY,
    SERVICE_TIMEOUT,
    SERVICE_TOGGLE_INFO_OVERLAY,
)
from .models import RemoteKey

_LOGGER = logging.getLogger(__name__)

TARGET_SCHEMA = {
    vol.Optional("device_id"): str,
    vol.Optional("entry_id"): str,
}


def _resolve_entry_ids(hass: HomeAssistant, service_call: ServiceCall) -> set[str]:
    """Entries targeted by a service call; all loaded entries if none given."""
    loaded = hass.data.get(DOMAIN, {})
    if "device_id" in service_call.data:
        device = dr.async_get(hass).async_get(service_call.data["device_id"])
        if not device:
            return set()
        return {entry_id for entry_id in device.config_entries if entry_id in loaded}
    if "entry_id" in service_call.data:
        entry_id = service_call.data["entry_id"]
        return {entry_id} if entry_id in loaded else set()
    return set(loaded)


async def async_setup_services(hass: HomeAssistant) -> None:
    """Set up services."""

    async def async_handle_service(service_call: ServiceCall) -> None:
        """Handle service call."""
        service = service_call.service
        entry_ids = _resolve_entry_ids(hass, service_call)
        if not entry_ids:
            _LOGGER.warning("No matching entries found for service call %s", service)
            return

        for entry_id in entry_ids:
            manager = hass.data[DOMAIN][entry_id]
            if not manager or not manager.device:
                continue
            device = manager.device

            try:
                if service == SERVICE_RENAME_INPUT:
                    _, error = await asyncio.wait_for(
                        device.async_rename_input(
                            service_call.data[ATTR_REFERENCE],
                            service_call.data[ATTR_DISPLAY_NAME],
                        ),
                        timeout=SERVICE_TIMEOUT,
                    )
                elif service == SERVICE_SEND_KEY:
                    _, error = await asyncio.wait_for(
                        device.async_remote_key(RemoteKey(service_call.data[ATTR_KEY])),
                        timeout=SERVICE_TIMEOUT,
                    )
                elif service == SERVICE_TOGGLE_INFO_OVERLAY:
                    _, error = await asyncio.wait_for(
                        device.async_toggle_info_overlay(), timeout=SERVICE_TIMEOUT
                    )
                else:
                    continue
            except asyncio.TimeoutError:
                _LOGGER.error("Service %s on %s timed out after %d seconds", service, entry_id, SERVICE_TIMEOUT)
                continue

            if error:
                _LOGGER.error("Service %s on %s failed: %s", service, entry_id, error)

    hass.services.async_register(
        DOMAIN,
        SERVICE_RENAME_INPUT,
        async_handle_service,
        schema=vol.Schema({
            **TARGET_SCHEMA,
            vol.Required(ATTR_REFERENCE): str,
            vol.Required(ATTR_DISPLAY_NAME): vol.All(str, vol.Length(min=1)),
        }),
    )

    hass.services.async_register(
        DOMAIN,
        SERVICE_SEND_KEY,
        async_handle_service,
        schema=vol.Schema({
            **TARGET_SCHEMA,
            vol.Required(ATTR_KEY): vol.In([key.value for key in RemoteKey]),
        }),
    )

    hass.services.async_register(
        DOMAIN,
        SERVICE_TOGGLE_INFO_OVERLAY,
        async_handle_service,
        schema=vol.Schema(TARGET_SCHEMA),
    )


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unload services."""
    hass.services.async_remove(DOMAIN, SERVICE_RENAME_INPUT)
    hass.services.async_remove(DOMAIN, SERVICE_SEND_KEY)
    hass.services.async_remove(DOMAIN, SERVICE_TOGGLE_INFO_OVERLAY)
