"""Config flow for LG webOS TV."""

from __future__ import annotations

import logging
import re
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.const import CONF_HOST, CONF_MAC, CONF_NAME
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult

from .const import (
    CONF_INPUTS,
    CONF_SWITCH_INFO_MENU,
    CONF_WOL_BROADCAST,
    DEFAULT_NAME,
    DEFAULT_SWITCH_INFO_MENU,
    DEFAULT_WOL_BROADCAST,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)

MAC_PATTERN = re.compile(r"^([0-9A-Fa-f]{2}[:-]?){5}[0-9A-Fa-f]{2}$")


def parse_inputs(text: str | None) -> list[dict[str, str]]:
    """Parse "reference[=Display Name], ..." into input mappings.

    >>> parse_inputs("com.webos.app.hdmi1=Console, netflix")
    [{'reference': 'com.webos.app.hdmi1', 'name': 'Console'}, {'reference': 'netflix'}]
    """
    inputs: list[dict[str, str]] = []
    for item in (text or "").split(","):
        reference, _, name = item.partition("=")
        reference = re.sub(r"\s", "", reference)
        if not reference:
            continue
        entry = {"reference": reference}
        if name.strip():
            entry["name"] = name.strip()
        inputs.append(entry)
    return inputs


def format_inputs(inputs: list[dict[str, str]] | None) -> str:
    """Inverse of parse_inputs, used to prefill the options form."""
    parts = []
    for item in inputs or []:
        if item.get("name"):
            parts.append(f"{item['reference']}={item['name']}")
        else:
            parts.append(item["reference"])
    return ", ".join(parts)


def _validate(user_input: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}
    mac = (user_input.get(CONF_MAC) or "").strip()
    if mac and not MAC_PATTERN.match(mac):
        errors[CONF_MAC] = "invalid_mac"
    return errors


class LgWebOsTvConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for LG webOS TV."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}
        if user_input is not None:
            host = user_input[CONF_HOST].strip()
            await self.async_set_unique_id(host)
            self._abort_if_unique_id_configured()

            errors = _validate(user_input)
            if not errors:
                data = {
                    CONF_NAME: user_input.get(CONF_NAME) or DEFAULT_NAME,
                    CONF_HOST: host,
                    CONF_MAC: (user_input.get(CONF_MAC) or "").strip() or None,
                    CONF_INPUTS: parse_inputs(user_input.get(CONF_INPUTS)),
                    CONF_SWITCH_INFO_MENU: user_input.get(CONF_SWITCH_INFO_MENU, DEFAULT_SWITCH_INFO_MENU),
                }
                _LOGGER.debug("Creating entry for %s with %d inputs", host, len(data[CONF_INPUTS]))
                return self.async_create_entry(title=data[CONF_NAME], data=data)

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema({
                vol.Required(CONF_NAME, default=DEFAULT_NAME): str,
                vol.Required(CONF_HOST): str,
                vol.Optional(CONF_MAC): str,
                vol.Optional(CONF_INPUTS, default=""): str,
                vol.Optional(CONF_SWITCH_INFO_MENU, default=DEFAULT_SWITCH_INFO_MENU): bool,
            }),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> LgWebOsTvOptionsFlowHandler:
        """Get the options flow for this handler."""
        return LgWebOsTvOptionsFlowHandler(config_entry)


class LgWebOsTvOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options flow."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        """Initialize options flow."""
        super().__init__()
        self._config_entry = config_entry

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Manage the options."""
        if user_input is not None:
            current_options = dict(self._config_entry.options)
            current_options.update({
                CONF_INPUTS: parse_inputs(user_input.get(CONF_INPUTS)),
                CONF_SWITCH_INFO_MENU: user_input.get(CONF_SWITCH_INFO_MENU, DEFAULT_SWITCH_INFO_MENU),
                CONF_WOL_BROADCAST: user_input.get(CONF_WOL_BROADCAST) or DEFAULT_WOL_BROADCAST,
            })
            return self.async_create_entry(title="", data=current_options)

        options = {**self._config_entry.data, **self._config_entry.options}
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema({
                vol.Optional(CONF_INPUTS, default=format_inputs(options.get(CONF_INPUTS))): str,
                vol.Optional(
                    CONF_SWITCH_INFO_MENU,
                    default=options.get(CONF_SWITCH_INFO_MENU, DEFAULT_SWITCH_INFO_MENU),
                ): bool,
                vol.Optional(
                    CONF_WOL_BROADCAST,
                    default=options.get(CONF_WOL_BROADCAST, DEFAULT_WOL_BROADCAST),
                ): str,
            }),
        )
