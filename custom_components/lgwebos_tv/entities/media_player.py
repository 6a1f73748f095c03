"""Media player entity for LG webOS TV."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.media_player import (
    MediaPlayerDeviceClass,
    MediaPlayerEntity,
    MediaPlayerEntityFeature,
    MediaPlayerState,
    MediaType,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from ..const import DOMAIN
from ..entity_helpers import LgWebOsTvEntity, log_command_error
from ..manager import LgWebOsTvManager
from ..models import VolumeSelector

_LOGGER = logging.getLogger(__name__)

BASE_FEATURES = (
    MediaPlayerEntityFeature.TURN_OFF
    | MediaPlayerEntityFeature.VOLUME_MUTE
    | MediaPlayerEntityFeature.VOLUME_SET
    | MediaPlayerEntityFeature.VOLUME_STEP
    | MediaPlayerEntityFeature.SELECT_SOURCE
    | MediaPlayerEntityFeature.PLAY_MEDIA
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up media player entity."""
    manager: LgWebOsTvManager = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([LgWebOsTvMediaPlayer(hass, entry, manager)])


class LgWebOsTvMediaPlayer(LgWebOsTvEntity, MediaPlayerEntity):
    """The TV itself: power, audio, inputs and channels."""

    _attr_device_class = MediaPlayerDeviceClass.TV

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        manager: LgWebOsTvManager,
    ) -> None:
        """Initialize media player."""
        super().__init__(hass, entry, manager, "media_player")
        self._attr_name = None

    @property
    def supported_features(self) -> MediaPlayerEntityFeature:
        features = BASE_FEATURES
        if self.device and self.device.profile.mac:
            features |= MediaPlayerEntityFeature.TURN_ON
        return features

    @property
    def state(self) -> MediaPlayerState:
        if self.device and self.device.snapshot.power_on:
            return MediaPlayerState.ON
        return MediaPlayerState.OFF

    @property
    def is_volume_muted(self) -> bool | None:
        if not self.device:
            return None
        return self.device.snapshot.muted

    @property
    def volume_level(self) -> float | None:
        if not self.device:
            return None
        return self.device.snapshot.volume / 100

    @property
    def source_list(self) -> list[str]:
        if not self.device:
            return []
        return self.device.catalog.names

    @property
    def source(self) -> str | None:
        if not self.device or not self.device.snapshot.power_on:
            return None
        index = self.device.catalog.index_of(self.device.snapshot.foreground_app_id)
        if index is None:
            return None
        return self.device.catalog.names[index]

    @property
    def media_channel(self) -> str | None:
        if not self.device or not self.device.snapshot.power_on:
            return None
        snapshot = self.device.snapshot
        return snapshot.channel_name or snapshot.channel_number

    async def async_turn_on(self) -> None:
        _, error = await self.device.async_set_power(True)
        log_command_error(self.name, "turn on", error)

    async def async_turn_off(self) -> None:
        _, error = await self.device.async_set_power(False)
        log_command_error(self.name, "turn off", error)

    async def async_mute_volume(self, mute: bool) -> None:
        _, error = await self.device.async_set_mute(mute)
        log_command_error(self.name, "mute", error)

    async def async_set_volume_level(self, volume: float) -> None:
        _, error = await self.device.async_set_volume(round(volume * 100))
        log_command_error(self.name, "set volume", error)

    async def async_volume_up(self) -> None:
        _, error = await self.device.async_volume_selector(VolumeSelector.INCREMENT)
        log_command_error(self.name, "volume up", error)

    async def async_volume_down(self) -> None:
        _, error = await self.device.async_volume_selector(VolumeSelector.DECREMENT)
        log_command_error(self.name, "volume down", error)

    async def async_select_source(self, source: str) -> None:
        reference = self.device.catalog.reference_for_name(source)
        if reference is None:
            _LOGGER.warning("%s: unknown source %s", self.name, source)
            return
        _, error = await self.device.async_set_input(reference)
        log_command_error(self.name, "select source", error)

    async def async_play_media(self, media_type: MediaType | str, media_id: str, **kwargs: Any) -> None:
        if media_type != MediaType.CHANNEL:
            _LOGGER.warning("%s: unsupported media type %s", self.name, media_type)
            return
        _, error = await self.device.async_set_channel(media_id)
        log_command_error(self.name, "open channel", error)
