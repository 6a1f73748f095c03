"""State derivation for subscription pushes and button selection for commands."""

from __future__ import annotations

import logging
from typing import Any

from .const import (
    BUTTON_BACK,
    BUTTON_INFO,
    BUTTON_MENU,
    BUTTON_PAUSE,
    BUTTON_PLAY,
    POWER_STATE_ACTIVE,
    POWER_STATE_ACTIVE_STANDBY,
    REMOTE_KEY_BUTTONS,
    VOLUME_SELECTOR_BUTTONS,
)
from .models import DeviceStateSnapshot, RemoteKey, VolumeSelector

_LOGGER = logging.getLogger(__name__)


def derive_power_on(payload: dict[str, Any]) -> bool:
    """
    Derive the on/off signal from a getPowerState push.

    The TV is on when any of state, processing or powerOnReason reads
    "Active", unless state or processing reads "Active Standby". The standby
    marker always wins over an "Active" match.
    """
    state = payload.get("state")
    processing = payload.get("processing")
    active = POWER_STATE_ACTIVE in (state, processing, payload.get("powerOnReason"))
    standby = POWER_STATE_ACTIVE_STANDBY in (state, processing)
    return active and not standby


def apply_power_push(snapshot: DeviceStateSnapshot, payload: dict[str, Any] | None) -> bool:
    """Apply a power push. Returns True if the snapshot changed."""
    if not payload:
        _LOGGER.debug("Ignoring empty power state push")
        return False
    power_on = derive_power_on(payload)
    if power_on == snapshot.power_on:
        return False
    snapshot.power_on = power_on
    if not power_on:
        snapshot.info_overlay_visible = False
    return True


def apply_foreground_app_push(snapshot: DeviceStateSnapshot, payload: dict[str, Any] | None) -> bool:
    """Apply a foreground app push. Returns True if the snapshot changed."""
    if not payload or "appId" not in payload:
        _LOGGER.debug("Ignoring foreground app push without appId: %s", payload)
        return False
    app_id = payload.get("appId") or None
    if app_id == snapshot.foreground_app_id:
        return False
    snapshot.foreground_app_id = app_id
    return True


def apply_audio_push(snapshot: DeviceStateSnapshot, payload: dict[str, Any] | None) -> bool:
    """
    Apply an audio push.

    muted and volume are gated independently on the push's "changed" list so
    a push for one never overwrites the other. The initial subscription reply
    carries no "changed" list and updates every key it contains. Newer
    firmware nests the values under "volumeStatus".
    """
    if not payload:
        _LOGGER.debug("Ignoring empty audio push")
        return False

    values = dict(payload)
    status = payload.get("volumeStatus")
    if isinstance(status, dict):
        if "muteStatus" in status:
            values.setdefault("muted", status["muteStatus"])
        if "volume" in status:
            values.setdefault("volume", status["volume"])

    changed_keys = payload.get("changed")
    if changed_keys is None:
        changed_keys = [key for key in ("muted", "volume") if key in values]
    elif not isinstance(changed_keys, list):
        _LOGGER.debug("Ignoring audio push with malformed changed list: %s", changed_keys)
        return False

    changed = False
    if "muted" in changed_keys and "muted" in values:
        muted = bool(values["muted"])
        if muted != snapshot.muted:
            snapshot.muted = muted
            changed = True
    if "volume" in changed_keys and "volume" in values:
        try:
            volume = int(values["volume"])
        except (TypeError, ValueError):
            _LOGGER.debug("Ignoring malformed volume value: %s", values["volume"])
        else:
            if volume != snapshot.volume:
                snapshot.volume = volume
                changed = True
    return changed


def apply_channel_push(snapshot: DeviceStateSnapshot, payload: dict[str, Any] | None) -> bool:
    """Apply a current channel push. Number and name move together."""
    if not payload:
        _LOGGER.debug("Ignoring empty channel push")
        return False
    number = payload.get("channelNumber")
    name = payload.get("channelName")
    if number == snapshot.channel_number and name == snapshot.channel_name:
        return False
    snapshot.channel_number = number
    snapshot.channel_name = name
    return True


def info_button(switch_info_menu: bool) -> str:
    """Button that opens the info overlay."""
    return BUTTON_MENU if switch_info_menu else BUTTON_INFO


def info_overlay_button(*, overlay_visible: bool, switch_info_menu: bool) -> str:
    """Button toggling the info overlay: close it if shown, open it otherwise."""
    if overlay_visible:
        return BUTTON_BACK
    return info_button(switch_info_menu)


def remote_key_button(
    key: RemoteKey | str,
    *,
    paused: bool,
    switch_info_menu: bool,
) -> str:
    """
    Translate an abstract remote key into a pointer channel button name.

    Returns "" for keys without a button so the caller can treat them as a
    no-op instead of an error.
    """
    try:
        key = RemoteKey(key)
    except ValueError:
        _LOGGER.debug("Unmapped remote key: %s", key)
        return ""

    if key is RemoteKey.PLAY_PAUSE:
        return BUTTON_PLAY if paused else BUTTON_PAUSE
    if key is RemoteKey.INFORMATION:
        return info_button(switch_info_menu)
    return REMOTE_KEY_BUTTONS.get(key.value, "")


def volume_selector_button(selector: VolumeSelector | str) -> str:
    """Translate a relative volume selector into a button name ("" if unknown)."""
    try:
        selector = VolumeSelector(selector)
    except ValueError:
        return ""
    return VOLUME_SELECTOR_BUTTONS.get(selector.value, "")
