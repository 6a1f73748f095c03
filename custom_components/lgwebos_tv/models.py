"""Data model for the LG webOS TV connection manager."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .const import (
    DEFAULT_FIRMWARE_REVISION,
    DEFAULT_MANUFACTURER,
    DEFAULT_MODEL,
    DEFAULT_PORT,
    DEFAULT_SERIAL_NUMBER,
)


class ConnectionState(str, Enum):
    """Connection state of one TV, owned by the supervisor."""

    DISCONNECTED = "disconnected"
    PROBING = "probing"
    CONNECTING = "connecting"
    AWAITING_PAIRING = "awaiting_pairing"
    CONNECTED = "connected"


class SessionEvent(str, Enum):
    """Lifecycle events emitted by the session transport."""

    CONNECTING = "connecting"
    CONNECT = "connect"
    PROMPT = "prompt"
    CLOSE = "close"
    ERROR = "error"


class RemoteKey(str, Enum):
    """Abstract remote keys understood by the command handlers."""

    REWIND = "rewind"
    FAST_FORWARD = "fast_forward"
    NEXT_TRACK = "next_track"
    PREVIOUS_TRACK = "previous_track"
    ARROW_UP = "arrow_up"
    ARROW_DOWN = "arrow_down"
    ARROW_LEFT = "arrow_left"
    ARROW_RIGHT = "arrow_right"
    SELECT = "select"
    BACK = "back"
    EXIT = "exit"
    PLAY_PAUSE = "play_pause"
    INFORMATION = "information"


class VolumeSelector(str, Enum):
    """Relative volume buttons."""

    INCREMENT = "increment"
    DECREMENT = "decrement"


def host_storage_suffix(host: str) -> str:
    """Return the host with address delimiters removed (192.168.1.5 -> 19216815)."""
    return re.sub(r"[.:\[\]]", "", host)


@dataclass
class DeviceProfile:
    """Identity and network attributes of the TV."""

    name: str
    host: str
    mac: str | None = None
    port: int = DEFAULT_PORT
    manufacturer: str = DEFAULT_MANUFACTURER
    model: str = DEFAULT_MODEL
    serial_number: str = DEFAULT_SERIAL_NUMBER
    firmware_revision: str = DEFAULT_FIRMWARE_REVISION
    product_name: str | None = None

    @property
    def url(self) -> str:
        """Control session URL."""
        return f"ws://{self.host}:{self.port}"

    @property
    def storage_suffix(self) -> str:
        return host_storage_suffix(self.host)

    def apply_system_info(self, data: dict[str, Any]) -> None:
        """Refine descriptive fields from ssap://system/getSystemInfo."""
        self.manufacturer = DEFAULT_MANUFACTURER
        if data.get("modelName"):
            self.model = str(data["modelName"])

    def apply_software_info(self, data: dict[str, Any]) -> None:
        """Refine descriptive fields from getCurrentSWInformation."""
        if data.get("product_name"):
            self.product_name = str(data["product_name"])
        if data.get("device_id"):
            self.serial_number = str(data["device_id"])
        if data.get("minor_ver"):
            self.firmware_revision = str(data["minor_ver"])


@dataclass
class DeviceStateSnapshot:
    """Latest known application state of the TV."""

    power_on: bool = False
    muted: bool = False
    volume: int = 0
    foreground_app_id: str | None = None
    channel_number: str | None = None
    channel_name: str | None = None
    info_overlay_visible: bool = False
    paused: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "power_on": self.power_on,
            "muted": self.muted,
            "volume": self.volume,
            "foreground_app_id": self.foreground_app_id,
            "channel_number": self.channel_number,
            "channel_name": self.channel_name,
            "info_overlay_visible": self.info_overlay_visible,
            "paused": self.paused,
        }


@dataclass
class InputSource:
    """One configured input (app id or input id) with its display name."""

    reference: str
    name: str


@dataclass
class InputCatalog:
    """Ordered configured inputs with persisted display-name overrides."""

    sources: list[InputSource] = field(default_factory=list)
    overrides: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls, inputs: list[Any] | str | dict | None, overrides: dict[str, str] | None = None
    ) -> InputCatalog:
        """Build the catalog from configured inputs and persisted overrides.

        An input is either a bare reference string or a mapping with a
        ``reference`` and an optional ``name``. A persisted name wins over the
        configured one; the reference is the last resort.
        """
        overrides = dict(overrides or {})
        if inputs is None:
            inputs = []
        elif not isinstance(inputs, list):
            inputs = [inputs]

        sources: list[InputSource] = []
        for item in inputs:
            if isinstance(item, dict):
                reference = item.get("reference")
                configured_name = item.get("name")
            else:
                reference = item
                configured_name = None
            if reference is None:
                continue
            reference = re.sub(r"\s", "", str(reference))
            if not reference:
                continue
            name = overrides.get(reference) or configured_name or reference
            sources.append(InputSource(reference=reference, name=str(name)))
        return cls(sources=sources, overrides=overrides)

    @property
    def references(self) -> list[str]:
        return [source.reference for source in self.sources]

    @property
    def names(self) -> list[str]:
        return [source.name for source in self.sources]

    def index_of(self, reference: str | None) -> int | None:
        if reference is None:
            return None
        for index, source in enumerate(self.sources):
            if source.reference == reference:
                return index
        return None

    def reference_at(self, index: int) -> str | None:
        if 0 <= index < len(self.sources):
            return self.sources[index].reference
        return None

    def reference_for_name(self, name: str) -> str | None:
        for source in self.sources:
            if source.name == name:
                return source.reference
        return None

    def rename(self, reference: str, name: str) -> dict[str, str]:
        """Rename an input and return the override mapping to persist."""
        index = self.index_of(reference)
        if index is None:
            raise KeyError(reference)
        self.sources[index].name = name
        self.overrides[reference] = name
        return dict(self.overrides)
