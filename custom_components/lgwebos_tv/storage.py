"""Storage helpers for LG webOS TV."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from .const import (
    DOMAIN,
    STORAGE_KEY_INPUTS,
    STORAGE_KEY_PAIRING,
    STORAGE_VERSION,
)
from .errors import PersistenceError
from .models import host_storage_suffix

_LOGGER = logging.getLogger(__name__)


class StoreLike(Protocol):
    async def async_load(self) -> Any: ...

    async def async_save(self, data: Any) -> None: ...


StoreFactory = Callable[[str], StoreLike]


def ha_store_factory(hass: HomeAssistant) -> StoreFactory:
    """Store factory backed by Home Assistant's .storage directory."""

    def _factory(key: str) -> StoreLike:
        return Store(hass, STORAGE_VERSION, key)

    return _factory


class DeviceStorage:
    """Durable per-TV files, keyed by host with delimiters removed.

    Every failure is logged and reported as "nothing stored" so device
    control keeps working in memory.
    """

    def __init__(self, host: str, store_factory: StoreFactory) -> None:
        """Initialize device storage."""
        self.host = host
        self._suffix = host_storage_suffix(host)
        self._store_factory = store_factory
        self._stores: dict[str, StoreLike] = {}

    def storage_key(self, kind: str) -> str:
        return f"{DOMAIN}.{kind}_{self._suffix}"

    def _store(self, kind: str) -> StoreLike:
        key = self.storage_key(kind)
        if key not in self._stores:
            self._stores[key] = self._store_factory(key)
        return self._stores[key]

    async def _async_load(self, kind: str) -> Any:
        try:
            return await self._store(kind).async_load()
        except Exception as ex:  # noqa: BLE001
            raise PersistenceError(f"could not read {self.storage_key(kind)}: {ex}") from ex

    async def _async_save(self, kind: str, data: Any) -> None:
        try:
            await self._store(kind).async_save(data)
        except Exception as ex:  # noqa: BLE001
            raise PersistenceError(f"could not write {self.storage_key(kind)}: {ex}") from ex

    async def async_load_pairing_key(self) -> str | None:
        """Load stored pairing key for the TV."""
        try:
            stored = await self._async_load(STORAGE_KEY_PAIRING)
        except PersistenceError as ex:
            _LOGGER.warning("Failed to load pairing key for %s: %s", self.host, ex)
            return None
        if isinstance(stored, dict) and stored.get("client_key"):
            _LOGGER.debug("Loaded pairing key from storage for %s", self.host)
            return str(stored["client_key"])
        _LOGGER.debug("No pairing key found in storage for %s", self.host)
        return None

    async def async_save_pairing_key(self, key: str) -> None:
        """Save pairing key for the TV."""
        try:
            await self._async_save(STORAGE_KEY_PAIRING, {"client_key": key})
        except PersistenceError as ex:
            _LOGGER.warning("Failed to save pairing key for %s: %s", self.host, ex)
            return
        _LOGGER.debug("Saved pairing key to storage for %s", self.host)

    async def async_save_if_absent(self, kind: str, data: dict[str, Any]) -> bool:
        """Persist a discovered metadata blob unless one is already stored.

        Returns True if the blob was written.
        """
        try:
            if await self._async_load(kind) is not None:
                _LOGGER.debug("%s already stored for %s, not saving", kind, self.host)
                return False
            await self._async_save(kind, data)
        except PersistenceError as ex:
            _LOGGER.debug("Could not store %s for %s: %s", kind, self.host, ex)
            return False
        _LOGGER.debug("Stored %s for %s", kind, self.host)
        return True

    async def async_load_blob(self, kind: str) -> dict[str, Any] | None:
        try:
            stored = await self._async_load(kind)
        except PersistenceError as ex:
            _LOGGER.debug("Could not read %s for %s: %s", kind, self.host, ex)
            return None
        return stored if isinstance(stored, dict) else None

    async def async_load_input_names(self) -> dict[str, str]:
        """Load display-name overrides keyed by input reference."""
        try:
            stored = await self._async_load(STORAGE_KEY_INPUTS)
        except PersistenceError as ex:
            _LOGGER.debug("Read input names failed for %s: %s", self.host, ex)
            return {}
        if not isinstance(stored, dict):
            return {}
        return {str(ref): str(name) for ref, name in stored.items() if name}

    async def async_save_input_names(self, names: dict[str, str]) -> bool:
        """Rewrite the display-name overrides."""
        try:
            await self._async_save(STORAGE_KEY_INPUTS, dict(names))
        except PersistenceError as ex:
            _LOGGER.warning("Saving input names failed for %s: %s", self.host, ex)
            return False
        return True
