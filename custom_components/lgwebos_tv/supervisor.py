"""Connection supervisor driving one TV from disconnected to fully operational."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Sequence

from .const import (
    MAX_RECENT_EVENTS,
    METADATA_ENDPOINTS,
    PROBE_INTERVAL,
    STORAGE_KEY_SOFTWARE,
    STORAGE_KEY_SYSTEM,
    WAKE_GRACE_PROBES,
)
from .errors import LgWebOsError
from .models import ConnectionState, DeviceProfile, DeviceStateSnapshot, SessionEvent
from .multiplexer import PushHandler
from .pointer import PointerChannel, async_acquire_pointer_channel
from .probe import async_probe
from .session import SessionTransport
from .storage import DeviceStorage

_LOGGER = logging.getLogger(__name__)

Prober = Callable[[str, int], Awaitable[bool]]
PointerFactory = Callable[[SessionTransport], Awaitable[PointerChannel]]
Listener = Callable[[], None]

# States in which a connect request is a no-op.
_ACTIVE_STATES = (
    ConnectionState.CONNECTING,
    ConnectionState.AWAITING_PAIRING,
    ConnectionState.CONNECTED,
)


class ConnectionSupervisor:
    """State machine reconciling reachability, session and application state.

    All transitions run synchronously on the event loop, so the connection
    state, the pointer reference and the power flag are never observed
    half-updated.
    """

    def __init__(
        self,
        profile: DeviceProfile,
        snapshot: DeviceStateSnapshot,
        session: SessionTransport,
        storage: DeviceStorage,
        subscriptions: Sequence[tuple[str, PushHandler]] = (),
        *,
        prober: Prober = async_probe,
        pointer_factory: PointerFactory = async_acquire_pointer_channel,
        probe_interval: float = PROBE_INTERVAL,
    ) -> None:
        """Initialize supervisor."""
        self.profile = profile
        self.snapshot = snapshot
        self.session = session
        self.storage = storage
        self.probe_interval = probe_interval

        self._subscriptions = list(subscriptions)
        self._prober = prober
        self._pointer_factory = pointer_factory

        self._state = ConnectionState.DISCONNECTED
        self._pointer: PointerChannel | None = None
        self._ready = False
        self._generation = 0

        self._probe_task: asyncio.Task | None = None
        self._bootstrap_task: asyncio.Task | None = None
        self._background_tasks: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []
        self._metadata_listeners: list[Listener] = []

        self._wake_probes_left = 0
        self._connect_count = 0
        self._last_error: str | None = None
        self._recent_events: deque[dict[str, Any]] = deque(maxlen=MAX_RECENT_EVENTS)

        session.set_event_callback(self.handle_session_event)

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def ready(self) -> bool:
        """True once the bootstrap of the current connection has finished."""
        return self._ready

    @property
    def pointer(self) -> PointerChannel | None:
        """Pointer channel of the current connection, None if unavailable."""
        if self._state is not ConnectionState.CONNECTED or not self._ready:
            return None
        return self._pointer

    @property
    def is_connected(self) -> bool:
        """True while the control session is registered."""
        return self._state is ConnectionState.CONNECTED

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call listener on every connection state change."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def add_metadata_listener(self, listener: Listener) -> Callable[[], None]:
        """Call listener after the profile was refined from discovered metadata."""
        self._metadata_listeners.append(listener)
        return lambda: (
            self._metadata_listeners.remove(listener) if listener in self._metadata_listeners else None
        )

    # Lifecycle

    async def async_start(self) -> None:
        """Start the periodic reachability probe."""
        if self._probe_task is None or self._probe_task.done():
            self._probe_task = asyncio.create_task(self._async_probe_loop())

    async def async_stop(self) -> None:
        """Stop probing and close the session."""
        tasks = [task for task in (self._probe_task, self._bootstrap_task) if task]
        self._probe_task = None
        self._teardown("shutdown")
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.session.async_disconnect()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    async def _async_probe_loop(self) -> None:
        while True:
            try:
                await self.async_probe_tick()
            except asyncio.CancelledError:
                raise
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Unexpected error probing %s", self.profile.host)
            await asyncio.sleep(self.probe_interval)

    async def async_probe_tick(self) -> None:
        """Run one reachability probe and apply its result."""
        if self._state is ConnectionState.DISCONNECTED:
            self._set_state(ConnectionState.PROBING)

        try:
            reachable = await self._prober(self.profile.host, self.profile.port)
        except Exception as ex:  # noqa: BLE001
            _LOGGER.debug("Probe of %s raised: %s", self.profile.host, ex)
            reachable = False

        if reachable:
            if self._state in _ACTIVE_STATES:
                return
            _LOGGER.info("TV %s (%s) is online", self.profile.name, self.profile.host)
            self._set_state(ConnectionState.CONNECTING)
            await self.session.async_connect()
            return

        if self._state is ConnectionState.PROBING:
            self._expire_wake()
            self._set_state(ConnectionState.DISCONNECTED)
        elif self._state in _ACTIVE_STATES:
            _LOGGER.info("TV %s (%s) is offline", self.profile.name, self.profile.host)
            await self.async_disconnect_session("unreachable")

    def expect_wake(self) -> None:
        """Keep an optimistic power on for a few failed probes after Wake-on-LAN."""
        self._wake_probes_left = WAKE_GRACE_PROBES

    def _expire_wake(self) -> None:
        if not self.snapshot.power_on:
            return
        self._wake_probes_left -= 1
        if self._wake_probes_left > 0:
            return
        _LOGGER.info("TV %s (%s) did not wake up, reporting it off", self.profile.name, self.profile.host)
        self.snapshot.power_on = False

    async def async_disconnect_session(self, reason: str) -> None:
        """Tear down immediately, then close the transport."""
        self._teardown(reason)
        await self.session.async_disconnect()

    # Session events

    def handle_session_event(self, event: SessionEvent, detail: Any = None) -> None:
        """Transition function for transport lifecycle events."""
        _LOGGER.debug("Session event %s for %s in state %s", event.value, self.profile.host, self._state.value)

        if event is SessionEvent.CONNECTING:
            if self._state is not ConnectionState.CONNECTING:
                self._set_state(ConnectionState.CONNECTING)
        elif event is SessionEvent.PROMPT:
            if self._state not in (ConnectionState.CONNECTING, ConnectionState.AWAITING_PAIRING):
                _LOGGER.debug("Ignoring pairing prompt for %s in state %s", self.profile.host, self._state.value)
                return
            self.snapshot.power_on = False
            if detail is not None:
                # Registration was rejected; the transport has stopped retrying.
                self._last_error = str(detail)
                self._log_event("prompt", f"Pairing rejected ({detail}), reload the entry to pair again")
            else:
                self._log_event("prompt", "Waiting for pairing confirmation on the TV")
            self._set_state(ConnectionState.AWAITING_PAIRING)
        elif event is SessionEvent.CONNECT:
            if self._state is ConnectionState.CONNECTED:
                return
            self._connect_count += 1
            self._last_error = None
            self._set_state(ConnectionState.CONNECTED)
            self._log_event("connect", "Connected")
            self._bootstrap_task = asyncio.create_task(self._async_bootstrap(self._generation))
        elif event is SessionEvent.ERROR:
            self._last_error = str(detail) if detail is not None else "error"
            _LOGGER.debug("Session error for %s: %s", self.profile.host, self._last_error)
            self._teardown("error")
        elif event is SessionEvent.CLOSE:
            self._teardown("closed")

    def _teardown(self, reason: str) -> None:
        """Clear the pointer and flip reachability before any reconnect."""
        self._generation += 1
        pointer = self._pointer
        self._pointer = None
        self._ready = False
        if pointer is not None:
            self._track(pointer.async_close())
        if self._bootstrap_task is not None and not self._bootstrap_task.done():
            self._bootstrap_task.cancel()
        self._bootstrap_task = None
        self.snapshot.power_on = False
        self.snapshot.info_overlay_visible = False
        if self._state is not ConnectionState.DISCONNECTED:
            self._log_event("disconnect", f"Disconnected ({reason})")
            self._set_state(ConnectionState.DISCONNECTED)

    # Bootstrap

    async def _async_bootstrap(self, generation: int) -> None:
        """Metadata, subscriptions and pointer: independent, best effort."""
        results = await asyncio.gather(
            self._async_fetch_metadata(),
            self._async_setup_subscriptions(),
            self._async_acquire_pointer(generation),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                _LOGGER.debug("Bootstrap step failed for %s: %s", self.profile.host, result)

        if generation != self._generation:
            return
        self._ready = True
        _LOGGER.debug("Bootstrap finished for %s", self.profile.host)
        self._notify()

    async def _async_fetch_metadata(self) -> None:
        mux = self.session.multiplexer
        for endpoint, kind in METADATA_ENDPOINTS:
            try:
                payload = await mux.async_request(endpoint)
            except LgWebOsError as ex:
                _LOGGER.debug("Get %s failed for %s: %s", kind, self.profile.host, ex)
                continue
            data = {key: value for key, value in payload.items() if key != "returnValue"}
            if kind == STORAGE_KEY_SYSTEM:
                self.profile.apply_system_info(data)
            elif kind == STORAGE_KEY_SOFTWARE:
                self.profile.apply_software_info(data)
            await self.storage.async_save_if_absent(kind, data)

        _LOGGER.info(
            "TV %s: manufacturer=%s, model=%s, system=%s, serial=%s, firmware=%s",
            self.profile.name,
            self.profile.manufacturer,
            self.profile.model,
            self.profile.product_name,
            self.profile.serial_number,
            self.profile.firmware_revision,
        )
        for listener in list(self._metadata_listeners):
            listener()

    async def _async_setup_subscriptions(self) -> None:
        mux = self.session.multiplexer
        for uri, handler in self._subscriptions:
            try:
                await mux.async_subscribe(uri, handler)
            except LgWebOsError as ex:
                _LOGGER.warning("Subscribe to %s failed for %s: %s", uri, self.profile.host, ex)

    async def _async_acquire_pointer(self, generation: int) -> None:
        pointer = await self._pointer_factory(self.session)
        if generation != self._generation:
            # The connection this pointer belongs to is already gone.
            self._track(pointer.async_close())
            return
        self._pointer = pointer
        _LOGGER.debug("Pointer channel acquired for %s", self.profile.host)

    # Helpers

    def _set_state(self, state: ConnectionState) -> None:
        if state is self._state:
            return
        _LOGGER.debug("Connection state %s -> %s for %s", self._state.value, state.value, self.profile.host)
        self._state = state
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Error in connection state listener")

    def _track(self, coro: Awaitable[Any]) -> None:
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _log_event(self, event_type: str, message: str) -> None:
        self._recent_events.append(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "type": event_type,
                "message": message,
            }
        )

    @property
    def recent_events(self) -> list[dict[str, Any]]:
        """Connection history, oldest first."""
        return list(self._recent_events)

    @property
    def status_attributes(self) -> dict[str, Any]:
        """Connection health for diagnostics and entity attributes."""
        return {
            "connection_state": self._state.value,
            "ready": self._ready,
            "pointer_available": self.pointer is not None,
            "connect_count": self._connect_count,
            "last_error": self._last_error,
            "pending_requests": self.session.multiplexer.pending_count,
            "subscriptions": self.session.multiplexer.subscription_count,
        }
