"""
Connectivity Monitor for the hosted movies service.

Holds the single current reachability state (online / offline / server-down)
and broadcasts ``{"status": ...}`` to subscribers on every change request.
The state is moved by runtime network signals, by the periodic probe and by
explicit calls; any state can follow any other and there is no debouncing.
"""

from __future__ import annotations

import asyncio
import contextlib
import datetime as dt
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from app.core.config import settings
from app.integrations.movies_api.errors import RemoteApplicationError, UpstreamTimeout, UpstreamUnavailable

logger = logging.getLogger(__name__)

StatusListener = Callable[[Dict[str, str]], None]
ReconnectHook = Callable[[], Awaitable[Any]]


class ConnectivityState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    SERVER_DOWN = "server-down"


class ConnectivityMonitor:
    """Mutable reachability state for the movies service plus its probe timer."""

    def __init__(
        self,
        client: Any,
        *,
        probe_interval: Optional[float] = None,
        on_reconnect: Optional[ReconnectHook] = None,
        initial: ConnectivityState = ConnectivityState.ONLINE,
    ) -> None:
        self._client = client
        self._status = ConnectivityState(initial)
        self._listeners: List[StatusListener] = []
        self._probe_interval = max(
            0.01,
            float(settings.STATUS_PROBE_INTERVAL_SECONDS if probe_interval is None else probe_interval),
        )
        self._probe_task: Optional[asyncio.Task] = None
        self.on_reconnect = on_reconnect
        # no probe has succeeded yet; the initial state is an assumption
        self._confirmed = False
        self.last_checked_at: Optional[str] = None
        self.last_error: Optional[str] = None

    # --- State ---

    def get_status(self) -> ConnectivityState:
        return self._status

    @property
    def is_online(self) -> bool:
        return self._status is ConnectivityState.ONLINE

    def set_status(self, status: ConnectivityState | str) -> None:
        """Overwrite the state and notify every subscriber (fire-and-forget)."""
        new_status = ConnectivityState(status)
        if new_status is not self._status:
            logger.info("Movies service status: %s -> %s", self._status.value, new_status.value)
        self._status = new_status

        event = {"status": new_status.value}
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Status listener %r failed", listener)

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a status listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def handle_network_event(self, reachable: bool) -> None:
        """Map a runtime "became reachable/unreachable" signal onto the state."""
        self.set_status(ConnectivityState.ONLINE if reachable else ConnectivityState.OFFLINE)

    # --- Probe ---

    async def check_server_status(self) -> bool:
        """
        Probe the movies service once and update the state.

        HTTP error response -> server-down; host unreachable -> offline.
        Never raises: every failure resolves to a status value.
        """
        self.last_checked_at = dt.datetime.now(dt.timezone.utc).isoformat()
        try:
            await self._client.probe()
        except (UpstreamUnavailable, UpstreamTimeout) as e:
            self.last_error = str(e)
            self.set_status(ConnectivityState.OFFLINE)
            return False
        except RemoteApplicationError as e:
            self.last_error = str(e)
            self.set_status(ConnectivityState.SERVER_DOWN)
            return False
        except Exception as e:
            logger.warning("Unexpected probe failure: %s", e)
            self.last_error = str(e)
            self.set_status(ConnectivityState.OFFLINE)
            return False

        self.last_error = None
        self.set_status(ConnectivityState.ONLINE)
        return True

    async def probe_once(self) -> bool:
        """
        Run one probe; await the reconnect hook if the service just came back.

        The first successful probe after startup also counts as coming back,
        so operations loaded from disk are replayed without waiting for a flap.
        """
        previous = self._status
        reachable = await self.check_server_status()
        came_back = previous is not ConnectivityState.ONLINE or not self._confirmed
        if reachable:
            self._confirmed = True
        if reachable and came_back and self.on_reconnect is not None:
            try:
                await self.on_reconnect()
            except Exception:
                logger.exception("Reconnect hook failed")
        return reachable

    async def _probe_loop(self) -> None:
        while True:
            await self.probe_once()
            await asyncio.sleep(self._probe_interval)

    @property
    def probe_running(self) -> bool:
        return self._probe_task is not None and not self._probe_task.done()

    def start_periodic_probe(self) -> asyncio.Task:
        """Start the fixed-interval probe on the running event loop."""
        if self.probe_running:
            return self._probe_task  # type: ignore[return-value]
        self._probe_task = asyncio.get_running_loop().create_task(self._probe_loop())
        logger.info("Periodic status probe started (every %.0fs)", self._probe_interval)
        return self._probe_task

    async def stop_periodic_probe(self) -> None:
        task, self._probe_task = self._probe_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("Periodic status probe stopped")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self._status.value,
            "online": self.is_online,
            "last_checked_at": self.last_checked_at,
            "last_error": self.last_error,
        }
