"""
Composition of the offline sync services.

The application factory owns one container per app instance; nothing in
the sync core is a module-level singleton.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.core.config import Settings, settings as default_settings
from app.core.services.connectivity import ConnectivityMonitor
from app.core.services.local_mirror import LocalMirror
from app.core.services.movie_service import MovieService
from app.core.services.pending_operations import PendingOperationLog
from app.integrations.movies_api.client import MoviesApiClient

MIRROR_FILENAME = "movies_mirror.json"
PENDING_FILENAME = "pending_operations.json"


@dataclass
class ServiceContainer:
    settings: Settings
    client: MoviesApiClient
    monitor: ConnectivityMonitor
    mirror: LocalMirror
    pending: PendingOperationLog
    movies: MovieService


def build_services(
    config: Optional[Settings] = None,
    *,
    client: Optional[MoviesApiClient] = None,
) -> ServiceContainer:
    config = config or default_settings
    client = client or MoviesApiClient(
        config.MOVIES_API_BASE_URL,
        timeout=config.MOVIES_API_TIMEOUT,
        api_key=config.MOVIES_API_KEY,
        probe_path=config.MOVIES_API_PROBE_PATH,
    )
    data_dir = Path(config.OFFLINE_DATA_DIR)
    monitor = ConnectivityMonitor(client, probe_interval=config.STATUS_PROBE_INTERVAL_SECONDS)
    mirror = LocalMirror(data_dir / MIRROR_FILENAME)
    pending = PendingOperationLog(data_dir / PENDING_FILENAME)
    movies = MovieService(client, monitor, mirror, pending)
    if config.SYNC_ON_RECONNECT:
        monitor.on_reconnect = movies.sync_pending_operations
    return ServiceContainer(
        settings=config,
        client=client,
        monitor=monitor,
        mirror=mirror,
        pending=pending,
        movies=movies,
    )
