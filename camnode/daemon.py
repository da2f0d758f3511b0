"""Process roles for multi-process mode: staged startup, infra and sys daemons."""

from __future__ import annotations

from typing import Optional, Tuple

from .shm_ring import ShmRingBuf
from .types import ServiceId, Topic
from .uds_router import MAX_MSG_SIZE, UdsTopicRouter

SHM_SLOT_SIZE = 256 * 1024
SHM_SLOT_COUNT = 16

# Services are started level by level, in dependency order.
STARTUP_ORDER: Tuple[Tuple[ServiceId, ...], ...] = (
    (ServiceId.CONFIG,),
    (ServiceId.NETWORK, ServiceId.STORAGE),
    (ServiceId.TIME_SYNC,),
    (ServiceId.MEDIA_CORE,),
    (ServiceId.LIVE, ServiceId.TALK, ServiceId.RECORD, ServiceId.PLAYBACK),
    (ServiceId.CLOUD, ServiceId.UPGRADE),
    (ServiceId.CONTROL_GATEWAY,),
)

DATA_PLANE_TOPICS: Tuple[Topic, ...] = tuple(t for t in Topic if t.is_data_plane())


class AppEntry:
    """Tracks progress through the staged startup levels."""

    def __init__(self) -> None:
        self._started_levels = 0

    def next_level(self) -> Optional[Tuple[ServiceId, ...]]:
        """Services of the next level to start, or None when all have started."""
        if self._started_levels < len(STARTUP_ORDER):
            return STARTUP_ORDER[self._started_levels]
        return None

    def advance(self) -> None:
        """Mark the current level as started."""
        if self._started_levels < len(STARTUP_ORDER):
            self._started_levels += 1

    def all_started(self) -> bool:
        return self._started_levels >= len(STARTUP_ORDER)

    def current_level(self) -> int:
        return self._started_levels


class InfraDaemon:
    """Process hosting the infrastructure services."""

    def __init__(self) -> None:
        self._running = False

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def is_running(self) -> bool:
        return self._running


class SysDaemon:
    """Core process: owns the shared-memory rings and the topic router."""

    def __init__(self) -> None:
        self._shm_buffers: dict[int, ShmRingBuf] = {}
        self._topic_router: Optional[UdsTopicRouter] = None
        self._running = False

    def init_shm(self) -> None:
        """Create one shared-memory ring for every data-plane topic."""
        for topic in DATA_PLANE_TOPICS:
            ring = ShmRingBuf.create(SHM_SLOT_SIZE, SHM_SLOT_COUNT)
            old = self._shm_buffers.pop(int(topic), None)
            if old is not None:
                old.close()
            self._shm_buffers[int(topic)] = ring

    def init_uds_router(self, socket_path: str) -> None:
        """Start the topic router listening at socket_path."""
        router = UdsTopicRouter(socket_path)
        if self._topic_router is not None:
            self._topic_router.close()
        self._topic_router = router

    def get_shm_fd(self, topic: Topic) -> Optional[int]:
        """File descriptor of a data-plane topic's ring, for passing to clients."""
        ring = self._shm_buffers.get(int(topic))
        return None if ring is None else ring.fd()

    def start(self) -> None:
        self._running = True

    def stop(self) -> None:
        self._running = False

    def is_running(self) -> bool:
        return self._running

    def tick(self) -> int:
        """Accept connections and route every pending message; return how many."""
        router = self._topic_router
        if router is None:
            return 0
        router.accept_connections()
        handled = 0
        while True:
            received = router.recv_from_any(MAX_MSG_SIZE)
            if received is None:
                return handled
            _client_id, topic, data = received
            router.route(topic, data)
            handled += 1

    def _close(self) -> None:
        for ring in self._shm_buffers.values():
            ring.close()
        self._shm_buffers.clear()
        if self._topic_router is not None:
            self._topic_router.close()
            self._topic_router = None

    def __enter__(self) -> SysDaemon:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._close()