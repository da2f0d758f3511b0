"""Cloud upload service with a bounded upload queue."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from .errors import CamError, ErrorCode
from .interfaces import CommBus, Service
from .types import CtrlMsg, HealthStatus, MethodId, ServiceId, ServiceState, Topic

MAX_UPLOAD_QUEUE = 16
INITIAL_RETRY_DELAY_MS = 1_000
MAX_RETRY_DELAY_MS = 60_000


class CloudState(IntEnum):
    IDLE = 0
    UPLOADING = 1
    SUSPENDED = 2


@dataclass
class _UploadTask:
    file_id: int = 0
    retry_count: int = 0
    retry_delay_ms: int = INITIAL_RETRY_DELAY_MS
    active: bool = False


class CloudService(Service):
    """Queues uploads and drains them while the network is connected."""

    def __init__(self) -> None:
        self._state = CloudState.IDLE
        self._queue = [_UploadTask() for _ in range(MAX_UPLOAD_QUEUE)]
        self._queue_len = 0
        self._network_connected = False
        self._bus: Optional[CommBus] = None
        self._service_state = ServiceState.NORMAL

    @property
    def _attached_bus(self) -> CommBus:
        if self._bus is None:
            raise CamError(ErrorCode.NOT_READY)
        return self._bus

    def cloud_state(self) -> CloudState:
        return self._state

    def queue_len(self) -> int:
        return self._queue_len

    def _enqueue(self, file_id: int) -> None:
        for index, task in enumerate(self._queue):
            if not task.active:
                self._queue[index] = _UploadTask(file_id=file_id, active=True)
                self._queue_len += 1
                if self._state == CloudState.IDLE and self._network_connected:
                    self._state = CloudState.UPLOADING
                return
        raise CamError(ErrorCode.RESOURCE_EXHAUSTED)

    def _cancel_all(self) -> None:
        for task in self._queue:
            task.active = False
        self._queue_len = 0
        self._state = CloudState.IDLE

    def _tick_upload(self) -> None:
        if self._state != CloudState.UPLOADING or not self._network_connected:
            return
        task = next((t for t in self._queue if t.active), None)
        if task is not None:
            task.active = False
            self._queue_len = max(self._queue_len - 1, 0)
        if self._queue_len == 0:
            self._state = CloudState.IDLE

    @staticmethod
    def _compute_retry_delay(retry_count: int) -> int:
        delay = INITIAL_RETRY_DELAY_MS * (1 << min(retry_count, 6))
        return min(delay, MAX_RETRY_DELAY_MS)

    def _handle_network_status(self, method_id: int) -> None:
        # The event's method id carries the network state; 2 and up is connected.
        connected = method_id >= 2
        self._network_connected = connected
        if not connected:
            if self._state == CloudState.UPLOADING:
                self._state = CloudState.SUSPENDED
                self._service_state = ServiceState.DEGRADED
        elif self._state == CloudState.SUSPENDED:
            self._state = CloudState.UPLOADING if self._queue_len > 0 else CloudState.IDLE
            self._service_state = ServiceState.NORMAL

    def _handle_storage_status(self, method_id: int) -> None:
        if method_id >= 2:
            self._service_state = ServiceState.DEGRADED

    def _reply(self, msg: CtrlMsg, response: CtrlMsg, payload: bytes = b"") -> None:
        try:
            self._attached_bus.reply(Topic.CMD_CLOUD, msg.request_id, response, payload)
        except CamError:
            pass

    def _handle_cmd(self, msg: CtrlMsg, payload: bytes) -> None:
        response = CtrlMsg(Topic.CMD_CLOUD, msg.method_id, msg.request_id).with_source(
            ServiceId.CLOUD
        )
        if msg.method_id == MethodId.START_UPLOAD:
            try:
                self._enqueue(msg.request_id)
            except CamError:
                pass
            self._reply(msg, response)
        elif msg.method_id == MethodId.STOP_UPLOAD:
            self._cancel_all()
            self._reply(msg, response)
        elif msg.method_id == MethodId.QUERY_UPLOAD_QUEUE:
            self._reply(msg, response, bytes([self._queue_len, int(self._state)]))

    def service_id(self) -> ServiceId:
        return ServiceId.CLOUD

    def dependencies(self) -> Tuple[ServiceId, ...]:
        return (ServiceId.NETWORK, ServiceId.STORAGE)

    def init(self, bus: CommBus) -> None:
        self._bus = bus
        bus.subscribe(Topic.CMD_CLOUD)
        bus.subscribe(Topic.EVT_NETWORK_STATUS)
        bus.subscribe(Topic.EVT_STORAGE_STATUS)

    def start(self) -> None:
        self._service_state = ServiceState.NORMAL

    def stop(self) -> None:
        self._cancel_all()
        self._service_state = ServiceState.SUSPENDED

    def health(self) -> HealthStatus:
        return HealthStatus(ServiceId.CLOUD, self._service_state, 0)

    def poll(self) -> bool:
        """Handle one pending message; with none pending, advance the upload."""
        polled = self._attached_bus.poll_ctrl()
        if polled is not None:
            topic, msg, payload = polled
            if topic == Topic.CMD_CLOUD and not msg.is_response():
                self._handle_cmd(msg, payload)
                return True
            if topic == Topic.EVT_NETWORK_STATUS:
                self._handle_network_status(msg.method_id)
                return True
            if topic == Topic.EVT_STORAGE_STATUS:
                self._handle_storage_status(msg.method_id)
                return True
            return False
        self._tick_upload()
        return False