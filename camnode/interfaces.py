"""Abstract contracts: the communication bus, services and the platform layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NoReturn, Optional, Sequence, Tuple

from .frame import FrameHeader
from .types import CtrlMsg, HealthStatus, ServiceId, Topic

Headers = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class PendingReply:
    """Handle for a request whose reply has not been collected yet."""

    request_id: int
    topic: Topic
    sent_at_ms: int


class CommBus(ABC):
    """Pub/sub for control, event and frame topics plus non-blocking request/reply.

    Failures are raised as CamError.
    """

    @abstractmethod
    def publish_ctrl(self, topic: Topic, msg: CtrlMsg, payload: bytes = b"") -> None:
        """Publish a control or event message to a topic."""

    @abstractmethod
    def poll_ctrl(self) -> Optional[Tuple[Topic, CtrlMsg, bytes]]:
        """Next pending control message as (topic, message, payload), or None."""

    @abstractmethod
    def subscribe(self, topic: Topic) -> None:
        """Subscribe to a topic."""

    @abstractmethod
    def unsubscribe(self, topic: Topic) -> None:
        """Remove a subscription from a topic."""

    @abstractmethod
    def publish_frame(self, topic: Topic, header: FrameHeader, data: bytes) -> None:
        """Publish a media frame to a data-plane topic."""

    @abstractmethod
    def poll_frame(self, topic: Topic) -> Optional[Tuple[FrameHeader, bytes]]:
        """Next pending frame on a topic as (header, data), or None."""

    @abstractmethod
    def send_request(
        self, topic: Topic, msg: CtrlMsg, payload: bytes = b""
    ) -> PendingReply:
        """Send a request and return a handle for its reply."""

    @abstractmethod
    def poll_reply(self, pending: PendingReply) -> Optional[CtrlMsg]:
        """The reply to a pending request, or None if it has not arrived."""

    @abstractmethod
    def cancel_request(self, pending: PendingReply) -> None:
        """Forget a pending request."""

    @abstractmethod
    def reply(
        self, topic: Topic, request_id: int, msg: CtrlMsg, payload: bytes = b""
    ) -> None:
        """Send a reply to a received request."""


class Service(ABC):
    """A camera-system service with staged startup and health reporting."""

    @abstractmethod
    def service_id(self) -> ServiceId:
        """Identifier of this service."""

    @abstractmethod
    def dependencies(self) -> Tuple[ServiceId, ...]:
        """Services that must be started before this one."""

    @abstractmethod
    def init(self, bus: CommBus) -> None:
        """Attach to the communication bus."""

    @abstractmethod
    def start(self) -> None:
        """Start after init and after all dependencies have started."""

    @abstractmethod
    def stop(self) -> None:
        """Stop gracefully."""

    @abstractmethod
    def health(self) -> HealthStatus:
        """Current health and degradation state."""

    def poll(self) -> bool:
        """Do one unit of periodic work; return whether any work was done."""
        return False


class FileSystem(ABC):
    """File-system access."""

    @abstractmethod
    def read_file(self, path: str) -> bytes: ...

    @abstractmethod
    def write_file(self, path: str, data: bytes) -> None: ...

    @abstractmethod
    def file_exists(self, path: str) -> bool: ...

    @abstractmethod
    def remove_file(self, path: str) -> None: ...

    @abstractmethod
    def file_size(self, path: str) -> int: ...

    @abstractmethod
    def list_dir(self, path: str) -> list[str]: ...

    @abstractmethod
    def create_dir(self, path: str) -> None: ...

    @abstractmethod
    def free_space(self, path: str) -> int: ...

    @abstractmethod
    def total_space(self, path: str) -> int: ...


class NetworkHal(ABC):
    """Network link control."""

    @abstractmethod
    def is_connected(self) -> bool: ...

    @abstractmethod
    def signal_strength(self) -> int: ...

    @abstractmethod
    def connect(self, ssid: str, password: str) -> None: ...

    @abstractmethod
    def disconnect(self) -> None: ...

    @abstractmethod
    def scan_wifi(self) -> list[str]: ...

    @abstractmethod
    def get_ip_address(self) -> str: ...


class StorageHal(ABC):
    """Removable storage detection and management."""

    @abstractmethod
    def is_card_inserted(self) -> bool: ...

    @abstractmethod
    def mount(self) -> None: ...

    @abstractmethod
    def unmount(self) -> None: ...

    @abstractmethod
    def format(self) -> None: ...

    @abstractmethod
    def capacity_bytes(self) -> int: ...

    @abstractmethod
    def used_bytes(self) -> int: ...


class SystemClock(ABC):
    """Wall clock and monotonic clock."""

    @abstractmethod
    def now_ms(self) -> int: ...

    @abstractmethod
    def set_time_ms(self, epoch_ms: int) -> None: ...

    @abstractmethod
    def monotonic_ms(self) -> int: ...


class UdpSocket(ABC):
    """UDP socket, used for time synchronisation."""

    @abstractmethod
    def send_to(self, addr: str, port: int, data: bytes) -> int: ...

    @abstractmethod
    def recv_from(self, timeout_ms: int) -> bytes: ...

    @abstractmethod
    def bind(self, port: int) -> None: ...


class HttpClient(ABC):
    """HTTP client for cloud upload and upgrades."""

    @abstractmethod
    def get(self, url: str, headers: Headers = ()) -> bytes: ...

    @abstractmethod
    def put(self, url: str, headers: Headers, body: bytes) -> bytes: ...

    @abstractmethod
    def post(self, url: str, headers: Headers, body: bytes) -> bytes: ...

    @abstractmethod
    def status_code(self) -> int: ...


class Timer(ABC):
    """Monotonic time and sleeping."""

    @abstractmethod
    def monotonic_ms(self) -> int: ...

    @abstractmethod
    def sleep_ms(self, ms: int) -> None: ...


class BootManager(ABC):
    """A/B boot-slot management for upgrades."""

    @abstractmethod
    def current_slot(self) -> int: ...

    @abstractmethod
    def set_next_boot_slot(self, slot: int) -> None: ...

    @abstractmethod
    def mark_boot_successful(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...


class SystemControl(ABC):
    """Reboot, factory reset and device information."""

    @abstractmethod
    def reboot(self) -> NoReturn: ...

    @abstractmethod
    def factory_reset(self) -> None: ...

    @abstractmethod
    def get_device_info(self) -> bytes: ...


class PtzHal(ABC):
    """Pan/tilt/zoom control."""

    @abstractmethod
    def move_to(self, pan: int, tilt: int, speed: int) -> None: ...

    @abstractmethod
    def zoom(self, level: int) -> None: ...

    @abstractmethod
    def get_position(self) -> Tuple[int, int]: ...

    @abstractmethod
    def stop(self) -> None: ...