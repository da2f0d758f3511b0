"""Platform layer placeholders for RTOS targets.

Every operation that would need real hardware raises
CamError(UNSUPPORTED); queries return neutral values.
"""

from __future__ import annotations

from typing import NoReturn, Tuple

from .errors import CamError, ErrorCode
from .interfaces import (
    BootManager,
    FileSystem,
    Headers,
    HttpClient,
    NetworkHal,
    PtzHal,
    StorageHal,
    SystemClock,
    SystemControl,
    Timer,
    UdpSocket,
)


def _unsupported() -> NoReturn:
    raise CamError(ErrorCode.UNSUPPORTED)


class RtosFileSystem(FileSystem):
    def read_file(self, path: str) -> bytes:
        _unsupported()

    def write_file(self, path: str, data: bytes) -> None:
        _unsupported()

    def file_exists(self, path: str) -> bool:
        return False

    def remove_file(self, path: str) -> None:
        _unsupported()

    def file_size(self, path: str) -> int:
        _unsupported()

    def list_dir(self, path: str) -> list[str]:
        _unsupported()

    def create_dir(self, path: str) -> None:
        _unsupported()

    def free_space(self, path: str) -> int:
        _unsupported()

    def total_space(self, path: str) -> int:
        _unsupported()


class RtosTimer(Timer):
    def monotonic_ms(self) -> int:
        return 0

    def sleep_ms(self, ms: int) -> None:
        """Returns immediately."""


class RtosNetworkHal(NetworkHal):
    def is_connected(self) -> bool:
        return False

    def signal_strength(self) -> int:
        return 0

    def connect(self, ssid: str, password: str) -> None:
        _unsupported()

    def disconnect(self) -> None:
        _unsupported()

    def scan_wifi(self) -> list[str]:
        _unsupported()

    def get_ip_address(self) -> str:
        _unsupported()


class RtosStorageHal(StorageHal):
    def is_card_inserted(self) -> bool:
        return False

    def mount(self) -> None:
        _unsupported()

    def unmount(self) -> None:
        _unsupported()

    def format(self) -> None:
        _unsupported()

    def capacity_bytes(self) -> int:
        _unsupported()

    def used_bytes(self) -> int:
        _unsupported()


class RtosSystemClock(SystemClock):
    def now_ms(self) -> int:
        return 0

    def set_time_ms(self, epoch_ms: int) -> None:
        _unsupported()

    def monotonic_ms(self) -> int:
        return 0


class RtosUdpSocket(UdpSocket):
    def send_to(self, addr: str, port: int, data: bytes) -> int:
        _unsupported()

    def recv_from(self, timeout_ms: int) -> bytes:
        _unsupported()

    def bind(self, port: int) -> None:
        _unsupported()


class RtosHttpClient(HttpClient):
    def get(self, url: str, headers: Headers = ()) -> bytes:
        _unsupported()

    def put(self, url: str, headers: Headers, body: bytes) -> bytes:
        _unsupported()

    def post(self, url: str, headers: Headers, body: bytes) -> bytes:
        _unsupported()

    def status_code(self) -> int:
        return 0


class RtosBootManager(BootManager):
    def current_slot(self) -> int:
        return 0

    def set_next_boot_slot(self, slot: int) -> None:
        _unsupported()

    def mark_boot_successful(self) -> None:
        _unsupported()

    def rollback(self) -> None:
        _unsupported()


class RtosSystemControl(SystemControl):
    def reboot(self) -> NoReturn:
        """Never returns; without a reboot mechanism it raises UNSUPPORTED."""
        _unsupported()

    def factory_reset(self) -> None:
        _unsupported()

    def get_device_info(self) -> bytes:
        _unsupported()


class RtosPtzHal(PtzHal):
    def move_to(self, pan: int, tilt: int, speed: int) -> None:
        _unsupported()

    def zoom(self, level: int) -> None:
        _unsupported()

    def get_position(self) -> Tuple[int, int]:
        _unsupported()

    def stop(self) -> None:
        _unsupported()