"""Platform layer for Linux: file system, network link and timer."""

from __future__ import annotations

import os
import shutil
import threading
import time
from pathlib import Path
from typing import Optional

from .errors import CamError, ErrorCode
from .interfaces import FileSystem, NetworkHal, Timer

_boot_lock = threading.Lock()
_boot_instant: Optional[float] = None


def _boot_time() -> float:
    """Monotonic reference point, fixed the first time it is asked for."""
    global _boot_instant
    with _boot_lock:
        if _boot_instant is None:
            _boot_instant = time.monotonic()
        return _boot_instant


class LinuxFileSystem(FileSystem):
    """File system backed by the host's files; failures raise CamError(IO_ERROR)."""

    def read_file(self, path: str) -> bytes:
        try:
            return Path(path).read_bytes()
        except (OSError, ValueError) as exc:
            raise CamError(ErrorCode.IO_ERROR) from exc

    def write_file(self, path: str, data: bytes) -> None:
        """Create or replace the file with data."""
        try:
            Path(path).write_bytes(bytes(data))
        except (OSError, ValueError) as exc:
            raise CamError(ErrorCode.IO_ERROR) from exc

    def file_exists(self, path: str) -> bool:
        return os.path.exists(path)

    def remove_file(self, path: str) -> None:
        try:
            os.remove(path)
        except (OSError, ValueError) as exc:
            raise CamError(ErrorCode.IO_ERROR) from exc

    def file_size(self, path: str) -> int:
        try:
            return os.stat(path).st_size
        except (OSError, ValueError) as exc:
            raise CamError(ErrorCode.IO_ERROR) from exc

    def list_dir(self, path: str) -> list[str]:
        """Names of the entries in a directory, in the order the system gives them."""
        try:
            with os.scandir(path) as entries:
                return [entry.name for entry in entries]
        except (OSError, ValueError) as exc:
            raise CamError(ErrorCode.IO_ERROR) from exc

    def create_dir(self, path: str) -> None:
        """Create a directory and any missing parents."""
        try:
            os.makedirs(path, exist_ok=True)
        except (OSError, ValueError) as exc:
            raise CamError(ErrorCode.IO_ERROR) from exc

    @staticmethod
    def _statvfs(path: str) -> os.statvfs_result:
        try:
            return os.statvfs(path)
        except ValueError as exc:
            raise CamError(ErrorCode.INVALID_PARAM) from exc
        except OSError as exc:
            raise CamError(ErrorCode.IO_ERROR) from exc

    def free_space(self, path: str) -> int:
        """Free bytes on the file system holding path."""
        stat = self._statvfs(path)
        return stat.f_bfree * stat.f_bsize

    def total_space(self, path: str) -> int:
        """Total bytes of the file system holding path."""
        stat = self._statvfs(path)
        return stat.f_blocks * stat.f_bsize


class LinuxNetworkHal(NetworkHal):
    """Network link that tracks a connected flag without touching the host."""

    def __init__(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def signal_strength(self) -> int:
        """Signal strength in dBm: -50 when connected, -127 otherwise."""
        return -50 if self._connected else -127

    def connect(self, ssid: str, password: str) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def scan_wifi(self) -> list[str]:
        return []

    def get_ip_address(self) -> str:
        """Address of the link; raises NETWORK_ERROR when disconnected."""
        if not self._connected:
            raise CamError(ErrorCode.NETWORK_ERROR)
        return "0.0.0.0"


class LinuxTimer(Timer):
    """Milliseconds since the first timer was created, and sleeping."""

    def __init__(self) -> None:
        _boot_time()

    def monotonic_ms(self) -> int:
        return int((time.monotonic() - _boot_time()) * 1000)

    def sleep_ms(self, ms: int) -> None:
        time.sleep(ms / 1000)


__all__ = ["LinuxFileSystem", "LinuxNetworkHal", "LinuxTimer", "shutil"][:3]