"""Error codes shared by every part of the camera node."""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric error codes, stable on the wire."""

    OK = 0
    INVALID_PARAM = 1
    TIMEOUT = 2
    BUFFER_FULL = 3
    BUFFER_EMPTY = 4
    NOT_FOUND = 5
    PERMISSION_DENIED = 6
    IO_ERROR = 7
    NETWORK_ERROR = 8
    STORAGE_ERROR = 9
    ENCODING_ERROR = 10
    PROTOCOL_ERROR = 11
    AUTH_FAILED = 12
    NOT_READY = 13
    UNSUPPORTED = 14
    ALREADY_EXISTS = 15
    RESOURCE_EXHAUSTED = 16
    SERVICE_DEGRADED = 17
    SERVICE_SUSPENDED = 18
    INTERNAL_ERROR = 255

    def __str__(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))

    def __format__(self, format_spec: str) -> str:
        return format(str(self), format_spec)


class CamError(Exception):
    """Raised when a camera-system operation fails; carries an ErrorCode."""

    def __init__(self, code: ErrorCode | int) -> None:
        self.code = ErrorCode(code)
        super().__init__(str(self.code))

    def __str__(self) -> str:
        return str(self.code)

    def __repr__(self) -> str:
        return f"CamError({self.code.name})"