"""Identifiers, topics and the control-plane message envelope."""

from __future__ import annotations

import dataclasses
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar


class ServiceId(IntEnum):
    """Identifies a service; used for the startup dependency graph."""

    CONFIG = 0
    NETWORK = 1
    STORAGE = 2
    TIME_SYNC = 3
    MEDIA_CORE = 4
    LIVE = 5
    TALK = 6
    RECORD = 7
    PLAYBACK = 8
    CLOUD = 9
    UPGRADE = 10
    CONTROL_GATEWAY = 11


class ServiceState(IntEnum):
    """Three-level degradation state of a service."""

    NORMAL = 0
    DEGRADED = 1
    SUSPENDED = 2


@dataclass(frozen=True)
class HealthStatus:
    """Health report of one service."""

    service: ServiceId
    state: ServiceState
    error_code: int = 0


class Topic(IntEnum):
    """Pub/sub and request/reply topics."""

    # Data plane
    VIDEO_MAIN_STREAM = 0
    VIDEO_SUB_STREAM = 1
    AUDIO_CAPTURE = 2
    TALK_DOWNLINK = 3
    TALK_UPLINK = 4
    PLAYBACK_STREAM = 5

    # Control plane
    CMD_LIVE = 10
    CMD_TALK = 11
    CMD_RECORD = 12
    CMD_PLAYBACK = 13
    CMD_CLOUD = 14
    CMD_UPGRADE = 15
    CMD_CONFIG = 16
    CMD_STORAGE = 17
    CMD_NETWORK = 18
    CMD_TIME = 19
    CMD_DEVICE = 20
    CMD_MEDIA_CORE = 21
    CMD_CONTROL = 22

    # Event plane
    EVT_CONFIG_CHANGED = 30
    EVT_NETWORK_STATUS = 31
    EVT_STORAGE_STATUS = 32
    EVT_TIME_SYNC = 33
    EVT_ALARM = 34
    EVT_SESSION_STATUS = 35
    EVT_UPGRADE_STATUS = 36

    def is_data_plane(self) -> bool:
        """True for high-throughput frame topics."""
        return self.value < 10

    def is_control_plane(self) -> bool:
        """True for command topics."""
        return 10 <= self.value < 30

    def is_event_plane(self) -> bool:
        """True for broadcast event topics."""
        return self.value >= 30


class MethodId(IntEnum):
    """Method identifiers for request/reply dispatch."""

    START_LIVE = 0x0100
    STOP_LIVE = 0x0101

    START_TALK = 0x0200
    STOP_TALK = 0x0201
    SET_TALK_MODE = 0x0202

    START_RECORD = 0x0300
    STOP_RECORD = 0x0301

    START_PLAYBACK = 0x0400
    STOP_PLAYBACK = 0x0401
    QUERY_TIMELINE = 0x0402
    SEEK_PLAYBACK = 0x0403

    START_UPLOAD = 0x0500
    STOP_UPLOAD = 0x0501
    QUERY_UPLOAD_QUEUE = 0x0502

    CHECK_UPDATE = 0x0600
    START_UPGRADE = 0x0601
    QUERY_UPGRADE_STATUS = 0x0602

    GET_CONFIG = 0x0700
    SET_CONFIG = 0x0701

    QUERY_CAPACITY = 0x0800
    FORMAT_STORAGE = 0x0801

    SCAN_WIFI = 0x0900
    CONNECT_WIFI = 0x0901
    GET_NETWORK_STATUS = 0x0902

    SYNC_NOW = 0x0A00
    QUERY_TIME = 0x0A01

    REBOOT = 0x0B00
    FACTORY_RESET = 0x0B01
    GET_DEVICE_INFO = 0x0B02

    SET_BITRATE = 0x0C00
    REQUEST_IDR = 0x0C01
    SET_RESOLUTION = 0x0C02


class AuthLevel(IntEnum):
    """Authentication levels of the control gateway."""

    NONE = 0
    VIEWER = 1
    ADMIN = 2


_CTRL_LAYOUT = struct.Struct("<BBHHBBHHI")


@dataclass
class CtrlMsg:
    """Control-plane message envelope with a fixed 16-byte binary form."""

    HEADER_SIZE: ClassVar[int] = _CTRL_LAYOUT.size
    FLAG_RESPONSE: ClassVar[int] = 0x01
    FLAG_ERROR: ClassVar[int] = 0x02
    FLAG_HAS_JSON: ClassVar[int] = 0x04

    topic: int
    method_id: int
    request_id: int = 0
    source: int = 0
    flags: int = 0
    payload_len: int = 0
    timestamp_ms: int = 0

    def __post_init__(self) -> None:
        self.topic = int(self.topic)
        self.method_id = int(self.method_id)
        self.source = int(self.source)

    def with_source(self, source: ServiceId | int) -> CtrlMsg:
        """Return a copy with the source service set."""
        return dataclasses.replace(self, source=int(source))

    def with_payload_len(self, length: int) -> CtrlMsg:
        """Return a copy with the payload length set."""
        return dataclasses.replace(self, payload_len=length)

    def with_timestamp(self, ts: int) -> CtrlMsg:
        """Return a copy with the timestamp set."""
        return dataclasses.replace(self, timestamp_ms=ts)

    def is_response(self) -> bool:
        return bool(self.flags & self.FLAG_RESPONSE)

    def is_error(self) -> bool:
        return bool(self.flags & self.FLAG_ERROR)

    def to_bytes(self) -> bytes:
        """Encode as the 16-byte little-endian wire header."""
        try:
            return _CTRL_LAYOUT.pack(
                self.topic,
                0,
                self.method_id,
                self.request_id,
                self.source,
                self.flags,
                self.payload_len,
                0,
                self.timestamp_ms,
            )
        except struct.error as exc:
            raise ValueError(f"field out of range: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> CtrlMsg:
        """Decode a header from the start of ``data``."""
        if len(data) < cls.HEADER_SIZE:
            raise ValueError(
                f"need {cls.HEADER_SIZE} bytes for a CtrlMsg, got {len(data)}"
            )
        (topic, _pad, method_id, request_id, source, flags,
         payload_len, _reserved, timestamp_ms) = _CTRL_LAYOUT.unpack_from(data)
        return cls(
            topic=topic,
            method_id=method_id,
            request_id=request_id,
            source=source,
            flags=flags,
            payload_len=payload_len,
            timestamp_ms=timestamp_ms,
        )