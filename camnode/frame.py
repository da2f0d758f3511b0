"""Data-plane frame types and the binary frame header."""

from __future__ import annotations

import dataclasses
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar


class FrameType(IntEnum):
    """Kinds of media frame carried on the data plane."""

    VIDEO_H264_IDR = 0
    VIDEO_H264_P = 1
    VIDEO_H265_IDR = 2
    VIDEO_H265_P = 3
    AUDIO_PCM = 10
    AUDIO_AAC = 11
    AUDIO_G711A = 12
    AUDIO_G711U = 13


_FRAME_LAYOUT = struct.Struct("<BBBBIQQII")


@dataclass
class FrameHeader:
    """Frame header with a fixed 32-byte binary form; payload follows it."""

    HEADER_SIZE: ClassVar[int] = _FRAME_LAYOUT.size
    FLAG_KEYFRAME: ClassVar[int] = 0x01
    FLAG_EOS: ClassVar[int] = 0x02

    frame_type: int
    stream_id: int
    seq: int
    flags: int = 0
    pts_ms: int = 0
    dts_ms: int = 0
    data_len: int = 0

    def __post_init__(self) -> None:
        self.frame_type = int(self.frame_type)

    def with_pts(self, pts: int) -> FrameHeader:
        """Return a copy with the presentation timestamp set."""
        return dataclasses.replace(self, pts_ms=pts)

    def with_dts(self, dts: int) -> FrameHeader:
        """Return a copy with the decode timestamp set."""
        return dataclasses.replace(self, dts_ms=dts)

    def with_data_len(self, length: int) -> FrameHeader:
        """Return a copy with the payload length set."""
        return dataclasses.replace(self, data_len=length)

    def is_keyframe(self) -> bool:
        return bool(self.flags & self.FLAG_KEYFRAME)

    def to_bytes(self) -> bytes:
        """Encode as the 32-byte little-endian wire header."""
        try:
            return _FRAME_LAYOUT.pack(
                self.frame_type,
                self.stream_id,
                self.flags,
                0,
                self.seq,
                self.pts_ms,
                self.dts_ms,
                self.data_len,
                0,
            )
        except struct.error as exc:
            raise ValueError(f"field out of range: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> FrameHeader:
        """Decode a header from the start of ``data``."""
        if len(data) < cls.HEADER_SIZE:
            raise ValueError(
                f"need {cls.HEADER_SIZE} bytes for a FrameHeader, got {len(data)}"
            )
        (frame_type, stream_id, flags, _pad, seq, pts_ms, dts_ms,
         data_len, _reserved) = _FRAME_LAYOUT.unpack_from(data)
        return cls(
            frame_type=frame_type,
            stream_id=stream_id,
            seq=seq,
            flags=flags,
            pts_ms=pts_ms,
            dts_ms=dts_ms,
            data_len=data_len,
        )