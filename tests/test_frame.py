import pytest

from camnode.frame import FrameHeader, FrameType


def test_frame_header_size():
    assert FrameHeader.HEADER_SIZE == 32
    assert len(FrameHeader(FrameType.AUDIO_PCM, 0, 0).to_bytes()) == 32


def test_frame_header_roundtrip():
    hdr = (
        FrameHeader(FrameType.VIDEO_H264_IDR, 0, 100)
        .with_pts(12345)
        .with_dts(12340)
        .with_data_len(65536)
    )
    parsed = FrameHeader.from_bytes(hdr.to_bytes())
    assert parsed.seq == 100
    assert parsed.pts_ms == 12345
    assert parsed.dts_ms == 12340
    assert parsed.data_len == 65536
    assert parsed.frame_type == FrameType.VIDEO_H264_IDR
    assert parsed == hdr


def test_keyframe_flag():
    hdr = FrameHeader(FrameType.VIDEO_H264_IDR, 1, 0)
    assert not hdr.is_keyframe()
    hdr.flags |= FrameHeader.FLAG_KEYFRAME
    assert hdr.is_keyframe()
    assert FrameHeader.from_bytes(hdr.to_bytes()).is_keyframe()


def test_eos_flag_is_not_keyframe():
    hdr = FrameHeader(FrameType.VIDEO_H265_P, 0, 5, flags=FrameHeader.FLAG_EOS)
    assert not hdr.is_keyframe()


def test_builders_leave_original_unchanged():
    hdr = FrameHeader(FrameType.AUDIO_AAC, 2, 9)
    later = hdr.with_pts(500)
    assert hdr.pts_ms == 0
    assert later.pts_ms == 500
    assert later.seq == 9


def test_from_short_bytes_rejected():
    with pytest.raises(ValueError):
        FrameHeader.from_bytes(b"\x00" * 31)


def test_from_bytes_ignores_trailing_payload():
    hdr = FrameHeader(FrameType.AUDIO_G711U, 0, 7).with_data_len(4)
    parsed = FrameHeader.from_bytes(hdr.to_bytes() + b"\xde\xad\xbe\xef")
    assert parsed == hdr


def test_out_of_range_field_rejected():
    with pytest.raises(ValueError):
        FrameHeader(FrameType.AUDIO_PCM, 256, 0).to_bytes()