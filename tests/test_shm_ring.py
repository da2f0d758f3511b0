import os

import pytest

from camnode.shm_ring import SHM_HEADER_SIZE, ShmRingBuf


def test_shm_ring_push_pop():
    with ShmRingBuf.create(128, 8) as ring:
        assert ring.is_empty()
        assert ring.push(bytes([0xAB]) * 128)
        assert not ring.is_empty()

        out = ring.pop()
        assert len(out) == 128
        assert out[0] == 0xAB
        assert ring.is_empty()


def test_shm_ring_cross_process_mapping():
    with ShmRingBuf.create(64, 4) as ring:
        ring.push(bytes([0x42]) * 64)
        with ShmRingBuf.from_fd(os.dup(ring.fd()), 64, 4) as ring2:
            out = ring2.pop()
            assert len(out) == 64
            assert out[0] == 0x42
            # The tail lives in shared memory, so the first mapping sees the pop.
            assert ring.is_empty()


def test_shm_ring_pop_empty_returns_none():
    with ShmRingBuf.create(32, 2) as ring:
        assert ring.pop() is None


def test_shm_ring_full_drops_oldest():
    with ShmRingBuf.create(16, 4) as ring:
        for value in (1, 2, 3, 4):
            ring.push(bytes([value]) * 16)
        assert ring.pop()[0] == 2
        assert ring.pop()[0] == 3
        assert ring.pop()[0] == 4
        assert ring.pop() is None


def test_shm_ring_pads_and_truncates():
    with ShmRingBuf.create(8, 4) as ring:
        ring.push(b"abc")
        assert ring.pop() == b"abc\0\0\0\0\0"
        ring.push(b"0123456789")
        assert ring.pop(4) == b"0123"


def test_shm_ring_header_size_and_fd():
    with ShmRingBuf.create(8, 2) as ring:
        assert SHM_HEADER_SIZE == 32
        assert os.fstat(ring.fd()).st_size == SHM_HEADER_SIZE + 16


def test_shm_ring_rejects_bad_layout():
    with pytest.raises(ValueError):
        ShmRingBuf.create(0, 4)


def test_shm_ring_close_releases_fd():
    ring = ShmRingBuf.create(8, 2)
    fd = ring.fd()
    ring.close()
    assert ring.fd() == -1
    with pytest.raises(OSError):
        os.fstat(fd)