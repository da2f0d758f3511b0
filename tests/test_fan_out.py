import pytest

from camnode.fan_out import MAX_FANOUT, FanOutPublisher, RefCountedSlot
from camnode.ring_buffer import SpscRingBuf


def test_fanout_1_to_3():
    r1, r2, r3 = (SpscRingBuf(32, 4) for _ in range(3))
    fanout = FanOutPublisher()
    assert fanout.add_consumer(r1) == 0
    assert fanout.add_consumer(r2) == 1
    assert fanout.add_consumer(r3) == 2
    assert fanout.active_count() == 3

    assert fanout.publish(bytes([0x42]) * 32) == 3

    for ring in (r1, r2, r3):
        out = ring.pop(32)
        assert len(out) == 32
        assert out[0] == 0x42


def test_fanout_add_remove_consumer():
    r1 = SpscRingBuf(16, 4)
    r2 = SpscRingBuf(16, 4)
    fanout = FanOutPublisher()
    idx1 = fanout.add_consumer(r1)
    idx2 = fanout.add_consumer(r2)
    assert fanout.active_count() == 2

    assert fanout.remove_consumer(idx1)
    assert fanout.active_count() == 1

    assert fanout.publish(bytes([0xFF]) * 16) == 1

    assert r1.pop(16) is None
    out = r2.pop(16)
    assert len(out) == 16
    assert out[0] == 0xFF

    assert fanout.remove_consumer(idx2)
    assert fanout.active_count() == 0


def test_fanout_max_capacity_rejected():
    rings = [SpscRingBuf(8, 2) for _ in range(MAX_FANOUT + 1)]
    fanout = FanOutPublisher()
    for ring in rings[:MAX_FANOUT]:
        assert fanout.add_consumer(ring) is not None
    assert fanout.add_consumer(rings[MAX_FANOUT]) is None
    assert fanout.active_count() == MAX_FANOUT


def test_removed_slot_is_reused():
    fanout = FanOutPublisher()
    for _ in range(3):
        fanout.add_consumer(SpscRingBuf(4, 2))
    assert fanout.remove_consumer(1)
    assert fanout.add_consumer(SpscRingBuf(4, 2)) == 1


@pytest.mark.parametrize("index", [-1, 0, MAX_FANOUT, MAX_FANOUT + 5])
def test_remove_invalid_or_empty_index(index):
    fanout = FanOutPublisher()
    assert fanout.remove_consumer(index) is False


def test_publish_with_no_consumers():
    assert FanOutPublisher().publish(b"data") == 0


def test_refcounted_slot_lifecycle():
    slot = RefCountedSlot()
    assert slot.count() == 0

    assert slot.acquire() == 1
    assert slot.acquire() == 2
    assert slot.acquire() == 3
    assert slot.count() == 3

    assert slot.release() == 2
    assert slot.release() == 1
    assert slot.release() == 0
    assert slot.count() == 0


def test_refcounted_slot_release_below_zero():
    slot = RefCountedSlot()
    with pytest.raises(ValueError):
        slot.release()


def test_refcounted_slot_reset():
    slot = RefCountedSlot()
    slot.acquire()
    slot.acquire()
    slot.data_len = 1024
    slot.reset()
    assert slot.count() == 0
    assert slot.data_len == 0