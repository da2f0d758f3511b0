import pytest

from camnode.errors import CamError, ErrorCode
from camnode.request_reply import MAX_PENDING, RequestReplyEngine
from camnode.types import CtrlMsg, Topic


def _response(topic, method_id, request_id):
    msg = CtrlMsg(topic, method_id, request_id)
    msg.flags |= CtrlMsg.FLAG_RESPONSE
    return msg


def test_send_poll_basic():
    engine = RequestReplyEngine()
    pending = engine.create_pending(Topic.CMD_CONFIG, 1000)
    assert engine.pending_count() == 1
    assert pending.sent_at_ms == 1000

    assert engine.poll(pending) is None

    engine.deliver_response(_response(Topic.CMD_CONFIG, 0x0700, pending.request_id))

    result = engine.poll(pending)
    assert result.request_id == pending.request_id
    assert result.is_response()
    assert engine.pending_count() == 0


def test_cancel():
    engine = RequestReplyEngine()
    pending = engine.create_pending(Topic.CMD_LIVE, 2000)
    assert engine.pending_count() == 1

    engine.cancel(pending)
    assert engine.pending_count() == 0


def test_multiple_concurrent():
    engine = RequestReplyEngine()
    p1 = engine.create_pending(Topic.CMD_CONFIG, 100)
    p2 = engine.create_pending(Topic.CMD_LIVE, 200)
    p3 = engine.create_pending(Topic.CMD_RECORD, 300)
    assert engine.pending_count() == 3

    engine.deliver_response(_response(Topic.CMD_LIVE, 0x0100, p2.request_id))

    assert engine.poll(p1) is None
    assert engine.poll(p2) is not None
    assert engine.poll(p3) is None

    assert engine.pending_count() == 2


def test_mismatched_id_returns_none():
    engine = RequestReplyEngine()
    pending = engine.create_pending(Topic.CMD_CONFIG, 500)
    engine.deliver_response(
        _response(Topic.CMD_CONFIG, 0x0700, pending.request_id + 100)
    )
    assert engine.poll(pending) is None
    assert engine.pending_count() == 1


def test_ids_start_at_one_and_increase():
    engine = RequestReplyEngine()
    ids = [engine.create_pending(Topic.CMD_LIVE, 0).request_id for _ in range(3)]
    assert ids == [1, 2, 3]


def test_exhaustion_raises():
    engine = RequestReplyEngine()
    for _ in range(MAX_PENDING):
        engine.create_pending(Topic.CMD_LIVE, 0)
    with pytest.raises(CamError) as info:
        engine.create_pending(Topic.CMD_LIVE, 0)
    assert info.value.code is ErrorCode.RESOURCE_EXHAUSTED


def test_cancel_unknown_raises_not_found():
    engine = RequestReplyEngine()
    pending = engine.create_pending(Topic.CMD_LIVE, 0)
    engine.cancel(pending)
    with pytest.raises(CamError) as info:
        engine.cancel(pending)
    assert info.value.code is ErrorCode.NOT_FOUND


def test_id_zero_is_skipped_on_wrap():
    engine = RequestReplyEngine()
    for _ in range(0xFFFF):
        engine.cancel(engine.create_pending(Topic.CMD_LIVE, 0))
    pending = engine.create_pending(Topic.CMD_LIVE, 0)
    assert pending.request_id == 1


def test_response_is_copied_on_delivery():
    engine = RequestReplyEngine()
    pending = engine.create_pending(Topic.CMD_CONFIG, 0)
    resp = _response(Topic.CMD_CONFIG, 0x0700, pending.request_id)
    engine.deliver_response(resp)
    resp.method_id = 0x0701
    assert engine.poll(pending).method_id == 0x0700


def test_poll_after_retire_returns_none():
    engine = RequestReplyEngine()
    pending = engine.create_pending(Topic.CMD_CONFIG, 0)
    engine.deliver_response(_response(Topic.CMD_CONFIG, 0x0700, pending.request_id))
    assert engine.poll(pending) is not None
    assert engine.poll(pending) is None