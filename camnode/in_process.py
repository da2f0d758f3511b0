"""Single-process, thread-safe communication bus."""

from __future__ import annotations

import dataclasses
import threading
from typing import Optional, Tuple

from .errors import CamError, ErrorCode
from .frame import FrameHeader
from .interfaces import CommBus, PendingReply
from .request_reply import RequestReplyEngine
from .ring_buffer import SpscRingBuf
from .types import CtrlMsg, Topic

CTRL_SLOT_SIZE = 256
CTRL_SLOT_COUNT = 64
FRAME_SLOT_SIZE = 256 * 1024
FRAME_SLOT_COUNT = 8
MAX_SUBSCRIBERS = 8
TOPIC_TABLE_SIZE = 64

_SubscriberTable = list[list[Optional[SpscRingBuf]]]


def _as_topic(topic: Topic | int) -> Topic:
    try:
        member = Topic(topic)
    except ValueError as exc:
        raise CamError(ErrorCode.INVALID_PARAM) from exc
    if not 0 <= member.value < TOPIC_TABLE_SIZE:
        raise CamError(ErrorCode.INVALID_PARAM)
    return member


def _empty_table() -> _SubscriberTable:
    return [[None] * MAX_SUBSCRIBERS for _ in range(TOPIC_TABLE_SIZE)]


class InProcessCommBus(CommBus):
    """CommBus for services that share one process.

    Every subscription owns its own ring buffer; control and event topics
    use small slots, data-plane topics use frame-sized slots.
    """

    def __init__(self) -> None:
        self._ctrl_lock = threading.Lock()
        self._frame_lock = threading.Lock()
        self._rr_lock = threading.Lock()
        self._ctrl_subs = _empty_table()
        self._frame_subs = _empty_table()
        self._rr_engine = RequestReplyEngine()

    @staticmethod
    def _add_subscriber(
        subs: list[Optional[SpscRingBuf]], slot_size: int, slot_count: int
    ) -> None:
        for index, slot in enumerate(subs):
            if slot is None:
                subs[index] = SpscRingBuf(slot_size, slot_count)
                return
        raise CamError(ErrorCode.RESOURCE_EXHAUSTED)

    @staticmethod
    def _publish_to_subs(subs: list[Optional[SpscRingBuf]], data: bytes) -> int:
        count = 0
        for ring in subs:
            if ring is not None:
                ring.push(data)
                count += 1
        return count

    def publish_ctrl(self, topic: Topic, msg: CtrlMsg, payload: bytes = b"") -> None:
        """Publish a control message; raises BUFFER_FULL if it exceeds a slot."""
        topic = _as_topic(topic)
        if CtrlMsg.HEADER_SIZE + len(payload) > CTRL_SLOT_SIZE:
            raise CamError(ErrorCode.BUFFER_FULL)
        data = msg.to_bytes() + bytes(payload)

        if msg.is_response():
            with self._rr_lock:
                self._rr_engine.deliver_response(msg)

        with self._ctrl_lock:
            self._publish_to_subs(self._ctrl_subs[topic.value], data)

    def poll_ctrl(self) -> Optional[Tuple[Topic, CtrlMsg, bytes]]:
        """Oldest message of the lowest-numbered topic that has one pending."""
        with self._ctrl_lock:
            for index, subs in enumerate(self._ctrl_subs):
                for ring in subs:
                    if ring is None:
                        continue
                    slot = ring.pop()
                    if slot is None or len(slot) < CtrlMsg.HEADER_SIZE:
                        continue
                    msg = CtrlMsg.from_bytes(slot)
                    start = CtrlMsg.HEADER_SIZE
                    payload = slot[start : start + msg.payload_len]
                    return Topic(index), msg, payload
        return None

    def subscribe(self, topic: Topic) -> None:
        """Add a subscription; raises RESOURCE_EXHAUSTED past the per-topic limit."""
        topic = _as_topic(topic)
        if topic.is_data_plane():
            with self._frame_lock:
                self._add_subscriber(
                    self._frame_subs[topic.value], FRAME_SLOT_SIZE, FRAME_SLOT_COUNT
                )
        else:
            with self._ctrl_lock:
                self._add_subscriber(
                    self._ctrl_subs[topic.value], CTRL_SLOT_SIZE, CTRL_SLOT_COUNT
                )

    def unsubscribe(self, topic: Topic) -> None:
        """Remove the most recently added subscription; raises NOT_FOUND if none."""
        topic = _as_topic(topic)
        if topic.is_data_plane():
            lock, table = self._frame_lock, self._frame_subs
        else:
            lock, table = self._ctrl_lock, self._ctrl_subs
        with lock:
            subs = table[topic.value]
            for index in reversed(range(len(subs))):
                if subs[index] is not None:
                    subs[index] = None
                    return
        raise CamError(ErrorCode.NOT_FOUND)

    def publish_frame(self, topic: Topic, header: FrameHeader, data: bytes) -> None:
        """Publish a frame; the header's data_len is set from data."""
        topic = _as_topic(topic)
        if FrameHeader.HEADER_SIZE + len(data) > FRAME_SLOT_SIZE:
            raise CamError(ErrorCode.BUFFER_FULL)
        buf = header.with_data_len(len(data)).to_bytes() + bytes(data)
        with self._frame_lock:
            self._publish_to_subs(self._frame_subs[topic.value], buf)

    def poll_frame(self, topic: Topic) -> Optional[Tuple[FrameHeader, bytes]]:
        """Oldest pending frame on topic as (header, data), or None."""
        topic = _as_topic(topic)
        with self._frame_lock:
            for ring in self._frame_subs[topic.value]:
                if ring is None:
                    continue
                slot = ring.pop()
                if slot is None or len(slot) < FrameHeader.HEADER_SIZE:
                    continue
                header = FrameHeader.from_bytes(slot)
                start = FrameHeader.HEADER_SIZE
                length = min(header.data_len, len(slot) - start)
                return header, slot[start : start + length]
        return None

    def send_request(
        self, topic: Topic, msg: CtrlMsg, payload: bytes = b""
    ) -> PendingReply:
        """Register a pending request and publish it with its new request id."""
        with self._rr_lock:
            pending = self._rr_engine.create_pending(topic, msg.timestamp_ms)
        request = dataclasses.replace(msg, request_id=pending.request_id)
        self.publish_ctrl(topic, request, payload)
        return pending

    def poll_reply(self, pending: PendingReply) -> Optional[CtrlMsg]:
        with self._rr_lock:
            return self._rr_engine.poll(pending)

    def cancel_request(self, pending: PendingReply) -> None:
        with self._rr_lock:
            self._rr_engine.cancel(pending)

    def reply(
        self, topic: Topic, request_id: int, msg: CtrlMsg, payload: bytes = b""
    ) -> None:
        """Publish msg as the response to request_id."""
        response = dataclasses.replace(
            msg, request_id=request_id, flags=msg.flags | CtrlMsg.FLAG_RESPONSE
        )
        self.publish_ctrl(topic, response, payload)