"""Non-blocking request/reply matching by request id."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

from .errors import CamError, ErrorCode
from .interfaces import PendingReply
from .types import CtrlMsg, Topic

MAX_PENDING = 16
_ID_MASK = 0xFFFF


@dataclass
class _PendingEntry:
    request_id: int = 0
    topic: Topic = Topic.CMD_CONFIG
    active: bool = False
    response: Optional[CtrlMsg] = None


class RequestReplyEngine:
    """Tracks up to MAX_PENDING outstanding requests and their replies."""

    def __init__(self) -> None:
        self._next_id = 1
        self._pending = [_PendingEntry() for _ in range(MAX_PENDING)]

    def _allocate_id(self) -> int:
        request_id = self._next_id
        self._next_id = (request_id + 1) & _ID_MASK
        if request_id == 0:
            # 0 is reserved.
            request_id = self._next_id
            self._next_id = (request_id + 1) & _ID_MASK
        return request_id

    def create_pending(self, topic: Topic, timestamp_ms: int) -> PendingReply:
        """Allocate a request id and register it; raises RESOURCE_EXHAUSTED when full."""
        request_id = self._allocate_id()
        for entry in self._pending:
            if not entry.active:
                entry.request_id = request_id
                entry.topic = topic
                entry.active = True
                entry.response = None
                return PendingReply(request_id, topic, timestamp_ms)
        raise CamError(ErrorCode.RESOURCE_EXHAUSTED)

    def _find(self, request_id: int) -> Optional[_PendingEntry]:
        return next(
            (e for e in self._pending if e.active and e.request_id == request_id),
            None,
        )

    def deliver_response(self, msg: CtrlMsg) -> None:
        """Store a response for the pending request with the same id, if any."""
        entry = self._find(msg.request_id)
        if entry is not None:
            entry.response = dataclasses.replace(msg)

    def poll(self, pending: PendingReply) -> Optional[CtrlMsg]:
        """Return and retire the response to a request, or None if not yet here."""
        entry = self._find(pending.request_id)
        if entry is None or entry.response is None:
            return None
        response, entry.response = entry.response, None
        entry.active = False
        return response

    def cancel(self, pending: PendingReply) -> None:
        """Forget a pending request; raises NOT_FOUND if it is not pending."""
        entry = self._find(pending.request_id)
        if entry is None:
            raise CamError(ErrorCode.NOT_FOUND)
        entry.active = False
        entry.response = None

    def pending_count(self) -> int:
        return sum(entry.active for entry in self._pending)