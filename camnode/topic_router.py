"""Routes messages from publishers to the rings subscribed to each topic."""

from __future__ import annotations

from .errors import CamError, ErrorCode
from .ring_buffer import SpscRingBuf
from .types import Topic

MAX_SUBSCRIBERS_PER_TOPIC = 8
MAX_TOPICS = 48


class TopicRouter:
    """Per-topic table of up to MAX_SUBSCRIBERS_PER_TOPIC subscribed rings."""

    def __init__(self) -> None:
        self._topics: list[list[SpscRingBuf | None]] = [
            [None] * MAX_SUBSCRIBERS_PER_TOPIC for _ in range(MAX_TOPICS)
        ]

    def _entry(self, topic: Topic) -> list[SpscRingBuf | None]:
        index = int(topic)
        if not 0 <= index < MAX_TOPICS:
            raise CamError(ErrorCode.INVALID_PARAM)
        return self._topics[index]

    def subscribe(self, topic: Topic, ring: SpscRingBuf) -> None:
        """Subscribe a ring to a topic; the same ring may subscribe only once."""
        entry = self._entry(topic)
        if all(slot is not None for slot in entry):
            raise CamError(ErrorCode.RESOURCE_EXHAUSTED)
        if any(slot is ring for slot in entry):
            raise CamError(ErrorCode.ALREADY_EXISTS)
        entry[entry.index(None)] = ring

    def unsubscribe(self, topic: Topic, ring: SpscRingBuf) -> None:
        """Remove a ring from a topic; raises NOT_FOUND if it was not subscribed."""
        entry = self._entry(topic)
        for index, slot in enumerate(entry):
            if slot is ring:
                entry[index] = None
                return
        raise CamError(ErrorCode.NOT_FOUND)

    def route(self, topic: Topic, data: bytes) -> int:
        """Push data to every subscriber of topic; return how many received it."""
        index = int(topic)
        if not 0 <= index < MAX_TOPICS:
            return 0
        count = 0
        for ring in self._topics[index]:
            if ring is not None:
                ring.push(data)
                count += 1
        return count

    def subscriber_count(self, topic: Topic) -> int:
        index = int(topic)
        if not 0 <= index < MAX_TOPICS:
            return 0
        return sum(ring is not None for ring in self._topics[index])