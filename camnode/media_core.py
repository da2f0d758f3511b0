"""Media pipeline service producing video and audio frames."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Tuple

from .errors import CamError, ErrorCode
from .frame import FrameHeader, FrameType
from .interfaces import CommBus, Service
from .types import CtrlMsg, HealthStatus, MethodId, ServiceId, ServiceState, Topic

_GOP_LENGTH = 30
_SEQ_MASK = 0xFFFFFFFF


class PipelineState(IntEnum):
    IDLE = 0
    RUNNING = 1
    ERROR = 2


@dataclass(frozen=True)
class _StreamConfig:
    width: int
    height: int
    bitrate_kbps: int
    fps: int


_MAIN_STREAM = _StreamConfig(width=1920, height=1080, bitrate_kbps=2048, fps=25)
_SUB_STREAM = _StreamConfig(width=640, height=360, bitrate_kbps=512, fps=15)


class MediaCoreService(Service):
    """Runs the capture pipeline and answers media commands."""

    def __init__(self) -> None:
        self._pipeline_state = PipelineState.IDLE
        self._main_stream = _MAIN_STREAM
        self._sub_stream = _SUB_STREAM
        self._audio_enabled = True
        self._seq_main = 0
        self._seq_sub = 0
        self._seq_audio = 0
        self._bus: Optional[CommBus] = None
        self._service_state = ServiceState.NORMAL

    @property
    def _attached_bus(self) -> CommBus:
        if self._bus is None:
            raise CamError(ErrorCode.NOT_READY)
        return self._bus

    def pipeline_state(self) -> PipelineState:
        return self._pipeline_state

    def start_pipeline(self) -> None:
        """Start the pipeline, resetting frame sequences; no-op if running."""
        if self._pipeline_state == PipelineState.RUNNING:
            return
        self._pipeline_state = PipelineState.RUNNING
        self._seq_main = 0
        self._seq_sub = 0
        self._seq_audio = 0

    def stop_pipeline(self) -> None:
        self._pipeline_state = PipelineState.IDLE

    def produce_frames(self) -> None:
        """Publish one frame per stream while the pipeline runs."""
        if self._pipeline_state != PipelineState.RUNNING:
            return
        self._seq_main = self._produce_video(
            Topic.VIDEO_MAIN_STREAM, 0, self._seq_main, 64
        )
        self._seq_sub = self._produce_video(Topic.VIDEO_SUB_STREAM, 1, self._seq_sub, 32)
        if self._audio_enabled:
            self._produce_audio()

    def _publish(self, topic: Topic, header: FrameHeader, data: bytes) -> None:
        try:
            self._attached_bus.publish_frame(topic, header, data)
        except CamError:
            pass

    def _produce_video(self, topic: Topic, stream_id: int, seq: int, size: int) -> int:
        is_idr = seq % _GOP_LENGTH == 0
        frame_type = FrameType.VIDEO_H264_IDR if is_idr else FrameType.VIDEO_H264_P
        flags = FrameHeader.FLAG_KEYFRAME if is_idr else 0
        data = bytes(size)
        header = FrameHeader(frame_type, stream_id, seq, flags=flags, data_len=size)
        self._publish(topic, header, data)
        return (seq + 1) & _SEQ_MASK

    def _produce_audio(self) -> None:
        data = bytes(16)
        header = FrameHeader(FrameType.AUDIO_PCM, 0, self._seq_audio).with_data_len(16)
        self._publish(Topic.AUDIO_CAPTURE, header, data)
        self._seq_audio = (self._seq_audio + 1) & _SEQ_MASK

    def _reply(self, msg: CtrlMsg, response: CtrlMsg) -> None:
        try:
            self._attached_bus.reply(Topic.CMD_MEDIA_CORE, msg.request_id, response, b"")
        except CamError:
            pass

    def _handle_cmd(self, msg: CtrlMsg, payload: bytes) -> None:
        response = CtrlMsg(Topic.CMD_MEDIA_CORE, msg.method_id, msg.request_id).with_source(
            ServiceId.MEDIA_CORE
        )
        if msg.method_id == MethodId.REQUEST_IDR:
            self._seq_main = (self._seq_main // _GOP_LENGTH) * _GOP_LENGTH
            self._seq_sub = (self._seq_sub // _GOP_LENGTH) * _GOP_LENGTH
        if msg.method_id in (
            MethodId.SET_BITRATE,
            MethodId.REQUEST_IDR,
            MethodId.SET_RESOLUTION,
        ):
            self._reply(msg, response)

    def service_id(self) -> ServiceId:
        return ServiceId.MEDIA_CORE

    def dependencies(self) -> Tuple[ServiceId, ...]:
        return (ServiceId.CONFIG,)

    def init(self, bus: CommBus) -> None:
        self._bus = bus
        bus.subscribe(Topic.CMD_MEDIA_CORE)
        bus.subscribe(Topic.EVT_CONFIG_CHANGED)

    def start(self) -> None:
        self._service_state = ServiceState.NORMAL
        self.start_pipeline()

    def stop(self) -> None:
        self.stop_pipeline()
        self._service_state = ServiceState.SUSPENDED

    def health(self) -> HealthStatus:
        return HealthStatus(ServiceId.MEDIA_CORE, self._service_state, 0)

    def poll(self) -> bool:
        """Handle one pending message, or else produce a round of frames."""
        polled = self._attached_bus.poll_ctrl()
        if polled is not None:
            topic, msg, payload = polled
            if topic == Topic.CMD_MEDIA_CORE and not msg.is_response():
                self._handle_cmd(msg, payload)
                return True
            if topic == Topic.EVT_CONFIG_CHANGED:
                return True
        self.produce_frames()
        return False