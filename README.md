# camnode

Building blocks for an embedded camera node: binary message types, bounded
containers, ring buffers, topic routing, non-blocking request/reply, an
in-process communication bus, two camera services and platform layers for
Linux and for RTOS targets.

It has no third-party dependencies.

## Installation

```
pip install .
```

To install the test tools as well:

```
pip install .[test]
```

## What is in the package

### Messages and identifiers

- `camnode.types`
  - `CtrlMsg` is the control-plane envelope. It encodes to 16 little-endian
    bytes with `to_bytes()` and decodes with `CtrlMsg.from_bytes()`.
  - `with_source`, `with_payload_len` and `with_timestamp` return modified
    copies. `is_response()` and `is_error()` test the flags.
  - The module defines the enums `ServiceId`, `ServiceState`, `Topic`,
    `MethodId` and `AuthLevel`, and the `HealthStatus` dataclass.
  - `Topic.is_data_plane()`, `is_control_plane()` and `is_event_plane()`
    tell which plane a topic belongs to.
- `camnode.frame`
  - `FrameHeader` is the 32-byte frame header, with `with_pts`, `with_dts`,
    `with_data_len`, `is_keyframe`, `to_bytes` and `from_bytes`.
  - `FrameType` lists the video and audio frame kinds.
- `camnode.errors`: failures are raised as `CamError`. Its `code` attribute
  is an `ErrorCode`, for example `ErrorCode.RESOURCE_EXHAUSTED`,
  `ErrorCode.NOT_FOUND` or `ErrorCode.UNSUPPORTED`.

### Bounded containers

`camnode.fixed` provides two containers.

- `FixedString(capacity)` is a UTF-8 string limited to `capacity` bytes.
  - `from_str` truncates on a character boundary.
  - `from_bytes` raises `UnicodeDecodeError` on invalid input.
  - `push_str` appends only if the whole text fits.
  - `write` appends as much as fits.
  - `truncate` shortens to a byte length.
- `FixedVec(capacity)` is a list with a maximum length.
  - `push` raises `OverflowError` when the vector is full.
  - `pop` raises `IndexError` when the vector is empty.
  - `get` returns `None` for an index that is out of range.
  - `remove` shifts the remaining elements left.

### Logging hook

`camnode.camlog`:

- `set_log_sink(sink)` installs one function that is called as
  `sink(level, module, message)`.
- `log(level, module, message)` passes the record to that sink, with the
  message bounded to 256 bytes.
- Levels above `LogLevel.WARN` are dropped when Python runs with `-O`.

### Messaging

- `camnode.ring_buffer.SpscRingBuf(slot_size, slot_count)` is a ring of
  fixed-size slots.
  - It holds at most `slot_count - 1` entries.
  - Pushing onto a full ring drops the oldest entry.
  - `pop` and `peek` return `bytes`, or `None` when the ring is empty.
- `camnode.fan_out`
  - `FanOutPublisher` pushes each message into up to 8 consumer rings.
  - `RefCountedSlot` is a thread-safe reference counter.
- `camnode.topic_router.TopicRouter` subscribes rings to topics, with up to
  8 rings per topic, and routes data to them.
- `camnode.request_reply.RequestReplyEngine` allocates request ids, tracks up
  to 16 pending requests and matches responses to them by id.
- `camnode.in_process.InProcessCommBus` is a thread-safe single-process
  implementation of `camnode.interfaces.CommBus`.
  - Every subscription gets its own ring buffer.
  - `poll_ctrl()` returns `(topic, message, payload)` or `None`.
  - `poll_frame(topic)` returns `(header, data)` or `None`.
  - `send_request`, `poll_reply`, `cancel_request` and `reply` provide
    non-blocking request/reply.

### Services

Both services implement `camnode.interfaces.Service`, whose methods are
`service_id`, `dependencies`, `init`, `start`, `stop`, `health` and `poll`.

- `camnode.media_core.MediaCoreService` runs the pipeline.
  - While it is running, each `produce_frames()` call publishes one
    main-stream, one sub-stream and one audio frame. The frame data is
    placeholder zero bytes.
  - Every 30th video frame is a keyframe.
  - It answers `SET_BITRATE`, `REQUEST_IDR` and `SET_RESOLUTION` on
    `Topic.CMD_MEDIA_CORE`.
  - When no message is pending, `poll()` produces frames.
- `camnode.cloud.CloudService` keeps an upload queue of up to 16 entries.
  - It answers `START_UPLOAD`, `STOP_UPLOAD` and `QUERY_UPLOAD_QUEUE` on
    `Topic.CMD_CLOUD`.
  - It follows `Topic.EVT_NETWORK_STATUS`, where a method id of 2 or more
    means connected.
  - When no message is pending and the network is connected, each `poll()`
    completes one queued upload.

### Platform layers

- `camnode.interfaces` holds the abstract interfaces: `CommBus`, `Service`,
  `FileSystem`, `NetworkHal`, `StorageHal`, `SystemClock`, `UdpSocket`,
  `HttpClient`, `Timer`, `BootManager`, `SystemControl` and `PtzHal`.
- `camnode.linux_pal`
  - `LinuxFileSystem` works on host files. Its failures raise
    `CamError(IO_ERROR)`.
  - `LinuxNetworkHal` only tracks a connected flag.
  - `LinuxTimer` gives monotonic milliseconds and sleeps.
- `camnode.shm_ring.ShmRingBuf` is a ring buffer in a shared memory mapping.
  - `create()` makes a new one and `from_fd()` maps an existing one.
  - It closes its file descriptor on `close()` or on leaving a `with` block.
- `camnode.uds_router`
  - `UdsTopicRouter` is a Unix-socket topic router that uses
    length-prefixed messages.
  - `UdsClient` connects to it.
  - `send_fd` and `recv_fd` pass file descriptors over a Unix socket.
- `camnode.daemon`
  - `STARTUP_ORDER` gives the seven startup levels and `AppEntry` steps
    through them.
  - `InfraDaemon` is a running flag.
  - `SysDaemon` owns one shared-memory ring per data-plane topic and a
    `UdsTopicRouter`. Each `tick()` accepts connections and routes pending
    messages.
- `camnode.rtos` holds placeholder implementations of every platform
  interface. Operations raise `CamError(UNSUPPORTED)`; queries return
  neutral values.

## Example

```python
from camnode.in_process import InProcessCommBus
from camnode.media_core import MediaCoreService
from camnode.types import CtrlMsg, MethodId, ServiceId, Topic

bus = InProcessCommBus()
bus.subscribe(Topic.VIDEO_MAIN_STREAM)

media = MediaCoreService()
media.init(bus)
media.start()
media.produce_frames()

header, data = bus.poll_frame(Topic.VIDEO_MAIN_STREAM)
print(header.seq, header.is_keyframe(), len(data))  # 0 True 64

request = CtrlMsg(Topic.CMD_MEDIA_CORE, MethodId.SET_BITRATE).with_source(
    ServiceId.CONTROL_GATEWAY
)
pending = bus.send_request(Topic.CMD_MEDIA_CORE, request)
media.poll()
reply = bus.poll_reply(pending)
print(reply.is_response(), reply.source == ServiceId.MEDIA_CORE)  # True True
```

## What the package does not do

- It has no command and no program that starts a whole camera node. You
  create the bus and the services, then call `init`, `start`, `poll` and
  `stop` yourself.
- It includes only two services, `MediaCoreService` and `CloudService`.
  `ServiceId` names further services, such as configuration, storage,
  network, time sync, live, talk, record, playback, upgrade and the control
  gateway, but the package does not implement them.
- Media frames carry placeholder data. Nothing captures or encodes video or
  audio.
- Uploads are simulated and no data is sent anywhere. The Linux network
  layer does not configure the host's network.
- The RTOS layer consists only of placeholders.