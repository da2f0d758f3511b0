"""Unix-domain-socket topic router for the control and event plane."""

from __future__ import annotations

import os
import socket
import struct
from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Topic

MAX_MSG_SIZE = 4096
_LEN = struct.Struct("<I")


def _recv_exact(sock: socket.socket, n: int) -> bytes:
    """Read exactly n bytes; raises OSError on would-block or end of stream."""
    chunks = bytearray()
    while len(chunks) < n:
        chunk = sock.recv(n - len(chunks))
        if not chunk:
            raise ConnectionError("connection closed mid-message")
        chunks += chunk
    return bytes(chunks)


def _frame(data: bytes) -> bytes:
    return _LEN.pack(len(data)) + bytes(data)


@dataclass
class _Client:
    sock: socket.socket
    id: int


class UdsTopicRouter:
    """Central router: accepts clients and forwards messages by topic.

    Routed messages go out as a 4-byte little-endian length and the data.
    Clients send in as one topic byte, a 4-byte little-endian length and
    the data.
    """

    def __init__(self, socket_path: str) -> None:
        """Bind a non-blocking listener at socket_path, replacing a stale socket."""
        try:
            os.remove(socket_path)
        except OSError:
            pass
        listener = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            listener.bind(socket_path)
            listener.listen()
            listener.setblocking(False)
        except BaseException:
            listener.close()
            raise
        self._listener = listener
        self._clients: list[_Client] = []
        self._subscriptions: dict[int, list[int]] = {}

    def accept_connections(self) -> int:
        """Accept every pending connection; return how many were accepted."""
        count = 0
        while True:
            try:
                sock, _ = self._listener.accept()
            except OSError:
                break
            sock.setblocking(False)
            self._clients.append(_Client(sock, len(self._clients)))
            count += 1
        return count

    def subscribe_client(self, client_idx: int, topic: Topic) -> None:
        """Subscribe a client, by index, to a topic; repeats are ignored."""
        subs = self._subscriptions.setdefault(int(topic), [])
        if client_idx not in subs:
            subs.append(client_idx)

    def route(self, topic: Topic, data: bytes) -> int:
        """Send data to every subscriber of topic; return how many it reached."""
        subs = self._subscriptions.get(int(topic))
        if not subs:
            return 0
        message = _frame(data)
        count = 0
        for index in list(subs):
            if index < len(self._clients):
                try:
                    self._clients[index].sock.sendall(message)
                except OSError:
                    continue
                count += 1
        return count

    def recv_from_any(
        self, max_len: int = MAX_MSG_SIZE
    ) -> Optional[Tuple[int, Topic, bytes]]:
        """One message from any client as (client id, topic, data), or None.

        Data longer than max_len is cut to max_len.
        """
        for client in self._clients:
            try:
                topic_byte = client.sock.recv(1)
            except OSError:
                continue
            if not topic_byte:
                continue
            try:
                (length,) = _LEN.unpack(_recv_exact(client.sock, _LEN.size))
                data = _recv_exact(client.sock, min(length, max_len))
            except OSError:
                continue
            try:
                topic = Topic(topic_byte[0])
            except ValueError:
                continue
            return client.id, topic, data
        return None

    def client_count(self) -> int:
        return len(self._clients)

    def close(self) -> None:
        """Close the listener and every client connection."""
        for client in self._clients:
            client.sock.close()
        self._listener.close()

    def __enter__(self) -> UdsTopicRouter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class UdsClient:
    """Connection to a UdsTopicRouter speaking length-prefixed messages."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    @classmethod
    def connect(cls, socket_path: str) -> UdsClient:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(socket_path)
        except BaseException:
            sock.close()
            raise
        return cls(sock)

    def send(self, data: bytes) -> None:
        """Send data prefixed by its 4-byte little-endian length."""
        self._sock.sendall(_frame(data))

    def recv(self, max_len: Optional[int] = None) -> bytes:
        """Receive one length-prefixed message, cut to max_len bytes."""
        (length,) = _LEN.unpack(_recv_exact(self._sock, _LEN.size))
        if max_len is not None:
            length = min(length, max_len)
        return _recv_exact(self._sock, length)

    def set_nonblocking(self, nonblocking: bool) -> None:
        self._sock.setblocking(not nonblocking)

    def fileno(self) -> int:
        return self._sock.fileno()

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> UdsClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def send_fd(sock: socket.socket, fd: int) -> None:
    """Pass a file descriptor over a Unix socket."""
    socket.send_fds(sock, [b"\0"], [fd])


def recv_fd(sock: socket.socket) -> int:
    """Receive a file descriptor sent with send_fd."""
    _msg, fds, _flags, _addr = socket.recv_fds(sock, 1, 1)
    if not fds:
        raise OSError("no file descriptor in message")
    return fds[0]