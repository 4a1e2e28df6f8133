"""TCP link to the receiving station that splits the stream into packets."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Callable, Optional, Protocol
from urllib.parse import urlsplit

from apsclient.idprovider import SequentialIdProvider
from apsclient.messages import HEADER_SIZE, Header, Packet

DEFAULT_PORT = 9999
_RECV_CHUNK = 65536

_log = logging.getLogger(__name__)

PacketCallback = Callable[[Packet], None]


class _IdSource(Protocol):
    def next(self) -> int: ...


def parse_host_port(url: str) -> tuple[str, int]:
    """Split an address such as ``host``, ``host:port`` or ``tcp://host:port``.

    The port defaults to 9999. Raises ValueError when there is no host or the
    port is not a valid number.
    """
    text = url.strip()
    if "://" not in text:
        text = "//" + text
    parts = urlsplit(text)
    host = parts.hostname
    if not host:
        raise ValueError(f"address has no host: {url!r}")
    port = parts.port
    return host, DEFAULT_PORT if port is None else port


class PacketDecoder:
    """Accumulates received bytes and yields complete packets."""

    def __init__(self, id_provider: Optional[_IdSource] = None) -> None:
        self._buffer = bytearray()
        self._ids = id_provider if id_provider is not None else SequentialIdProvider.get()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet part of a complete packet."""
        return len(self._buffer)

    def feed(self, data: bytes) -> list[Packet]:
        """Add received bytes and return every packet that is now complete."""
        self._buffer += data
        packets = []
        while len(self._buffer) >= HEADER_SIZE:
            header = Header.decode(bytes(self._buffer[:HEADER_SIZE]))
            end = HEADER_SIZE + header.count_bytes
            if len(self._buffer) < end:
                break
            body = bytes(self._buffer[HEADER_SIZE:end])
            del self._buffer[:end]
            packets.append(Packet(header=header, data=body, id=self._ids.next()))
        return packets


class TcpSocket:
    """A client connection that delivers received packets to a callback."""

    def __init__(
        self,
        on_packet: Optional[PacketCallback] = None,
        *,
        connect_timeout: float = 5.0,
        id_provider: Optional[_IdSource] = None,
    ) -> None:
        self._on_packet = on_packet
        self._connect_timeout = connect_timeout
        self._id_provider = id_provider
        self._sock: Optional[socket.socket] = None
        self._reader: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.url: Optional[str] = None

    def __enter__(self) -> "TcpSocket":
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect_from_host()

    def connect_to_host(self, url: str) -> bool:
        """(Re)connect to the given address; return whether it succeeded."""
        host, port = parse_host_port(url)
        self.disconnect_from_host()
        self.url = url
        try:
            sock = socket.create_connection((host, port), timeout=self._connect_timeout)
        except OSError as exc:
            _log.debug("connection to %s:%s failed: %s", host, port, exc)
            return False
        sock.settimeout(None)
        decoder = PacketDecoder(self._id_provider)
        reader = threading.Thread(
            target=self._read_loop, args=(sock, decoder), daemon=True
        )
        with self._lock:
            self._sock = sock
            self._reader = reader
        reader.start()
        return True

    def disconnect_from_host(self) -> None:
        """Close the connection if there is one."""
        with self._lock:
            sock, self._sock = self._sock, None
            reader, self._reader = self._reader, None
        if sock is not None:
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            sock.close()
        if reader is not None and reader is not threading.current_thread():
            reader.join(timeout=1.0)

    def send(self, header: bytes, msg: bytes) -> None:
        """Write a header followed by a message body."""
        with self._lock:
            sock = self._sock
        if sock is None:
            raise ConnectionError("socket is not connected")
        sock.sendall(bytes(header) + bytes(msg))

    def is_connected(self) -> bool:
        """Whether the connection is established."""
        with self._lock:
            return self._sock is not None

    def _read_loop(self, sock: socket.socket, decoder: PacketDecoder) -> None:
        while True:
            try:
                chunk = sock.recv(_RECV_CHUNK)
            except OSError:
                break
            if not chunk:
                break
            for packet in decoder.feed(chunk):
                if self._on_packet is not None:
                    self._on_packet(packet)
        with self._lock:
            if self._sock is sock:
                self._sock = None
                self._reader = None
                sock.close()