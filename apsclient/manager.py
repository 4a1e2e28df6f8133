"""Keeps the two station connections up and translates station messages."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional, Protocol

from apsclient.helpers import current_oa_date
from apsclient.messages import (
    TARGET_DESIGNATION_SIZE,
    ByteReader,
    ConnectionStatus,
    DataChannelMessage,
    ExecutedTheCommand,
    Header,
    MessageType,
    Packet,
    ReceiveState,
    ReceivingMessage,
    TargetDesignations,
)
from apsclient.tcpsocket import TcpSocket, parse_host_port

_log = logging.getLogger(__name__)


class ConnectionListener(Protocol):
    """Receiver of the events a ConnectionManager reports."""

    def on_state_changed(self, status: ConnectionStatus) -> None: ...

    def on_executed_the_command(self, result: ExecutedTheCommand) -> None: ...

    def on_receiving_message(self, message: ReceivingMessage) -> None: ...

    def on_receiving_message_empty(self) -> None: ...

    def on_data_channel_message(self, message: DataChannelMessage) -> None: ...


class ConnectionManager:
    """Connects to the AC and P2 endpoints, retrying until a timeout, and sends commands."""

    def __init__(
        self,
        listener: Optional[ConnectionListener] = None,
        *,
        socket_factory: Callable = TcpSocket,
        reconnect_interval: float = 2.0,
        timeout: float = 10.0,
        clock: Callable[[], float] = current_oa_date,
    ) -> None:
        self.listener = listener
        self._reconnect_interval = reconnect_interval
        self._timeout = timeout
        self._clock = clock
        self._socket_ac = socket_factory(self._on_ac_packet)
        self._socket_p2 = socket_factory(None)
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._ac_url: Optional[str] = None
        self._p2_url: Optional[str] = None
        self.attempt_count = 0

    def __enter__(self) -> "ConnectionManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def connect_to_host(self, ac: str, p2: str) -> None:
        """Start connecting to both endpoints, retrying until the timeout."""
        parse_host_port(ac)
        parse_host_port(p2)
        self._stop_worker()
        with self._lock:
            self._ac_url = ac
            self._p2_url = p2
            self.attempt_count = 0
        self._notify_state(ConnectionStatus.CONNECTING)
        if self._attempt_connect():
            return
        stop = threading.Event()
        worker = threading.Thread(target=self._reconnect_loop, args=(stop,), daemon=True)
        with self._lock:
            self._stop_event = stop
            self._worker = worker
        worker.start()

    def disconnect(self) -> None:
        """Close both connections and report DISCONNECTED."""
        self._stop_worker()
        self._close_sockets()
        self._notify_state(ConnectionStatus.DISCONNECTED)

    def cancel(self) -> None:
        """Abandon a connection attempt without reporting a state."""
        self._stop_worker()
        self._close_sockets()

    def close(self) -> None:
        """Stop all activity and release the sockets."""
        self._stop_worker()
        self._close_sockets()

    def stop_messages(self) -> None:
        """Ask the station to stop receiving on all channels."""
        self._send(MessageType.STOP_MESSAGES)

    def request_state_of_data(self) -> None:
        """Ask the station for the state of its data channels."""
        self._send(MessageType.REQUEST_STATE_OF_DATA)

    def send_target_design(self, target: TargetDesignations) -> None:
        """Send a target designation command."""
        body = target.encode()
        self._send(
            MessageType.TARGET_DESIGNATION,
            body,
            count_bytes=TARGET_DESIGNATION_SIZE + 4 * target.count,
        )

    def handle_packet(self, packet: Packet) -> None:
        """Decode a packet from the AC endpoint and report its contents."""
        reader = ByteReader(packet.data)
        msg_type = packet.header.msg_type
        listener = self.listener
        if msg_type == MessageType.EXECUTED_THE_COMMAND:
            result = ExecutedTheCommand.read(reader)
            if listener is not None:
                listener.on_executed_the_command(result)
        elif msg_type == MessageType.RECEIVE_STATE:
            state = ReceiveState.read(reader)
            if listener is not None:
                for channel in state.channels:
                    listener.on_receiving_message(channel)
                if state.count == 0:
                    listener.on_receiving_message_empty()
        elif msg_type == MessageType.DATA_CHANNEL_STATE:
            message = DataChannelMessage.read(reader)
            if listener is not None:
                listener.on_data_channel_message(message)

    def _send(self, msg_type: MessageType, body: bytes = b"", count_bytes: Optional[int] = None) -> None:
        header = Header(
            msg_type=int(msg_type),
            time_created=self._clock(),
            count_bytes=len(body) if count_bytes is None else count_bytes,
        )
        self._socket_ac.send(header.encode(), body)

    def _on_ac_packet(self, packet: Packet) -> None:
        try:
            self.handle_packet(packet)
        except ValueError as exc:
            _log.warning("malformed packet %s dropped: %s", packet.id, exc)

    def _notify_state(self, status: ConnectionStatus) -> None:
        if self.listener is not None:
            self.listener.on_state_changed(status)

    def _both_connected(self) -> bool:
        return self._socket_ac.is_connected() and self._socket_p2.is_connected()

    def _attempt_connect(self) -> bool:
        with self._lock:
            self.attempt_count += 1
            ac, p2 = self._ac_url, self._p2_url
        self._socket_ac.connect_to_host(ac)
        self._socket_p2.connect_to_host(p2)
        if self._both_connected():
            self._notify_state(ConnectionStatus.CONNECTED)
            return True
        return False

    def _reconnect_loop(self, stop: threading.Event) -> None:
        deadline = time.monotonic() + self._timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                if not self._both_connected():
                    self._notify_state(ConnectionStatus.UNCONNECTED)
                return
            if stop.wait(min(self._reconnect_interval, remaining)):
                return
            if time.monotonic() >= deadline:
                continue
            if self._both_connected():
                self._notify_state(ConnectionStatus.CONNECTED)
                return
            if self._attempt_connect():
                return

    def _stop_worker(self) -> None:
        with self._lock:
            worker, self._worker = self._worker, None
            self._stop_event.set()
        if worker is not None and worker is not threading.current_thread():
            worker.join(timeout=5.0)

    def _close_sockets(self) -> None:
        self._socket_ac.disconnect_from_host()
        self._socket_p2.disconnect_from_host()