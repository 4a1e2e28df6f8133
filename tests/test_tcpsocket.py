import socket
import struct
import threading
import time

import pytest

from apsclient.idprovider import SequentialIdProvider
from apsclient.messages import HEADER_SIZE
from apsclient.tcpsocket import PacketDecoder, TcpSocket, parse_host_port


def _raw_header(msg_type, created, count):
    return struct.pack("<HBBdI", 0xAC01, msg_type, 0, created, count)


def test_parse_host_default_port():
    assert parse_host_port("localhost") == ("localhost", 9999)


def test_parse_host_with_port():
    assert parse_host_port("127.0.0.1:5000") == ("127.0.0.1", 5000)


def test_parse_host_with_scheme():
    assert parse_host_port("tcp://example.com:7000") == ("example.com", 7000)


@pytest.mark.parametrize("bad", ["", "   ", "host:notaport"])
def test_parse_host_rejects_bad_input(bad):
    with pytest.raises(ValueError):
        parse_host_port(bad)


def test_decoder_single_packet():
    decoder = PacketDecoder(SequentialIdProvider())
    packets = decoder.feed(_raw_header(0x80, 45000.0, 3) + b"abc")
    assert len(packets) == 1
    packet = packets[0]
    assert packet.header.version == 0xAC01
    assert packet.header.msg_type == 0x80
    assert packet.header.time_created == 45000.0
    assert packet.header.count_bytes == 3
    assert packet.data == b"abc"
    assert packet.id == 0
    assert decoder.pending == 0


def test_decoder_waits_for_complete_packet():
    decoder = PacketDecoder(SequentialIdProvider())
    raw = _raw_header(0x81, 1.5, 4) + b"wxyz"
    collected = []
    for index in range(len(raw)):
        collected.extend(decoder.feed(raw[index:index + 1]))
        if index < len(raw) - 1:
            assert collected == []
    assert [p.data for p in collected] == [b"wxyz"]


def test_decoder_several_packets_get_sequential_ids():
    decoder = PacketDecoder(SequentialIdProvider())
    raw = _raw_header(0x80, 1.0, 2) + b"ab" + _raw_header(0x84, 2.0, 0)
    packets = decoder.feed(raw)
    assert [p.id for p in packets] == [0, 1]
    assert [p.header.msg_type for p in packets] == [0x80, 0x84]
    assert packets[1].data == b""


def test_decoder_keeps_partial_header():
    decoder = PacketDecoder(SequentialIdProvider())
    assert decoder.feed(_raw_header(0x80, 1.0, 0)[: HEADER_SIZE - 1]) == []
    assert decoder.pending == HEADER_SIZE - 1


@pytest.fixture
def server():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    yield listener
    listener.close()


def _wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_socket_receives_and_sends(server):
    port = server.getsockname()[1]
    received = []
    arrived = threading.Event()

    def on_packet(packet):
        received.append(packet)
        arrived.set()

    with TcpSocket(on_packet, id_provider=SequentialIdProvider()) as client:
        assert client.connect_to_host(f"127.0.0.1:{port}") is True
        assert client.is_connected() is True
        peer, _ = server.accept()
        with peer:
            peer.sendall(_raw_header(0x80, 3.0, 2) + b"ok")
            assert arrived.wait(2.0)
            assert received[0].data == b"ok"
            assert received[0].header.msg_type == 0x80

            client.send(b"hdr", b"msg")
            data = b""
            while len(data) < 6:
                chunk = peer.recv(16)
                if not chunk:
                    break
                data += chunk
            assert data == b"hdrmsg"

        client.disconnect_from_host()
        assert client.is_connected() is False


def test_socket_notices_remote_close(server):
    port = server.getsockname()[1]
    client = TcpSocket()
    assert client.connect_to_host(f"127.0.0.1:{port}")
    peer, _ = server.accept()
    peer.close()
    assert _wait_until(lambda: not client.is_connected())


def test_connect_to_closed_port_fails():
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = TcpSocket(connect_timeout=1.0)
    assert client.connect_to_host(f"127.0.0.1:{port}") is False
    assert client.is_connected() is False


def test_send_without_connection_raises():
    with pytest.raises(ConnectionError):
        TcpSocket().send(b"a", b"b")