import socket

import pytest

from tidewebserver.acceptor import Acceptor
from tidewebserver.event_loop import EventLoop


def drain(loop):
    loop.queue_in_loop(loop.stop)
    loop.wakeup()
    loop.loop()


@pytest.fixture
def loop():
    with EventLoop() as event_loop:
        yield event_loop


@pytest.fixture
def accepted():
    conns = []
    yield conns
    for conn, _ in conns:
        conn.close()


def collector(accepted):
    def callback(conn, peer):
        accepted.append((conn, peer))
    return callback


def test_on_accept_passes_connection_and_peer(loop, accepted):
    with Acceptor(loop, 0, collector(accepted)) as acceptor:
        acceptor.listen(16)
        with socket.create_connection(("127.0.0.1", acceptor.port)) as client:
            acceptor.on_accept()
            assert len(accepted) == 1
            conn, peer = accepted[0]
            assert peer.ip == "127.0.0.1"
            assert peer.port == client.getsockname()[1]
            assert acceptor.peer_address == peer
            assert conn.getblocking() is False


def test_listen_twice_raises(loop):
    with Acceptor(loop, 0) as acceptor:
        acceptor.listen(4)
        with pytest.raises(RuntimeError):
            acceptor.listen(4)
        assert acceptor.listening is True


def test_on_accept_without_pending_connection(loop, accepted):
    with Acceptor(loop, 0, collector(accepted)) as acceptor:
        acceptor.listen(4)
        acceptor.on_accept()
        assert accepted == []


def test_host_address_uses_bound_port(loop):
    with Acceptor(loop, 0) as acceptor:
        assert acceptor.host_address.ip == "127.0.0.1"
        assert acceptor.host_address.port == acceptor.port
        assert acceptor.port > 0


def test_accepts_every_pending_connection(loop, accepted):
    with Acceptor(loop, 0, collector(accepted)) as acceptor:
        acceptor.listen(16)
        with socket.create_connection(("127.0.0.1", acceptor.port)) as first, \
                socket.create_connection(("127.0.0.1", acceptor.port)) as second:
            acceptor.on_accept()
            ports = sorted(peer.port for _, peer in accepted)
            assert ports == sorted([first.getsockname()[1], second.getsockname()[1]])


def test_loop_dispatches_accept(loop, accepted):
    with Acceptor(loop, 0, collector(accepted)) as acceptor:
        acceptor.listen(16)
        with socket.create_connection(("127.0.0.1", acceptor.port)) as client:
            drain(loop)
            assert [peer.port for _, peer in accepted] == [client.getsockname()[1]]


def test_close_removes_channel(loop):
    acceptor = Acceptor(loop, 0)
    channel = acceptor.channel
    assert loop.has_channel(channel) is True
    acceptor.close()
    acceptor.close()
    assert loop.has_channel(channel) is False