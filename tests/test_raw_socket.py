import socket

import pytest

from vflow.producer.raw_socket import RawSocket, RawSocketConfig


class _FailingConnection:
    def __init__(self, exc):
        self.exc = exc
        self.attempts = 0

    def sendall(self, data):
        self.attempts += 1
        raise self.exc


def _read_all(conn):
    chunks = []
    while True:
        chunk = conn.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


@pytest.fixture
def listener():
    server = socket.create_server(("127.0.0.1", 0))
    yield server
    server.close()


def _write_config(tmp_path, text):
    path = tmp_path / "mq.conf"
    path.write_text(text)
    return str(path)


def test_defaults():
    config = RawSocketConfig()
    assert config.url == "localhost:9555"
    assert config.protocol == "tcp"
    assert config.max_retry == 2


def test_setup_missing_file_raises(tmp_path):
    rs = RawSocket()
    with pytest.raises(FileNotFoundError):
        rs.setup(str(tmp_path / "absent.conf"), None)


def test_setup_reads_config(tmp_path, listener):
    port = listener.getsockname()[1]
    path = _write_config(tmp_path, f"url: 127.0.0.1:{port}\nretry-max: 5\n")
    rs = RawSocket()
    rs.setup(path, None)
    try:
        assert rs.config.url == f"127.0.0.1:{port}"
        assert rs.config.protocol == "tcp"
        assert rs.config.max_retry == 5
    finally:
        rs.connection.close()


def test_tcp_messages_are_newline_terminated(tmp_path, listener):
    port = listener.getsockname()[1]
    path = _write_config(tmp_path, f"url: 127.0.0.1:{port}\nprotocol: tcp\n")
    rs = RawSocket()
    rs.setup(path, None)
    conn, _ = listener.accept()
    with conn:
        errors = rs.input_messages("topic", [b"first", b"second"])
        rs.connection.close()
        assert _read_all(conn) == b"first\nsecond\n"
    assert errors == 0


def test_udp_message(tmp_path):
    receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    receiver.bind(("127.0.0.1", 0))
    receiver.settimeout(5)
    port = receiver.getsockname()[1]
    path = _write_config(tmp_path, f"url: 127.0.0.1:{port}\nprotocol: udp\n")
    rs = RawSocket()
    rs.setup(path, None)
    try:
        assert rs.input_messages("topic", [b"hello"]) == 0
        data, _ = receiver.recvfrom(4096)
        assert data == b"hello\n"
    finally:
        rs.connection.close()
        receiver.close()


def test_retries_until_limit():
    fake = _FailingConnection(ConnectionResetError("reset"))
    rs = RawSocket(connection=fake)
    errors = rs.input_messages("topic", [b"lost"])
    assert errors == rs.config.max_retry + 1
    assert fake.attempts == errors


def test_no_retry_when_limit_is_zero():
    fake = _FailingConnection(ConnectionResetError("reset"))
    rs = RawSocket(config=RawSocketConfig(max_retry=0), connection=fake)
    assert rs.input_messages("topic", [b"a", b"b"]) == 2
    assert fake.attempts == 2


def test_broken_pipe_reconnects(listener):
    port = listener.getsockname()[1]
    fake = _FailingConnection(BrokenPipeError("broken pipe"))
    rs = RawSocket(
        config=RawSocketConfig(url=f"127.0.0.1:{port}"), connection=fake
    )
    errors = rs.input_messages("topic", [b"again"])
    conn, _ = listener.accept()
    with conn:
        rs.connection.close()
        assert _read_all(conn) == b"again\n"
    assert errors == 1
    assert fake.attempts == 1


def test_unknown_protocol_rejected(tmp_path):
    path = _write_config(tmp_path, "url: 127.0.0.1:1\nprotocol: sctp\n")
    with pytest.raises(ValueError):
        RawSocket().setup(path, None)