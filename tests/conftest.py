import socket

import pytest


@pytest.fixture
def listener():
    """A loopback socket accepting connections; yields its port."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind(("127.1.1.1", 0))
    srv.listen(50)
    yield srv.getsockname()[1]
    srv.close()


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening on it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.1.1.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port
