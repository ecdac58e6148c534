"""
Tests for loopback port allocation
"""

import socket

import pytest

from slidecast_core.ports import NoPortAvailableError, find_available_port, is_port_available


def _listen(port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", port))
    sock.listen(1)
    return sock


@pytest.fixture
def held_port():
    """A port kept busy by a listener for the duration of the test."""
    sock = _listen(0)
    yield sock.getsockname()[1]
    sock.close()


class TestIsPortAvailable:

    def test_busy_port(self, held_port):
        """Test a listening port is reported busy."""
        assert not is_port_available(held_port)

    def test_free_port(self):
        """Test a released port is reported free."""
        sock = _listen(0)
        port = sock.getsockname()[1]
        sock.close()
        assert is_port_available(port)


class TestFindAvailablePort:

    def test_returns_start_when_free(self):
        """Test the first port of the range is preferred."""
        sock = _listen(0)
        port = sock.getsockname()[1]
        sock.close()
        assert find_available_port(port, port) == port

    def test_skips_occupied_port(self, held_port):
        """Test an occupied port is skipped in favour of the next one."""
        if held_port >= 65535:
            pytest.skip("no room after the held port")
        result = find_available_port(held_port, min(held_port + 20, 65535))
        assert result > held_port

    def test_all_occupied_raises(self, held_port):
        """Test an exhausted range raises NoPortAvailableError."""
        with pytest.raises(NoPortAvailableError) as exc_info:
            find_available_port(held_port, held_port)
        assert exc_info.value.start == held_port
        assert exc_info.value.end == held_port
        assert f"{held_port}-{held_port}" in str(exc_info.value)
        assert "All 1 ports are occupied" in str(exc_info.value)

    def test_error_is_runtime_error(self):
        """Test the error can be caught as a RuntimeError."""
        assert issubclass(NoPortAvailableError, RuntimeError)
        assert "All 100 ports" in str(NoPortAvailableError(52100, 52199))
