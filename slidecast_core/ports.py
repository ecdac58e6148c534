"""
Loopback port allocation for the embedded presenter server.

Ports are probed sequentially by binding a throwaway socket; a successful
bind (closed immediately) marks the port as free.
"""

import socket
import logging

logger = logging.getLogger(__name__)

PORT_RANGE_START = 52100
PORT_RANGE_END = 52199
LOOPBACK_HOST = "127.0.0.1"


class NoPortAvailableError(RuntimeError):
    """Raised when every port of the configured range is occupied."""

    def __init__(self, start: int, end: int):
        self.start = start
        self.end = end
        count = end - start + 1
        super().__init__(
            f"No available port found in range {start}-{end}. "
            f"All {count} ports are occupied. Close other applications using these ports and try again."
        )


def is_port_available(port: int, host: str = LOOPBACK_HOST) -> bool:
    """
    Test if a port is free by binding a temporary listener on it.

    The probe binds with SO_REUSEADDR, like the real listener: TIME_WAIT
    leftovers of a stopped server do not count as busy, a live listener does.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            probe.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(
    start: int = PORT_RANGE_START,
    end: int = PORT_RANGE_END,
    host: str = LOOPBACK_HOST,
) -> int:
    """
    Find the first free port in ``[start, end]``.

    Args:
        start: First port to try
        end: Last port to try (inclusive)
        host: Interface to probe

    Returns:
        The first available port in range

    Raises:
        NoPortAvailableError: If all ports in the range are occupied
    """
    for port in range(start, end + 1):
        if is_port_available(port, host):
            return port
        logger.debug(f"Port {port} is busy, trying next port")
    raise NoPortAvailableError(start, end)
