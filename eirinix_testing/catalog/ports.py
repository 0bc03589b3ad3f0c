"""
Free TCP port allocation for webhook servers started by tests.
"""

import logging
import socket

from ..errors import ConstructionError

logger = logging.getLogger(__name__)


def get_free_port(host: str = "127.0.0.1") -> int:
    """
    Ask the kernel for a free TCP port.

    The port is released before returning, so another process may grab it;
    tests bind it shortly after allocation.

    Args:
        host: Address to bind while probing

    Returns:
        int: A port number that was free at call time

    Raises:
        ConstructionError: If no port could be allocated
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((host, 0))
            port = sock.getsockname()[1]
    except OSError as e:
        raise ConstructionError(f"Cannot allocate a free port on {host}: {e}") from e

    logger.debug(f"Allocated free port {port}")
    return port
