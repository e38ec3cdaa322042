"""Push a dithered frame to a display over raw TCP.

The wire format is just the frame: one byte per pixel, row-major, no
header or framing. The connection is held open briefly after the write
so the receiver can drain it before the socket closes.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
import time

from rasterkit.core.image import Image
from rasterkit.core.writer import frame_bytes

logger = logging.getLogger(__name__)

DEFAULT_PORT = 80
LINGER_SECONDS = 0.25


class PushError(OSError):
    """Raised when the frame cannot be delivered."""


def push_frame(
    img: Image,
    host: str,
    port: int = DEFAULT_PORT,
    linger: float = LINGER_SECONDS,
    timeout: float | None = None,
) -> int:
    """Send ``frame_bytes(img)`` to ``host:port`` and return the byte count.

    Args:
        img: frame to send; only the red component of each pixel is used.
        host: IPv4 or IPv6 address literal.
        port: TCP port.
        linger: seconds to wait after writing before closing.
        timeout: connect/send timeout, None blocks.

    Raises:
        PushError: if the address is invalid or the connection fails.
    """
    try:
        address = ipaddress.ip_address(host)
    except ValueError as e:
        raise PushError(f"Invalid address: {host}") from e

    data = frame_bytes(img)
    try:
        with socket.create_connection((str(address), port), timeout=timeout) as sock:
            sock.sendall(data)
            time.sleep(linger)
    except OSError as e:
        raise PushError(f"Cannot connect to {host}:{port}: {e}") from e

    logger.debug("Pushed %d bytes to %s:%d", len(data), host, port)
    return len(data)
