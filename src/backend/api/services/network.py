"""
Network helpers for handing the backend address to mobile clients.
"""

import logging
import socket

from core.config import settings

logger = logging.getLogger(__name__)

FALLBACK_HOST = "localhost"


def get_local_ip() -> str:
    """
    Best-guess LAN IPv4 address of this host.

    Connecting a UDP socket sends no packets; it only makes the OS pick the
    outbound interface, whose address is then read back.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(("10.255.255.255", 1))
        address = sock.getsockname()[0]
    except OSError as e:
        logger.warning(f"Could not detect LAN IP, falling back to {FALLBACK_HOST}: {e}")
        return FALLBACK_HOST
    finally:
        sock.close()

    if address.startswith("127.") or address == "0.0.0.0":
        return FALLBACK_HOST
    return address


def resolve_backend_url() -> tuple[str, bool]:
    """
    Returns:
        Tuple of (backend URL, whether it was auto-detected)
    """
    if settings.backend_url:
        return settings.backend_url, False
    return f"http://{get_local_ip()}:{settings.api.port}", True
