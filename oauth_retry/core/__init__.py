"""Core components: configuration and HTTP transport."""

from .config import Settings
from .transport import HttpxTransport, Transport, TransportResponse

__all__ = ["HttpxTransport", "Settings", "Transport", "TransportResponse"]
