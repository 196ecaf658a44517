"""Port interfaces (Hexagonal Architecture)."""

from hearken.ports.inbound import InboundMessage, Sender
from hearken.ports.outbound import ChatTransport, ResponseFactory

__all__ = [
    "InboundMessage",
    "Sender",
    "ChatTransport",
    "ResponseFactory",
]
