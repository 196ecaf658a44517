"""Listener dispatch and per-user sessions over a chat event stream."""

from hearken.config import __version__, AppConfig, DiscordConfig, SessionConfig
from hearken.ports.inbound import InboundMessage, Sender
from hearken.ports.outbound import ChatTransport
from hearken.domain.disposable import CompositeSubscription, Subscription
from hearken.domain.dispatcher import Dispatcher
from hearken.domain.response import Response
from hearken.domain.session import Session, SessionHandlers

__all__ = [
    "__version__",
    "AppConfig",
    "DiscordConfig",
    "SessionConfig",
    "InboundMessage",
    "Sender",
    "ChatTransport",
    "Subscription",
    "CompositeSubscription",
    "Dispatcher",
    "Response",
    "Session",
    "SessionHandlers",
]
