"""Domain layer — dispatch and session core, no framework dependencies."""

from hearken.domain.disposable import CompositeSubscription, Subscription
from hearken.domain.dispatcher import Dispatcher
from hearken.domain.identity import Identity
from hearken.domain.listener import Listener, ListenerHandle
from hearken.domain.registry import ListenerRegistry
from hearken.domain.response import Response
from hearken.domain.session import Session, SessionHandlers, UserTable
from hearken.domain.stream import MessageStream

__all__ = [
    "CompositeSubscription",
    "Dispatcher",
    "Identity",
    "Listener",
    "ListenerHandle",
    "ListenerRegistry",
    "MessageStream",
    "Response",
    "Session",
    "SessionHandlers",
    "Subscription",
    "UserTable",
]
