"""Outbound ports — interfaces for the chat transport and reply helper."""

from re import Pattern
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

from hearken.ports.inbound import InboundMessage, Sender

EventHandler = Callable[..., Any]


@runtime_checkable
class ChatTransport(Protocol):
    """Interface for a real-time chat connection.

    Emits ``"open"`` once the handshake completes, ``"message"`` per inbound
    event, ``"error"`` with ``(reason, code)`` and ``"close"`` on disconnect.
    """

    def on(self, event: str, handler: EventHandler) -> None: ...
    def off(self, event: str, handler: EventHandler) -> None: ...

    @property
    def self_user(self) -> Optional[Sender]: ...

    def get_user(self, user_id: str) -> Optional[Sender]: ...

    async def login(self) -> None: ...
    async def disconnect(self) -> None: ...
    async def send(self, channel_id: Any, text: str) -> None: ...


class ResponseFactory(Protocol):
    """Builds the object handed to listener callbacks."""

    def __call__(
        self, pattern: Pattern[str], message: InboundMessage, transport: ChatTransport
    ) -> Any: ...


Callback = Callable[[Any], Optional[Awaitable[None]]]
Predicate = Callable[[InboundMessage], Any]
