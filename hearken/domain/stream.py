"""Event source adapter — a lazy, multicast stream of chat messages.

One transport-level ``"message"`` handler serves every subscriber. It
is attached on first subscription; the stream completes when the
transport emits ``"close"``. Nothing is buffered: a subscriber only sees
messages that arrive after it subscribed.
"""

import inspect
import sys
from typing import Any, Awaitable, Callable, List, Mapping, Optional

from hearken.domain.disposable import Subscription
from hearken.ports.inbound import InboundMessage, MESSAGE_KIND
from hearken.ports.outbound import ChatTransport


def _log(msg: str):
    print(msg, file=sys.stderr)


class _Observer:
    __slots__ = ("on_next", "on_completed", "active")

    def __init__(
        self,
        on_next: Callable[[InboundMessage], Optional[Awaitable[None]]],
        on_completed: Optional[Callable[[], None]],
    ):
        self.on_next = on_next
        self.on_completed = on_completed
        self.active = True


class MessageStream:
    """Shared stream of ``InboundMessage`` values for one transport."""

    def __init__(self, transport: ChatTransport, kind: str = MESSAGE_KIND):
        self._transport = transport
        self._kind = kind
        self._observers: List[_Observer] = []
        self._connected = False
        self._completed = False
        # Completion is observed even before the first subscriber.
        transport.on("close", self._on_close)

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def subscribe(
        self,
        on_next: Callable[[InboundMessage], Optional[Awaitable[None]]],
        on_completed: Optional[Callable[[], None]] = None,
    ) -> Subscription:
        """Attach an observer; returns the token that detaches it.

        Subscribing after completion yields an already-disposed token and
        signals ``on_completed`` straight away.
        """
        if self._completed:
            if on_completed is not None:
                on_completed()
            subscription = Subscription()
            subscription.dispose()
            return subscription

        observer = _Observer(on_next, on_completed)
        self._observers.append(observer)
        self._connect()
        return Subscription(lambda: self._detach(observer))

    def _connect(self):
        if self._connected:
            return
        self._connected = True
        self._transport.on("message", self._on_event)

    def _detach(self, observer: _Observer):
        observer.active = False
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    async def _on_event(self, event: Mapping[str, Any]):
        message = InboundMessage.from_event(event)
        if message.kind != self._kind:
            return
        await self.publish(message)

    async def publish(self, message: InboundMessage):
        """Deliver one message to every observer active at arrival time."""
        # Observers added while this message is in flight wait for the next one.
        for observer in list(self._observers):
            if not observer.active:
                continue
            result = observer.on_next(message)
            if inspect.isawaitable(result):
                await result

    def _on_close(self, *args):
        if self._completed:
            return
        self._completed = True
        self._transport.off("message", self._on_event)
        self._transport.off("close", self._on_close)
        observers, self._observers = self._observers, []
        for observer in observers:
            observer.active = False
            if observer.on_completed is None:
                continue
            try:
                observer.on_completed()
            except Exception as e:
                _log(f"[stream] completion handler failed: {e!r}")
