"""Listeners and the per-listener error boundary."""

import inspect
import re
import sys
from re import Pattern
from typing import Callable, Optional, Union

from hearken.domain.disposable import Subscription
from hearken.ports.inbound import InboundMessage
from hearken.ports.outbound import Callback, ChatTransport, Predicate, ResponseFactory


def _log(msg: str):
    print(msg, file=sys.stderr)


MATCH_ALL = re.compile(r".*")


def compile_pattern(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, str):
        return re.compile(pattern)
    if not hasattr(pattern, "search"):
        raise TypeError(f"pattern must be a str or compiled regex, got {type(pattern).__name__}")
    return pattern


def always(message: InboundMessage) -> bool:
    return True


class Listener:
    """A (predicate, pattern, callback) triple."""

    def __init__(self, predicate: Predicate, pattern: Union[str, Pattern[str]], callback: Callback):
        if not callable(predicate):
            raise TypeError("predicate must be callable")
        if not callable(callback):
            raise TypeError("callback must be callable")
        self.predicate = predicate
        self.pattern = compile_pattern(pattern)
        self.callback = callback

    def match(self, message: InboundMessage) -> Optional[re.Match]:
        """Return the pattern match if this listener should fire for ``message``."""
        if not message.text:
            return None
        if not self.predicate(message):
            return None
        return self.pattern.search(message.text)


class ListenerHandle(Subscription):
    """Cancellation token for one registered listener."""

    def __init__(self, key: int, listener: Listener):
        super().__init__(self._release)
        self.id = key
        self.listener = listener
        self._upstream: Optional[Subscription] = None

    def attach(self, upstream: Subscription):
        self._upstream = upstream
        if self.disposed or upstream.disposed:
            self.dispose()

    def _release(self):
        if self._upstream is not None:
            self._upstream.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "active"
        return f"<ListenerHandle id={self.id} pattern={self.listener.pattern.pattern!r} {state}>"


class ListenerBoundary:
    """Runs one listener against one message.

    Any ``Exception`` from the predicate, response construction or callback
    is logged and ends this listener's subscription; the stream and the
    other listeners carry on.
    """

    def __init__(
        self,
        handle: ListenerHandle,
        transport: ChatTransport,
        response_factory: ResponseFactory,
        name: str = "hearken",
    ):
        self._handle = handle
        self._transport = transport
        self._response_factory = response_factory
        self._name = name

    async def __call__(self, message: InboundMessage):
        if self._handle.disposed:
            return
        listener = self._handle.listener
        try:
            if listener.match(message) is None:
                return
            response = self._response_factory(listener.pattern, message, self._transport)
            result = listener.callback(response)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            _log(
                f"[{self._name}] listener {self._handle.id} "
                f"({listener.pattern.pattern!r}) failed: {e!r}; unsubscribed"
            )
            self._handle.dispose()

    def completed(self):
        _log(f"[{self._name}] listener {self._handle.id} completed")
