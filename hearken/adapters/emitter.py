"""Minimal async event emitter shared by transports."""

import inspect
import sys
from typing import Any, Dict, List

from hearken.ports.outbound import EventHandler


def _log(msg: str):
    print(msg, file=sys.stderr)


class EventEmitter:
    """Named-event handler table; handlers may be sync or async.

    A handler that raises is logged and skipped so one bad handler cannot
    stop the transport from emitting.
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            pass

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    async def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                _log(f"[emitter] {event} handler {getattr(handler, '__qualname__', handler)!r} failed: {e!r}")
