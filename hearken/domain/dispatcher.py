"""Dispatcher — the public surface consumer modules register against."""

import sys
from re import Pattern
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from hearken.config import SessionConfig
from hearken.domain.disposable import Subscription
from hearken.domain.identity import Identity
from hearken.domain.listener import Listener, ListenerBoundary, ListenerHandle, always
from hearken.domain.registry import ListenerRegistry
from hearken.domain.response import Response
from hearken.domain.session import Session, SessionHandlers
from hearken.domain.stream import MessageStream
from hearken.ports.outbound import Callback, ChatTransport, Predicate, ResponseFactory


def _log(msg: str):
    print(msg, file=sys.stderr)


PatternLike = Union[str, Pattern[str]]
Module = Callable[["Dispatcher"], Any]


class Dispatcher:
    """Fans one transport's message stream out to many cancellable listeners.

    Usage::

        bot = Dispatcher(transport)
        bot.listen(r"^ping$", lambda res: res.send("pong"))
        bot.session(r"^join$", r"^leave$")
        await bot.login()

    Every registration returns a handle; ``ignore(handle)`` or
    ``handle.dispose()`` stops it. ``logout()`` disposes all of them.
    """

    def __init__(
        self,
        transport: ChatTransport,
        response_factory: ResponseFactory = Response,
        session_config: Optional[SessionConfig] = None,
        name: str = "hearken",
    ):
        self.transport = transport
        self.messages = MessageStream(transport)
        self.identity = Identity(transport)
        self.registry = ListenerRegistry()
        self._response_factory = response_factory
        self._session_config = session_config or SessionConfig()
        self._log_name = name
        self._logged_in = False

    # -- Identity --

    @property
    def name(self) -> Optional[str]:
        return self.identity.name

    @property
    def id(self) -> Optional[str]:
        return self.identity.id

    # -- Lifecycle --

    async def login(self):
        """Attach transport handlers and open the connection."""
        if self.messages.completed:
            # A closed stream never reopens; start a fresh one for this connection.
            self.messages = MessageStream(self.transport)
        if not self._logged_in:
            self._logged_in = True
            self.identity.attach()
            self.transport.on("error", self._on_error)
        await self.transport.login()

    async def logout(self):
        """Dispose every listener, then close the connection."""
        count = self.registry.dispose_all()
        _log(f"[{self._log_name}] logout: {count} listener(s) disposed")
        if self._logged_in:
            self._logged_in = False
            self.transport.off("error", self._on_error)
        await self.transport.disconnect()

    def _on_error(self, reason: Any = None, code: Any = None, *args):
        _log(f"[{self._log_name}] socket error: reason {reason}, code {code}")

    # -- Modules --

    def add_module(self, module: Module):
        """Hand this dispatcher to a consumer setup function."""
        module(self)

    def add_modules(self, modules: Iterable[Module]):
        for module in modules:
            self.add_module(module)

    # -- Registration --

    def hear(self, predicate: Predicate, pattern: PatternLike, callback: Callback) -> ListenerHandle:
        """Fire ``callback`` for messages passing ``predicate`` and matching ``pattern``.

        ``pattern`` is searched, not fully matched: anchor it (``^ping$``)
        to require the whole text.
        """
        listener = Listener(predicate, pattern, callback)
        handle = ListenerHandle(self.registry.next_id(), listener)
        boundary = ListenerBoundary(handle, self.transport, self._response_factory, self._log_name)
        handle.attach(self.messages.subscribe(boundary, boundary.completed))
        self.registry.add(handle.id, handle)
        return handle

    register = hear

    def listen(self, pattern: PatternLike, callback: Callback) -> ListenerHandle:
        """Fire ``callback`` for every message matching ``pattern``."""
        return self.hear(always, pattern, callback)

    def respond(self, pattern: PatternLike, callback: Callback) -> ListenerHandle:
        """Like ``listen`` but only for messages that name or mention the bot.

        Never matches before the transport has reported the bot's identity.
        """
        return self.hear(self.identity.is_addressed, pattern, callback)

    def ignore(self, handle: Subscription):
        """Stop a listener or session. Safe to call more than once."""
        handle.dispose()

    def session(
        self,
        summon: PatternLike,
        dismiss: PatternLike,
        handlers: Union[None, SessionHandlers, Mapping[str, Callback]] = None,
    ) -> Session:
        """Open a per-user session driven by ``summon`` and ``dismiss`` patterns.

        ``handlers`` may override any of ``greeting``, ``converse`` and
        ``farewell``; the rest reply with a salutation naming the sender.
        """
        resolved = SessionHandlers.resolve(handlers, self._session_config)
        return Session.open(self, summon, dismiss, resolved)
