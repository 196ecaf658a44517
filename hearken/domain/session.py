"""Per-user conversational sessions.

A session is three listeners sharing one ``UserTable``:

- summon:   ABSENT -> PRESENT, calls ``greeting``
- converse: PRESENT -> PRESENT for any text, calls ``converse``
- dismiss:  PRESENT -> ABSENT, calls ``farewell``

Listeners are dispatched in registration order, so dismiss and converse are
registered before summon. A summon message is then not also treated as
conversation, and a dismiss message is not either.
"""

from dataclasses import dataclass, fields
from re import Pattern
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Union

from hearken.config import SessionConfig
from hearken.domain.disposable import CompositeSubscription
from hearken.domain.listener import MATCH_ALL, ListenerHandle, always
from hearken.ports.inbound import InboundMessage
from hearken.ports.outbound import Callback

if TYPE_CHECKING:
    from hearken.domain.dispatcher import Dispatcher
    from hearken.domain.response import Response


class UserTable:
    """Users currently in session, mapped to the display name seen at summon.

    A user id is a key exactly while that user is PRESENT.
    """

    def __init__(self):
        self._users: Dict[str, Optional[str]] = {}

    def enter(self, user_id: str, name: Optional[str] = None):
        if user_id is None:
            return
        self._users[user_id] = name

    def leave(self, user_id: str):
        self._users.pop(user_id, None)

    def is_present(self, message: InboundMessage) -> bool:
        return message.user_id in self._users

    def get(self, user_id: str) -> Optional[str]:
        return self._users.get(user_id)

    def snapshot(self) -> Dict[str, Optional[str]]:
        return dict(self._users)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def __len__(self) -> int:
        return len(self._users)


def salute(phrase: str, fallback_name: str) -> Callable[["Response"], Any]:
    """Handler that replies ``"<phrase>, <sender name>!"``."""

    async def handler(res: "Response"):
        name = res.get_message_sender().name or fallback_name
        await res.send(f"{phrase}, {name}!")

    handler.__name__ = f"salute_{phrase.lower()}"
    return handler


@dataclass
class SessionHandlers:
    greeting: Optional[Callback] = None
    converse: Optional[Callback] = None
    farewell: Optional[Callback] = None

    @classmethod
    def resolve(
        cls,
        handlers: Union[None, "SessionHandlers", Mapping[str, Callback]],
        config: Optional[SessionConfig] = None,
    ) -> "SessionHandlers":
        """Fill unspecified handlers with the salutation defaults."""
        config = config or SessionConfig()
        if handlers is None:
            given: Dict[str, Any] = {}
        elif isinstance(handlers, SessionHandlers):
            given = {f.name: getattr(handlers, f.name) for f in fields(handlers)}
        else:
            known = {f.name for f in fields(cls)}
            unknown = set(handlers) - known
            if unknown:
                raise ValueError(
                    f"unknown session handler(s): {', '.join(sorted(unknown))}; "
                    f"expected any of {', '.join(sorted(known))}"
                )
            given = dict(handlers)

        for key, value in given.items():
            if value is not None and not callable(value):
                raise TypeError(f"session handler {key!r} must be callable")

        return cls(
            greeting=given.get("greeting") or salute(config.greeting_phrase, config.fallback_name),
            converse=given.get("converse") or salute(config.converse_phrase, config.fallback_name),
            farewell=given.get("farewell") or salute(config.farewell_phrase, config.fallback_name),
        )


class Session(CompositeSubscription):
    """Disposable for one session: releases summon, converse and dismiss together."""

    def __init__(
        self,
        summon: ListenerHandle,
        converse: ListenerHandle,
        dismiss: ListenerHandle,
        users: UserTable,
        handlers: SessionHandlers,
    ):
        super().__init__([summon, converse, dismiss])
        self.summon = summon
        self.converse = converse
        self.dismiss = dismiss
        self.users = users
        self.handlers = handlers

    @property
    def disposed(self) -> bool:
        # Children may be released one by one, e.g. by the registry on logout.
        return super().disposed or all(child.disposed for child in self._children)

    @classmethod
    def open(
        cls,
        dispatcher: "Dispatcher",
        summon_pattern: Union[str, Pattern[str]],
        dismiss_pattern: Union[str, Pattern[str]],
        handlers: SessionHandlers,
        users: Optional[UserTable] = None,
    ) -> "Session":
        users = users if users is not None else UserTable()

        def on_dismiss(res: "Response"):
            users.leave(res.user_id)
            return handlers.farewell(res)

        def on_summon(res: "Response"):
            users.enter(res.user_id, res.get_message_sender().name)
            return handlers.greeting(res)

        dismiss = dispatcher.hear(always, dismiss_pattern, on_dismiss)
        converse = dispatcher.hear(users.is_present, MATCH_ALL, handlers.converse)
        summon = dispatcher.hear(always, summon_pattern, on_summon)
        return cls(summon, converse, dismiss, users, handlers)

    def __repr__(self) -> str:
        state = "disposed" if self.disposed else "active"
        return f"<Session users={len(self.users)} {state}>"
