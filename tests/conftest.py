"""Shared fixtures — an in-memory transport standing in for the chat service."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from hearken.adapters.emitter import EventEmitter
from hearken.domain.dispatcher import Dispatcher
from hearken.ports.inbound import Sender


BOT_ID = "B999"
BOT_NAME = "hearken"
CHANNEL = "C100"


class FakeTransport(EventEmitter):
    """ChatTransport implementation that records replies in memory."""

    def __init__(self, users: Optional[Dict[str, str]] = None):
        super().__init__()
        self.users: Dict[str, str] = dict(users or {})
        self.sent: List[Tuple[Any, str]] = []
        self.me: Optional[Sender] = None
        self.login_calls = 0
        self.disconnect_calls = 0

    @property
    def self_user(self) -> Optional[Sender]:
        return self.me

    def get_user(self, user_id: str) -> Optional[Sender]:
        if user_id not in self.users:
            return None
        return Sender(id=user_id, name=self.users[user_id])

    async def login(self) -> None:
        self.login_calls += 1

    async def disconnect(self) -> None:
        self.disconnect_calls += 1
        await self.emit("close")

    async def send(self, channel_id: Any, text: str) -> None:
        self.sent.append((channel_id, text))

    # -- Test drivers --

    async def ready(self, name: str = BOT_NAME, user_id: str = BOT_ID):
        self.me = Sender(id=user_id, name=name)
        await self.emit("open")

    async def say(self, user: str, text: Optional[str], channel: Any = CHANNEL, kind: str = "message"):
        await self.emit("message", {"type": kind, "user": user, "text": text, "channel": channel})

    @property
    def texts(self) -> List[str]:
        return [text for _, text in self.sent]


@pytest.fixture
def transport():
    return FakeTransport(users={"U1": "alice", "U2": "bob"})


@pytest.fixture
def bot(transport):
    return Dispatcher(transport)
