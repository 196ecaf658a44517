"""The bot's own name and id, captured once the transport is ready."""

import re
import sys
from typing import Optional

from hearken.ports.inbound import InboundMessage, Sender
from hearken.ports.outbound import ChatTransport


def _log(msg: str):
    print(msg, file=sys.stderr)


class Identity:
    """Captured on the transport's first ``"open"`` event; unset before that."""

    def __init__(self, transport: ChatTransport):
        self._transport = transport
        self.name: Optional[str] = None
        self.id: Optional[str] = None
        self._attached = False

    @property
    def ready(self) -> bool:
        return self.id is not None

    def attach(self):
        if self._attached or self.ready:
            return
        self._attached = True
        self._transport.on("open", self._on_open)

    def _on_open(self, *args):
        if self.capture(self._transport.self_user):
            self._transport.off("open", self._on_open)
            self._attached = False

    def capture(self, user: Optional[Sender]) -> bool:
        """Record ``user`` as the bot's identity. Only the first call counts."""
        if self.ready or user is None:
            return False
        self.name = user.name
        self.id = str(user.id)
        _log(f"[hearken] identity: {self.name} ({self.id})")
        return True

    def is_addressed(self, message: InboundMessage) -> bool:
        """True if the text names the bot or carries its mention."""
        if not self.ready or not message.text:
            return False
        if self.name and re.search(re.escape(self.name), message.text, re.IGNORECASE):
            return True
        return re.search(re.escape(f"<@{self.id}>"), message.text, re.IGNORECASE) is not None
