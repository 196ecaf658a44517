"""Response context handed to listener callbacks."""

import re
from re import Pattern
from typing import Any, Dict, Optional, Tuple

from hearken.ports.inbound import InboundMessage, Sender
from hearken.ports.outbound import ChatTransport


class Response:
    """Reply-capable view of one matched message.

    Built fresh for every match; callbacks should not hold on to it.
    """

    def __init__(self, pattern: Pattern[str], message: InboundMessage, transport: ChatTransport):
        self.pattern = pattern
        self.incoming_message = message
        self._transport = transport
        self.match: Optional[re.Match] = pattern.search(message.text or "")

    @property
    def text(self) -> str:
        return self.incoming_message.text or ""

    @property
    def user_id(self) -> Optional[str]:
        return self.incoming_message.user_id

    def group(self, key: Any = 0) -> Optional[str]:
        """Positional or named capture group; ``None`` when absent."""
        if self.match is None:
            return None
        try:
            return self.match.group(key)
        except (IndexError, KeyError):
            return None

    def groups(self) -> Tuple[Optional[str], ...]:
        return self.match.groups() if self.match else ()

    def groupdict(self) -> Dict[str, Optional[str]]:
        return self.match.groupdict() if self.match else {}

    def get_message_sender(self) -> Sender:
        """Resolve the sender; the name is ``None`` if the transport cannot tell."""
        user_id = self.incoming_message.user_id
        if user_id is not None:
            sender = self._transport.get_user(user_id)
            if sender is not None:
                return sender
        return Sender(id=user_id or "")

    async def send(self, text: str) -> None:
        """Reply in the channel the message came from."""
        await self._transport.send(self.incoming_message.channel_id, text)
