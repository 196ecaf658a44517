"""Inbound port — platform-agnostic message representation."""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

MESSAGE_KIND = "message"


@dataclass(frozen=True)
class Sender:
    """A chat user as resolved by the transport."""

    id: str
    name: Optional[str] = None

    @property
    def mention(self) -> str:
        return f"<@{self.id}>"


@dataclass(frozen=True)
class InboundMessage:
    """Discord/Slack-agnostic chat message, one per transport event."""

    kind: str
    user_id: Optional[str]
    text: Optional[str]
    channel_id: Any = None
    is_bot: bool = False
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> "InboundMessage":
        """Normalise a raw transport event (`type`, `user`, `text`, `channel`)."""
        user = event.get("user")
        text = event.get("text")
        return cls(
            kind=event.get("type", ""),
            user_id=str(user) if user is not None else None,
            text=text if isinstance(text, str) else None,
            channel_id=event.get("channel"),
            is_bot=bool(event.get("bot", False)),
            raw=event,
        )

    @property
    def is_message(self) -> bool:
        return self.kind == MESSAGE_KIND
