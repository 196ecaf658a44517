"""Configuration loaded from the environment / .env file."""

__version__ = "0.1.0"

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split_modules(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class DiscordConfig:
    token: str = ""
    max_message_length: int = 2000


@dataclass
class SessionConfig:
    """Phrases used by the default session handlers."""

    fallback_name: str = "Buddy"
    greeting_phrase: str = "Hello"
    converse_phrase: str = "Whatever"
    farewell_phrase: str = "Bye"


@dataclass
class AppConfig:
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    modules: List[str] = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            discord=DiscordConfig(
                token=os.getenv("HEARKEN_DISCORD_TOKEN", "").strip(),
                max_message_length=int(os.getenv("HEARKEN_MAX_MESSAGE_LENGTH", "2000")),
            ),
            session=SessionConfig(
                fallback_name=os.getenv("HEARKEN_FALLBACK_NAME", "Buddy"),
            ),
            modules=_split_modules(os.getenv("HEARKEN_MODULES", "")),
        )
