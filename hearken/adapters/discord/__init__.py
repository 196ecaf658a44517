"""Discord transport."""

from hearken.adapters.discord.transport import DiscordTransport, to_event

__all__ = ["DiscordTransport", "to_event"]
