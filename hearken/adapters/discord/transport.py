"""Discord transport — bridges discord.Client to the hearken event contract.

Gateway messages are queued and emitted one at a time by a single pump task,
so listeners for one message finish before the next message is dispatched.
"""

import asyncio
import sys
from typing import Any, Dict, Optional

import discord

from hearken.adapters.emitter import EventEmitter
from hearken.ports.inbound import MESSAGE_KIND, Sender


def _log(msg: str):
    print(msg, file=sys.stderr)


def to_event(message: discord.Message) -> Dict[str, Any]:
    """Convert a discord.Message to a raw hearken event mapping."""
    return {
        "type": MESSAGE_KIND,
        "user": str(message.author.id),
        "text": message.content,
        "channel": message.channel.id,
        "bot": message.author.bot,
        "message": message,
    }


def _to_sender(user: Any) -> Sender:
    name = getattr(user, "display_name", None) or getattr(user, "name", None)
    return Sender(id=str(user.id), name=name)


class _GatewayClient(discord.Client):
    """discord.Client that forwards gateway callbacks to its transport."""

    def __init__(self, transport: "DiscordTransport", **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self._relay = transport

    async def on_ready(self):
        _log(f"[discord] logged in as {self.user}")
        await self._relay.emit("open")

    async def on_message(self, message: discord.Message):
        # Ignore own messages
        if self.user is not None and message.author == self.user:
            return
        self._relay.enqueue(to_event(message))

    async def on_error(self, event_method: str, *args, **kwargs):
        _, exc, _ = sys.exc_info()
        await self._relay.emit("error", event_method, repr(exc) if exc else None)


class DiscordTransport(EventEmitter):
    """ChatTransport implementation on top of discord.py."""

    def __init__(self, token: str, max_message_length: int = 2000, **discord_kwargs):
        if max_message_length <= 0:
            raise ValueError(f"max_message_length must be positive, got {max_message_length}")
        super().__init__()
        self._token = token
        self._max_message_length = max_message_length
        self.client = _GatewayClient(self, **discord_kwargs)
        self._queue: Optional[asyncio.Queue] = None
        self._pump_task: Optional[asyncio.Task] = None
        self._connect_task: Optional[asyncio.Task] = None
        self._closed = False

    # -- Identity / users --

    @property
    def self_user(self) -> Optional[Sender]:
        if self.client.user is None:
            return None
        return Sender(id=str(self.client.user.id), name=self.client.user.name)

    def get_user(self, user_id: str) -> Optional[Sender]:
        try:
            user = self.client.get_user(int(user_id))
        except (TypeError, ValueError):
            return None
        return _to_sender(user) if user is not None else None

    # -- Inbound --

    def enqueue(self, event: Dict[str, Any]):
        if self._closed:
            return
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._queue.put_nowait(event)
        self._ensure_pump()

    def _ensure_pump(self):
        if self._pump_task is None or self._pump_task.done():
            self._pump_task = asyncio.create_task(self._pump())

    async def _pump(self):
        while not self._closed:
            event = await self._queue.get()
            try:
                await self.emit("message", event)
            finally:
                self._queue.task_done()

    # -- Lifecycle --

    async def login(self) -> None:
        """Authenticate and start the gateway connection in the background."""
        if not self._token:
            raise ValueError("Discord token is required")
        self._closed = False
        await self.client.login(self._token)
        self._connect_task = asyncio.create_task(self.client.connect())
        self._connect_task.add_done_callback(self._on_connect_done)

    def _on_connect_done(self, task: asyncio.Task):
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _log(f"[discord] gateway stopped: {exc!r}")

    async def wait_closed(self):
        """Block until the gateway connection ends."""
        if self._connect_task is not None:
            try:
                await self._connect_task
            except Exception as e:
                _log(f"[discord] connection ended: {e!r}")

    async def disconnect(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.client.close()
        pump, self._pump_task = self._pump_task, None
        if pump is not None and pump is not asyncio.current_task():
            pump.cancel()
            try:
                await pump
            except asyncio.CancelledError:
                pass
        await self.emit("close")

    # -- Outbound --

    async def send(self, channel_id: Any, text: str) -> None:
        channel = self.client.get_channel(int(channel_id))
        if channel is None:
            _log(f"[discord] channel {channel_id} not found, reply dropped")
            return
        # Split long messages
        size = self._max_message_length
        while text:
            await channel.send(text[:size])
            text = text[size:]
