"""Launcher — connects a Discord transport and loads consumer modules."""

import asyncio
import importlib
import sys
from typing import Callable, Iterable, List, Optional

from hearken.config import AppConfig
from hearken.domain.dispatcher import Dispatcher


def _log(msg: str):
    print(msg, file=sys.stderr)


def load_module(path: str) -> Callable[[Dispatcher], None]:
    """Resolve ``"package.module"`` (its ``setup``) or ``"package.module:func"``."""
    module_name, _, attr = path.partition(":")
    module = importlib.import_module(module_name)
    setup = getattr(module, attr or "setup", None)
    if not callable(setup):
        raise AttributeError(f"{path!r} has no callable {attr or 'setup'!r}")
    return setup


def load_modules(paths: Iterable[str]) -> List[Callable[[Dispatcher], None]]:
    """Load every module path, skipping (and logging) the ones that fail."""
    modules = []
    for path in paths:
        try:
            modules.append(load_module(path))
            _log(f"Module loaded: {path}")
        except Exception as e:
            _log(f"Module unavailable: {path} ({e})")
    return modules


async def run(config: Optional[AppConfig] = None):
    """Log in, dispatch until the gateway closes, then log out."""
    config = config or AppConfig.from_env()
    if not config.discord.token:
        _log("No bot configured. Set HEARKEN_DISCORD_TOKEN.")
        return

    from hearken.adapters.discord import DiscordTransport

    transport = DiscordTransport(
        config.discord.token,
        max_message_length=config.discord.max_message_length,
    )
    bot = Dispatcher(transport, session_config=config.session)
    bot.add_modules(load_modules(config.modules))
    _log(f"Launching with {len(bot.registry)} listener(s)...")

    try:
        await bot.login()
        await transport.wait_closed()
    finally:
        await bot.logout()


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
