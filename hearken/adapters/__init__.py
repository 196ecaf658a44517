"""Transport adapters."""

from hearken.adapters.emitter import EventEmitter

__all__ = ["EventEmitter"]
