"""Cancellation tokens returned by every listener registration."""

from typing import Callable, Iterable, List, Optional


class Subscription:
    """Idempotent cancellation token.

    ``dispose()`` runs the teardown at most once; later calls are no-ops.
    """

    def __init__(self, teardown: Optional[Callable[[], None]] = None):
        self._teardown = teardown
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        teardown, self._teardown = self._teardown, None
        if teardown is not None:
            teardown()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"<{type(self).__name__} {state}>"


class CompositeSubscription(Subscription):
    """Holds child tokens and releases them together, in insertion order."""

    def __init__(self, children: Iterable[Subscription] = ()):
        super().__init__(self._dispose_children)
        self._children: List[Subscription] = list(children)

    @property
    def children(self) -> List[Subscription]:
        return list(self._children)

    def _dispose_children(self) -> None:
        # Every child is released even if an earlier teardown raises.
        errors = []
        for child in self._children:
            try:
                child.dispose()
            except Exception as e:
                errors.append(e)
        if errors:
            raise errors[0]
