from __future__ import annotations

from typing import Callable, List, Optional

from flipbook.utils.logger import logger


class Subscription:
    """Handle for an installed listener; ``release`` removes it once.

    Usable as a context manager so the listener is removed when the block
    exits.
    """

    def __init__(self, release: Callable[[], None], name: str = "") -> None:
        self._release: Optional[Callable[[], None]] = release
        self.name = name

    @property
    def active(self) -> bool:
        return self._release is not None

    def release(self) -> None:
        release, self._release = self._release, None
        if release is None:
            return
        release()
        logger.debug("Released subscription %s", self.name or id(self))

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.release()


class SubscriptionSet:
    """Owns several subscriptions and releases them together on teardown."""

    def __init__(self) -> None:
        self._items: List[Subscription] = []

    def add(self, subscription: Subscription) -> Subscription:
        self._items.append(subscription)
        return subscription

    def __len__(self) -> int:
        return sum(1 for item in self._items if item.active)

    def release_all(self) -> None:
        items, self._items = self._items, []
        # Reverse order so later listeners that depend on earlier ones go first.
        for item in reversed(items):
            item.release()


class Signal:
    """Minimal callback list for the Qt-free engine.

    ``connect`` returns a :class:`Subscription` that disconnects the
    callback when released.
    """

    def __init__(self) -> None:
        self._callbacks: List[Callable] = []

    def connect(self, callback: Callable) -> Subscription:
        self._callbacks.append(callback)

        def _disconnect() -> None:
            try:
                self._callbacks.remove(callback)
            except ValueError:
                pass

        return Subscription(_disconnect, name=getattr(callback, "__name__", ""))

    def emit(self, *args) -> None:
        for callback in list(self._callbacks):
            callback(*args)

    def __len__(self) -> int:
        return len(self._callbacks)
