from __future__ import annotations

from typing import Callable, Iterable

from qtpy import QtCore

from flipbook.core.subscriptions import Subscription

EventHandler = Callable[[QtCore.QObject, QtCore.QEvent], bool]


class _EventFilter(QtCore.QObject):
    def __init__(self, event_types: Iterable[QtCore.QEvent.Type], handler: EventHandler) -> None:
        super().__init__()
        self._event_types = set(event_types)
        self._handler = handler

    def eventFilter(self, obj: QtCore.QObject, event: QtCore.QEvent) -> bool:  # noqa: N802 - Qt override
        if event.type() in self._event_types:
            return bool(self._handler(obj, event))
        return False


def listen(
    target: QtCore.QObject,
    event_types: Iterable[QtCore.QEvent.Type],
    handler: EventHandler,
    name: str = "",
) -> Subscription:
    """Install an event filter on ``target``; release the returned handle to remove it.

    ``handler`` returns True to consume the event.
    """
    event_filter = _EventFilter(event_types, handler)
    target.installEventFilter(event_filter)

    def _release() -> None:
        try:
            target.removeEventFilter(event_filter)
        except RuntimeError:
            # Target already deleted by Qt.
            pass
        event_filter.deleteLater()

    return Subscription(_release, name=name)
