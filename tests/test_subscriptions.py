from __future__ import annotations

import os

from qtpy import QtCore, QtGui, QtWidgets

from flipbook.core.subscriptions import Signal, Subscription, SubscriptionSet
from flipbook.gui.event_filters import listen

os.environ.setdefault("QT_QPA_PLATFORM", "minimal")

_QAPP = None


def _ensure_qapp():
    global _QAPP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _QAPP = app
    return _QAPP


def test_subscription_releases_once() -> None:
    calls = []
    subscription = Subscription(lambda: calls.append("released"), name="x")
    assert subscription.active
    subscription.release()
    subscription.release()
    assert calls == ["released"]
    assert not subscription.active


def test_subscription_as_context_manager() -> None:
    signal = Signal()
    seen = []
    with signal.connect(seen.append):
        signal.emit(1)
    signal.emit(2)
    assert seen == [1]
    assert len(signal) == 0


def test_subscription_set_releases_in_reverse_order() -> None:
    order = []
    subscriptions = SubscriptionSet()
    subscriptions.add(Subscription(lambda: order.append("first")))
    subscriptions.add(Subscription(lambda: order.append("second")))
    assert len(subscriptions) == 2
    subscriptions.release_all()
    assert order == ["second", "first"]
    assert len(subscriptions) == 0


def test_listen_installs_and_removes_event_filter() -> None:
    _ensure_qapp()
    widget = QtWidgets.QWidget()
    seen = []

    def handler(obj, event):
        seen.append(event.type())
        return False

    subscription = listen(widget, (QtCore.QEvent.Resize,), handler, name="resize")
    resize = QtGui.QResizeEvent(QtCore.QSize(10, 10), QtCore.QSize(5, 5))
    QtWidgets.QApplication.sendEvent(widget, resize)
    QtWidgets.QApplication.sendEvent(widget, QtGui.QShowEvent())
    assert seen == [QtCore.QEvent.Resize]

    subscription.release()
    QtWidgets.QApplication.sendEvent(widget, resize)
    assert seen == [QtCore.QEvent.Resize]
