from __future__ import annotations

import os

from qtpy import QtWidgets

from flipbook.core.catalog import DocumentReference
from flipbook.core.decoder import DecoderConfig
from flipbook.core.settings import ViewerSettings
from flipbook.gui.viewer_controller import ViewerController
from flipbook.gui.widgets.flipbook_controls import NAVIGATION_HINT
from flipbook.gui.widgets.flipbook_viewer import FlipbookViewerWidget
from flipbook.gui.workers import InlineTaskRunner

os.environ.setdefault("QT_QPA_PLATFORM", "minimal")

_QAPP = None


def _ensure_qapp():
    global _QAPP
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    _QAPP = app
    return _QAPP


def _viewer(strategy: str = "eager") -> FlipbookViewerWidget:
    settings = ViewerSettings(decoder=DecoderConfig(strategy=strategy, target_width=60))
    controller = ViewerController(settings, task_runner=InlineTaskRunner())
    return FlipbookViewerWidget(settings, controller=controller)


def test_viewer_starts_on_the_loading_page() -> None:
    _ensure_qapp()
    viewer = _viewer()
    assert viewer.current_page_name() == "loading"
    assert viewer.loading_label.text() == "Loading PDF..."
    assert viewer.controls.isHidden()
    viewer.controller.teardown()


def test_ready_document_shows_book_and_controls(make_pdf) -> None:
    _ensure_qapp()
    viewer = _viewer()
    viewer.load_document(DocumentReference("b1", "Book", str(make_pdf(4))))

    assert viewer.current_page_name() == "book"
    assert not viewer.controls.isHidden()
    controls = viewer.controls
    assert controls.page_label.text() == "Page 1 of 6"
    assert not controls.prev_button.isEnabled()
    assert controls.next_button.isEnabled()
    assert controls.hint_label.text() == NAVIGATION_HINT

    controls.next_button.click()
    assert viewer.controller.position == 1
    assert controls.page_label.text() == "Page 2 of 6"
    assert controls.prev_button.isEnabled()

    viewer.controller.jump_to(5)
    assert controls.page_label.text() == "Page 6 of 6"
    assert not controls.next_button.isEnabled()
    viewer.controller.teardown()


def test_failed_document_shows_error_page(tmp_path) -> None:
    _ensure_qapp()
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"")
    viewer = _viewer()
    viewer.load_document(DocumentReference("b1", "Book", str(path)))

    assert viewer.current_page_name() == "error"
    assert viewer.error_label.text() == viewer.controller.decode_state.reason
    assert "empty" in viewer.error_label.text()
    assert viewer.controls.isHidden()


def test_view_gestures_request_turns(make_pdf) -> None:
    _ensure_qapp()
    viewer = _viewer("lazy")
    viewer.load_document(DocumentReference("b1", "Book", str(make_pdf(4))))
    view = viewer.view
    width = viewer.controller.dimensions.width

    # A click on the right page turns forward, on the left page back.
    view._request_from_gesture(width + 20, width + 20)
    assert viewer.controller.position == 1
    view._request_from_gesture(20, 22)
    assert viewer.controller.position == 0
    # A leftward swipe turns forward even on the left half.
    view._request_from_gesture(120, 40)
    assert viewer.controller.position == 1
    # A short drag on the right half is still a click.
    view._request_from_gesture(width + 50, width + 40)
    assert viewer.controller.position == 2
    viewer.controller.teardown()


def test_view_follows_page_dimensions() -> None:
    _ensure_qapp()
    viewer = _viewer()
    viewer.controller.set_container_size(1000, 800)
    assert viewer.view.width() == 920
    assert viewer.view.height() == 597
    viewer.controller.teardown()


def test_unloading_returns_to_idle(make_pdf) -> None:
    _ensure_qapp()
    viewer = _viewer()
    viewer.load_document(DocumentReference("b1", "Book", str(make_pdf(2))))
    viewer.load_document(None)
    assert viewer.controller.decode_state.is_idle
    assert viewer.controller.slot_count == 0
    assert viewer.controls.page_label.text() == "Page - of -"
    viewer.controller.teardown()


def test_retry_reopens_a_document_that_failed(tmp_path, make_pdf) -> None:
    _ensure_qapp()
    path = tmp_path / "late.pdf"
    path.write_bytes(b"")
    viewer = _viewer()
    viewer.load_document(DocumentReference("b1", "Book", str(path)))
    assert viewer.current_page_name() == "error"

    path.write_bytes(make_pdf(3).read_bytes())
    viewer.retry_button.click()

    assert viewer.current_page_name() == "book"
    assert viewer.controller.decode_state.page_count == 3
    assert viewer.controls.page_label.text() == "Page 1 of 5"
    viewer.controller.teardown()
