from __future__ import annotations

from typing import Optional

from qtpy import QtCore, QtGui, QtWidgets

from flipbook.core.catalog import DocumentReference
from flipbook.core.decode_state import DecodeState
from flipbook.core.decoder import EAGER
from flipbook.core.settings import ViewerSettings
from flipbook.gui.viewer_controller import ViewerController
from flipbook.gui.widgets.flipbook_controls import FlipbookControlsWidget
from flipbook.gui.widgets.flipbook_view import FlipbookView

_LOADING_PAGE = 0
_ERROR_PAGE = 1
_BOOK_PAGE = 2


class _BookArea(QtWidgets.QWidget):
    """Container whose size drives the page layout; keeps the book centered.

    Children are placed by hand so the fixed-size book never props the
    container open when the window shrinks.
    """

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setSizePolicy(
            QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Expanding
        )
        self.setMinimumSize(1, 1)

    def recenter(self, *_args) -> None:
        for child in self.findChildren(
            QtWidgets.QWidget, options=QtCore.Qt.FindDirectChildrenOnly
        ):
            x = max(0, (self.width() - child.width()) // 2)
            y = max(0, (self.height() - child.height()) // 2)
            child.move(x, y)

    def resizeEvent(self, event: QtGui.QResizeEvent) -> None:  # noqa: N802 - Qt override
        super().resizeEvent(event)
        self.recenter()


class FlipbookViewerWidget(QtWidgets.QWidget):
    """Loading/error/book pages around a :class:`FlipbookView`."""

    def __init__(
        self,
        settings: Optional[ViewerSettings] = None,
        parent: Optional[QtWidgets.QWidget] = None,
        controller: Optional[ViewerController] = None,
    ) -> None:
        super().__init__(parent)
        self.controller = controller or ViewerController(settings, parent=self)
        self._build_ui()
        self.controller.decode_state_changed.connect(self._on_decode_state)
        self.controller.position_changed.connect(self.controls.set_page_info)
        self.controller.slots_changed.connect(self._on_slots_changed)
        self.controls.previous_requested.connect(self.controller.previous_page)
        self.controls.next_requested.connect(self.controller.next_page)
        self.view.previous_requested.connect(self.controller.previous_page)
        self.view.next_requested.connect(self.controller.next_page)
        self.controller.attach(self.book_area)
        self._on_decode_state(self.controller.decode_state)

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        self._stack = QtWidgets.QStackedWidget(self)

        loading = QtWidgets.QWidget(self._stack)
        loading_layout = QtWidgets.QVBoxLayout(loading)
        loading_layout.addStretch(1)
        self.loading_label = QtWidgets.QLabel("Loading PDF...", loading)
        self.loading_label.setAlignment(QtCore.Qt.AlignCenter)
        self.loading_label.setStyleSheet("color: #64748b;")
        self.progress_bar = QtWidgets.QProgressBar(loading)
        self.progress_bar.setRange(0, 100)
        self.progress_bar.setMaximumWidth(320)
        loading_layout.addWidget(self.loading_label)
        loading_layout.addWidget(self.progress_bar, alignment=QtCore.Qt.AlignHCenter)
        loading_layout.addStretch(1)

        error = QtWidgets.QWidget(self._stack)
        error_layout = QtWidgets.QVBoxLayout(error)
        error_layout.addStretch(1)
        title = QtWidgets.QLabel("Failed to load PDF", error)
        title.setAlignment(QtCore.Qt.AlignCenter)
        title.setStyleSheet("color: #ef4444;")
        self.error_label = QtWidgets.QLabel("", error)
        self.error_label.setAlignment(QtCore.Qt.AlignCenter)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet("color: #f87171;")
        self.retry_button = QtWidgets.QPushButton("Try again", error)
        self.retry_button.setFocusPolicy(QtCore.Qt.NoFocus)
        self.retry_button.clicked.connect(self.controller.reload)
        error_layout.addWidget(title)
        error_layout.addWidget(self.error_label)
        error_layout.addWidget(self.retry_button, alignment=QtCore.Qt.AlignHCenter)
        error_layout.addStretch(1)

        book = QtWidgets.QWidget(self._stack)
        book_layout = QtWidgets.QVBoxLayout(book)
        book_layout.setContentsMargins(0, 0, 0, 0)
        self.book_area = _BookArea(book)
        self.view = FlipbookView(self.controller, self.book_area)
        self.controller.dimensions_changed.connect(self.book_area.recenter)
        self.controls = FlipbookControlsWidget(book)
        book_layout.addWidget(self.book_area, 1)
        book_layout.addWidget(self.controls)

        self._stack.addWidget(loading)
        self._stack.addWidget(error)
        self._stack.addWidget(book)
        layout.addWidget(self._stack)
        self.setFocusPolicy(QtCore.Qt.StrongFocus)

    def load_document(self, reference: Optional[DocumentReference]) -> None:
        self.controller.set_document(reference)

    def current_page_name(self) -> str:
        return ("loading", "error", "book")[self._stack.currentIndex()]

    def _on_decode_state(self, state: DecodeState) -> None:
        if state.is_ready:
            self._stack.setCurrentIndex(_BOOK_PAGE)
            self.controls.setVisible(True)
            self.controls.set_page_info(
                self.controller.position, self.controller.slot_count
            )
            return
        self.controls.setVisible(False)
        if state.is_failed:
            self.error_label.setText(state.reason)
            self._stack.setCurrentIndex(_ERROR_PAGE)
            return
        self._stack.setCurrentIndex(_LOADING_PAGE)
        if self.controller.decoder.strategy == EAGER:
            self.progress_bar.setRange(0, 100)
            self.progress_bar.setValue(state.progress)
        else:
            # Busy indicator while the document opens.
            self.progress_bar.setRange(0, 0)

    def _on_slots_changed(self, count: int) -> None:
        self.controls.set_page_info(self.controller.position, count)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # pragma: no cover - GUI cleanup
        self.controller.teardown()
        super().closeEvent(event)
