from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from qtpy import QtCore, QtGui, QtWidgets

from flipbook.configs import DEFAULT_CATALOG
from flipbook.core.catalog import Book, Catalog, DocumentReference
from flipbook.core.settings import ViewerSettings
from flipbook.gui.application import create_qapp
from flipbook.gui.cli import parse_cli
from flipbook.gui.widgets.flipbook_viewer import FlipbookViewerWidget
from flipbook.gui.widgets.library_view import LibraryView
from flipbook.utils.logger import __appname__, logger
from flipbook.version import __version__

_LIBRARY_PAGE = 0
_DOCUMENT_PAGE = 1


def load_catalog(settings: ViewerSettings) -> Catalog:
    catalog_file = settings.catalog or DEFAULT_CATALOG
    try:
        return Catalog.from_yaml(catalog_file, base_dir=settings.library_dir)
    except (OSError, ValueError) as exc:
        logger.error("Failed to load catalog %s: %s", catalog_file, exc)
        return Catalog()


def reference_for_path(location: str) -> DocumentReference:
    """Reference for a document opened directly from the command line."""
    name = Path(location.split("?", 1)[0]).stem or location
    return DocumentReference(id=location, title=name, source_location=location)


class FlipbookWindow(QtWidgets.QMainWindow):
    """Library list and single-document page."""

    def __init__(
        self,
        config: Optional[dict] = None,
        catalog: Optional[Catalog] = None,
    ) -> None:
        super().__init__()
        self.settings = ViewerSettings.from_config(config)
        self.catalog = catalog if catalog is not None else load_catalog(self.settings)
        self.setWindowTitle(__appname__.capitalize())
        self.resize(1280, 900)

        self._stack = QtWidgets.QStackedWidget(self)
        self.library = LibraryView(self.catalog, self._stack)
        self.library.book_selected.connect(self.open_book)
        self._stack.addWidget(self.library)
        self._stack.addWidget(self._build_document_page())
        self.setCentralWidget(self._stack)

        back = QtWidgets.QAction(self.tr("Back to library"), self)
        back.setShortcut(QtGui.QKeySequence(QtCore.Qt.Key_Escape))
        back.triggered.connect(self.show_library)
        self.addAction(back)

    def _build_document_page(self) -> QtWidgets.QWidget:
        page = QtWidgets.QWidget(self._stack)
        layout = QtWidgets.QVBoxLayout(page)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(6)

        header = QtWidgets.QHBoxLayout()
        self.back_button = QtWidgets.QPushButton(self.tr("← Library"), page)
        self.back_button.setFocusPolicy(QtCore.Qt.NoFocus)
        self.back_button.clicked.connect(self.show_library)
        self.title_label = QtWidgets.QLabel("", page)
        font = self.title_label.font()
        font.setPointSizeF(font.pointSizeF() * 1.4)
        font.setBold(True)
        self.title_label.setFont(font)
        header.addWidget(self.back_button)
        header.addWidget(self.title_label, 1)
        layout.addLayout(header)

        self.byline_label = QtWidgets.QLabel("", page)
        self.byline_label.setStyleSheet("color: #64748b;")
        self.description_label = QtWidgets.QLabel("", page)
        self.description_label.setWordWrap(True)
        self.tags_label = QtWidgets.QLabel("", page)
        self.tags_label.setStyleSheet("color: #475569;")
        layout.addWidget(self.byline_label)
        layout.addWidget(self.description_label)
        layout.addWidget(self.tags_label)

        self.viewer = FlipbookViewerWidget(self.settings, page)
        layout.addWidget(self.viewer, 1)
        return page

    def open_book(self, book_id: str) -> bool:
        book = self.catalog.get_book(book_id)
        if book is None:
            logger.warning("Unknown book id: %s", book_id)
            return False
        self._show_document(book.reference(), book)
        return True

    def open_location(self, location: str) -> None:
        self._show_document(reference_for_path(location), None)

    def _show_document(self, reference: DocumentReference, book: Optional[Book]) -> None:
        self.title_label.setText(reference.title)
        self.byline_label.setText(book.byline if book is not None else "")
        self.description_label.setText(book.description if book is not None else "")
        self.tags_label.setText(", ".join(book.tags) if book is not None else "")
        self.setWindowTitle(f"{reference.title} - {__appname__.capitalize()}")
        self._stack.setCurrentIndex(_DOCUMENT_PAGE)
        self.viewer.load_document(reference)
        self.viewer.setFocus()

    def show_library(self) -> None:
        self.viewer.load_document(None)
        self.setWindowTitle(__appname__.capitalize())
        self._stack.setCurrentIndex(_LIBRARY_PAGE)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # pragma: no cover - GUI cleanup
        self.viewer.controller.teardown()
        super().closeEvent(event)


def main(argv=None):
    config, namespace, version_requested = parse_cli(argv)
    if version_requested:
        print(__version__)
        return 0

    qt_args = sys.argv if argv is None else [sys.argv[0], *argv]
    app = create_qapp(qt_args)
    app.setApplicationName(__appname__)

    win = FlipbookWindow(config=config)
    win.show()
    win.raise_()
    if namespace.document:
        win.open_location(namespace.document)
    elif namespace.book:
        win.open_book(namespace.book)
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
