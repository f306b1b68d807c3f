from __future__ import annotations

from typing import Optional

from qtpy import QtCore, QtWidgets

from flipbook.core.catalog import Book, Catalog


class LibraryView(QtWidgets.QWidget):
    """Lists the catalog; activating an entry requests that book."""

    book_selected = QtCore.Signal(str)

    def __init__(self, catalog: Catalog, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._catalog = catalog
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(12)

        heading = QtWidgets.QLabel("Library", self)
        font = heading.font()
        font.setPointSizeF(font.pointSizeF() * 1.6)
        font.setBold(True)
        heading.setFont(font)
        layout.addWidget(heading)

        self.book_list = QtWidgets.QListWidget(self)
        self.book_list.setWordWrap(True)
        self.book_list.setSpacing(6)
        self.book_list.itemActivated.connect(self._on_item_activated)
        layout.addWidget(self.book_list, 1)
        self.populate()

    def populate(self) -> None:
        self.book_list.clear()
        for book in self._catalog.books():
            item = QtWidgets.QListWidgetItem(self._item_text(book))
            item.setData(QtCore.Qt.UserRole, book.id)
            item.setToolTip(book.description)
            self.book_list.addItem(item)

    @staticmethod
    def _item_text(book: Book) -> str:
        lines = [book.title]
        if book.byline:
            lines.append(book.byline)
        if book.tags:
            lines.append(", ".join(book.tags))
        return "\n".join(lines)

    def _on_item_activated(self, item: QtWidgets.QListWidgetItem) -> None:
        book_id = item.data(QtCore.Qt.UserRole)
        if book_id:
            self.book_selected.emit(str(book_id))
