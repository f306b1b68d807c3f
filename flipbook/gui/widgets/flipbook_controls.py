from __future__ import annotations

from qtpy import QtCore, QtWidgets

NAVIGATION_HINT = "Use arrow keys or click page edges to navigate"


class FlipbookControlsWidget(QtWidgets.QWidget):
    """Previous/Next buttons with a "Page X of Y" label."""

    previous_requested = QtCore.Signal()
    next_requested = QtCore.Signal()

    def __init__(self, parent: QtWidgets.QWidget | None = None) -> None:
        super().__init__(parent)
        self._build_ui()

    def _build_ui(self) -> None:
        outer = QtWidgets.QVBoxLayout(self)
        outer.setContentsMargins(8, 8, 8, 8)
        outer.setSpacing(6)

        nav_row = QtWidgets.QHBoxLayout()
        nav_row.setSpacing(16)
        self.prev_button = QtWidgets.QPushButton("Previous", self)
        self.prev_button.setFocusPolicy(QtCore.Qt.NoFocus)
        self.prev_button.clicked.connect(self.previous_requested.emit)

        self.page_label = QtWidgets.QLabel("Page - of -", self)
        self.page_label.setMinimumWidth(110)
        self.page_label.setAlignment(QtCore.Qt.AlignCenter)

        self.next_button = QtWidgets.QPushButton("Next", self)
        self.next_button.setFocusPolicy(QtCore.Qt.NoFocus)
        self.next_button.clicked.connect(self.next_requested.emit)

        nav_row.addStretch(1)
        nav_row.addWidget(self.prev_button)
        nav_row.addWidget(self.page_label)
        nav_row.addWidget(self.next_button)
        nav_row.addStretch(1)
        outer.addLayout(nav_row)

        self.hint_label = QtWidgets.QLabel(NAVIGATION_HINT, self)
        self.hint_label.setAlignment(QtCore.Qt.AlignCenter)
        self.hint_label.setStyleSheet("color: #64748b;")
        outer.addWidget(self.hint_label)

        self.setSizePolicy(
            QtWidgets.QSizePolicy.Preferred,
            QtWidgets.QSizePolicy.Maximum,
        )

    def set_page_info(self, position: int, total: int) -> None:
        """Update the label and button states for slot ``position`` of ``total``."""
        if total <= 0:
            self.page_label.setText("Page - of -")
            self.prev_button.setEnabled(False)
            self.next_button.setEnabled(False)
            return
        current = max(0, min(position, total - 1))
        self.page_label.setText(f"Page {current + 1} of {total}")
        self.prev_button.setEnabled(current > 0)
        self.next_button.setEnabled(current < total - 1)
