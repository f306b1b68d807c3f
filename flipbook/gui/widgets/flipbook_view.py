from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from qtpy import QtCore, QtGui, QtWidgets

from flipbook.core.decoder import EAGER, PageFailure, PageSurfaceData
from flipbook.core.flip_engine import Transition
from flipbook.core.layout import PageDimensions
from flipbook.gui.widgets.page_surface import render_surface

SHADOW_COLOR = QtGui.QColor(0, 0, 0, 128)


class FlipbookView(QtWidgets.QWidget):
    """Paints the open spread and animates page turns.

    The left page shows slot ``position - 1`` and the right page slot
    ``position``. Clicking the right or left half, or dragging past the
    swipe distance, requests a turn.
    """

    next_requested = QtCore.Signal()
    previous_requested = QtCore.Signal()

    def __init__(self, controller, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._dimensions = controller.dimensions
        self._images: Dict[int, Tuple[object, QtGui.QImage]] = {}
        self._transition: Optional[Transition] = None
        self._progress = 0.0
        self._finish: Optional[Callable[[], None]] = None
        self._press_pos: Optional[QtCore.QPoint] = None
        self._animation = QtCore.QVariantAnimation(self)
        self._animation.setStartValue(0.0)
        self._animation.setEndValue(1.0)
        self._animation.setEasingCurve(QtCore.QEasingCurve.InOutQuad)
        self._animation.valueChanged.connect(self._on_animation_value)
        self._animation.finished.connect(self._on_animation_finished)
        self.setSizePolicy(QtWidgets.QSizePolicy.Fixed, QtWidgets.QSizePolicy.Fixed)
        self.setCursor(QtCore.Qt.PointingHandCursor)

        controller.dimensions_changed.connect(self._on_dimensions_changed)
        controller.page_updated.connect(self._on_page_updated)
        controller.position_changed.connect(lambda *_: self.update())
        controller.slots_changed.connect(self._on_slots_changed)
        controller.set_animator(self.animate)
        self._apply_size()

    # ---------------------------------------------------------------- sizing
    def _apply_size(self) -> None:
        self.setFixedSize(self._dimensions.spread_width, self._dimensions.height)

    def sizeHint(self) -> QtCore.QSize:  # noqa: N802 - Qt override
        return QtCore.QSize(self._dimensions.spread_width, self._dimensions.height)

    def _on_dimensions_changed(self, width: int, height: int) -> None:
        self._dimensions = PageDimensions(width, height)
        self._images.clear()
        self._apply_size()
        self.update()

    def _on_slots_changed(self, _count: int) -> None:
        # The engine abandons a running turn when the book changes.
        if self._finish is not None:
            self._animation.stop()
            self._finish = None
            self._transition = None
            self._progress = 0.0
        self._images.clear()
        self.update()

    def _on_page_updated(self, page_index: int) -> None:
        self._images.pop(page_index + 1, None)
        self.update()

    # ------------------------------------------------------------- animation
    def animate(self, transition: Transition, finish: Callable[[], None]) -> None:
        """Animator for the flip engine: turn the page, then call ``finish``."""
        duration = int(self._controller.settings.flip.duration_ms)
        if self._finish is not None:
            self._animation.stop()
        self._transition = transition
        self._finish = finish
        self._progress = 0.0
        if duration <= 0 or not self.isVisible():
            self._on_animation_finished()
            return
        self._animation.setDuration(duration)
        self._animation.start()

    def _on_animation_value(self, value) -> None:
        self._progress = float(value)
        self.update()

    def _on_animation_finished(self) -> None:
        finish, self._finish = self._finish, None
        self._transition = None
        self._progress = 0.0
        if finish is not None:
            finish()
        self.update()

    # --------------------------------------------------------------- images
    def _slot_image(self, slot_index: int) -> Optional[QtGui.QImage]:
        slot = self._controller.slot(slot_index)
        if slot is None:
            return None
        data = self._controller.page_result(slot_index)
        key = data if isinstance(data, (PageSurfaceData, PageFailure)) else None
        cached = self._images.get(slot_index)
        if cached is not None and cached[0] is key:
            return cached[1]
        allow_upscale = self._controller.decoder.strategy != EAGER
        image = render_surface(slot, data, self._dimensions, allow_upscale=allow_upscale)
        self._images[slot_index] = (key, image)
        return image

    # -------------------------------------------------------------- painting
    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # noqa: N802 - Qt override
        painter = QtGui.QPainter(self)
        try:
            painter.setRenderHint(QtGui.QPainter.SmoothPixmapTransform, True)
            if self._transition is None:
                position = self._controller.position
                self._paint_page(painter, position - 1, left=True)
                self._paint_page(painter, position, left=False)
            else:
                self._paint_turn(painter)
            self._paint_spine(painter)
        finally:
            painter.end()

    def _page_rect(self, left: bool) -> QtCore.QRectF:
        width = float(self._dimensions.width)
        return QtCore.QRectF(0.0 if left else width, 0.0, width, float(self._dimensions.height))

    def _paint_page(self, painter: QtGui.QPainter, slot_index: int, left: bool) -> None:
        image = self._slot_image(slot_index)
        if image is not None:
            painter.drawImage(self._page_rect(left), image)

    def _paint_turn(self, painter: QtGui.QPainter) -> None:
        transition = self._transition
        forward = transition.direction > 0
        source, target = transition.from_position, transition.to_position
        # Pages uncovered underneath the turning leaf.
        if forward:
            self._paint_page(painter, source - 1, left=True)
            self._paint_page(painter, target, left=False)
        else:
            self._paint_page(painter, target - 1, left=True)
            self._paint_page(painter, source, left=False)

        width = float(self._dimensions.width)
        height = float(self._dimensions.height)
        first_half = self._progress < 0.5
        squeeze = 1.0 - self._progress * 2 if first_half else self._progress * 2 - 1.0
        leaf_width = max(1.0, width * squeeze)
        if forward:
            slot_index = source if first_half else target - 1
            x = width if first_half else width - leaf_width
        else:
            slot_index = source - 1 if first_half else target
            x = width - leaf_width if first_half else width
        image = self._slot_image(slot_index)
        leaf = QtCore.QRectF(x, 0.0, leaf_width, height)
        if image is not None:
            painter.drawImage(leaf, image)
        shade = QtGui.QColor(SHADOW_COLOR)
        shade.setAlphaF(SHADOW_COLOR.alphaF() * (1.0 - squeeze))
        painter.fillRect(leaf, shade)

    def _paint_spine(self, painter: QtGui.QPainter) -> None:
        x = float(self._dimensions.width)
        gradient = QtGui.QLinearGradient(x - 8, 0, x + 8, 0)
        gradient.setColorAt(0.0, QtGui.QColor(0, 0, 0, 0))
        gradient.setColorAt(0.5, QtGui.QColor(0, 0, 0, 60))
        gradient.setColorAt(1.0, QtGui.QColor(0, 0, 0, 0))
        painter.fillRect(
            QtCore.QRectF(x - 8, 0, 16, float(self._dimensions.height)),
            QtGui.QBrush(gradient),
        )

    # ----------------------------------------------------------------- input
    def mousePressEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: N802 - Qt override
        if event.button() == QtCore.Qt.LeftButton:
            self._press_pos = event.pos()
        super().mousePressEvent(event)

    def mouseReleaseEvent(self, event: QtGui.QMouseEvent) -> None:  # noqa: N802 - Qt override
        press, self._press_pos = self._press_pos, None
        if press is None or event.button() != QtCore.Qt.LeftButton:
            super().mouseReleaseEvent(event)
            return
        self._request_from_gesture(press.x(), event.pos().x())
        event.accept()

    def _request_from_gesture(self, press_x: float, release_x: float) -> None:
        delta = release_x - press_x
        swipe = int(self._controller.settings.flip.swipe_distance)
        if abs(delta) >= swipe:
            # Dragging the page to the left turns forward.
            if delta < 0:
                self.next_requested.emit()
            else:
                self.previous_requested.emit()
            return
        if release_x >= self._dimensions.width:
            self.next_requested.emit()
        else:
            self.previous_requested.emit()
