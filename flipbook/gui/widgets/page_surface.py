"""Render one book slot into an image of exactly the page size.

``render_surface`` is a pure function of its inputs: the same slot, data
and dimensions always produce the same picture, and nothing here asks for
a relayout.
"""
from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

from qtpy import QtCore, QtGui

from flipbook.core.decoder import PNG, PageFailure, PageResult, PageSurfaceData
from flipbook.core.layout import PageDimensions
from flipbook.core.slots import PageSlot, PageSlotKind

# Gap between the page edge and the page raster.
CONTENT_INSET = 10

COVER_TOP = QtGui.QColor("#1e293b")
COVER_BOTTOM = QtGui.QColor("#0f172a")
COVER_TEXT = QtGui.QColor("#ffffff")
COVER_HINT = QtGui.QColor("#cbd5e1")
PAGE_BACKGROUND = QtGui.QColor("#ffffff")
PENDING_FILL = QtGui.QColor("#e2e8f0")
ERROR_FILL = QtGui.QColor("#fef2f2")
ERROR_BORDER = QtGui.QColor("#ef4444")
ERROR_TEXT = QtGui.QColor("#b91c1c")


def fit_rect(
    source_width: float,
    source_height: float,
    box_width: float,
    box_height: float,
    allow_upscale: bool = True,
) -> Tuple[float, float, float, float]:
    """Return ``(x, y, w, h)`` fitting the source into the box, centered.

    The aspect ratio is preserved; with ``allow_upscale=False`` the source
    is never drawn larger than its native size.
    """
    if source_width <= 0 or source_height <= 0 or box_width <= 0 or box_height <= 0:
        return 0.0, 0.0, 0.0, 0.0
    scale = min(box_width / source_width, box_height / source_height)
    if not allow_upscale:
        scale = min(scale, 1.0)
    width = source_width * scale
    height = source_height * scale
    return (box_width - width) / 2.0, (box_height - height) / 2.0, width, height


def surface_to_image(data: PageSurfaceData) -> QtGui.QImage:
    if data.encoding == PNG:
        return QtGui.QImage.fromData(data.samples, "PNG")
    fmt = QtGui.QImage.Format_RGBA8888 if data.alpha else QtGui.QImage.Format_RGB888
    return QtGui.QImage(data.samples, data.width, data.height, data.stride, fmt).copy()


def _blank(dimensions: PageDimensions, color: QtGui.QColor) -> QtGui.QImage:
    image = QtGui.QImage(
        max(1, dimensions.width), max(1, dimensions.height), QtGui.QImage.Format_ARGB32
    )
    image.fill(color)
    return image


def _draw_centered_text(
    painter: QtGui.QPainter,
    rect: QtCore.QRectF,
    text: str,
    color: QtGui.QColor,
    point_size: float,
    bold: bool = False,
) -> None:
    if not text:
        return
    font = QtGui.QFont(painter.font())
    font.setPointSizeF(point_size)
    font.setBold(bold)
    painter.setFont(font)
    painter.setPen(color)
    painter.drawText(rect, int(QtCore.Qt.AlignCenter | QtCore.Qt.TextWordWrap), text)


def _render_cover_like(slot: PageSlot, dimensions: PageDimensions) -> QtGui.QImage:
    image = _blank(dimensions, COVER_BOTTOM)
    painter = QtGui.QPainter(image)
    try:
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        painter.setRenderHint(QtGui.QPainter.TextAntialiasing, True)
        gradient = QtGui.QLinearGradient(0, 0, dimensions.width, dimensions.height)
        gradient.setColorAt(0.0, COVER_TOP)
        gradient.setColorAt(1.0, COVER_BOTTOM)
        painter.fillRect(image.rect(), QtGui.QBrush(gradient))
        padding = 32.0
        width = max(1.0, dimensions.width - 2 * padding)
        title_rect = QtCore.QRectF(padding, padding, width, dimensions.height * 0.55 - padding)
        hint_rect = QtCore.QRectF(
            padding, dimensions.height * 0.55, width, dimensions.height * 0.45 - padding
        )
        _draw_centered_text(painter, title_rect, slot.title, COVER_TEXT, 18.0, bold=True)
        _draw_centered_text(painter, hint_rect, slot.subtitle, COVER_HINT, 10.0)
    finally:
        painter.end()
    return image


def _render_content(
    slot: PageSlot,
    data: Optional[PageResult],
    dimensions: PageDimensions,
    allow_upscale: bool,
) -> QtGui.QImage:
    if isinstance(data, PageFailure):
        return _render_error(data, dimensions)
    if not isinstance(data, PageSurfaceData):
        return _render_pending(dimensions)

    image = _blank(dimensions, PAGE_BACKGROUND)
    box_width = dimensions.width - 2 * CONTENT_INSET
    box_height = dimensions.height - 2 * CONTENT_INSET
    x, y, width, height = fit_rect(
        data.width, data.height, box_width, box_height, allow_upscale=allow_upscale
    )
    painter = QtGui.QPainter(image)
    try:
        painter.setRenderHint(QtGui.QPainter.SmoothPixmapTransform, True)
        target = QtCore.QRectF(CONTENT_INSET + x, CONTENT_INSET + y, width, height)
        painter.drawImage(target, surface_to_image(data))
    finally:
        painter.end()
    return image


def _render_pending(dimensions: PageDimensions) -> QtGui.QImage:
    image = _blank(dimensions, PAGE_BACKGROUND)
    painter = QtGui.QPainter(image)
    try:
        painter.fillRect(
            QtCore.QRectF(
                CONTENT_INSET,
                CONTENT_INSET,
                max(0, dimensions.width - 2 * CONTENT_INSET),
                max(0, dimensions.height - 2 * CONTENT_INSET),
            ),
            PENDING_FILL,
        )
    finally:
        painter.end()
    return image


def _render_error(failure: PageFailure, dimensions: PageDimensions) -> QtGui.QImage:
    image = _blank(dimensions, ERROR_FILL)
    painter = QtGui.QPainter(image)
    try:
        painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
        pen = QtGui.QPen(ERROR_BORDER)
        pen.setWidth(2)
        painter.setPen(pen)
        painter.drawRect(
            QtCore.QRectF(
                CONTENT_INSET,
                CONTENT_INSET,
                max(0, dimensions.width - 2 * CONTENT_INSET),
                max(0, dimensions.height - 2 * CONTENT_INSET),
            )
        )
        _draw_centered_text(
            painter,
            QtCore.QRectF(0, 0, dimensions.width, dimensions.height),
            error_text(failure),
            ERROR_TEXT,
            11.0,
        )
    finally:
        painter.end()
    return image


def error_text(failure: PageFailure) -> str:
    return f"Page {failure.page_number} could not be rendered"


_Renderer = Callable[[PageSlot, Optional[PageResult], PageDimensions, bool], QtGui.QImage]

_RENDERERS: Dict[PageSlotKind, _Renderer] = {
    PageSlotKind.COVER: lambda slot, _data, dims, _up: _render_cover_like(slot, dims),
    PageSlotKind.CONTENT: _render_content,
    PageSlotKind.BACK_COVER: lambda slot, _data, dims, _up: _render_cover_like(slot, dims),
}


def render_surface(
    slot: PageSlot,
    data: Optional[PageResult],
    dimensions: PageDimensions,
    allow_upscale: bool = True,
) -> QtGui.QImage:
    """Draw ``slot`` at ``dimensions``.

    ``data`` is only used for content slots: a raster is scaled to fit,
    a :class:`PageFailure` draws the error placeholder and anything else
    (pending) draws the neutral placeholder.
    """
    return _RENDERERS[slot.kind](slot, data, dimensions, allow_upscale)
