"""Coordinates layout, decoding and the flip engine for one viewer.

All state lives on the GUI thread. Decode work runs through a task runner;
every result carries the epoch it was started under and is dropped when a
newer document (or teardown) has bumped the epoch since.
"""
from __future__ import annotations

import threading
from typing import List, Optional

from qtpy import QtCore, QtWidgets

from flipbook.core.catalog import DocumentReference
from flipbook.core.decode_state import DecodeState
from flipbook.core.decoder import (
    EAGER,
    PENDING,
    DocumentDecoder,
    DocumentHandle,
    PageFailure,
    PageResult,
)
from flipbook.core.errors import DecodeTimeout, FlipbookError
from flipbook.core.flip_engine import FlipEngine
from flipbook.core.layout import LayoutBounds, PageDimensions, PageLayout
from flipbook.core.settings import ViewerSettings
from flipbook.core.slots import PageSlot, PageSlotKind, build_slots, page_index_for_slot
from flipbook.core.subscriptions import SubscriptionSet
from flipbook.gui.event_filters import listen
from flipbook.gui.workers import ThreadPoolTaskRunner
from flipbook.utils.logger import logger

_TEXT_INPUTS = (
    QtWidgets.QLineEdit,
    QtWidgets.QTextEdit,
    QtWidgets.QPlainTextEdit,
    QtWidgets.QAbstractSpinBox,
)


class _DecodeToken:
    """Cancellation token for one decode; cancels the handle it gets."""

    def __init__(self, epoch: int) -> None:
        self.epoch = epoch
        self._lock = threading.Lock()
        self._cancelled = False
        self._handle: Optional[DocumentHandle] = None

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._cancelled

    def attach(self, handle: DocumentHandle) -> None:
        with self._lock:
            self._handle = handle
            cancelled = self._cancelled
        if cancelled:
            handle.close()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            handle = self._handle
        if handle is not None:
            handle.close()


class ViewerController(QtCore.QObject):
    """Viewer state owner: page size, decode state and flip position."""

    decode_state_changed = QtCore.Signal(object)
    dimensions_changed = QtCore.Signal(int, int)
    position_changed = QtCore.Signal(int, int)
    slots_changed = QtCore.Signal(int)
    transition_started = QtCore.Signal(int, int)
    page_updated = QtCore.Signal(int)

    def __init__(
        self,
        settings: Optional[ViewerSettings] = None,
        task_runner=None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings or ViewerSettings()
        if task_runner is None:
            task_runner = ThreadPoolTaskRunner(self)
        self._runner = task_runner
        self.decoder = DocumentDecoder(self.settings.decoder, scheduler=task_runner)
        self.layout = PageLayout(self.settings.aspect_ratio, self.settings.bounds)
        self._reference: Optional[DocumentReference] = None
        self._handle: Optional[DocumentHandle] = None
        self._token: Optional[_DecodeToken] = None
        self._epoch = 0
        self._state = DecodeState.idle()
        self._slots: List[PageSlot] = []
        self._engine: Optional[FlipEngine] = None
        self._animator = None
        self._resolved_pages: set[int] = set()
        self._subscriptions = SubscriptionSet()
        self._engine_subscriptions = SubscriptionSet()
        self._container: Optional[QtWidgets.QWidget] = None

        self._watchdog = QtCore.QTimer(self)
        self._watchdog.setSingleShot(True)
        self._watchdog.timeout.connect(self._on_decode_timeout)
        self._watchdog_epoch = -1

    # ------------------------------------------------------------ properties
    @property
    def reference(self) -> Optional[DocumentReference]:
        return self._reference

    @property
    def decode_state(self) -> DecodeState:
        return self._state

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def dimensions(self) -> PageDimensions:
        return self.layout.dimensions

    @property
    def slots(self) -> List[PageSlot]:
        return list(self._slots)

    @property
    def engine(self) -> Optional[FlipEngine]:
        return self._engine

    @property
    def position(self) -> int:
        return self._engine.position if self._engine is not None else 0

    @property
    def slot_count(self) -> int:
        return self._engine.slot_count if self._engine is not None else 0

    @property
    def page_count(self) -> int:
        return self._state.page_count if self._state.is_ready else 0

    def can_go_previous(self) -> bool:
        return self._engine is not None and self._engine.can_flip_prev()

    def can_go_next(self) -> bool:
        return self._engine is not None and self._engine.can_flip_next()

    def page_label(self) -> str:
        if self._engine is None:
            return "Page - of -"
        return f"Page {self.position + 1} of {self.slot_count}"

    # -------------------------------------------------------------- document
    def set_document(self, reference: Optional[DocumentReference]) -> None:
        """Start decoding ``reference``, abandoning any decode in flight."""
        self._cancel_decode()
        self._reference = reference
        self._set_state(DecodeState.idle())
        if reference is None:
            return

        epoch = self._epoch
        token = _DecodeToken(epoch)
        self._token = token
        self._set_state(DecodeState.loading(0))
        self._arm_watchdog(epoch)
        logger.info(
            "Decoding %s from %s (%s)",
            reference.id,
            reference.source_location,
            self.decoder.strategy,
        )
        decoder = self.decoder
        source = reference.source_location

        def _job(report):
            handle = decoder.open(source)
            token.attach(handle)
            if handle.cancelled:
                return None
            if decoder.strategy == EAGER:
                decoder.rasterize_all(handle, on_progress=report)
            return handle

        self._runner.submit(
            _job,
            lambda result, error: self._on_open_done(epoch, result, error),
            lambda progress: self._on_progress(epoch, progress),
        )

    def reload(self) -> None:
        """Decode the current document again from scratch."""
        self.set_document(self._reference)

    def _cancel_decode(self) -> None:
        self._epoch += 1
        self._watchdog.stop()
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self._engine_subscriptions.release_all()
        self._resolved_pages.clear()
        had_book = self._engine is not None or bool(self._slots)
        self._engine = None
        self._slots = []
        if had_book:
            self.slots_changed.emit(0)

    def _is_current(self, epoch: int) -> bool:
        return epoch == self._epoch

    def _set_state(self, state: DecodeState) -> None:
        if state == self._state:
            return
        if not self._state.can_transition_to(state):
            logger.debug("Ignoring decode transition %s -> %s", self._state, state)
            return
        self._state = state
        self.decode_state_changed.emit(state)

    def _on_progress(self, epoch: int, progress: int) -> None:
        if not self._is_current(epoch):
            logger.debug("Dropping progress %d from stale decode", progress)
            return
        if self._state.is_loading:
            # The watchdog measures time since the last sign of progress.
            self._arm_watchdog(epoch)
            self._set_state(DecodeState.loading(progress))

    def _on_open_done(
        self,
        epoch: int,
        handle: Optional[DocumentHandle],
        error: Optional[BaseException],
    ) -> None:
        if not self._is_current(epoch):
            logger.debug("Dropping result of stale decode (epoch %d)", epoch)
            if handle is not None:
                handle.close()
            return
        self._watchdog.stop()
        self._token = None
        if error is not None:
            if isinstance(error, FlipbookError):
                reason = str(error)
                logger.error("Failed to load %s: %s", self._source_name(), reason)
            else:
                reason = f"Unexpected error: {error}"
                logger.error(
                    "Failed to load %s", self._source_name(), exc_info=error
                )
            self._set_state(DecodeState.failed(reason))
            return
        if handle is None or handle.cancelled:
            return
        self._handle = handle
        self._engine_subscriptions.add(
            handle.page_decoded.connect(
                lambda index, result: self._on_page_decoded(epoch, index, result)
            )
        )
        self._set_state(DecodeState.ready(handle.page_count))
        self._apply_page_count(handle.page_count)

    def _source_name(self) -> str:
        if self._reference is None:
            return "<none>"
        return self._reference.source_location

    # -------------------------------------------------------------- timeouts
    def _arm_watchdog(self, epoch: int) -> None:
        timeout_s = float(self.settings.decoder.decode_timeout_s)
        self._watchdog_epoch = epoch
        self._watchdog.start(int(timeout_s * 1000))

    def _on_decode_timeout(self) -> None:
        if not self._is_current(self._watchdog_epoch) or not self._state.is_loading:
            return
        timeout_s = self.settings.decoder.decode_timeout_s
        logger.warning(
            "Decoding %s timed out after %s s", self._source_name(), timeout_s
        )
        self._cancel_decode()
        self._set_state(
            DecodeState.failed(str(DecodeTimeout(f"Timed out after {timeout_s:g} s")))
        )

    # ----------------------------------------------------------------- pages
    def _apply_page_count(self, page_count: int) -> None:
        title = self._reference.title if self._reference is not None else ""
        self._slots = build_slots(title, page_count)
        count = len(self._slots)
        if self._engine is None:
            self._engine = FlipEngine(count, 0, animator=self._animator)
            self._engine_subscriptions.add(
                self._engine.position_changed.connect(self._on_engine_position)
            )
            self._engine_subscriptions.add(
                self._engine.transition_started.connect(self._on_engine_transition)
            )
            self.slots_changed.emit(count)
            self._on_engine_position(self._engine.position, count)
        elif self._engine.slot_count != count:
            self.slots_changed.emit(count)
            self._engine.reset(count)

    def refresh_page_count(self) -> None:
        """Pick up a changed page count from the open document."""
        if self._handle is None or not self._state.is_ready:
            return
        page_count = self._handle.refresh_page_count()
        if page_count == self._state.page_count:
            return
        logger.info("Page count of %s changed to %d", self._source_name(), page_count)
        self._set_state(DecodeState.ready(page_count))
        self._apply_page_count(page_count)

    def slot(self, slot_index: int) -> Optional[PageSlot]:
        if 0 <= slot_index < len(self._slots):
            return self._slots[slot_index]
        return None

    def page_result(self, slot_index: int) -> Optional[PageResult]:
        """Decoded data for a content slot; None for covers and unknown slots."""
        slot = self.slot(slot_index)
        if slot is None or slot.kind is not PageSlotKind.CONTENT or self._handle is None:
            return None
        result = self.decoder.get_page(self._handle, slot.page_index)
        if result is PENDING:
            self._resolved_pages.discard(slot.page_index)
        return result

    def _on_page_decoded(self, epoch: int, index: int, result: object) -> None:
        if not self._is_current(epoch):
            logger.debug("Dropping page %d from stale decode", index)
            return
        if index in self._resolved_pages:
            return
        if not isinstance(result, PageFailure):
            self._resolved_pages.add(index)
        self.page_updated.emit(index)

    def visible_slots(self, position: Optional[int] = None) -> List[int]:
        """Slots of the spread whose leading slot is ``position``."""
        if self._engine is None:
            return []
        position = self.position if position is None else position
        return [s for s in (position - 1, position) if 0 <= s < self.slot_count]

    def _prefetch_around(self, position: int) -> None:
        if self._handle is None or self.decoder.strategy == EAGER:
            return
        spread = self.decoder.config.prefetch
        page_count = self._handle.page_count
        wanted = []
        for slot_index in range(position - 1 - spread, position + spread + 1):
            page_index = page_index_for_slot(slot_index, page_count)
            if page_index is not None:
                wanted.append(page_index)
        self.decoder.prefetch(self._handle, wanted)

    def _on_engine_position(self, position: int, count: int) -> None:
        self.position_changed.emit(position, count)
        self._prefetch_around(position)

    def _on_engine_transition(self, from_position: int, to_position: int) -> None:
        self.transition_started.emit(from_position, to_position)
        self._prefetch_around(to_position)

    # ------------------------------------------------------------ navigation
    def set_animator(self, animator) -> None:
        self._animator = animator
        if self._engine is not None:
            self._engine.set_animator(animator)

    def next_page(self) -> bool:
        return self._engine.next() if self._engine is not None else False

    def previous_page(self) -> bool:
        return self._engine.prev() if self._engine is not None else False

    def jump_to(self, position: int) -> bool:
        return self._engine.jump_to(position) if self._engine is not None else False

    def handle_key(self, key: int) -> bool:
        """Map arrow keys to navigation; True when the key was used."""
        if self._engine is None:
            return False
        if key == QtCore.Qt.Key_Left:
            self.previous_page()
            return True
        if key == QtCore.Qt.Key_Right:
            self.next_page()
            return True
        return False

    # ------------------------------------------------------------ listeners
    def set_container_size(self, width: float, height: float) -> PageDimensions:
        previous = self.layout.dimensions
        dimensions = self.layout.update(LayoutBounds(width, height))
        if dimensions != previous:
            self.dimensions_changed.emit(dimensions.width, dimensions.height)
        return dimensions

    def attach(
        self,
        container: QtWidgets.QWidget,
        key_source: Optional[QtCore.QObject] = None,
    ) -> None:
        """Track ``container``'s size and arrow keys until :meth:`teardown`."""
        self._subscriptions.release_all()
        self._container = container
        self._subscriptions.add(
            listen(
                container,
                (QtCore.QEvent.Resize, QtCore.QEvent.Show),
                self._on_container_event,
                name="resize",
            )
        )
        if key_source is None:
            key_source = QtWidgets.QApplication.instance()
        if key_source is not None:
            self._subscriptions.add(
                listen(
                    key_source,
                    (QtCore.QEvent.KeyPress,),
                    self._on_key_event,
                    name="keyboard",
                )
            )
        self.set_container_size(container.width(), container.height())

    def listener_count(self) -> int:
        return len(self._subscriptions)

    def _on_container_event(self, obj: QtCore.QObject, _event: QtCore.QEvent) -> bool:
        if obj is self._container:
            self.set_container_size(self._container.width(), self._container.height())
        return False

    def _on_key_event(self, obj: QtCore.QObject, event: QtCore.QEvent) -> bool:
        if self._container is None or isinstance(obj, _TEXT_INPUTS):
            return False
        if not isinstance(obj, QtWidgets.QWidget):
            return False
        if obj.window() is not self._container.window():
            return False
        if event.modifiers() & (
            QtCore.Qt.ControlModifier | QtCore.Qt.AltModifier | QtCore.Qt.MetaModifier
        ):
            return False
        return self.handle_key(event.key())

    def teardown(self) -> None:
        """Stop decoding and remove every listener this viewer installed."""
        self._subscriptions.release_all()
        self._container = None
        self._cancel_decode()
        self._reference = None
        self._set_state(DecodeState.idle())
