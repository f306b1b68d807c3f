"""Flip position state machine.

The engine owns the current slot index of the book and serialises
navigation intents against the page-turn animation. It does not animate
anything itself: an *animator* callable receives each transition together
with a ``finish`` callback and calls it when the visual turn is done. The
default animator finishes immediately.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from flipbook.core.subscriptions import Signal
from flipbook.utils.logger import logger

DoneCallback = Callable[[bool, int], None]


@dataclass(frozen=True)
class Transition:
    from_position: int
    to_position: int

    @property
    def direction(self) -> int:
        return 1 if self.to_position > self.from_position else -1


@dataclass
class _Intent:
    kind: str  # "next" | "prev" | "jump"
    target: int = 0
    on_done: Optional[DoneCallback] = None

    def resolve(self, completed: bool, position: int) -> None:
        callback, self.on_done = self.on_done, None
        if callback is not None:
            callback(completed, position)


def _finish_immediately(_transition: Transition, finish: Callable[[], None]) -> None:
    finish()


class FlipEngine:
    """Current-slot owner for a book of ``slot_count`` slots.

    Signals (callbacks registered with ``connect``):

    - ``transition_started(from_position, to_position)``
    - ``position_changed(position, slot_count)``
    - ``slot_count_changed(slot_count)``

    An intent arriving while a turn is animating is queued; a later intent
    replaces the queued one (last wins) and the replaced intent's callback
    is resolved with ``completed=False``. Every accepted intent resolves its
    callback exactly once.
    """

    def __init__(
        self,
        slot_count: int,
        start_position: int = 0,
        animator: Optional[Callable[[Transition, Callable[[], None]], None]] = None,
    ) -> None:
        self._slot_count = max(1, int(slot_count))
        self._position = self._clamp(start_position)
        self._animator = animator or _finish_immediately
        self._transition: Optional[Transition] = None
        self._active: Optional[_Intent] = None
        self._queued: Optional[_Intent] = None
        self.transition_started = Signal()
        self.position_changed = Signal()
        self.slot_count_changed = Signal()

    # ------------------------------------------------------------------ state
    @property
    def position(self) -> int:
        return self._position

    @property
    def slot_count(self) -> int:
        return self._slot_count

    @property
    def last_position(self) -> int:
        return self._slot_count - 1

    @property
    def transition(self) -> Optional[Transition]:
        return self._transition

    @property
    def is_animating(self) -> bool:
        return self._transition is not None

    def can_flip_prev(self) -> bool:
        return self._position > 0

    def can_flip_next(self) -> bool:
        return self._position < self.last_position

    def set_animator(
        self, animator: Optional[Callable[[Transition, Callable[[], None]], None]]
    ) -> None:
        self._animator = animator or _finish_immediately

    # ------------------------------------------------------------ navigation
    def next(self, on_done: Optional[DoneCallback] = None) -> bool:
        return self._submit(_Intent("next", on_done=on_done))

    def prev(self, on_done: Optional[DoneCallback] = None) -> bool:
        return self._submit(_Intent("prev", on_done=on_done))

    def jump_to(self, position: int, on_done: Optional[DoneCallback] = None) -> bool:
        """Turn to ``position``; out-of-range requests are ignored."""
        try:
            target = int(position)
        except (TypeError, ValueError):
            target = -1
        if not 0 <= target < self._slot_count:
            logger.debug(
                "Ignoring jump to %s outside [0, %d]", position, self.last_position
            )
            if on_done is not None:
                on_done(False, self._position)
            return False
        return self._submit(_Intent("jump", target=target, on_done=on_done))

    def _submit(self, intent: _Intent) -> bool:
        if self._transition is not None:
            if self._queued is not None:
                self._queued.resolve(False, self._position)
            self._queued = intent
            return True
        return self._start(intent)

    def _target_for(self, intent: _Intent) -> Optional[int]:
        if intent.kind == "next":
            target = self._position + 1
        elif intent.kind == "prev":
            target = self._position - 1
        else:
            target = intent.target
        if not 0 <= target < self._slot_count or target == self._position:
            return None
        return target

    def _start(self, intent: _Intent) -> bool:
        target = self._target_for(intent)
        if target is None:
            intent.resolve(intent.kind == "jump" and intent.target == self._position,
                           self._position)
            return False
        transition = Transition(self._position, target)
        self._transition = transition
        self._active = intent
        self.transition_started.emit(transition.from_position, transition.to_position)
        self._animator(transition, lambda: self._finish(transition))
        return True

    def _finish(self, transition: Transition) -> None:
        if self._transition is not transition:
            # Superseded by a reset; the turn has already been resolved.
            return
        self._transition = None
        self._position = transition.to_position
        active, self._active = self._active, None
        queued, self._queued = self._queued, None
        self.position_changed.emit(self._position, self._slot_count)
        if active is not None:
            active.resolve(True, self._position)
        if queued is not None:
            self._submit(queued)

    # ------------------------------------------------------------- resizing
    def _clamp(self, position: int) -> int:
        return max(0, min(int(position), self._slot_count - 1))

    def reset(self, slot_count: int) -> None:
        """Reinitialise for a new slot count.

        The running turn and any queued intent are abandoned (resolved as not
        completed); the position is kept when still valid, else clamped.
        """
        self._transition = None
        active, self._active = self._active, None
        queued, self._queued = self._queued, None
        previous = self._position
        count_changed = max(1, int(slot_count)) != self._slot_count
        self._slot_count = max(1, int(slot_count))
        self._position = self._clamp(previous)
        if active is not None:
            active.resolve(False, self._position)
        if queued is not None:
            queued.resolve(False, self._position)
        if count_changed:
            self.slot_count_changed.emit(self._slot_count)
        if self._position != previous or count_changed:
            self.position_changed.emit(self._position, self._slot_count)
