from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DecodePhase(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class DecodeState:
    """Loading status of the current document.

    ``progress`` is only meaningful while loading (0..100), ``page_count``
    only once ready and ``reason`` only once failed.
    """

    phase: DecodePhase = DecodePhase.IDLE
    progress: int = 0
    page_count: int = 0
    reason: str = ""

    @classmethod
    def idle(cls) -> "DecodeState":
        return cls()

    @classmethod
    def loading(cls, progress: int = 0) -> "DecodeState":
        return cls(DecodePhase.LOADING, progress=max(0, min(100, int(progress))))

    @classmethod
    def ready(cls, page_count: int) -> "DecodeState":
        return cls(DecodePhase.READY, progress=100, page_count=max(0, int(page_count)))

    @classmethod
    def failed(cls, reason: str) -> "DecodeState":
        return cls(DecodePhase.FAILED, reason=str(reason or "Unknown error"))

    @property
    def is_idle(self) -> bool:
        return self.phase is DecodePhase.IDLE

    @property
    def is_loading(self) -> bool:
        return self.phase is DecodePhase.LOADING

    @property
    def is_ready(self) -> bool:
        return self.phase is DecodePhase.READY

    @property
    def is_failed(self) -> bool:
        return self.phase is DecodePhase.FAILED

    def can_transition_to(self, new: "DecodeState") -> bool:
        """Only forward moves are allowed; resetting to idle always is."""
        if new.is_idle:
            return True
        if self.is_idle:
            return new.is_loading
        if self.is_loading:
            if new.is_loading:
                return new.progress >= self.progress
            return new.is_ready or new.is_failed
        if self.is_ready:
            # Lazy documents may report more pages after the first count.
            return new.is_ready
        return False

    def __str__(self) -> str:
        if self.is_loading:
            return f"Loading({self.progress})"
        if self.is_ready:
            return f"Ready({self.page_count})"
        if self.is_failed:
            return f"Failed({self.reason})"
        return "Idle"
