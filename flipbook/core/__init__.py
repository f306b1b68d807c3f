"""Qt-free page layout, decoding and flip-state engine."""
from flipbook.core.catalog import Book, Catalog, DocumentReference
from flipbook.core.decode_state import DecodePhase, DecodeState
from flipbook.core.errors import (
    DecodeCorrupt,
    DecodeTimeout,
    FlipbookError,
    PageDecodeFailed,
    SourceUnavailable,
)
from flipbook.core.flip_engine import FlipEngine, Transition
from flipbook.core.layout import (
    ASPECT_RATIO,
    LayoutBounds,
    PageDimensions,
    PageLayout,
    SizeBounds,
    compute_page_dimensions,
)
from flipbook.core.slots import PageSlot, PageSlotKind, build_slots, slot_count

__all__ = [
    "ASPECT_RATIO",
    "Book",
    "Catalog",
    "DecodeCorrupt",
    "DecodePhase",
    "DecodeState",
    "DecodeTimeout",
    "DocumentReference",
    "FlipEngine",
    "FlipbookError",
    "LayoutBounds",
    "PageDecodeFailed",
    "PageDimensions",
    "PageLayout",
    "PageSlot",
    "PageSlotKind",
    "SizeBounds",
    "SourceUnavailable",
    "Transition",
    "build_slots",
    "compute_page_dimensions",
    "slot_count",
]
