from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

COVER_HINT = "Click or swipe to turn pages"
BACK_COVER_TITLE = "End"
BACK_COVER_HINT = "Thank you for reading"


class PageSlotKind(Enum):
    """What a flip unit of the book shows."""
    COVER = auto()
    CONTENT = auto()
    BACK_COVER = auto()


@dataclass(frozen=True)
class PageSlot:
    kind: PageSlotKind
    # Zero-based index into the decoded document, only set for content.
    page_index: Optional[int] = None
    title: str = ""
    subtitle: str = ""

    @property
    def page_number(self) -> Optional[int]:
        if self.page_index is None:
            return None
        return self.page_index + 1


def slot_count(page_count: int) -> int:
    return max(0, int(page_count)) + 2


def build_slots(title: str, page_count: int) -> List[PageSlot]:
    """Cover, one slot per decoded page in order, then the back cover."""
    slots = [PageSlot(PageSlotKind.COVER, title=title, subtitle=COVER_HINT)]
    slots.extend(
        PageSlot(PageSlotKind.CONTENT, page_index=index)
        for index in range(max(0, int(page_count)))
    )
    slots.append(
        PageSlot(
            PageSlotKind.BACK_COVER,
            title=BACK_COVER_TITLE,
            subtitle=BACK_COVER_HINT,
        )
    )
    return slots


def page_index_for_slot(slot_index: int, page_count: int) -> Optional[int]:
    """Map a slot position to its decoded page index, None for covers."""
    if 1 <= slot_index <= page_count:
        return slot_index - 1
    return None
