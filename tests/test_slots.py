from flipbook.core.slots import (
    BACK_COVER_HINT,
    COVER_HINT,
    PageSlotKind,
    build_slots,
    page_index_for_slot,
    slot_count,
)


def test_slots_wrap_pages_in_covers():
    slots = build_slots("Interference", 4)
    assert len(slots) == slot_count(4) == 6
    assert slots[0].kind is PageSlotKind.COVER
    assert slots[0].title == "Interference"
    assert slots[0].subtitle == COVER_HINT
    assert [slot.page_index for slot in slots[1:-1]] == [0, 1, 2, 3]
    assert [slot.page_number for slot in slots[1:-1]] == [1, 2, 3, 4]
    assert slots[-1].kind is PageSlotKind.BACK_COVER
    assert slots[-1].title == "End"
    assert slots[-1].subtitle == BACK_COVER_HINT


def test_single_page_document_has_three_slots():
    slots = build_slots("One", 1)
    assert [slot.kind for slot in slots] == [
        PageSlotKind.COVER,
        PageSlotKind.CONTENT,
        PageSlotKind.BACK_COVER,
    ]


def test_page_index_for_slot_skips_covers():
    assert page_index_for_slot(0, 4) is None
    assert page_index_for_slot(1, 4) == 0
    assert page_index_for_slot(4, 4) == 3
    assert page_index_for_slot(5, 4) is None
