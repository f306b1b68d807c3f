from __future__ import annotations

from flipbook.core.decode_state import DecodePhase, DecodeState


def test_constructors_clamp_and_describe() -> None:
    assert DecodeState.idle().phase is DecodePhase.IDLE
    assert DecodeState.loading(150).progress == 100
    assert DecodeState.loading(-3).progress == 0
    ready = DecodeState.ready(4)
    assert ready.is_ready and ready.page_count == 4 and ready.progress == 100
    assert str(ready) == "Ready(4)"
    assert str(DecodeState.loading(25)) == "Loading(25)"
    assert DecodeState.failed("").reason == "Unknown error"


def test_forward_transitions_are_allowed() -> None:
    idle = DecodeState.idle()
    assert idle.can_transition_to(DecodeState.loading(0))
    assert DecodeState.loading(10).can_transition_to(DecodeState.loading(10))
    assert DecodeState.loading(10).can_transition_to(DecodeState.loading(90))
    assert DecodeState.loading(90).can_transition_to(DecodeState.ready(3))
    assert DecodeState.loading(90).can_transition_to(DecodeState.failed("x"))
    assert DecodeState.ready(3).can_transition_to(DecodeState.ready(5))


def test_backward_transitions_are_rejected() -> None:
    assert not DecodeState.loading(50).can_transition_to(DecodeState.loading(40))
    assert not DecodeState.idle().can_transition_to(DecodeState.ready(1))
    assert not DecodeState.ready(1).can_transition_to(DecodeState.loading(0))
    assert not DecodeState.failed("x").can_transition_to(DecodeState.loading(0))
    assert not DecodeState.failed("x").can_transition_to(DecodeState.ready(1))


def test_any_state_may_reset_to_idle() -> None:
    for state in (
        DecodeState.loading(30),
        DecodeState.ready(2),
        DecodeState.failed("boom"),
    ):
        assert state.can_transition_to(DecodeState.idle())
