import pytest

from clinicbook.application.status import AppointmentStatus, clean_text, ensure_transition
from clinicbook.exceptions import InvalidParameterError, InvalidTransitionError

S = AppointmentStatus


@pytest.mark.parametrize(
    "current,target",
    [
        (S.BOOKED, S.CHECKED_IN),
        (S.BOOKED, S.CANCELLED),
        (S.BOOKED, S.NO_SHOW),
        (S.CHECKED_IN, S.COMPLETED),
        (S.CHECKED_IN, S.CANCELLED),
    ],
)
def test_allowed_transitions(current, target):
    ensure_transition(current.value, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (S.BOOKED, S.COMPLETED),
        (S.BOOKED, S.BOOKED),
        (S.CHECKED_IN, S.NO_SHOW),
        (S.CHECKED_IN, S.BOOKED),
    ],
)
def test_illegal_transitions(current, target):
    with pytest.raises(InvalidTransitionError):
        ensure_transition(current.value, target)


@pytest.mark.parametrize("terminal", [S.COMPLETED, S.CANCELLED, S.NO_SHOW])
def test_terminal_states_reject_everything(terminal):
    for target in S:
        with pytest.raises(InvalidTransitionError):
            ensure_transition(terminal.value, target)


def test_clean_text():
    assert clean_text(None, "reason", 10) is None
    assert clean_text("   ", "reason", 10) is None
    assert clean_text("  back pain ", "reason", 10) == "back pain"
    with pytest.raises(InvalidParameterError):
        clean_text("x" * 11, "reason", 10)
