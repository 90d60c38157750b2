import pytest

from models.trial import NudgeType
from services.nudge_messages import get_nudge_message


def test_none_has_no_message():
    assert get_nudge_message(NudgeType.NONE, 30) is None


@pytest.mark.parametrize("nudge_type", [t for t in NudgeType if t is not NudgeType.NONE])
def test_every_phase_has_a_message(nudge_type):
    message = get_nudge_message(nudge_type, 5)

    assert isinstance(message, str)
    assert message


def test_day40_urgent_countdown_at_three_days():
    message = get_nudge_message(NudgeType.DAY40, 3)

    assert message.startswith("Only 3 days left")


def test_day40_calendar_reminder_above_three_days():
    message = get_nudge_message(NudgeType.DAY40, 4)

    assert message.startswith("Your trial ends in 4 days")


def test_accepts_plain_string_values():
    assert get_nudge_message("expired", 0) == get_nudge_message(NudgeType.EXPIRED, 0)


def test_unknown_nudge_type_raises():
    with pytest.raises(ValueError):
        get_nudge_message("day99", 1)
