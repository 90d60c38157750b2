"""
Unit tests for trial status derivation (no database)
"""
from datetime import datetime, timedelta

import pytest

from database_models import Profile
from models.trial import NudgeType
from services.trial_service import compute_trial_status, nudge_type_for

NOW = datetime(2024, 6, 15, 12, 0, 0)


def make_profile(started_days_ago: float, tier: str = "trial") -> Profile:
    started = NOW - timedelta(days=started_days_ago)
    return Profile(
        id="user-1",
        subscription_tier=tier,
        trial_started_at=started,
        trial_ends_at=started + timedelta(days=45),
    )


def test_no_profile_is_no_trial():
    status = compute_trial_status(None, NOW)

    assert status.is_active is False
    assert status.days_remaining == 0
    assert status.nudge_type == NudgeType.NONE
    assert status.show_upgrade_prompt is False
    assert status.can_access_premium is False
    assert status.trial_start_date is None
    assert status.trial_end_date is None


def test_profile_without_trial_is_no_trial():
    profile = Profile(id="user-1", subscription_tier="free")

    status = compute_trial_status(profile, NOW)

    assert status.is_active is False
    assert status.nudge_type == NudgeType.NONE
    assert status.can_access_premium is False


def test_nudge_boundary_at_exactly_seven_days():
    assert compute_trial_status(make_profile(7.0), NOW).nudge_type == NudgeType.DAY7
    assert compute_trial_status(make_profile(6.999), NOW).nudge_type == NudgeType.NONE


def test_day_eight_is_day7_without_upgrade_prompt():
    status = compute_trial_status(make_profile(8), NOW)

    assert status.nudge_type == NudgeType.DAY7
    assert status.show_upgrade_prompt is False
    assert status.is_active is True
    assert status.can_access_premium is True
    assert status.days_remaining == 37


@pytest.mark.parametrize("days_elapsed, expected", [
    (0, NudgeType.NONE),
    (20, NudgeType.DAY7),
    (21, NudgeType.DAY21),
    (39, NudgeType.DAY21),
    (40, NudgeType.DAY40),
    (42, NudgeType.DAY40),
    (44, NudgeType.DAY40),
])
def test_nudge_thresholds(days_elapsed, expected):
    assert nudge_type_for(days_elapsed, is_expired=False) == expected


def test_expired_wins_over_elapsed_days():
    assert nudge_type_for(10, is_expired=True) == NudgeType.EXPIRED


def test_upgrade_prompt_from_day_thirty():
    assert compute_trial_status(make_profile(29.5), NOW).show_upgrade_prompt is False
    assert compute_trial_status(make_profile(30), NOW).show_upgrade_prompt is True


def test_expired_trial_clamps_days_remaining_and_keeps_tier():
    profile = make_profile(50)

    status = compute_trial_status(profile, NOW)

    assert status.nudge_type == NudgeType.EXPIRED
    assert status.days_remaining == 0
    assert status.is_active is False
    assert status.can_access_premium is False
    # Expiry is a read-time view only
    assert profile.subscription_tier == "trial"


def test_trial_is_not_expired_at_exact_end():
    profile = make_profile(45)

    status = compute_trial_status(profile, NOW)

    assert status.nudge_type == NudgeType.DAY40
    assert status.days_remaining == 0
    assert status.is_active is True


def test_premium_keeps_access_after_trial_end():
    status = compute_trial_status(make_profile(60, tier="premium"), NOW)

    assert status.can_access_premium is True
    assert status.is_active is False


def test_same_instant_gives_identical_status():
    profile = make_profile(12.25)

    assert compute_trial_status(profile, NOW) == compute_trial_status(profile, NOW)
