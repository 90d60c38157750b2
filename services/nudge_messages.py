"""
Nudge message selection for trial users
"""
from typing import Optional

from config.settings import NUDGE_URGENT_DAYS_LEFT
from models.trial import NudgeType


def get_nudge_message(nudge_type: NudgeType, days_remaining: int) -> Optional[str]:
    """
    Get the nudge message for a trial phase.

    The day40 phase covers both the late reminder and the urgent countdown;
    which one is shown depends on days_remaining, not on the phase.

    Args:
        nudge_type: Phase derived by TrialService.get_trial_status
        days_remaining: Whole days left in the trial

    Returns:
        Message text, or None when no nudge should be shown

    Raises:
        ValueError: If nudge_type is not a known NudgeType
    """
    nudge_type = NudgeType(nudge_type)

    if nudge_type is NudgeType.NONE:
        return None

    if nudge_type is NudgeType.DAY7:
        return (
            "You're getting the hang of it! You've explored manuals, found parts, "
            "and connected with the community. Keep discovering!"
        )

    if nudge_type is NudgeType.DAY21:
        return (
            "Look what you've accomplished! You've accessed technical guides, saved your "
            "favorite procedures, and helped fellow owners. The community is better with you here."
        )

    if nudge_type is NudgeType.DAY40:
        if days_remaining <= NUDGE_URGENT_DAYS_LEFT:
            return (
                f"Only {days_remaining} days left in your trial! Don't lose access to workshop "
                f"manuals, wiring diagrams, and expert support. Upgrade now to keep your vehicle "
                f"running smoothly."
            )
        return (
            f"Your trial ends in {days_remaining} days. Ready to continue? Join hundreds of "
            f"owners who rely on our premium features daily."
        )

    if nudge_type is NudgeType.EXPIRED:
        return (
            "Your free trial has ended. Upgrade now to regain access to premium manuals, "
            "technical diagrams, and priority support. No long-term commitment required."
        )

    raise ValueError(f"Unhandled nudge type: {nudge_type}")
