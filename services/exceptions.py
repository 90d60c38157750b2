"""
Custom exceptions for trial lifecycle and guardrail services.
"""


class TrialError(Exception):
    """Base exception for trial services."""
    code = "trial_error"


class AlreadyUsedTrial(TrialError):
    """Raised when a user who already started a trial tries to start another."""
    code = "already_used_trial"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("You have already used your free trial. Please upgrade to continue.")


class AlreadySubscribed(TrialError):
    """Raised when a user on a paid tier tries to start a trial."""
    code = "already_subscribed"

    def __init__(self, user_id: str, tier: str):
        self.user_id = user_id
        self.tier = tier
        super().__init__("You already have an active subscription.")


class NoTrialFound(TrialError):
    """Raised when converting a user who never started a trial."""
    code = "no_trial_found"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("No trial found. Please start a free trial first.")


class DownloadLimitExceeded(TrialError):
    """Raised when a user has used up the daily download allowance."""
    code = "download_limit_exceeded"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Daily download limit reached ({limit} per day). "
            f"Upgrade for unlimited downloads."
        )


class StoreUnavailable(TrialError):
    """Raised when the record store cannot complete an operation."""
    code = "store_unavailable"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Record store unavailable during {operation}: {reason}")
