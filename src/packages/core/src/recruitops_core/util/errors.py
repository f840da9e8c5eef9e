"""Error types shared by the core, the API and the worker."""


class RecruitOpsError(Exception):
    """Base class for expected, caller-facing errors."""


class ValidationError(RecruitOpsError):
    """Request rejected before any state was written."""


class NotFoundError(RecruitOpsError):
    """Requested record does not exist."""


class UnknownActionTypeError(ValidationError):
    """No executor is registered for the requested action type."""

    def __init__(self, action_type: str):
        super().__init__(f"Unknown action type: {action_type}")
        self.action_type = action_type


class QueueUnavailableError(RecruitOpsError):
    """The message broker could not accept work."""
