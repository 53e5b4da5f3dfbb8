"""
This file contains custom, application-specific exceptions.
"""

class SchedulerError(Exception):
    """Base class for every error raised by the scheduling domain."""
    pass

class UnauthorizedError(SchedulerError):
    """Raised when a request carries no usable identity."""
    pass

class NotFoundError(SchedulerError):
    """Raised when a referenced tutor, invitation or profile does not exist."""
    pass

class InvalidPatternError(SchedulerError):
    """Raised when a recurring pattern fails validation."""
    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors))

class PersistenceFailure(SchedulerError):
    """Raised when a storage write fails."""
    pass

class NotificationFailure(SchedulerError):
    """Raised when an email could not be delivered. Never fatal to the caller."""
    def __init__(self, recipient: str, reason: str):
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Failed to notify {recipient}: {reason}")
