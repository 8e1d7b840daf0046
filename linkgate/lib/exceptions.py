"""Exception hierarchy for linkgate.

Policy denials are never raised: they are returned as advisories. The
exceptions below cover infrastructure failures and errors whose message may
be shown to the end user.
"""


class LinkException(Exception):
    """Base exception for internal failures. Its message is never shown to end users."""


class StoreUnavailableError(LinkException):
    """A backing store (database or cooldown store) could not be read or written."""


class LinkDisplayableException(LinkException):
    """
    Exception whose message is safe to show to the end user.
    
    Args:
        message: User-facing message
        is_end_user_at_fault: True if the request itself was wrong (client error)
    """
    
    def __init__(self, message: str, is_end_user_at_fault: bool):
        super().__init__(message)
        self.message = message
        self.is_end_user_at_fault = is_end_user_at_fault
