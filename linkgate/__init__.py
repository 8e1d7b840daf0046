"""linkgate: account-link permission and moderation checks."""

__version__ = "0.1.0"
