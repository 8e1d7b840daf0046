"""Ban validity checks."""

from datetime import datetime
from typing import Iterable, Optional

from ..models.ban import Ban


def is_ban_active(ban: Ban, now: datetime) -> bool:
    """
    Check whether a ban currently applies.
    
    Args:
        ban: Ban to check
        now: Current time. Use the same value for every ban evaluated in one decision.
        
    Returns:
        True if the ban never expires or has not expired yet
    """
    return ban.expires_at is None or now < ban.expires_at


def first_active_ban(bans: Iterable[Ban], now: datetime) -> Optional[Ban]:
    """
    Select the ban to report among a user's bans.
    
    Bans are considered most recently issued first (highest id first on ties),
    so the result does not depend on the order the database returned them in.
    
    Args:
        bans: Bans for one hashed Microsoft ID
        now: Current time
        
    Returns:
        The most recently issued active ban, or None if no ban is active
    """
    ordered = sorted(bans, key=lambda b: (b.issued_at, b.id), reverse=True)
    for ban in ordered:
        if is_ban_active(ban, now):
            return ban
    return None
