"""Unlink cooldown tracking.

Users are prevented from removing their true identity for some time after
certain events, to prevent abuse (e.g. removing one's identity right after
being banned). The cooldown is engaged or refreshed when:

- a ban is issued against the user,
- the user's true identity is accessed.

Refreshing overwrites the previous deadline: repeated events extend the
cooldown instead of stacking it.
"""

from ..lib.clock import Clock, utc_now
from ..lib.config import UNLINK_COOLDOWN_PREFIX
from ..lib.logging import get_logger
from .cooldown_storage import CooldownStorage

logger = get_logger(__name__)


class UnlinkCooldown:
    """Per-user cooldown gating the removal of a true identity."""
    
    def __init__(
        self,
        storage: CooldownStorage,
        duration_seconds: int,
        clock: Clock = utc_now,
        prefix: str = UNLINK_COOLDOWN_PREFIX
    ):
        """
        Initialize unlink cooldown tracker.
        
        Args:
            storage: Key-value store holding cooldown deadlines
            duration_seconds: Cooldown duration in seconds (0 disables the cooldown)
            clock: Time source
            prefix: Prefix for the storage keys
            
        Raises:
            ValueError: If duration_seconds is negative
        """
        if duration_seconds < 0:
            raise ValueError(f"Unlink cooldown duration must be non-negative, got {duration_seconds}")
        self.storage = storage
        self.duration_seconds = duration_seconds
        self.clock = clock
        self.prefix = prefix
    
    def _key(self, user_id: str) -> str:
        return f"{self.prefix}{user_id}"
    
    async def can_unlink(self, user_id: str) -> bool:
        """
        Check whether the user may remove their identity right now.
        
        Args:
            user_id: Discord user ID
            
        Returns:
            True if no cooldown is engaged or it has already ended
        """
        deadline = await self.storage.get(self._key(user_id))
        return deadline is None or deadline <= self.clock()
    
    async def refresh_cooldown(self, user_id: str) -> None:
        """
        Engage the cooldown, or push it back if already engaged.
        
        Args:
            user_id: Discord user ID
        """
        await self.storage.set(self._key(user_id), self.duration_seconds)
        logger.debug("unlink_cooldown_refreshed", user_id=user_id, duration_seconds=self.duration_seconds)
    
    async def delete_cooldown(self, user_id: str) -> None:
        """
        Remove the cooldown so the user may unlink immediately.
        
        Args:
            user_id: Discord user ID
        """
        await self.storage.set(self._key(user_id), 0)
        logger.debug("unlink_cooldown_deleted", user_id=user_id)
