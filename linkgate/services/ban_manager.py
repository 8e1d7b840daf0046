"""Ban issuance and lookup."""

from datetime import datetime
from typing import List, Optional

from ..lib.clock import Clock, ensure_utc, utc_now
from ..lib.exceptions import LinkDisplayableException
from ..lib.logging import get_logger
from ..models.ban import Ban
from .ban_logic import is_ban_active
from .link_database import LinkDatabase
from .unlink_cooldown import UnlinkCooldown

logger = get_logger(__name__)


class BanManager:
    """Issues bans against hashed Microsoft identities."""
    
    def __init__(self, database: LinkDatabase, cooldown: UnlinkCooldown, clock: Clock = utc_now):
        """
        Initialize ban manager.
        
        Args:
            database: Database facade
            cooldown: Unlink cooldown tracker, refreshed for banned users
            clock: Time source
        """
        self.database = database
        self.cooldown = cooldown
        self.clock = clock
    
    async def ban(
        self,
        msft_id_hash: str,
        reason: str,
        author: str,
        expires_at: Optional[datetime] = None
    ) -> Ban:
        """
        Ban a hashed Microsoft identity.
        
        If the identity is linked to a user, that user's unlink cooldown is
        refreshed so they cannot remove their identity to dodge the ban.
        
        Args:
            msft_id_hash: SHA-256 hex digest of the Microsoft ID
            reason: Reason shown to the user
            author: Who issues the ban
            expires_at: When the ban ends (None = never)
            
        Returns:
            The recorded ban
            
        Raises:
            LinkDisplayableException: If the reason is empty or the expiry is not in the future
        """
        if not reason.strip():
            raise LinkDisplayableException("A ban reason is required", True)
        if expires_at is not None:
            expires_at = ensure_utc(expires_at)
            if expires_at <= self.clock():
                raise LinkDisplayableException("The ban expiry date must be in the future", True)
        
        # Cooldown first: an interrupted ban must not leave the user free to unlink
        user = await self.database.get_user_by_msft_hash(msft_id_hash)
        if user is not None:
            await self.cooldown.refresh_cooldown(user.discord_id)
        
        ban = await self.database.record_ban(msft_id_hash, reason, author, expires_at)
        
        logger.info(
            "ban_issued",
            ban_id=ban.id,
            author=author,
            linked_discord_id=user.discord_id if user else None,
            expires_at=expires_at.isoformat() if expires_at else None
        )
        return ban
    
    async def get_bans(self, msft_id_hash: str) -> List[Ban]:
        """Return every ban for a hash, expired ones included."""
        return await self.database.get_bans_for(msft_id_hash)
    
    async def get_active_bans(self, msft_id_hash: str) -> List[Ban]:
        """Return the bans for a hash that currently apply."""
        now = self.clock()
        return [ban for ban in await self.database.get_bans_for(msft_id_hash) if is_ban_active(ban, now)]
