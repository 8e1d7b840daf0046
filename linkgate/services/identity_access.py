"""Audited access to true identities."""

from ..lib.clock import Clock, utc_now
from ..lib.exceptions import LinkDisplayableException
from ..lib.logging import get_logger
from ..models.identity_access import IdentityAccess
from ..models.link_user import LinkUser
from ..models.true_identity import TrueIdentityCapability, require_capability
from .link_database import LinkDatabase
from .unlink_cooldown import UnlinkCooldown

logger = get_logger(__name__)


class IdentityAccessor:
    """
    Reads and removes true identities.
    
    Every read is recorded as an `IdentityAccess` and refreshes the user's
    unlink cooldown, so a user cannot remove their identity right after it
    was looked at.
    """
    
    def __init__(self, database: LinkDatabase, cooldown: UnlinkCooldown, clock: Clock = utc_now):
        """
        Initialize identity accessor.
        
        Args:
            database: Database facade
            cooldown: Unlink cooldown tracker
            clock: Time source for access records
        """
        self.database = database
        self.cooldown = cooldown
        self.clock = clock
    
    async def access_identity(
        self,
        capability: TrueIdentityCapability,
        user: LinkUser,
        author: str,
        reason: str,
        automated: bool = False
    ) -> str:
        """
        Read a user's true identity.
        
        Args:
            capability: True identity capability of the caller
            user: User whose identity is read
            author: Who requests the identity
            reason: Why the identity is requested (shown to the user)
            automated: True if the system itself requests the identity
            
        Returns:
            The true identity
            
        Raises:
            LinkDisplayableException: If the user is not identifiable
        """
        require_capability(capability, "access_identity")
        identity = await self.database.get_true_identity(capability, user)
        if not identity:
            raise LinkDisplayableException("This user does not have their identity recorded", False)
        
        await self.database.record_identity_access(
            IdentityAccess(
                discord_id=user.discord_id,
                author=author,
                reason=reason,
                automated=automated,
                accessed_at=self.clock(),
            )
        )
        await self.cooldown.refresh_cooldown(user.discord_id)
        
        logger.info(
            "true_identity_accessed",
            discord_id=user.discord_id,
            author=author,
            automated=automated,
            holder=capability.holder
        )
        return identity
    
    async def remove_identity(self, capability: TrueIdentityCapability, user: LinkUser) -> None:
        """
        Remove a user's true identity.
        
        Args:
            capability: True identity capability of the caller
            user: User removing their identity
            
        Raises:
            LinkDisplayableException: If the user has no identity or the unlink cooldown is engaged
        """
        require_capability(capability, "remove_identity")
        if not await self.database.is_user_identifiable(capability, user):
            raise LinkDisplayableException("Your identity is not recorded", True)
        if not await self.cooldown.can_unlink(user.discord_id):
            raise LinkDisplayableException(
                "You cannot remove your identity right now. Please try again later.", True
            )
        await self.database.remove_true_identity(capability, user)
        logger.info("true_identity_removed", discord_id=user.discord_id)
