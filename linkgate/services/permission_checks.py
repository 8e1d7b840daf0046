"""Permission checks for account creation, server access and admin actions."""

import inspect
from typing import Awaitable, Callable, Optional, Union

from ..lib.clock import Clock, utc_now
from ..lib.config import PermissionSettings
from ..lib.hashing import hash_microsoft_id
from ..lib.logging import get_logger
from ..models.advisory import ALLOWED, Advisory, AdminStatus, DenialCode, Disallowed
from ..models.link_user import IdentityKind, LinkUser
from ..models.true_identity import TrueIdentityCapability, require_capability
from .ban_logic import first_active_ban
from .link_database import LinkDatabase

logger = get_logger(__name__)

EmailValidator = Callable[[str], Union[bool, Awaitable[bool]]]


class PermissionChecks:
    """
    Decides whether users may create accounts, join servers or act as admins.
    
    All checks are read-only: they query the database and return an advisory
    (or an `AdminStatus`) without writing anything. Database failures are
    propagated; no default decision is made when facts cannot be read.
    """
    
    def __init__(
        self,
        database: LinkDatabase,
        settings: PermissionSettings,
        email_validator: Optional[EmailValidator] = None,
        clock: Clock = utc_now
    ):
        """
        Initialize permission checks.
        
        Args:
            database: Database facade
            settings: Admin list and cooldown configuration
            email_validator: Optional predicate rejecting e-mail addresses (sync or async)
            clock: Time source used to evaluate bans
        """
        self.database = database
        self.settings = settings
        self.email_validator = email_validator
        self.clock = clock
    
    async def is_allowed_to_create_account(
        self,
        identity_kind: IdentityKind,
        identifier: str,
        email: Optional[str] = None
    ) -> Advisory:
        """
        Check whether an identity may be used to create an account.
        
        Args:
            identity_kind: Kind of identity being linked
            identifier: Discord ID, or raw Microsoft ID
            email: E-mail address of the Microsoft account
            
        Returns:
            Allowed, or Disallowed with the first failed check
        """
        if identity_kind == IdentityKind.DISCORD:
            return await self.is_discord_user_allowed_to_create_account(identifier)
        return await self.is_microsoft_user_allowed_to_create_account(identifier, email)
    
    async def is_discord_user_allowed_to_create_account(self, discord_id: str) -> Advisory:
        """
        Check whether a Discord account may be used to create an account.
        
        Args:
            discord_id: Discord user ID
            
        Returns:
            Disallowed (pc.dae) if an account already exists for this Discord ID
        """
        if await self.database.user_exists(discord_id):
            return Disallowed(reason="This Discord account already exists", code=DenialCode.DISCORD_ACCOUNT_EXISTS)
        return ALLOWED
    
    async def is_microsoft_user_allowed_to_create_account(
        self,
        microsoft_id: str,
        email: Optional[str]
    ) -> Advisory:
        """
        Check whether a Microsoft account may be used to create an account.
        
        Checks, in order: existing link, e-mail validation, active bans. Ban
        status is only revealed for identities that passed the other checks.
        
        Args:
            microsoft_id: Raw Microsoft account ID (hashed before any lookup)
            email: E-mail address of the Microsoft account
            
        Returns:
            Allowed, or Disallowed with code pc.ala, pc.erj or pc.cba
        """
        msft_id_hash = hash_microsoft_id(microsoft_id)
        
        if await self.database.is_account_linked(msft_id_hash):
            return Disallowed(
                reason="This Microsoft account is already linked to another account",
                code=DenialCode.ACCOUNT_ALREADY_LINKED
            )
        
        if self.email_validator is not None and not await self._is_email_valid(email):
            return Disallowed(
                reason="This e-mail address was rejected. Are you sure you are using the correct Microsoft account?",
                code=DenialCode.EMAIL_REJECTED
            )
        
        ban = first_active_ban(await self.database.get_bans_for(msft_id_hash), self.clock())
        if ban is not None:
            return Disallowed(
                reason=f"This Microsoft account is banned (reason: {ban.reason})",
                code=DenialCode.CREATION_BANNED,
                metadata={"reason": ban.reason}
            )
        
        return ALLOWED
    
    async def _is_email_valid(self, email: Optional[str]) -> bool:
        if email is None:
            return False
        result = self.email_validator(email)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)
    
    async def can_user_join_servers(self, user: LinkUser) -> Advisory:
        """
        Check whether a known user may join monitored servers.
        
        At present the only reason to deny a known user is an active ban.
        
        Args:
            user: Linked user
            
        Returns:
            Allowed, or Disallowed (pc.jba) with the reason of the selected active ban
        """
        ban = first_active_ban(await self.database.get_bans_for(user.msft_id_hash), self.clock())
        if ban is not None:
            logger.info("active_ban_found", discord_id=user.discord_id, ban_reason=ban.reason)
            return Disallowed(
                reason=f"You are banned from joining any server at the moment. (Ban reason: {ban.reason})",
                code=DenialCode.JOIN_BANNED,
                metadata={"reason": ban.reason}
            )
        return ALLOWED
    
    async def can_perform_admin_actions(
        self,
        user: LinkUser,
        capability: TrueIdentityCapability
    ) -> AdminStatus:
        """
        Check whether a user may perform admin actions.
        
        Admins must be identifiable: being in the admin list is not enough.
        
        Args:
            user: Linked user
            capability: True identity capability of the caller
            
        Returns:
            NOT_ADMIN, ADMIN_NOT_IDENTIFIABLE or ADMIN
        """
        require_capability(capability, "can_perform_admin_actions")
        if user.discord_id not in self.settings.admins:
            return AdminStatus.NOT_ADMIN
        if not await self.database.is_user_identifiable(capability, user):
            return AdminStatus.ADMIN_NOT_IDENTIFIABLE
        return AdminStatus.ADMIN


def create_permission_checks(
    database: LinkDatabase,
    settings: PermissionSettings,
    email_validator: Optional[EmailValidator] = None
) -> PermissionChecks:
    """
    Create a permission checks instance.
    
    Args:
        database: Database facade
        settings: Permission settings
        email_validator: Optional e-mail validator
        
    Returns:
        PermissionChecks instance
    """
    return PermissionChecks(database, settings, email_validator)
