"""Permission checker for bot commands."""

from enum import Enum
from typing import Optional

from ..models.bot_command import BotCommand, PermissionLevel
from ...lib.logging import get_logger
from ...models.advisory import AdminStatus, Disallowed
from ...models.link_user import LinkUser
from ...models.true_identity import TrueIdentityCapability, grant_true_identity_capability
from ...services.permission_checks import PermissionChecks

logger = get_logger(__name__)


class CommandAccess(str, Enum):
    """Outcome of a command permission check."""
    
    ALLOWED = "allowed"
    NOT_IN_MONITORED_SERVER = "not_in_monitored_server"
    NOT_REGISTERED = "not_registered"
    BANNED = "banned"
    NOT_ADMIN = "not_admin"
    ADMIN_NOT_IDENTIFIABLE = "admin_not_identifiable"


class CommandPermissionChecker:
    """
    Gates bot commands on the sender's account state.
    
    Checks run in this order and stop at the first failure:
    - monitored server requirement
    - registration (USER and ADMIN commands)
    - active bans (USER and ADMIN commands)
    - admin status (ADMIN commands)
    """
    
    ERROR_MESSAGES: dict[CommandAccess, str] = {
        CommandAccess.NOT_IN_MONITORED_SERVER: "This command can only be used in a monitored server.",
        CommandAccess.NOT_REGISTERED: "You need to link your account before using this command.",
        CommandAccess.BANNED: "You are banned and cannot use this command.",
        CommandAccess.NOT_ADMIN: "This command requires admin privileges.",
        CommandAccess.ADMIN_NOT_IDENTIFIABLE: (
            "This command requires admin privileges, and admins must keep their identity recorded."
        ),
    }
    
    def __init__(self, permission_checks: PermissionChecks, capability: TrueIdentityCapability):
        """
        Initialize command permission checker.
        
        Args:
            permission_checks: Permission checks service
            capability: True identity capability used for admin checks
        """
        self.permission_checks = permission_checks
        self.capability = capability
    
    async def check(
        self,
        command: BotCommand,
        sender: Optional[LinkUser],
        in_monitored_server: bool
    ) -> CommandAccess:
        """
        Check whether a sender may run a command.
        
        Args:
            command: Command declaration
            sender: Linked user who sent the command, None if not registered
            in_monitored_server: True if the command was sent in a monitored server
            
        Returns:
            CommandAccess result
        """
        if command.require_monitored_server and not in_monitored_server:
            return self._deny(command, sender, CommandAccess.NOT_IN_MONITORED_SERVER)
        
        if command.permission_level == PermissionLevel.ANYONE:
            return CommandAccess.ALLOWED
        
        if sender is None:
            return self._deny(command, sender, CommandAccess.NOT_REGISTERED)
        
        advisory = await self.permission_checks.can_user_join_servers(sender)
        if isinstance(advisory, Disallowed):
            return self._deny(command, sender, CommandAccess.BANNED)
        
        if command.permission_level == PermissionLevel.ADMIN:
            status = await self.permission_checks.can_perform_admin_actions(sender, self.capability)
            if status == AdminStatus.NOT_ADMIN:
                return self._deny(command, sender, CommandAccess.NOT_ADMIN)
            if status == AdminStatus.ADMIN_NOT_IDENTIFIABLE:
                return self._deny(command, sender, CommandAccess.ADMIN_NOT_IDENTIFIABLE)
        
        return CommandAccess.ALLOWED
    
    def _deny(self, command: BotCommand, sender: Optional[LinkUser], access: CommandAccess) -> CommandAccess:
        logger.debug(
            "command_denied",
            command=command.name,
            discord_id=sender.discord_id if sender else None,
            access=access.value
        )
        return access
    
    def get_permission_error_message(self, access: CommandAccess) -> str:
        """
        Get user-friendly error message for a denied command.
        
        Args:
            access: Denied CommandAccess result
            
        Returns:
            Error message string
        """
        return self.ERROR_MESSAGES.get(access, "You do not have permission to use this command.")


def create_command_permission_checker(permission_checks: PermissionChecks) -> CommandPermissionChecker:
    """
    Create a command permission checker instance.
    
    Args:
        permission_checks: Permission checks service
        
    Returns:
        CommandPermissionChecker instance
    """
    return CommandPermissionChecker(
        permission_checks,
        grant_true_identity_capability("bot.command_permission_checker")
    )
