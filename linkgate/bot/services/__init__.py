"""Bot services."""

from .permission_checker import CommandAccess, CommandPermissionChecker, create_command_permission_checker

__all__ = ["CommandAccess", "CommandPermissionChecker", "create_command_permission_checker"]
