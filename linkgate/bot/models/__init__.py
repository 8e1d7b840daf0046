"""Bot models."""

from .bot_command import BotCommand, PermissionLevel

__all__ = ["BotCommand", "PermissionLevel"]
