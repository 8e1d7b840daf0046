"""linkgate services."""

from .ban_logic import first_active_ban, is_ban_active
from .ban_manager import BanManager
from .cooldown_storage import CooldownStorage, JsonCooldownStorage, MemoryCooldownStorage
from .identity_access import IdentityAccessor
from .link_database import JsonLinkDatabase, LinkDatabase
from .permission_checks import PermissionChecks, create_permission_checks
from .unlink_cooldown import UnlinkCooldown

__all__ = [
    "first_active_ban",
    "is_ban_active",
    "BanManager",
    "CooldownStorage",
    "JsonCooldownStorage",
    "MemoryCooldownStorage",
    "IdentityAccessor",
    "JsonLinkDatabase",
    "LinkDatabase",
    "PermissionChecks",
    "create_permission_checks",
    "UnlinkCooldown",
]
