"""Service wiring shared by CLI commands."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..lib.config import build_email_validator, get_data_dir, load_permission_settings
from ..models.true_identity import TrueIdentityCapability, grant_true_identity_capability
from ..services.ban_manager import BanManager
from ..services.cooldown_storage import JsonCooldownStorage
from ..services.link_database import JsonLinkDatabase
from ..services.permission_checks import PermissionChecks
from ..services.unlink_cooldown import UnlinkCooldown


@dataclass
class CliServices:
    """Services built from configuration for one CLI invocation."""
    
    database: JsonLinkDatabase
    cooldown: UnlinkCooldown
    permission_checks: PermissionChecks
    ban_manager: BanManager
    capability: TrueIdentityCapability


def build_services(data_dir: Optional[Path] = None) -> CliServices:
    """
    Build the services operating on the configured data directory.
    
    Args:
        data_dir: Storage directory (defaults to LINKGATE_DATA_DIR)
        
    Returns:
        CliServices bundle
    """
    root = data_dir or get_data_dir()
    settings = load_permission_settings()
    database = JsonLinkDatabase(root)
    cooldown = UnlinkCooldown(JsonCooldownStorage(root / "cooldowns.json"), settings.unlink_cooldown_seconds)
    return CliServices(
        database=database,
        cooldown=cooldown,
        permission_checks=PermissionChecks(database, settings, build_email_validator()),
        ban_manager=BanManager(database, cooldown),
        capability=grant_true_identity_capability("cli"),
    )
