"""Configuration management for linkgate.

Values are read from the environment (a local ``.env`` file is loaded first
when present) and exposed as module-level constants.
"""

import os
from pathlib import Path
from typing import Callable, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv(dotenv_path=Path(".env"), override=False)


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


# Storage
DATA_DIR: Path = Path(os.getenv("LINKGATE_DATA_DIR", "data/linkgate"))

# Permissions
ADMINS: List[str] = _split_list(os.getenv("LINKGATE_ADMINS"))
UNLINK_COOLDOWN_SECONDS: int = int(os.getenv("LINKGATE_UNLINK_COOLDOWN_SECONDS", "3600"))
EMAIL_DOMAINS: List[str] = _split_list(os.getenv("LINKGATE_EMAIL_DOMAINS"))

# Cooldown store key prefix
UNLINK_COOLDOWN_PREFIX: str = "el_ulc_"

# Logging
LOG_LEVEL: str = os.getenv("LINKGATE_LOG_LEVEL", "INFO")
LOG_JSON: bool = os.getenv("LINKGATE_LOG_JSON", "false").lower() in ("1", "true", "yes")


class PermissionSettings(BaseModel):
    """
    Settings consumed by the permission checks and the unlink cooldown.
    
    Passed explicitly to the services that need them.
    """
    
    admins: List[str] = Field(default_factory=list, description="Discord IDs allowed to perform admin actions")
    unlink_cooldown_seconds: int = Field(
        default=3600,
        ge=0,
        description="Seconds during which a user may not remove their identity (0 disables)"
    )
    
    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "admins": ["123456789012345678"],
                "unlink_cooldown_seconds": 3600,
            }
        }


def load_permission_settings() -> PermissionSettings:
    """
    Build permission settings from the environment.
    
    Returns:
        PermissionSettings instance
        
    Raises:
        pydantic.ValidationError: If the cooldown duration is negative
    """
    return PermissionSettings(admins=ADMINS, unlink_cooldown_seconds=UNLINK_COOLDOWN_SECONDS)


def build_email_validator(domains: Optional[List[str]] = None) -> Optional[Callable[[str], bool]]:
    """
    Build an e-mail validator accepting only the given domains.
    
    Args:
        domains: Allowed domains (defaults to LINKGATE_EMAIL_DOMAINS)
        
    Returns:
        Predicate over e-mail addresses, or None when no domain is configured
    """
    allowed = [d.lower().lstrip("@") for d in (EMAIL_DOMAINS if domains is None else domains)]
    if not allowed:
        return None
    
    def validator(email: str) -> bool:
        _, sep, domain = email.rpartition("@")
        if not sep:
            return False
        return domain.lower() in allowed
    
    return validator


def get_data_dir() -> Path:
    """
    Get the storage directory from configuration.
    
    Returns:
        Path to the data directory
    """
    return DATA_DIR
