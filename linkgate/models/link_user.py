"""Linked user model."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..lib.clock import utc_now


class IdentityKind(str, Enum):
    """Kind of external identity an account creation request refers to."""
    
    DISCORD = "discord"
    MICROSOFT = "microsoft"


class LinkUser(BaseModel):
    """
    Internal user record linking a Discord account to a hashed Microsoft identity.
    
    The true identity, when kept, is held by the database and never carried on
    this model.
    """
    
    discord_id: str = Field(..., description="Discord user ID (Discord snowflake)", min_length=1)
    msft_id_hash: str = Field(..., description="SHA-256 hex digest of the Microsoft ID", min_length=1)
    created_at: datetime = Field(default_factory=utc_now, description="Account creation timestamp")
    
    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "discord_id": "123456789012345678",
                "msft_id_hash": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
                "created_at": "2024-03-15T10:00:00Z",
            }
        }
