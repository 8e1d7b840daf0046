"""Ban model for institutional identities."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..lib.clock import ensure_utc


class Ban(BaseModel):
    """
    A ban targeting a hashed Microsoft identity.
    
    Bans are immutable and kept after they expire, for audit purposes.
    A ban without `expires_at` never expires.
    """
    
    id: int = Field(..., description="Ban identifier assigned by the database")
    msft_id_hash: str = Field(..., description="SHA-256 hex digest of the banned Microsoft ID")
    reason: str = Field(..., description="Reason shown to the banned user")
    author: str = Field(default="", description="Who issued the ban")
    issued_at: datetime = Field(..., description="When the ban was issued")
    expires_at: Optional[datetime] = Field(None, description="When the ban stops applying (None = never)")
    
    @field_validator("issued_at", "expires_at")
    @classmethod
    def attach_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are read as UTC so they compare with the service clock
        return ensure_utc(value) if value is not None else None
    
    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "msft_id_hash": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
                "reason": "spam",
                "author": "moderator",
                "issued_at": "2024-03-15T10:00:00Z",
                "expires_at": None,
            }
        }
