"""Audit record of a true identity access."""

from datetime import datetime

from pydantic import BaseModel, Field

from ..lib.clock import utc_now


class IdentityAccess(BaseModel):
    """An access to a user's true identity, kept for the user's own review."""
    
    discord_id: str = Field(..., description="Discord ID of the user whose identity was accessed")
    author: str = Field(..., description="Who (or which component) accessed the identity")
    reason: str = Field(..., description="Why the identity was accessed")
    automated: bool = Field(default=False, description="True if the access was made by the system itself")
    accessed_at: datetime = Field(default_factory=utc_now, description="When the access happened")
