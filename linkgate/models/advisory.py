"""Advisory values returned by permission checks.

An advisory is either ``Allowed`` or ``Disallowed``. Denials carry a
user-facing reason, a stable machine code and structured metadata so callers
can localize messages without re-deriving why the request was refused.
"""

from enum import Enum
from typing import Annotated, Dict, Literal, Union

from pydantic import BaseModel, Field


class DenialCode(str, Enum):
    """Machine-readable denial codes (stable contract for callers and localizers)."""
    
    DISCORD_ACCOUNT_EXISTS = "pc.dae"
    ACCOUNT_ALREADY_LINKED = "pc.ala"
    EMAIL_REJECTED = "pc.erj"
    CREATION_BANNED = "pc.cba"
    JOIN_BANNED = "pc.jba"


class Allowed(BaseModel):
    """The requested action is allowed."""
    
    kind: Literal["allowed"] = "allowed"
    
    class Config:
        """Pydantic configuration."""
        frozen = True


class Disallowed(BaseModel):
    """
    The requested action is denied.
    
    `reason` is shown to end users, `code` identifies the denial and
    `metadata` repeats structured details (e.g. the ban reason).
    """
    
    kind: Literal["disallowed"] = "disallowed"
    reason: str = Field(..., description="End-user friendly explanation")
    code: DenialCode = Field(..., description="Machine-readable denial code")
    metadata: Dict[str, str] = Field(default_factory=dict, description="Structured denial details")
    
    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "kind": "disallowed",
                "reason": "This Microsoft account is banned (reason: spam)",
                "code": "pc.cba",
                "metadata": {"reason": "spam"},
            }
        }


Advisory = Annotated[Union[Allowed, Disallowed], Field(discriminator="kind")]

ALLOWED = Allowed()


class AdminStatus(str, Enum):
    """Ability of a user to perform admin actions."""
    
    # Not present in the admin list
    NOT_ADMIN = "NotAdmin"
    # In the admin list, but their true identity is not available
    ADMIN_NOT_IDENTIFIABLE = "AdminNotIdentifiable"
    # In the admin list and identifiable
    ADMIN = "Admin"
