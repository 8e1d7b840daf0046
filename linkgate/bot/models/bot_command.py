"""Bot command declaration used for permission gating."""

from enum import Enum

from pydantic import BaseModel, Field


class PermissionLevel(str, Enum):
    """Who may run a command."""
    
    # Anyone, registered or not
    ANYONE = "anyone"
    # Registered users who are not banned
    USER = "user"
    # Identifiable admins
    ADMIN = "admin"


class BotCommand(BaseModel):
    """
    Declaration of a bot command's access requirements.
    
    Not persisted; commands declare it once at registration time.
    """
    
    name: str = Field(..., description="Command name (e.g. 'count')", min_length=1)
    permission_level: PermissionLevel = Field(default=PermissionLevel.USER, description="Required permission level")
    require_monitored_server: bool = Field(
        default=False,
        description="True if the command may only run inside a monitored server"
    )
    
    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "name": "count",
                "permission_level": "admin",
                "require_monitored_server": True,
            }
        }
