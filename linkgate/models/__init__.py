"""Domain models for linked accounts, bans and permission decisions."""

from .advisory import ALLOWED, Advisory, AdminStatus, Allowed, DenialCode, Disallowed
from .ban import Ban
from .identity_access import IdentityAccess
from .link_user import IdentityKind, LinkUser
from .true_identity import TrueIdentityCapability, grant_true_identity_capability

__all__ = [
    "ALLOWED",
    "Advisory",
    "AdminStatus",
    "Allowed",
    "DenialCode",
    "Disallowed",
    "Ban",
    "IdentityAccess",
    "IdentityKind",
    "LinkUser",
    "TrueIdentityCapability",
    "grant_true_identity_capability",
]
