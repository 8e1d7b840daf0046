"""Capability token for code paths that use true identities.

Every function that reads or depends on a user's true identity takes a
``TrueIdentityCapability`` argument. The token cannot be built directly: it is
only handed out by ``grant_true_identity_capability``, which logs the grant.
"""

from ..lib.logging import get_logger

logger = get_logger(__name__)

_GRANT_KEY = object()


class TrueIdentityCapability:
    """Proof that the holder went through the audited true identity grant."""
    
    __slots__ = ("holder",)
    
    def __init__(self, holder: str, *, _key: object = None):
        if _key is not _GRANT_KEY:
            raise TypeError(
                "TrueIdentityCapability cannot be created directly, "
                "use grant_true_identity_capability()"
            )
        self.holder = holder
    
    def __repr__(self) -> str:
        return f"TrueIdentityCapability(holder={self.holder!r})"


def grant_true_identity_capability(holder: str) -> TrueIdentityCapability:
    """
    Grant the true identity capability to a component.
    
    Args:
        holder: Name of the component receiving the capability (logged)
        
    Returns:
        TrueIdentityCapability token
    """
    logger.info("true_identity_capability_granted", holder=holder)
    return TrueIdentityCapability(holder, _key=_GRANT_KEY)


def require_capability(capability: TrueIdentityCapability, operation: str = "This operation") -> None:
    """Raise TypeError unless `capability` is a granted TrueIdentityCapability."""
    if not isinstance(capability, TrueIdentityCapability):
        raise TypeError(f"{operation} requires a TrueIdentityCapability")
