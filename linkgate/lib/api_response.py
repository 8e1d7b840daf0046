"""Response envelope used by API handlers to report advisories and errors."""

from typing import Any, Awaitable, Callable, Dict, Optional

from pydantic import BaseModel, Field

from .exceptions import LinkDisplayableException, LinkException
from .logging import get_logger
from ..models.advisory import Advisory, Disallowed

logger = get_logger(__name__)

INTERNAL_ERROR_CODE = "err.internal"
INTERNAL_ERROR_MESSAGE = "Encountered an internal error. Please try again later."


class ApiResponse(BaseModel):
    """
    Envelope returned by every API endpoint.
    
    `message_i18n` and `message_i18n_data` let the front-end localize the
    message instead of displaying `message` as-is.
    """
    
    success: bool = Field(..., description="Whether the request succeeded")
    message: Optional[str] = Field(None, description="End-user friendly message")
    message_i18n: Optional[str] = Field(None, description="Machine-readable message code")
    message_i18n_data: Dict[str, str] = Field(default_factory=dict, description="Values for the localized message")
    data: Optional[Any] = Field(None, description="Response payload")
    
    @classmethod
    def from_advisory(cls, advisory: Advisory, data: Optional[Any] = None) -> "ApiResponse":
        """
        Build a response from a permission advisory.
        
        Args:
            advisory: Allowed or Disallowed
            data: Payload for allowed requests
            
        Returns:
            Successful response for Allowed, failed response carrying the denial otherwise
        """
        if isinstance(advisory, Disallowed):
            return cls(
                success=False,
                message=advisory.reason,
                message_i18n=advisory.code.value,
                message_i18n_data=dict(advisory.metadata),
            )
        return cls(success=True, data=data)
    
    @classmethod
    def internal_error(cls) -> "ApiResponse":
        """Generic failure response that does not leak internal details."""
        return cls(success=False, message=INTERNAL_ERROR_MESSAGE, message_i18n=INTERNAL_ERROR_CODE)


async def guarded(operation: Callable[[], Awaitable[ApiResponse]]) -> ApiResponse:
    """
    Run an API operation, turning linkgate exceptions into responses.
    
    Displayable exceptions keep their message; any other `LinkException` is
    logged and replaced with a generic internal error response.
    
    Args:
        operation: Coroutine function producing the response
        
    Returns:
        The operation's response, or an error response
    """
    try:
        return await operation()
    except LinkDisplayableException as e:
        logger.debug("displayable_exception", message=e.message, end_user_at_fault=e.is_end_user_at_fault)
        return ApiResponse(success=False, message=e.message)
    except LinkException as e:
        logger.error("internal_exception", error=str(e), error_type=type(e).__name__)
        return ApiResponse.internal_error()
