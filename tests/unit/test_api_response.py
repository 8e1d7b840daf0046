"""Unit tests for the API response envelope."""

import pytest

from linkgate.lib.api_response import INTERNAL_ERROR_CODE, ApiResponse, guarded
from linkgate.lib.exceptions import LinkDisplayableException, StoreUnavailableError
from linkgate.models.advisory import ALLOWED, DenialCode, Disallowed


class TestApiResponse:
    """Unit tests for ApiResponse."""
    
    def test_from_allowed(self):
        response = ApiResponse.from_advisory(ALLOWED, data={"next": "continue"})
        
        assert response.success is True
        assert response.data == {"next": "continue"}
        assert response.message is None
    
    def test_from_disallowed(self):
        advisory = Disallowed(
            reason="This Microsoft account is banned (reason: spam)",
            code=DenialCode.CREATION_BANNED,
            metadata={"reason": "spam"},
        )
        
        response = ApiResponse.from_advisory(advisory)
        
        assert response.success is False
        assert response.message == advisory.reason
        assert response.message_i18n == "pc.cba"
        assert response.message_i18n_data == {"reason": "spam"}
    
    def test_internal_error(self):
        response = ApiResponse.internal_error()
        
        assert response.success is False
        assert response.message_i18n == INTERNAL_ERROR_CODE
        assert "try again" in response.message


class TestGuarded:
    """Unit tests for guarded."""
    
    @pytest.mark.asyncio
    async def test_passes_response_through(self):
        async def operation():
            return ApiResponse(success=True, message="ok")
        
        response = await guarded(operation)
        
        assert response.success is True
        assert response.message == "ok"
    
    @pytest.mark.asyncio
    async def test_displayable_exception_keeps_message(self):
        async def operation():
            raise LinkDisplayableException("You cannot remove your identity right now.", True)
        
        response = await guarded(operation)
        
        assert response.success is False
        assert response.message == "You cannot remove your identity right now."
    
    @pytest.mark.asyncio
    async def test_internal_exception_hides_details(self):
        async def operation():
            raise StoreUnavailableError("Cannot read /srv/linkgate/users.json")
        
        response = await guarded(operation)
        
        assert response == ApiResponse.internal_error()
        assert "users.json" not in response.message
    
    @pytest.mark.asyncio
    async def test_other_exceptions_propagate(self):
        async def operation():
            raise KeyError("bug")
        
        with pytest.raises(KeyError):
            await guarded(operation)
