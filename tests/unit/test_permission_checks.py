"""Unit tests for the permission checks."""

import pytest
from datetime import timedelta
from unittest.mock import AsyncMock

from structlog.testing import capture_logs

from linkgate.lib.config import PermissionSettings
from linkgate.lib.exceptions import StoreUnavailableError
from linkgate.lib.hashing import hash_microsoft_id
from linkgate.models.advisory import ALLOWED, AdminStatus, DenialCode, Disallowed
from linkgate.models.ban import Ban
from linkgate.models.link_user import IdentityKind, LinkUser
from linkgate.models.true_identity import grant_true_identity_capability
from linkgate.services.permission_checks import PermissionChecks


ADMIN_ID = "111111111111111111"
USER_ID = "222222222222222222"


class TestPermissionChecks:
    """Unit tests for PermissionChecks."""
    
    @pytest.fixture
    def database(self):
        """Create mock database with no users, links or bans."""
        database = AsyncMock()
        database.user_exists.return_value = False
        database.is_account_linked.return_value = False
        database.get_bans_for.return_value = []
        database.is_user_identifiable.return_value = True
        return database
    
    @pytest.fixture
    def settings(self):
        """Create settings with a single admin."""
        return PermissionSettings(admins=[ADMIN_ID], unlink_cooldown_seconds=3600)
    
    @pytest.fixture
    def checks(self, database, settings, clock):
        """Create permission checks without e-mail validator."""
        return PermissionChecks(database, settings, clock=clock)
    
    @pytest.fixture
    def capability(self):
        """Grant the true identity capability."""
        return grant_true_identity_capability("tests")
    
    def make_ban(self, clock, reason="spam", ban_id=1, issued_delta=timedelta(days=1), expires_at=None):
        return Ban(
            id=ban_id,
            msft_id_hash="hash",
            reason=reason,
            author="moderator",
            issued_at=clock() - issued_delta,
            expires_at=expires_at,
        )
    
    def make_user(self, discord_id=USER_ID):
        return LinkUser(discord_id=discord_id, msft_id_hash="hash")
    
    # ------------------------------------------------------------------
    # Account creation: Discord
    # ------------------------------------------------------------------
    
    @pytest.mark.asyncio
    async def test_discord_user_allowed(self, checks, database):
        advisory = await checks.is_allowed_to_create_account(IdentityKind.DISCORD, USER_ID)
        
        assert advisory == ALLOWED
        database.user_exists.assert_awaited_once_with(USER_ID)
    
    @pytest.mark.asyncio
    async def test_existing_discord_user_disallowed(self, checks, database, clock):
        """An existing Discord account is refused whatever the other state is."""
        database.user_exists.return_value = True
        database.get_bans_for.return_value = [self.make_ban(clock)]
        
        advisory = await checks.is_allowed_to_create_account(IdentityKind.DISCORD, USER_ID)
        
        assert isinstance(advisory, Disallowed)
        assert advisory.code == DenialCode.DISCORD_ACCOUNT_EXISTS
        assert advisory.code.value == "pc.dae"
    
    # ------------------------------------------------------------------
    # Account creation: Microsoft
    # ------------------------------------------------------------------
    
    @pytest.mark.asyncio
    async def test_microsoft_user_allowed(self, checks, database):
        advisory = await checks.is_allowed_to_create_account(IdentityKind.MICROSOFT, "msft-id", "a@b.c")
        
        assert advisory == ALLOWED
        database.is_account_linked.assert_awaited_once_with(hash_microsoft_id("msft-id"))
        database.get_bans_for.assert_awaited_once_with(hash_microsoft_id("msft-id"))
    
    @pytest.mark.asyncio
    async def test_linked_microsoft_account_disallowed_before_ban_check(self, checks, database, clock):
        database.is_account_linked.return_value = True
        database.get_bans_for.return_value = [self.make_ban(clock)]
        
        advisory = await checks.is_microsoft_user_allowed_to_create_account("msft-id", "a@b.c")
        
        assert advisory.code == DenialCode.ACCOUNT_ALREADY_LINKED
        database.get_bans_for.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_rejected_email_disallowed_before_ban_check(self, database, settings, clock):
        database.get_bans_for.return_value = [self.make_ban(clock)]
        checks = PermissionChecks(database, settings, email_validator=lambda email: False, clock=clock)
        
        advisory = await checks.is_microsoft_user_allowed_to_create_account("msft-id", "a@b.c")
        
        assert advisory.code == DenialCode.EMAIL_REJECTED
        database.get_bans_for.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_accepted_email_passes(self, database, settings, clock):
        checks = PermissionChecks(
            database,
            settings,
            email_validator=lambda email: email.endswith("@example.com"),
            clock=clock
        )
        
        advisory = await checks.is_microsoft_user_allowed_to_create_account("msft-id", "alice@example.com")
        
        assert advisory == ALLOWED
    
    @pytest.mark.asyncio
    async def test_async_email_validator(self, database, settings, clock):
        async def validator(email):
            return False
        
        checks = PermissionChecks(database, settings, email_validator=validator, clock=clock)
        
        advisory = await checks.is_microsoft_user_allowed_to_create_account("msft-id", "a@b.c")
        
        assert advisory.code == DenialCode.EMAIL_REJECTED
    
    @pytest.mark.asyncio
    async def test_missing_email_rejected_when_validator_configured(self, database, settings, clock):
        checks = PermissionChecks(database, settings, email_validator=lambda email: True, clock=clock)
        
        advisory = await checks.is_microsoft_user_allowed_to_create_account("msft-id", None)
        
        assert advisory.code == DenialCode.EMAIL_REJECTED
    
    @pytest.mark.asyncio
    async def test_missing_email_ignored_without_validator(self, checks):
        advisory = await checks.is_microsoft_user_allowed_to_create_account("msft-id", None)
        
        assert advisory == ALLOWED
    
    @pytest.mark.asyncio
    async def test_banned_microsoft_account_disallowed(self, checks, database, clock):
        database.get_bans_for.return_value = [self.make_ban(clock, reason="spam")]
        
        advisory = await checks.is_allowed_to_create_account(IdentityKind.MICROSOFT, "msft-id", "a@b.c")
        
        assert advisory == Disallowed(
            reason="This Microsoft account is banned (reason: spam)",
            code=DenialCode.CREATION_BANNED,
            metadata={"reason": "spam"},
        )
        assert "spam" in advisory.reason
    
    @pytest.mark.asyncio
    async def test_expired_ban_does_not_prevent_creation(self, checks, database, clock):
        database.get_bans_for.return_value = [self.make_ban(clock, expires_at=clock())]
        
        advisory = await checks.is_microsoft_user_allowed_to_create_account("msft-id", "a@b.c")
        
        assert advisory == ALLOWED
    
    # ------------------------------------------------------------------
    # Joining servers
    # ------------------------------------------------------------------
    
    @pytest.mark.asyncio
    async def test_user_without_bans_can_join(self, checks):
        assert await checks.can_user_join_servers(self.make_user()) == ALLOWED
    
    @pytest.mark.asyncio
    async def test_banned_user_cannot_join(self, checks, database, clock):
        database.get_bans_for.return_value = [self.make_ban(clock, reason="raiding")]
        
        advisory = await checks.can_user_join_servers(self.make_user())
        
        assert isinstance(advisory, Disallowed)
        assert advisory.code == DenialCode.JOIN_BANNED
        assert advisory.metadata == {"reason": "raiding"}
        assert "raiding" in advisory.reason
        database.get_bans_for.assert_awaited_once_with("hash")
    
    @pytest.mark.asyncio
    async def test_join_reports_single_most_recent_ban(self, checks, database, clock):
        database.get_bans_for.return_value = [
            self.make_ban(clock, reason="old", ban_id=1, issued_delta=timedelta(days=20)),
            self.make_ban(clock, reason="recent", ban_id=2, issued_delta=timedelta(days=2)),
        ]
        
        advisory = await checks.can_user_join_servers(self.make_user())
        
        assert advisory.metadata == {"reason": "recent"}
        assert "old" not in advisory.reason
    
    @pytest.mark.asyncio
    async def test_join_denial_is_logged(self, checks, database, clock):
        database.get_bans_for.return_value = [self.make_ban(clock, reason="raiding")]
        
        with capture_logs() as logs:
            await checks.can_user_join_servers(self.make_user())
        
        events = [entry for entry in logs if entry["event"] == "active_ban_found"]
        assert len(events) == 1
        assert events[0]["discord_id"] == USER_ID
        assert events[0]["ban_reason"] == "raiding"
        # Audit entries must survive the default INFO threshold
        assert events[0]["log_level"] == "info"
    
    @pytest.mark.asyncio
    async def test_join_check_is_idempotent(self, checks, database, clock):
        database.get_bans_for.return_value = [self.make_ban(clock)]
        user = self.make_user()
        
        first = await checks.can_user_join_servers(user)
        second = await checks.can_user_join_servers(user)
        
        assert first == second
    
    @pytest.mark.asyncio
    async def test_database_failure_propagates(self, checks, database):
        database.get_bans_for.side_effect = StoreUnavailableError("down")
        
        with pytest.raises(StoreUnavailableError):
            await checks.can_user_join_servers(self.make_user())
    
    # ------------------------------------------------------------------
    # Admin actions
    # ------------------------------------------------------------------
    
    @pytest.mark.asyncio
    async def test_identifiable_admin(self, checks, capability):
        status = await checks.can_perform_admin_actions(self.make_user(ADMIN_ID), capability)
        
        assert status == AdminStatus.ADMIN
    
    @pytest.mark.asyncio
    async def test_admin_not_identifiable(self, checks, database, capability):
        database.is_user_identifiable.return_value = False
        
        status = await checks.can_perform_admin_actions(self.make_user(ADMIN_ID), capability)
        
        assert status == AdminStatus.ADMIN_NOT_IDENTIFIABLE
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifiable", [True, False])
    async def test_non_admin_regardless_of_identifiability(self, checks, database, capability, identifiable):
        database.is_user_identifiable.return_value = identifiable
        
        status = await checks.can_perform_admin_actions(self.make_user(USER_ID), capability)
        
        assert status == AdminStatus.NOT_ADMIN
        database.is_user_identifiable.assert_not_awaited()
    
    @pytest.mark.asyncio
    async def test_admin_check_requires_capability(self, checks):
        with pytest.raises(TypeError):
            await checks.can_perform_admin_actions(self.make_user(ADMIN_ID), object())
