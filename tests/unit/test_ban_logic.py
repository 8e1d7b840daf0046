"""Unit tests for ban validity checks."""

import pytest
from datetime import datetime, timedelta, timezone

from linkgate.models.ban import Ban
from linkgate.services.ban_logic import first_active_ban, is_ban_active


NOW = datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


def make_ban(ban_id: int, reason: str = "spam", issued_at: datetime = NOW, expires_at=None) -> Ban:
    return Ban(
        id=ban_id,
        msft_id_hash="hash",
        reason=reason,
        author="moderator",
        issued_at=issued_at,
        expires_at=expires_at,
    )


class TestIsBanActive:
    """Unit tests for is_ban_active."""
    
    @pytest.mark.parametrize("now", [
        datetime(1970, 1, 1, tzinfo=timezone.utc),
        NOW,
        datetime(2999, 12, 31, tzinfo=timezone.utc),
    ])
    def test_ban_without_expiry_is_always_active(self, now):
        """Bans that never expire apply at any time."""
        assert is_ban_active(make_ban(1), now) is True
    
    def test_ban_active_before_expiry(self):
        ban = make_ban(1, expires_at=NOW + timedelta(hours=1))
        assert is_ban_active(ban, NOW) is True
    
    def test_ban_inactive_exactly_at_expiry(self):
        """A ban stops applying at its expiry instant."""
        ban = make_ban(1, expires_at=NOW)
        assert is_ban_active(ban, NOW) is False
    
    def test_ban_inactive_after_expiry(self):
        ban = make_ban(1, expires_at=NOW - timedelta(seconds=1))
        assert is_ban_active(ban, NOW) is False
    
    def test_naive_expiry_compares_with_aware_clock(self):
        """Bans loaded with offset-free timestamps still compare against UTC time."""
        ban = make_ban(1, issued_at="2024-03-15T09:00:00", expires_at="2024-03-15T11:00:00")
        
        assert is_ban_active(ban, NOW) is True
        assert is_ban_active(ban, NOW + timedelta(hours=1)) is False


class TestFirstActiveBan:
    """Unit tests for first_active_ban."""
    
    def test_no_bans(self):
        assert first_active_ban([], NOW) is None
    
    def test_only_expired_bans(self):
        bans = [
            make_ban(1, expires_at=NOW - timedelta(days=1)),
            make_ban(2, expires_at=NOW),
        ]
        assert first_active_ban(bans, NOW) is None
    
    def test_most_recently_issued_active_ban_is_selected(self):
        """Selection does not depend on the input order."""
        older = make_ban(1, reason="older", issued_at=NOW - timedelta(days=10))
        newer = make_ban(2, reason="newer", issued_at=NOW - timedelta(days=1))
        
        assert first_active_ban([older, newer], NOW).reason == "newer"
        assert first_active_ban([newer, older], NOW).reason == "newer"
    
    def test_expired_recent_ban_is_skipped(self):
        permanent = make_ban(1, reason="permanent", issued_at=NOW - timedelta(days=30))
        expired = make_ban(
            2,
            reason="expired",
            issued_at=NOW - timedelta(days=2),
            expires_at=NOW - timedelta(days=1),
        )
        
        assert first_active_ban([expired, permanent], NOW).reason == "permanent"
    
    def test_ties_broken_by_highest_id(self):
        first = make_ban(1, reason="first")
        second = make_ban(2, reason="second")
        
        assert first_active_ban([first, second], NOW).reason == "second"
