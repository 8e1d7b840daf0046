"""Database facade for linked users, bans and true identities.

`LinkDatabase` is the interface the permission checks and the other services
depend on. `JsonLinkDatabase` implements it with local JSON files, following
the local-first storage approach: no external database server is required.
"""

import asyncio
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..lib.clock import Clock, utc_now
from ..lib.exceptions import LinkDisplayableException, StoreUnavailableError
from ..lib.logging import get_logger
from ..models.ban import Ban
from ..models.identity_access import IdentityAccess
from ..models.link_user import LinkUser
from ..models.true_identity import TrueIdentityCapability, require_capability

logger = get_logger(__name__)


class LinkDatabase(Protocol):
    """Persistence operations used by linkgate services."""
    
    async def user_exists(self, discord_id: str) -> bool: ...
    
    async def is_account_linked(self, msft_id_hash: str) -> bool: ...
    
    async def get_bans_for(self, msft_id_hash: str) -> List[Ban]: ...
    
    async def is_user_identifiable(self, capability: TrueIdentityCapability, user: LinkUser) -> bool: ...
    
    async def get_user(self, discord_id: str) -> Optional[LinkUser]: ...
    
    async def get_user_by_msft_hash(self, msft_id_hash: str) -> Optional[LinkUser]: ...
    
    async def create_user(
        self,
        discord_id: str,
        msft_id_hash: str,
        true_identity: Optional[str] = None
    ) -> LinkUser: ...
    
    async def record_ban(
        self,
        msft_id_hash: str,
        reason: str,
        author: str,
        expires_at: Optional[datetime] = None
    ) -> Ban: ...
    
    async def get_true_identity(self, capability: TrueIdentityCapability, user: LinkUser) -> Optional[str]: ...
    
    async def record_identity_access(self, access: IdentityAccess) -> None: ...
    
    async def remove_true_identity(self, capability: TrueIdentityCapability, user: LinkUser) -> None: ...
    
    async def count_users(self) -> int: ...


class JsonLinkDatabase:
    """
    `LinkDatabase` implementation backed by JSON files.
    
    Storage layout under `storage_dir`:
    - ``users.json`` -- list of user dicts (with the optional true identity)
    - ``bans.json`` -- list of ban dicts
    - ``identity_accesses.json`` -- list of identity access records
    
    Blocking file I/O runs in a worker thread. Writes replace files atomically
    and are serialized with a lock; uniqueness of Discord IDs and Microsoft
    hashes is enforced in `create_user`.
    """
    
    def __init__(self, storage_dir: Path, clock: Clock = utc_now):
        """
        Initialize JSON database.
        
        Args:
            storage_dir: Directory holding the JSON files
            clock: Time source for timestamps
        """
        self.storage_dir = storage_dir
        self.clock = clock
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self._users_path = self.storage_dir / "users.json"
        self._bans_path = self.storage_dir / "bans.json"
        self._accesses_path = self.storage_dir / "identity_accesses.json"
        # Keys the lookups below index directly
        self._required_keys = {
            self._users_path: ("discord_id", "msft_id_hash"),
            self._bans_path: ("id", "msft_id_hash"),
            self._accesses_path: ("discord_id",),
        }
        self._lock = asyncio.Lock()
        
        logger.info("link_database_initialized", storage_dir=str(self.storage_dir))
    
    # ------------------------------------------------------------------
    # File helpers
    # ------------------------------------------------------------------
    
    @staticmethod
    def _read_list(path: Path, required_keys: Tuple[str, ...] = ()) -> List[Dict[str, Any]]:
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("database_read_failed", path=str(path), error=str(e))
            raise StoreUnavailableError(f"Cannot read {path}") from e
        if not isinstance(data, list):
            raise StoreUnavailableError(f"Malformed database file {path}")
        for entry in data:
            if not isinstance(entry, dict) or any(key not in entry for key in required_keys):
                logger.error("database_entry_malformed", path=str(path), entry=str(entry)[:200])
                raise StoreUnavailableError(f"Malformed entry in {path}")
        return data
    
    @staticmethod
    def _write_list(path: Path, data: List[Dict[str, Any]]) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("database_write_failed", path=str(path), error=str(e))
            raise StoreUnavailableError(f"Cannot write {path}") from e
    
    async def _load(self, path: Path) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._read_list, path, self._required_keys.get(path, ()))
    
    async def _save(self, path: Path, data: List[Dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write_list, path, data)
    
    @staticmethod
    def _user_from_dict(d: Dict[str, Any]) -> LinkUser:
        try:
            return LinkUser(
                discord_id=d["discord_id"],
                msft_id_hash=d["msft_id_hash"],
                created_at=datetime.fromisoformat(d["created_at"]),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise StoreUnavailableError(f"Malformed user entry: {e}") from e
    
    @staticmethod
    def _ban_from_dict(d: Dict[str, Any]) -> Ban:
        try:
            expires_at = d.get("expires_at")
            return Ban(
                id=d["id"],
                msft_id_hash=d["msft_id_hash"],
                reason=d["reason"],
                author=d.get("author", ""),
                issued_at=datetime.fromisoformat(d["issued_at"]),
                expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
            )
        except (KeyError, ValueError, TypeError) as e:
            raise StoreUnavailableError(f"Malformed ban entry: {e}") from e
    
    @staticmethod
    def _next_ban_id(bans: List[Dict[str, Any]]) -> int:
        try:
            return max((int(d["id"]) for d in bans), default=0) + 1
        except (ValueError, TypeError) as e:
            raise StoreUnavailableError(f"Malformed ban id: {e}") from e
    
    @staticmethod
    def _access_from_dict(d: Dict[str, Any]) -> IdentityAccess:
        try:
            return IdentityAccess(**d)
        except (ValueError, TypeError) as e:
            raise StoreUnavailableError(f"Malformed identity access entry: {e}") from e
    
    async def _find_user_dict(self, discord_id: str) -> Optional[Dict[str, Any]]:
        for d in await self._load(self._users_path):
            if d["discord_id"] == discord_id:
                return d
        return None
    
    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    
    async def user_exists(self, discord_id: str) -> bool:
        return await self._find_user_dict(discord_id) is not None
    
    async def is_account_linked(self, msft_id_hash: str) -> bool:
        return await self.get_user_by_msft_hash(msft_id_hash) is not None
    
    async def get_user(self, discord_id: str) -> Optional[LinkUser]:
        d = await self._find_user_dict(discord_id)
        return self._user_from_dict(d) if d else None
    
    async def get_user_by_msft_hash(self, msft_id_hash: str) -> Optional[LinkUser]:
        for d in await self._load(self._users_path):
            if d["msft_id_hash"] == msft_id_hash:
                return self._user_from_dict(d)
        return None
    
    async def create_user(
        self,
        discord_id: str,
        msft_id_hash: str,
        true_identity: Optional[str] = None
    ) -> LinkUser:
        """
        Create a linked user.
        
        Raises:
            LinkDisplayableException: If the Discord ID or Microsoft hash is already in use
        """
        async with self._lock:
            users = await self._load(self._users_path)
            for d in users:
                if d["discord_id"] == discord_id:
                    raise LinkDisplayableException("This Discord account already exists", True)
                if d["msft_id_hash"] == msft_id_hash:
                    raise LinkDisplayableException(
                        "This Microsoft account is already linked to another account", True
                    )
            user = LinkUser(discord_id=discord_id, msft_id_hash=msft_id_hash, created_at=self.clock())
            users.append({
                "discord_id": user.discord_id,
                "msft_id_hash": user.msft_id_hash,
                "created_at": user.created_at.isoformat(),
                "true_identity": true_identity,
            })
            await self._save(self._users_path, users)
        
        logger.info("user_created", discord_id=discord_id, keeps_identity=true_identity is not None)
        return user
    
    async def count_users(self) -> int:
        return len(await self._load(self._users_path))
    
    # ------------------------------------------------------------------
    # Bans
    # ------------------------------------------------------------------
    
    async def get_bans_for(self, msft_id_hash: str) -> List[Ban]:
        """Return all bans for a hash, most recently issued first."""
        bans = [
            self._ban_from_dict(d)
            for d in await self._load(self._bans_path)
            if d["msft_id_hash"] == msft_id_hash
        ]
        return sorted(bans, key=lambda b: (b.issued_at, b.id), reverse=True)
    
    async def record_ban(
        self,
        msft_id_hash: str,
        reason: str,
        author: str,
        expires_at: Optional[datetime] = None
    ) -> Ban:
        async with self._lock:
            bans = await self._load(self._bans_path)
            ban = Ban(
                id=self._next_ban_id(bans),
                msft_id_hash=msft_id_hash,
                reason=reason,
                author=author,
                issued_at=self.clock(),
                expires_at=expires_at,
            )
            bans.append({
                "id": ban.id,
                "msft_id_hash": ban.msft_id_hash,
                "reason": ban.reason,
                "author": ban.author,
                "issued_at": ban.issued_at.isoformat(),
                "expires_at": ban.expires_at.isoformat() if ban.expires_at else None,
            })
            await self._save(self._bans_path, bans)
        return ban
    
    # ------------------------------------------------------------------
    # True identities
    # ------------------------------------------------------------------
    
    async def is_user_identifiable(self, capability: TrueIdentityCapability, user: LinkUser) -> bool:
        require_capability(capability, "is_user_identifiable")
        d = await self._find_user_dict(user.discord_id)
        return bool(d and d.get("true_identity"))
    
    async def get_true_identity(self, capability: TrueIdentityCapability, user: LinkUser) -> Optional[str]:
        require_capability(capability, "get_true_identity")
        d = await self._find_user_dict(user.discord_id)
        return d.get("true_identity") if d else None
    
    async def remove_true_identity(self, capability: TrueIdentityCapability, user: LinkUser) -> None:
        require_capability(capability, "remove_true_identity")
        async with self._lock:
            users = await self._load(self._users_path)
            for d in users:
                if d["discord_id"] == user.discord_id:
                    d["true_identity"] = None
            await self._save(self._users_path, users)
    
    async def record_identity_access(self, access: IdentityAccess) -> None:
        async with self._lock:
            accesses = await self._load(self._accesses_path)
            accesses.append(access.model_dump(mode="json"))
            await self._save(self._accesses_path, accesses)
    
    async def get_identity_accesses(self, discord_id: str) -> List[IdentityAccess]:
        """Return the identity accesses recorded for a user, oldest first."""
        return [
            self._access_from_dict(d)
            for d in await self._load(self._accesses_path)
            if d["discord_id"] == discord_id
        ]
