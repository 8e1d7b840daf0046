"""Key-value stores holding unlink cooldown deadlines."""

import asyncio
import json
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Optional, Protocol

from ..lib.clock import Clock, ensure_utc, utc_now
from ..lib.exceptions import StoreUnavailableError
from ..lib.logging import get_logger

logger = get_logger(__name__)


class CooldownStorage(Protocol):
    """Store mapping a key to the time at which its cooldown ends."""
    
    async def get(self, key: str) -> Optional[datetime]:
        """Return the stored deadline for a key, or None if there is none."""
        ...
    
    async def set(self, key: str, ttl_seconds: int) -> None:
        """Set the deadline of a key to now + ttl_seconds, replacing any previous value."""
        ...


class MemoryCooldownStorage:
    """
    In-process cooldown store.
    
    Suitable for a single bot process and for tests.
    """
    
    def __init__(self, clock: Clock = utc_now):
        """
        Initialize memory cooldown storage.
        
        Args:
            clock: Time source
        """
        self.clock = clock
        self._deadlines: Dict[str, datetime] = {}
        self._lock = asyncio.Lock()
    
    async def get(self, key: str) -> Optional[datetime]:
        async with self._lock:
            return self._deadlines.get(key)
    
    async def set(self, key: str, ttl_seconds: int) -> None:
        async with self._lock:
            self._deadlines[key] = self.clock() + timedelta(seconds=ttl_seconds)


class JsonCooldownStorage:
    """
    Cooldown store persisted to a single local JSON file.
    
    Each write replaces the whole file atomically, so a cancelled request
    never leaves a partially written store behind.
    """
    
    def __init__(self, path: Path, clock: Clock = utc_now):
        """
        Initialize JSON cooldown storage.
        
        Args:
            path: JSON file holding the deadlines
            clock: Time source
        """
        self.path = path
        self.clock = clock
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()
        
        logger.info("cooldown_storage_initialized", path=str(self.path))
    
    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("cooldown_storage_read_failed", path=str(self.path), error=str(e))
            raise StoreUnavailableError(f"Cannot read cooldown store {self.path}") from e
        if not isinstance(data, dict):
            raise StoreUnavailableError(f"Malformed cooldown store {self.path}")
        return data
    
    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("cooldown_storage_write_failed", path=str(self.path), error=str(e))
            raise StoreUnavailableError(f"Cannot write cooldown store {self.path}") from e
    
    async def get(self, key: str) -> Optional[datetime]:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
        value = data.get(key)
        if value is None:
            return None
        try:
            return ensure_utc(datetime.fromisoformat(value))
        except (ValueError, TypeError) as e:
            logger.error("cooldown_entry_malformed", path=str(self.path), key=key, value=str(value)[:200])
            raise StoreUnavailableError(f"Malformed cooldown entry {key!r} in {self.path}") from e
    
    async def set(self, key: str, ttl_seconds: int) -> None:
        deadline = self.clock() + timedelta(seconds=ttl_seconds)
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = deadline.isoformat()
            await asyncio.to_thread(self._write, data)
