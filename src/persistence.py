"""State persistence for Intercom Door using SQLite."""

import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

from config import DEFAULT_DB_PATH
from models.lock import LockStateCode
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)


class StateStore:
    """Persistent lock state, one record per device name.

    Reads and writes are synchronous for the devices: every record is loaded
    into memory by ``initialize`` and ``set_item`` queues the database write
    in the background. Writes are applied in the order they were queued.
    Malformed records are ignored, never raised.
    """

    def __init__(self, db_path: Path | str | None = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._cache: dict[str, LockStateCode] = {}
        self._pending: set[asyncio.Task] = set()

    async def initialize(self) -> None:
        """Open the database, create the schema and load every record."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._db = await aiosqlite.connect(str(self.db_path))
        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS lock_state (
                name TEXT PRIMARY KEY,
                value_json TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._db.commit()

        async with self._db.execute("SELECT name, value_json FROM lock_state") as cursor:
            rows = await cursor.fetchall()

        for name, value_json in rows:
            try:
                self._cache[name] = self._decode(name, value_json)
            except PersistenceError as e:
                logger.warning(f"Ignoring {e}")

        logger.info(f"Initialized state store at {self.db_path} ({len(self._cache)} records)")

    @staticmethod
    def _decode(name: str, value_json: str) -> LockStateCode:
        try:
            value = json.loads(value_json)
        except (TypeError, ValueError) as e:
            raise PersistenceError(name, f"unparsable value {value_json!r}") from e
        state = LockStateCode.parse(value)
        if state is None:
            raise PersistenceError(name, f"not a lock state: {value!r}")
        return state

    def get_item(self, name: str) -> LockStateCode | None:
        """Get the last stored state for a device, or None if absent."""
        return self._cache.get(name)

    def set_item(self, name: str, state: LockStateCode) -> None:
        """Store a device's state. The database write happens in the background."""
        state = LockStateCode(state)
        self._cache[name] = state
        if not self._db:
            return

        task = asyncio.get_running_loop().create_task(self._write(name, state))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write(self, name: str, state: LockStateCode) -> None:
        async with self._lock:
            if not self._db:
                return
            try:
                await self._db.execute(
                    """
                    INSERT OR REPLACE INTO lock_state (name, value_json, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    (name, json.dumps(int(state)), datetime.now().isoformat()),
                )
                await self._db.commit()
            except Exception as e:
                logger.error(str(PersistenceError(name, f"write failed: {e}")))

    async def flush(self) -> None:
        """Wait for every queued write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Flush pending writes and close the database connection."""
        await self.flush()
        if self._db:
            await self._db.close()
            self._db = None
