# supplies aiosqlite connections to storage implementations
import asyncio
import os
import os.path
from contextlib import asynccontextmanager
from sqlite3 import Row
from typing import AsyncIterator, List, Optional

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

_HERE = os.path.dirname(os.path.abspath(__file__))

DB_PATH = os.getenv("WEBSHOP_DB_PATH", "data/webshop.sqlite")
SEED_DATA = os.getenv("WEBSHOP_SEED", "1").strip().lower() not in ("0", "false", "no")

SCHEMA_SCRIPT = os.path.join(_HERE, "schema.sql")
SEED_SCRIPT = os.path.join(_HERE, "seed-data.sql")


async def _table_exists(conn: aiosqlite.Connection, table_name: str) -> bool:
    cur = await conn.execute(
        """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table'
          AND name = ?;
        """,
        (table_name,),
    )
    row = await cur.fetchone()
    await cur.close()
    return row is not None


class ConnectionProvider:
    """
    Hands out aiosqlite connections with foreign keys enabled and rows as
    sqlite3.Row. The schema (and, optionally, seed data) is created the
    first time a database without an `accounts` table is opened.
    """

    def __init__(self, db_path: Optional[str] = None, seed: Optional[bool] = None):
        self.db_path = db_path or DB_PATH
        self.seed = SEED_DATA if seed is None else seed
        self._init_lock = asyncio.Lock()

    @property
    def init_scripts(self) -> List[str]:
        scripts = [SCHEMA_SCRIPT]
        if self.seed:
            scripts.append(SEED_SCRIPT)
        return scripts

    async def _init_db(self, conn: aiosqlite.Connection) -> None:
        for script in self.init_scripts:
            if not os.path.exists(script) or os.path.getsize(script) == 0:
                continue
            _logger.info(f"Initializing database with script {os.path.basename(script)}...")
            with open(script, "r", encoding="utf-8") as f:
                await conn.executescript(f.read())
        await conn.commit()

    async def acquire(self) -> aiosqlite.Connection:
        """Open a new connection, initializing the database if it is empty."""
        if self.db_path != ":memory:":
            folder = os.path.dirname(self.db_path)
            if folder:
                os.makedirs(folder, exist_ok=True)

        conn = await aiosqlite.connect(self.db_path)
        try:
            conn.row_factory = Row
            await conn.execute("PRAGMA foreign_keys = ON;")
            # LIKE filters match case exactly
            await conn.execute("PRAGMA case_sensitive_like = ON;")
            async with self._init_lock:
                if not await _table_exists(conn, "accounts"):
                    _logger.info(f"Initializing database at {self.db_path}...")
                    await self._init_db(conn)
        except BaseException:
            await conn.close()
            raise
        _logger.debug(f"Connection to {self.db_path} acquired.")
        return conn

    async def release(self, conn: aiosqlite.Connection) -> None:
        await conn.close()
        _logger.debug(f"Connection to {self.db_path} released.")

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Async context manager yielding a connection that is closed on exit."""
        conn = await self.acquire()
        try:
            yield conn
        finally:
            await self.release(conn)
