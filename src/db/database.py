# manages connection to db, provides helper methods internal to db package
import asyncio
import os.path
from contextlib import asynccontextmanager
from sqlite3 import Row

import aiosqlite

from utils import config
from utils.logger import get_logger
from utils.security import hash_password

_logger = get_logger(__name__)

_HERE = os.path.dirname(os.path.abspath(__file__))

DB_PATH = config.DB_PATH
DB_INIT_SCRIPTS = [os.path.join(_HERE, "schema.sql")]
DB_SEED_SCRIPTS = [os.path.join(_HERE, "seed.sql")]

_initialized = False
_init_lock = asyncio.Lock()


async def _run_scripts(conn: aiosqlite.Connection, scripts) -> None:
    for script in scripts:
        if not os.path.exists(script) or os.path.getsize(script) == 0:
            continue
        _logger.info(f"Running database script {os.path.basename(script)}...")
        with open(script, "r") as f:
            await conn.executescript(f.read())


async def _count(conn: aiosqlite.Connection, table_name: str) -> int:
    cur = await conn.execute(f"SELECT COUNT(1) FROM {table_name};")
    row = await cur.fetchone()
    await cur.close()
    return int(row[0]) if row else 0


async def _init_db(conn: aiosqlite.Connection) -> None:
    """Create tables, then seed the admin account and, into an empty catalogue, the sample products."""
    await _run_scripts(conn, DB_INIT_SCRIPTS)

    await conn.execute(
        "INSERT OR IGNORE INTO users (name, email, password, is_admin) VALUES (?, ?, ?, 1);",
        ("admin", config.ADMIN_EMAIL, hash_password(config.ADMIN_PASSWORD)),
    )

    if await _count(conn, "products") == 0:
        await _run_scripts(conn, DB_SEED_SCRIPTS)
    await conn.commit()


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent and not os.path.isdir(parent):
        os.makedirs(parent, exist_ok=True)


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Ensures the database is initialized (tables and seed data) on first use.
    """
    global _initialized
    _ensure_parent_dir(DB_PATH)
    conn = await aiosqlite.connect(DB_PATH)
    conn.row_factory = Row

    if not _initialized:
        async with _init_lock:
            if not _initialized:
                _logger.info(f"Initializing database at {DB_PATH}...")
                await _init_db(conn)
                _initialized = True
    try:
        yield conn
    finally:
        await conn.close()
