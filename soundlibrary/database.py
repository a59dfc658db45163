from pathlib import Path

import aiosqlite

from soundlibrary.config import DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS tracks (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    artist TEXT,
    category TEXT,
    mood TEXT,
    tempo INTEGER,
    license TEXT,
    tags TEXT NOT NULL DEFAULT '[]',
    duration TEXT NOT NULL DEFAULT 'unknown',
    downloads INTEGER NOT NULL DEFAULT 0,
    likes INTEGER,
    url TEXT NOT NULL CHECK (url != ''),
    artwork TEXT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_tracks_created ON tracks(created_at);
CREATE INDEX IF NOT EXISTS idx_tracks_category ON tracks(category);
"""


async def get_db(path: Path = DB_PATH) -> aiosqlite.Connection:
    db = await aiosqlite.connect(str(path))
    db.row_factory = aiosqlite.Row
    try:
        await db.execute("PRAGMA journal_mode=WAL")
    except aiosqlite.Error:
        await db.close()
        raise
    return db


async def init_db(path: Path = DB_PATH):
    path.parent.mkdir(parents=True, exist_ok=True)
    db = await get_db(path)
    try:
        await db.executescript(SCHEMA)
        await db.commit()
    finally:
        await db.close()
