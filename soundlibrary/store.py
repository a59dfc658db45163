"""
Catalog Store: track records in SQLite plus a local public asset bucket.

Field mapping between the table and the domain model lives here and nowhere
else (url <-> media_url, duration <-> duration_label, downloads <->
download_count, likes <-> like_count, artwork <-> artwork_url).
"""
import json
import logging
from pathlib import Path, PurePosixPath
from urllib.parse import quote

import aiosqlite

from soundlibrary.config import (
    ASSET_BUCKET, DB_PATH, PUBLIC_BASE_URL, STORAGE_DIR, STORAGE_ROUTE,
)
from soundlibrary.database import get_db, init_db
from soundlibrary.errors import FetchError, StoreError, StoreErrorKind, classify_store_error
from soundlibrary.models import NewTrack, Track

log = logging.getLogger(__name__)

STORAGE_POLICY_MESSAGE = "new row violates row-level security policy"
TABLE_POLICY_MESSAGE = 'new row violates row-level security policy for table "tracks"'

COLUMNS = (
    "title", "artist", "category", "mood", "tempo", "license",
    "tags", "duration", "downloads", "likes", "url", "artwork",
)


def row_to_track(row) -> Track:
    try:
        tags = json.loads(row["tags"] or "[]")
    except json.JSONDecodeError:
        log.warning("Ignoring malformed tags for track %s", row["id"])
        tags = []
    return Track(
        id=row["id"],
        title=row["title"],
        artist=row["artist"],
        category=row["category"],
        mood=row["mood"],
        tempo=row["tempo"],
        license=row["license"],
        tags=frozenset(tags),
        duration_label=row["duration"],
        download_count=row["downloads"],
        like_count=row["likes"],
        media_url=row["url"],
        artwork_url=row["artwork"],
    )


def track_to_row(record: NewTrack) -> tuple:
    return (
        record.title,
        record.artist,
        record.category,
        record.mood,
        record.tempo,
        record.license,
        json.dumps(sorted(record.tags)),
        record.duration_label,
        record.download_count,
        record.like_count,
        record.media_url,
        record.artwork_url,
    )


class CatalogStore:
    def __init__(
        self,
        db_path: Path = DB_PATH,
        storage_dir: Path = STORAGE_DIR,
        bucket: str = ASSET_BUCKET,
        public_base_url: str = PUBLIC_BASE_URL,
        allow_uploads: bool = True,
        allow_inserts: bool = True,
    ):
        self.db_path = Path(db_path)
        self.storage_dir = Path(storage_dir)
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        # Access policies, the local equivalent of row-level security
        self.allow_uploads = allow_uploads
        self.allow_inserts = allow_inserts

    @property
    def bucket_dir(self) -> Path:
        return self.storage_dir / self.bucket

    async def init(self):
        await init_db(self.db_path)

    async def list_tracks(self) -> list[Track]:
        """All tracks, newest first."""
        try:
            db = await get_db(self.db_path)
            try:
                cursor = await db.execute(
                    "SELECT * FROM tracks ORDER BY created_at DESC, id DESC"
                )
                rows = await cursor.fetchall()
            finally:
                await db.close()
        except aiosqlite.Error as e:
            log.debug("Error fetching tracks: %s", e)
            raise FetchError(None, str(e), str(self.db_path), what="tracks") from e
        return [row_to_track(r) for r in rows]

    async def count_tracks(self) -> int:
        try:
            db = await get_db(self.db_path)
            try:
                cursor = await db.execute("SELECT COUNT(*) as cnt FROM tracks")
                row = await cursor.fetchone()
            finally:
                await db.close()
        except aiosqlite.Error as e:
            raise FetchError(None, str(e), str(self.db_path), what="tracks") from e
        return row["cnt"]

    async def insert_track(self, record: NewTrack) -> Track:
        if not self.allow_inserts:
            raise StoreError(StoreErrorKind.TABLE_POLICY_DENIED, TABLE_POLICY_MESSAGE)

        placeholders = ", ".join("?" * len(COLUMNS))
        try:
            db = await get_db(self.db_path)
            try:
                cursor = await db.execute(
                    f"INSERT INTO tracks ({', '.join(COLUMNS)}) VALUES ({placeholders})",
                    track_to_row(record),
                )
                await db.commit()
                cursor = await db.execute("SELECT * FROM tracks WHERE id=?", (cursor.lastrowid,))
                row = await cursor.fetchone()
            finally:
                await db.close()
        except aiosqlite.Error as e:
            log.debug("Insert failed for %r: %s", record.title, e)
            raise StoreError(classify_store_error(str(e)), str(e)) from e
        return row_to_track(row)

    async def upload_asset(self, key: str, data: bytes) -> str:
        """Store bytes under key in the bucket; never overwrites. Returns the object path."""
        if not self.bucket_dir.is_dir():
            raise StoreError(StoreErrorKind.BUCKET_MISSING, "Bucket not found")
        if not self.allow_uploads:
            raise StoreError(StoreErrorKind.STORAGE_POLICY_DENIED, STORAGE_POLICY_MESSAGE)
        if not key or PurePosixPath(key).name != key or key in (".", ".."):
            raise StoreError(StoreErrorKind.UNKNOWN, f"Invalid key: {key!r}")

        dest = self.bucket_dir / key
        try:
            with open(dest, "xb") as f:
                f.write(data)
        except FileExistsError as e:
            raise StoreError(StoreErrorKind.UNKNOWN, "The resource already exists") from e
        except PermissionError as e:
            raise StoreError(StoreErrorKind.STORAGE_POLICY_DENIED, str(e)) from e
        except OSError as e:
            dest.unlink(missing_ok=True)
            raise StoreError(StoreErrorKind.UNKNOWN, str(e)) from e

        log.info("Stored asset %s/%s (%d bytes)", self.bucket, key, len(data))
        return key

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}{STORAGE_ROUTE}/{self.bucket}/{quote(path)}"

    def storage_bytes(self) -> int:
        if not self.bucket_dir.is_dir():
            return 0
        return sum(f.stat().st_size for f in self.bucket_dir.iterdir() if f.is_file())
