"""
Download and upload orchestration with per-key in-flight status.

Download status is keyed by track id, upload status by a client-local slot
("upload-<n>") since no track id exists yet. Every status entry carries the
token of the operation that set it; an operation only clears its own entry.
Both operations report failures through TransferResult, logged once, and
always settle their status entry.
"""
import itertools
import logging
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path, PurePath

from soundlibrary.config import (
    DOWNLOAD_EXTENSION, DOWNLOADS_DIR, UNKNOWN_DURATION, UPLOADED_ARTIST, UPLOADED_CATEGORY,
)
from soundlibrary.errors import SoundLibraryError, StoreError, ValidationError
from soundlibrary.media import MediaBackend
from soundlibrary.models import NewTrack, Track, TrackId, TransferKind
from soundlibrary.store import CatalogStore

log = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def suggested_filename(track: Track) -> str:
    name = _UNSAFE_CHARS.sub("_", track.title).strip(" .") or f"track-{track.id}"
    return name + DOWNLOAD_EXTENSION


def title_from_filename(filename: str) -> str:
    """Filename with its last extension stripped."""
    return re.sub(r"\.[^/.]+$", "", filename) or filename


@dataclass
class SelectedFile:
    name: str
    data: bytes
    content_type: str | None = None


@dataclass
class TransferResult:
    key: TrackId | str
    kind: TransferKind
    ok: bool
    error: SoundLibraryError | None = None
    filename: str | None = None
    track: Track | None = None
    discarded: bool = False

    @property
    def message(self) -> str:
        if self.discarded:
            return "Discarded after session ended"
        if isinstance(self.error, StoreError):
            return self.error.user_message()
        if self.error is not None:
            return str(self.error)
        if self.kind is TransferKind.DOWNLOADING:
            return f"Saved {self.filename}"
        return "File uploaded successfully and added to the list!"


class DirectorySaver:
    """Host save mechanism: writes downloads into a directory, never clobbering."""

    def __init__(self, directory: Path = DOWNLOADS_DIR):
        self.directory = Path(directory)

    def save(self, data: bytes, filename: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        name = PurePath(filename).name
        stem, suffix = PurePath(name).stem, PurePath(name).suffix
        dest = self.directory / name
        for n in itertools.count(1):
            try:
                with open(dest, "xb") as f:
                    f.write(data)
                break
            except FileExistsError:
                dest = self.directory / f"{stem} ({n}){suffix}"
        log.info("Saved download %s (%d bytes)", dest, len(data))
        return dest


class TransferController:
    def __init__(
        self,
        store: CatalogStore,
        media: MediaBackend,
        saver: DirectorySaver,
        on_catalog_changed: Callable[[], Awaitable[object]] | None = None,
    ):
        self._store = store
        self._media = media
        self._saver = saver
        self._on_catalog_changed = on_catalog_changed
        self._status: dict[TrackId | str, tuple[TransferKind, int]] = {}
        self._tokens = itertools.count(1)
        self._slots = itertools.count(1)
        self._last_prefix = 0
        self._disposed = False
        self.selected_file: SelectedFile | None = None

    # -------------------------
    # Status
    # -------------------------

    def status(self, key: TrackId | str) -> TransferKind:
        entry = self._status.get(key)
        return entry[0] if entry else TransferKind.IDLE

    def snapshot(self) -> dict[TrackId | str, TransferKind]:
        return {key: kind for key, (kind, _) in self._status.items()}

    def _mark(self, key: TrackId | str, kind: TransferKind) -> int:
        token = next(self._tokens)
        self._status[key] = (kind, token)
        return token

    def _clear(self, key: TrackId | str, token: int):
        entry = self._status.get(key)
        if entry and entry[1] == token:
            del self._status[key]

    def _storage_key(self, filename: str) -> str:
        # Unique even for identically named files within the same millisecond
        prefix = max(int(time.time() * 1000), self._last_prefix + 1)
        self._last_prefix = prefix
        return f"{prefix}-{PurePath(filename).name}"

    def select_file(self, file: SelectedFile | None):
        self.selected_file = file

    # -------------------------
    # Operations
    # -------------------------

    async def download(self, track: Track) -> TransferResult:
        key = track.id
        if self.status(key) is TransferKind.DOWNLOADING:
            error = ValidationError(f"Track {track.id} is already downloading")
            log.info("%s", error)
            return TransferResult(key, TransferKind.DOWNLOADING, False, error=error)

        token = self._mark(key, TransferKind.DOWNLOADING)
        result = TransferResult(key, TransferKind.DOWNLOADING, False)
        try:
            data = await self._media.fetch_bytes(track.media_url)
            if self._disposed:
                result.discarded = True
                return result
            saved = self._saver.save(data, suggested_filename(track))
            result.ok = True
            result.filename = saved.name
        except SoundLibraryError as e:
            result.error = e
        except OSError as e:
            result.error = SoundLibraryError(f"Could not save download: {e}")
        finally:
            self._clear(key, token)

        if result.error is not None:
            log.warning("Download failed for track %s: %s", track.id, result.error)
        return result

    async def upload(self, file: SelectedFile | None = None) -> TransferResult:
        file = file if file is not None else self.selected_file
        if file is None or not file.name:
            error = ValidationError("Please select a file to upload.")
            log.info("Upload rejected: %s", error)
            return TransferResult("upload", TransferKind.UPLOADING, False, error=error)
        if not file.data:
            error = ValidationError(f"Selected file {file.name!r} is empty.")
            log.info("Upload rejected: %s", error)
            return TransferResult("upload", TransferKind.UPLOADING, False, error=error)

        slot = f"upload-{next(self._slots)}"
        token = self._mark(slot, TransferKind.UPLOADING)
        result = TransferResult(slot, TransferKind.UPLOADING, False)
        try:
            key = self._storage_key(file.name)
            path = await self._store.upload_asset(key, file.data)
            record = NewTrack(
                title=title_from_filename(file.name),
                artist=UPLOADED_ARTIST,
                category=UPLOADED_CATEGORY,
                duration_label=UNKNOWN_DURATION,
                download_count=0,
                media_url=self._store.public_url(path),
            )
            result.track = await self._store.insert_track(record)
            result.filename = key
            result.ok = True
            if self._disposed:
                result.discarded = True
            elif self._on_catalog_changed is not None:
                await self._on_catalog_changed()
        except SoundLibraryError as e:
            result.error = e
        finally:
            self._clear(slot, token)
            if self.selected_file is file:
                self.selected_file = None

        if result.error is not None:
            log.warning("Upload of %r failed: %s", file.name, result.error)
        else:
            log.info("Uploaded %r as track %s", file.name, result.track.id)
        return result

    def dispose(self):
        self._disposed = True
        self._status.clear()
