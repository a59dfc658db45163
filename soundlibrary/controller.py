import logging

from fastapi import Request

from soundlibrary.catalog import CatalogIndex, artwork_for, category_of
from soundlibrary.config import DISPLAY_MISSING, DISPLAY_UNKNOWN_ARTIST
from soundlibrary.errors import FetchError
from soundlibrary.media import MediaBackend
from soundlibrary.models import Track, TrackId, TrackOut
from soundlibrary.playback import PlaybackSession, media_acquirer
from soundlibrary.store import CatalogStore
from soundlibrary.transfers import DirectorySaver, TransferController

log = logging.getLogger(__name__)


class CatalogController:
    """
    Owns one browsing/playback session: the catalog index, the playback
    session and the transfer controller. Routers receive it by dependency
    injection; there is no module-level instance.
    """

    def __init__(self, store: CatalogStore, media: MediaBackend, saver: DirectorySaver | None = None):
        self.store = store
        self.media = media
        self.index = CatalogIndex()
        self.playback = PlaybackSession(media_acquirer(media))
        self.transfers = TransferController(
            store, media, saver or DirectorySaver(), on_catalog_changed=self.refresh
        )
        self.catalog_error: str | None = None
        self._refresh_generation = 0
        self._disposed = False

    async def refresh(self) -> bool:
        """Re-fetch the catalog. A stale or post-disposal result is dropped."""
        self._refresh_generation += 1
        token = self._refresh_generation
        try:
            tracks = await self.store.list_tracks()
        except FetchError as e:
            if token == self._refresh_generation and not self._disposed:
                self.catalog_error = str(e)
            log.error("Error fetching tracks: %s", e)
            return False

        if token != self._refresh_generation or self._disposed:
            log.debug("Dropping stale catalog fetch")
            return False

        self.index.replace(tracks)
        self.catalog_error = None
        log.info("Catalog loaded: %d tracks", len(tracks))
        return True

    def track(self, track_id: TrackId) -> Track | None:
        return self.index.get(track_id)

    def track_out(self, track: Track) -> TrackOut:
        state = self.playback.state
        is_active = state.active_track_id is not None and str(state.active_track_id) == str(track.id)
        return TrackOut(
            id=track.id,
            title=track.title,
            artist=track.artist or DISPLAY_UNKNOWN_ARTIST,
            category=category_of(track),
            mood=track.mood or DISPLAY_MISSING,
            tempo=f"{track.tempo} BPM" if track.tempo is not None else DISPLAY_MISSING,
            license=track.license or DISPLAY_MISSING,
            tags=sorted(track.tags),
            duration=track.duration_label,
            downloads=track.download_count,
            downloads_label=f"{track.download_count:,}",
            likes=track.like_count,
            url=track.media_url,
            artwork_url=artwork_for(track),
            transfer=self.transfers.status(track.id),
            is_active=is_active,
            is_playing=is_active and state.is_playing,
        )

    async def dispose(self):
        """Stop playback and settle transfer status when the session ends."""
        if self._disposed:
            return
        self._disposed = True
        self.playback.dispose()
        self.transfers.dispose()
        await self.media.aclose()
        log.info("Session disposed")


def get_controller(request: Request) -> CatalogController:
    return request.app.state.controller
