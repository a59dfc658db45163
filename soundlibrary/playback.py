"""
Single-stream playback session.

A PlaybackSession owns zero or one open MediaHandle. Pressing a track
toggles play/pause on the active one, or releases it and acquires a handle
for the new track. Acquisition is asynchronous; every acquisition is tagged
with a generation token so a handle that resolves after a newer press (or a
stop) is closed immediately instead of becoming audible.
"""
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from soundlibrary.errors import PlaybackAcquisitionError
from soundlibrary.media import MediaBackend, content_type_for_name
from soundlibrary.models import PlaybackState, PlaybackStatus, Track, TrackId

log = logging.getLogger(__name__)

NOW_PLAYING = "now_playing"
PAUSED = "paused"
STOPPED = "stopped"
ENDED = "ended"
ERROR = "error"


class MediaHandle:
    """An open, stateful playback resource for one audio stream."""

    def __init__(self, track_id: TrackId, payload: bytes, content_type: str = "application/octet-stream"):
        self.track_id = track_id
        self.payload = payload
        self.content_type = content_type
        self.playing = False
        self.closed = False
        self._ended_callbacks: list[Callable[["MediaHandle"], None]] = []

    def play(self):
        if self.closed:
            raise RuntimeError(f"Handle for track {self.track_id} is closed")
        self.playing = True

    def pause(self):
        self.playing = False

    def close(self):
        self.playing = False
        self.closed = True

    def on_ended(self, callback: Callable[["MediaHandle"], None]):
        self._ended_callbacks.append(callback)

    def finish(self):
        """Signal natural end of stream."""
        if self.closed:
            return
        self.playing = False
        for callback in list(self._ended_callbacks):
            callback(self)


Acquirer = Callable[[Track], Awaitable[MediaHandle]]


def media_acquirer(media: MediaBackend) -> Acquirer:
    """Build an acquirer that opens handles from the Media Backend."""

    async def acquire(track: Track) -> MediaHandle:
        resp = await media.fetch(track.media_url)
        content_type = resp.headers.get("content-type") or content_type_for_name(track.media_url)
        return MediaHandle(track.id, resp.content, content_type)

    return acquire


@dataclass(frozen=True)
class PlaybackEvent:
    kind: str
    track_id: TrackId | None


class PlaybackSession:
    """
    Listeners see exactly one event per return to Idle from a known track:

    - ``stopped``: Playing/Paused left by stop, a press on another track,
      or dispose
    - ``ended``: the active stream finished naturally
    - ``error``: Loading failed; no ``stopped`` follows

    A load superseded by another press or a stop emits nothing.
    """

    def __init__(self, acquire: Acquirer):
        self._acquire = acquire
        self._listeners: list[Callable[[PlaybackEvent], None]] = []
        self._handle: MediaHandle | None = None
        self._active_id: TrackId | None = None
        self._status = PlaybackStatus.IDLE
        self._error: str | None = None
        self._generation = 0
        self._disposed = False
        self.last_error: PlaybackAcquisitionError | None = None

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            active_track_id=self._active_id,
            is_playing=self._status is PlaybackStatus.PLAYING,
            status=self._status,
            error=self._error,
        )

    @property
    def active_handle(self) -> MediaHandle | None:
        return self._handle

    @property
    def disposed(self) -> bool:
        return self._disposed

    def subscribe(self, listener: Callable[[PlaybackEvent], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str, track_id: TrackId | None):
        log.info("Playback %s: track %s", kind, track_id)
        event = PlaybackEvent(kind, track_id)
        for listener in list(self._listeners):
            listener(event)

    def _is_active(self, track_id: TrackId) -> bool:
        return self._active_id is not None and str(self._active_id) == str(track_id)

    def _release(self, event: str = STOPPED):
        """Close the current handle (if any) and return to Idle."""
        previous_id = self._active_id
        was_audible = self._status in (PlaybackStatus.PLAYING, PlaybackStatus.PAUSED)
        # Invalidates any pending acquisition
        self._generation += 1
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self._active_id = None
        self._status = PlaybackStatus.IDLE
        if was_audible:
            self._emit(event, previous_id)

    async def press(self, track: Track) -> PlaybackState:
        if self._disposed:
            log.debug("Ignoring press on disposed session: track %s", track.id)
            return self.state

        if self._is_active(track.id):
            if self._status is PlaybackStatus.PLAYING:
                self._handle.pause()
                self._status = PlaybackStatus.PAUSED
                self._emit(PAUSED, track.id)
                return self.state
            if self._status is PlaybackStatus.PAUSED:
                self._handle.play()
                self._status = PlaybackStatus.PLAYING
                self._emit(NOW_PLAYING, track.id)
                return self.state
            # Already loading this track
            return self.state

        self._release()
        token = self._generation
        self._active_id = track.id
        self._status = PlaybackStatus.LOADING
        self._error = None

        try:
            handle = await self._acquire(track)
        except Exception as e:
            if token != self._generation:
                log.debug("Stale acquisition for track %s failed: %s", track.id, e)
                return self.state
            error = PlaybackAcquisitionError(track.id, e)
            log.warning("%s", error)
            self._active_id = None
            self._status = PlaybackStatus.IDLE
            self._error = str(error)
            self.last_error = error
            self._emit(ERROR, track.id)
            return self.state

        if token != self._generation or self._disposed:
            log.info("Releasing stale handle for track %s", track.id)
            handle.close()
            return self.state

        self._handle = handle
        handle.on_ended(self._handle_ended)
        handle.play()
        self._status = PlaybackStatus.PLAYING
        self._emit(NOW_PLAYING, track.id)
        return self.state

    def _handle_ended(self, handle: MediaHandle):
        if handle is self._handle:
            self._release(ENDED)

    def end_of_stream(self, track_id: TrackId | None = None) -> PlaybackState:
        """Natural end of the active stream, reported by the client."""
        if self._handle is not None and (track_id is None or self._is_active(track_id)):
            self._handle.finish()
        return self.state

    def stop(self) -> PlaybackState:
        self._release()
        return self.state

    async def next(self, tracks: Sequence[Track]) -> PlaybackState:
        return await self._step(tracks, 1)

    async def previous(self, tracks: Sequence[Track]) -> PlaybackState:
        return await self._step(tracks, -1)

    async def _step(self, tracks: Sequence[Track], offset: int) -> PlaybackState:
        if not tracks:
            return self.state
        position = next(
            (i for i, t in enumerate(tracks) if self._is_active(t.id)), None
        )
        if position is None:
            target = tracks[0]
        else:
            target = tracks[(position + offset) % len(tracks)]
            if self._is_active(target.id):
                # Single-track view, nothing to move to
                return self.state
        return await self.press(target)

    def dispose(self):
        """Release playback when the owning session goes away."""
        self._release()
        self._disposed = True
