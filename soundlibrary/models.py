from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from soundlibrary.config import ALL, UNKNOWN_DURATION

TrackId = int | str


class NewTrack(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    artist: str | None = None
    category: str | None = None
    mood: str | None = None
    tempo: int | None = None
    license: str | None = None
    tags: frozenset[str] = frozenset()
    duration_label: str = UNKNOWN_DURATION
    media_url: str = Field(min_length=1)
    artwork_url: str | None = None
    download_count: int = Field(default=0, ge=0)
    like_count: int | None = None


class Track(NewTrack):
    id: TrackId


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    category: str = ALL
    mood: str = ALL


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackState(BaseModel):
    active_track_id: TrackId | None = None
    is_playing: bool = False
    status: PlaybackStatus = PlaybackStatus.IDLE
    error: str | None = None


class TransferKind(str, Enum):
    IDLE = "idle"
    DOWNLOADING = "downloading"
    UPLOADING = "uploading"


class TrackOut(BaseModel):
    id: TrackId
    title: str
    artist: str
    category: str
    mood: str
    tempo: str
    license: str
    tags: list[str] = []
    duration: str
    downloads: int = 0
    downloads_label: str = "0"
    likes: int | None = None
    url: str
    artwork_url: str
    transfer: TransferKind = TransferKind.IDLE
    is_active: bool = False
    is_playing: bool = False


class TrackGroupOut(BaseModel):
    category: str | None = None
    tracks: list[TrackOut] = []


class CatalogView(BaseModel):
    filter: FilterState
    total: int = 0
    count: int = 0
    empty: bool = True
    groups: list[TrackGroupOut] = []


class TransferOut(BaseModel):
    key: str
    kind: TransferKind


class TransferResultOut(BaseModel):
    key: str
    kind: TransferKind
    ok: bool
    message: str
    filename: str | None = None
    track_id: TrackId | None = None


class StatusOut(BaseModel):
    total_tracks: int = 0
    visible_tracks: int = 0
    playback: PlaybackState = PlaybackState()
    transfers: list[TransferOut] = []
    storage_mb: float = 0.0
    catalog_error: str | None = None
