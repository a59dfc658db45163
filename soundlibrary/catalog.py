"""
In-memory catalog index: filtering, search and grouping over a track snapshot.

Everything here is synchronous and side-effect free apart from CatalogIndex
holding the current snapshot and FilterState. Tracks are never mutated;
every query returns a new list in the snapshot's order.
"""
import logging
from collections.abc import Iterable, Sequence
from urllib.parse import quote

from soundlibrary.config import ALL, ARTWORK_FALLBACK_URL, UNCLASSIFIED
from soundlibrary.models import FilterState, Track, TrackId

log = logging.getLogger(__name__)


def category_of(track: Track) -> str:
    return track.category or UNCLASSIFIED


def _matches_search(track: Track, needle: str) -> bool:
    if needle in track.title.casefold():
        return True
    if needle in (track.artist or "").casefold():
        return True
    return any(needle in tag.casefold() for tag in track.tags)


def view(tracks: Sequence[Track], filter_state: FilterState) -> list[Track]:
    """
    Return the tracks matching filter_state, preserving input order.

    Search matches title, artist or any tag as a case-insensitive substring.
    Category and mood are exact, case-sensitive matches; a missing category
    counts as "Unclassified", a missing mood never matches.
    """
    result = list(tracks)

    if filter_state.search_text:
        needle = filter_state.search_text.casefold()
        result = [t for t in result if _matches_search(t, needle)]

    if filter_state.category != ALL:
        result = [t for t in result if category_of(t) == filter_state.category]

    if filter_state.mood != ALL:
        result = [t for t in result if t.mood == filter_state.mood]

    return result


def group_tracks(
    tracks: Sequence[Track], by_category: bool = False
) -> list[tuple[str | None, list[Track]]]:
    """Group tracks by category in first-seen order, or return a single group."""
    if not by_category:
        return [(None, list(tracks))]

    groups: dict[str, list[Track]] = {}
    for track in tracks:
        groups.setdefault(category_of(track), []).append(track)
    return list(groups.items())


def _options(values: Iterable[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return [ALL, *seen]


def category_options(tracks: Sequence[Track]) -> list[str]:
    return _options(category_of(t) for t in tracks)


def mood_options(tracks: Sequence[Track]) -> list[str]:
    return _options(t.mood for t in tracks)


def artwork_for(track: Track) -> str:
    """Artwork locator, falling back to a stable per-id placeholder image."""
    if track.artwork_url:
        return track.artwork_url
    return ARTWORK_FALLBACK_URL.format(track_id=quote(str(track.id), safe=""))


class CatalogIndex:
    """Current catalog snapshot plus the FilterState applied to it."""

    def __init__(self, tracks: Iterable[Track] = ()):
        self._tracks: tuple[Track, ...] = ()
        self._by_id: dict[str, Track] = {}
        self._filter = FilterState()
        self.replace(tracks)

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    @property
    def filter(self) -> FilterState:
        return self._filter

    def replace(self, tracks: Iterable[Track]):
        """Swap in a new snapshot. Ids must be unique."""
        snapshot = tuple(tracks)
        by_id: dict[str, Track] = {}
        for track in snapshot:
            key = str(track.id)
            if key in by_id:
                raise ValueError(f"Duplicate track id in catalog snapshot: {track.id!r}")
            by_id[key] = track
        self._tracks = snapshot
        self._by_id = by_id
        log.debug("Catalog snapshot replaced: %d tracks", len(snapshot))

    def get(self, track_id: TrackId) -> Track | None:
        return self._by_id.get(str(track_id))

    def set_filter(self, filter_state: FilterState):
        self._filter = filter_state

    def set_search(self, text: str):
        self._filter = self._filter.model_copy(update={"search_text": text})

    def set_category(self, category: str):
        self._filter = self._filter.model_copy(update={"category": category})

    def set_mood(self, mood: str):
        self._filter = self._filter.model_copy(update={"mood": mood})

    def clear_search(self):
        self.set_search("")

    def clear_filters(self):
        self._filter = FilterState()

    def view(self) -> list[Track]:
        return view(self._tracks, self._filter)

    def grouped(self, by_category: bool = False) -> list[tuple[str | None, list[Track]]]:
        return group_tracks(self.view(), by_category)

    def category_options(self) -> list[str]:
        return category_options(self._tracks)

    def mood_options(self) -> list[str]:
        return mood_options(self._tracks)
