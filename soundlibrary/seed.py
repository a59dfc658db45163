import logging

from soundlibrary.models import NewTrack
from soundlibrary.store import CatalogStore

log = logging.getLogger(__name__)

_PEXELS = "https://images.pexels.com/photos/{0}/pexels-photo-{0}.jpeg?auto=compress&cs=tinysrgb&w=300&h=300"

# Listed newest first, the order the store returns them in
SAMPLE_TRACKS = [
    NewTrack(
        title="Ethereal Dreams", artist="SoundScape Studio", category="Ambient",
        duration_label="3:42", tempo=85, mood="Relaxed", license="Creative Commons",
        media_url="/tracks/ethereal-dreams.mp3", artwork_url=_PEXELS.format(1105666),
        tags={"chill", "meditation", "background"}, download_count=1247, like_count=89,
    ),
    NewTrack(
        title="Urban Pulse", artist="Beat Collective", category="Hip Hop",
        duration_label="2:58", tempo=128, mood="Energetic", license="Royalty Free",
        media_url="/tracks/urban-pulse.mp3", artwork_url=_PEXELS.format(1763075),
        tags={"urban", "modern", "upbeat"}, download_count=2341, like_count=156,
    ),
    NewTrack(
        title="Corporate Success", artist="ProMusic Labs", category="Corporate",
        duration_label="4:15", tempo=110, mood="Professional", license="Public Domain",
        media_url="/tracks/corporate-success.mp3", artwork_url=_PEXELS.format(1631677),
        tags={"business", "presentation", "motivational"}, download_count=987, like_count=67,
    ),
    NewTrack(
        title="Indie Reflection", artist="Acoustic Sessions", category="Indie Folk",
        duration_label="5:23", tempo=95, mood="Melancholic", license="Creative Commons",
        media_url="/tracks/indie-reflection.mp3", artwork_url=_PEXELS.format(1708912),
        tags={"acoustic", "emotional", "storytelling"}, download_count=1876, like_count=134,
    ),
    NewTrack(
        title="Electronic Horizons", artist="Digital Soundworks", category="Electronic",
        duration_label="6:01", tempo=140, mood="Futuristic", license="Royalty Free",
        media_url="/tracks/electronic-horizons.mp3", artwork_url=_PEXELS.format(1190297),
        tags={"synth", "tech", "innovation"}, download_count=3421, like_count=278,
    ),
    NewTrack(
        title="Cinematic Journey", artist="Epic Scores", category="Cinematic",
        duration_label="4:47", tempo=75, mood="Epic", license="Creative Commons",
        media_url="/tracks/cinematic-journey.mp3",
        tags={"orchestral", "dramatic", "film"}, download_count=2156, like_count=198,
    ),
    # Rows without mood/tag enrichment
    NewTrack(title="Epic Adventure", artist="John Doe", category="Cinematic",
             duration_label="3:45", download_count=120, media_url="/tracks/epic-adventure.mp3"),
    NewTrack(title="Calm Piano", artist="Jane Smith", category="Classical",
             duration_label="2:30", download_count=85, media_url="/tracks/calm-piano.mp3"),
    NewTrack(title="Upbeat Pop", artist="The Beats", category="Pop",
             duration_label="4:00", download_count=200, media_url="/tracks/upbeat-pop.mp3"),
    NewTrack(title="Rock Anthem", artist="Rockers", category="Rock",
             duration_label="3:15", download_count=150, media_url="/tracks/rock-anthem.mp3"),
    NewTrack(title="Jazz Vibes", artist="Smooth Jazz Band", category="Jazz",
             duration_label="5:20", download_count=95, media_url="/tracks/jazz-vibes.mp3"),
]


async def seed_catalog(store: CatalogStore, tracks: list[NewTrack] = SAMPLE_TRACKS) -> int:
    """Insert the sample catalog if the store is empty. Returns rows inserted."""
    if await store.count_tracks() > 0:
        return 0
    # Oldest first so the first sample ends up newest
    for record in reversed(tracks):
        await store.insert_track(record)
    log.info("Seeded catalog with %d sample tracks", len(tracks))
    return len(tracks)
