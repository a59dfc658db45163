"""Tests for the SQLite-backed catalog store, its field mapping and seeding."""

import pytest

from soundlibrary.errors import FetchError, StoreError, StoreErrorKind, classify_store_error
from soundlibrary.models import NewTrack
from soundlibrary.seed import SAMPLE_TRACKS, seed_catalog
from soundlibrary.store import CatalogStore


@pytest.mark.anyio
async def test_insert_maps_fields_both_ways(store):
    record = NewTrack(
        title="Ethereal Dreams",
        artist="SoundScape Studio",
        category="Ambient",
        mood="Relaxed",
        tempo=85,
        license="Creative Commons",
        tags={"chill", "background"},
        duration_label="3:42",
        download_count=1247,
        like_count=89,
        media_url="/tracks/ethereal-dreams.mp3",
    )

    track = await store.insert_track(record)

    assert isinstance(track.id, int)
    assert track.model_dump(exclude={"id"}) == record.model_dump()


@pytest.mark.anyio
async def test_list_tracks_newest_first(store):
    for title in ["first", "second", "third"]:
        await store.insert_track(NewTrack(title=title, media_url=f"/{title}.mp3"))

    titles = [t.title for t in await store.list_tracks()]
    assert titles == ["third", "second", "first"]


@pytest.mark.anyio
async def test_list_tracks_failure_is_fetch_error(tmp_path):
    store = CatalogStore(db_path=tmp_path / "missing-dir" / "catalog.db", storage_dir=tmp_path)
    with pytest.raises(FetchError) as exc:
        await store.list_tracks()
    assert "Failed to fetch tracks" in str(exc.value)


@pytest.mark.anyio
async def test_upload_asset_never_overwrites(store):
    path = await store.upload_asset("1-a.mp3", b"one")
    assert path == "1-a.mp3"

    with pytest.raises(StoreError) as exc:
        await store.upload_asset("1-a.mp3", b"two")
    assert exc.value.kind is StoreErrorKind.UNKNOWN
    assert not exc.value.is_configuration
    assert (store.bucket_dir / "1-a.mp3").read_bytes() == b"one"


@pytest.mark.anyio
async def test_upload_asset_rejects_path_keys(store):
    with pytest.raises(StoreError):
        await store.upload_asset("../escape.mp3", b"x")


@pytest.mark.anyio
async def test_public_url_points_into_bucket(store):
    assert store.public_url("12-my song.mp3") == (
        "http://media.test/storage/music-tracks/12-my%20song.mp3"
    )


@pytest.mark.anyio
async def test_seed_only_fills_empty_catalog(store):
    assert await seed_catalog(store) == len(SAMPLE_TRACKS)
    assert await seed_catalog(store) == 0

    tracks = await store.list_tracks()
    assert [t.title for t in tracks] == [r.title for r in SAMPLE_TRACKS]


@pytest.mark.parametrize(
    "message, kind",
    [
        ("Bucket not found", StoreErrorKind.BUCKET_MISSING),
        ("new row violates row-level security policy", StoreErrorKind.STORAGE_POLICY_DENIED),
        ('new row violates row-level security policy for table "tracks"', StoreErrorKind.TABLE_POLICY_DENIED),
        ("attempt to write a readonly database", StoreErrorKind.TABLE_POLICY_DENIED),
        ("connection reset", StoreErrorKind.UNKNOWN),
    ],
)
def test_classify_store_error(message, kind):
    assert classify_store_error(message) is kind


@pytest.mark.anyio
async def test_unreachable_database_is_wrapped(store, tmp_path):
    store.db_path = tmp_path / "nope" / "x" / "catalog.db"

    with pytest.raises(StoreError):
        await store.insert_track(NewTrack(title="t", media_url="/t.mp3"))
    with pytest.raises(FetchError):
        await store.count_tracks()
