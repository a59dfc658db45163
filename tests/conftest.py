"""Shared fixtures: isolated data dir, track factory, store and mocked media backend."""

import os
import tempfile

# Keep config's import-time directory creation out of the source tree
os.environ.setdefault("SOUNDLIBRARY_DATA_DIR", tempfile.mkdtemp(prefix="soundlibrary-test-"))

import httpx
import pytest

from soundlibrary.config import ASSET_BUCKET
from soundlibrary.media import MediaBackend
from soundlibrary.models import Track
from soundlibrary.store import CatalogStore

MEDIA_BASE = "http://media.test"


@pytest.fixture
def anyio_backend():
    return "asyncio"


def make_track(id, title="Track", **kwargs) -> Track:
    kwargs.setdefault("media_url", f"/tracks/{id}.mp3")
    return Track(id=id, title=title, **kwargs)


@pytest.fixture
def storage_dir(tmp_path):
    path = tmp_path / "storage"
    (path / ASSET_BUCKET).mkdir(parents=True)
    return path


@pytest.fixture
async def store(tmp_path, storage_dir):
    store = CatalogStore(
        db_path=tmp_path / "catalog.db",
        storage_dir=storage_dir,
        public_base_url=MEDIA_BASE,
    )
    await store.init()
    return store


def audio_handler(request: httpx.Request) -> httpx.Response:
    """Serve fake audio for any path except those containing 'missing' or 'broken'."""
    if "missing" in request.url.path:
        return httpx.Response(404)
    if "broken" in request.url.path:
        return httpx.Response(500)
    return httpx.Response(
        200, content=b"ID3" + request.url.path.encode(), headers={"content-type": "audio/mpeg"}
    )


@pytest.fixture
def media():
    client = httpx.AsyncClient(transport=httpx.MockTransport(audio_handler))
    return MediaBackend(base_url=MEDIA_BASE, client=client)
