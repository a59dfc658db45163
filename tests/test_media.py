import httpx
import pytest

from soundlibrary.errors import FetchError
from soundlibrary.media import MediaBackend, content_type_for_name


@pytest.mark.anyio
async def test_fetch_bytes_resolves_relative_urls(media):
    data = await media.fetch_bytes("/tracks/a.mp3")
    assert data == b"ID3/tracks/a.mp3"


@pytest.mark.anyio
async def test_non_success_carries_status_text(media):
    with pytest.raises(FetchError) as exc:
        await media.fetch_bytes("/broken.mp3")
    assert exc.value.status_code == 500
    assert exc.value.status_text == "Internal Server Error"
    assert "Internal Server Error" in str(exc.value)


@pytest.mark.anyio
async def test_transport_errors_become_fetch_errors():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    media = MediaBackend("http://media.test", client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)))
    with pytest.raises(FetchError) as exc:
        await media.fetch_bytes("http://elsewhere.test/a.mp3")
    assert exc.value.status_code is None
    assert "connection refused" in str(exc.value)


def test_content_type_for_name():
    assert content_type_for_name("/storage/music-tracks/1-a.MP3") == "audio/mpeg"
    assert content_type_for_name("http://x.test/a.ogg?sig=1") == "audio/ogg"
    assert content_type_for_name("notes.txt") == "application/octet-stream"
