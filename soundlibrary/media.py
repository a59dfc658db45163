import logging
from pathlib import PurePosixPath
from urllib.parse import urljoin, urlparse

import httpx

from soundlibrary.config import FETCH_TIMEOUT, PUBLIC_BASE_URL
from soundlibrary.errors import FetchError

log = logging.getLogger(__name__)


def content_type_for_name(name: str) -> str:
    ext = PurePosixPath(urlparse(name).path).suffix.lower()
    return {
        ".ogg": "audio/ogg",
        ".mp3": "audio/mpeg",
        ".wav": "audio/wav",
        ".flac": "audio/flac",
    }.get(ext, "application/octet-stream")


class MediaBackend:
    """
    Byte source for track media locators. Used identically for playback
    handle acquisition and downloads.
    """

    def __init__(
        self,
        base_url: str = PUBLIC_BASE_URL,
        client: httpx.AsyncClient | None = None,
        timeout: float = FETCH_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def resolve(self, url: str) -> str:
        """Resolve relative locators (e.g. /tracks/x.mp3) against the base URL."""
        return urljoin(self.base_url, url)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
        return self._client

    async def fetch(self, url: str) -> httpx.Response:
        target = self.resolve(url)
        try:
            resp = await self._get_client().get(target, timeout=self.timeout)
        except httpx.HTTPError as e:
            log.debug("Fetch error %s: %s", target, e)
            raise FetchError(None, str(e) or type(e).__name__, target) from e
        if not resp.is_success:
            log.debug("Fetch failed HTTP %d: %s", resp.status_code, target)
            raise FetchError(resp.status_code, resp.reason_phrase, target)
        return resp

    async def fetch_bytes(self, url: str) -> bytes:
        resp = await self.fetch(url)
        return resp.content

    async def aclose(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
