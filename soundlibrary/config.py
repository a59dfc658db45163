from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Deployment overrides, read from SOUNDLIBRARY_* env vars or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SOUNDLIBRARY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Public address of this service; asset locators and relative media URLs resolve against it
    public_base_url: str = Field(default="http://127.0.0.1:8000")
    data_dir: Path = Field(default=BASE_DIR / "data")


settings = Settings()

PUBLIC_BASE_URL = settings.public_base_url.rstrip("/")

# Local paths
DATA_DIR = settings.data_dir
DB_PATH = DATA_DIR / "catalog.db"
STORAGE_DIR = DATA_DIR / "storage"
DOWNLOADS_DIR = DATA_DIR / "downloads"

# Asset bucket (must exist under STORAGE_DIR, uploads never create it)
ASSET_BUCKET = "music-tracks"
STORAGE_ROUTE = "/storage"

# Filter sentinels
ALL = "All"
UNCLASSIFIED = "Unclassified"

# Placeholders for uploaded tracks
UPLOADED_ARTIST = "Uploaded Artist"
UPLOADED_CATEGORY = "Uploaded"
UNKNOWN_DURATION = "unknown"

# Display defaults, never used for filtering
DISPLAY_UNKNOWN_ARTIST = "Unknown Artist"
DISPLAY_MISSING = "—"

# Downloads are always saved with this extension
DOWNLOAD_EXTENSION = ".mp3"

# Deterministic artwork when a track has none
ARTWORK_FALLBACK_URL = "https://picsum.photos/seed/soundlibrary-{track_id}/300/300"

# Fetch settings
FETCH_TIMEOUT = 60.0

# Seed an empty catalog with the sample tracks on startup
SEED_SAMPLE_CATALOG = True

# Ensure dirs exist
for d in [DATA_DIR, STORAGE_DIR / ASSET_BUCKET, DOWNLOADS_DIR]:
    d.mkdir(parents=True, exist_ok=True)
