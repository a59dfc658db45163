"""
Error taxonomy shared by the catalog, playback and transfer operations.

Every collaborator failure is converted into one of these at the operation
boundary, logged once, and reported back as status. Nothing is retried.
"""
from enum import Enum

from soundlibrary.config import ASSET_BUCKET


class SoundLibraryError(Exception):
    """Base class for all errors surfaced to the caller."""


class ValidationError(SoundLibraryError):
    """Malformed input caught before any network call."""


class FetchError(SoundLibraryError):
    """Non-success response while fetching the catalog or media bytes."""

    def __init__(self, status_code: int | None, status_text: str, url: str = "", what: str = "track"):
        self.status_code = status_code
        self.status_text = status_text
        self.url = url
        super().__init__(f"Failed to fetch {what}: {status_text}")


class StoreErrorKind(str, Enum):
    BUCKET_MISSING = "bucket_missing"
    STORAGE_POLICY_DENIED = "storage_policy_denied"
    TABLE_POLICY_DENIED = "table_policy_denied"
    UNKNOWN = "unknown"


_HINTS = {
    StoreErrorKind.BUCKET_MISSING: (
        f'Please make sure a bucket named "{ASSET_BUCKET}" exists in the asset '
        "storage and is public."
    ),
    StoreErrorKind.STORAGE_POLICY_DENIED: (
        "This is a permissions error. Check that the storage policy allows "
        f'uploads to the "{ASSET_BUCKET}" bucket.'
    ),
    StoreErrorKind.TABLE_POLICY_DENIED: (
        "This is a database permissions error. Check that the table policy "
        'allows inserting into the "tracks" table.'
    ),
}


class StoreError(SoundLibraryError):
    """Insert or upload rejected by the Catalog Store."""

    def __init__(self, kind: StoreErrorKind, detail: str):
        self.kind = kind
        self.detail = detail
        super().__init__(detail)

    @property
    def is_configuration(self) -> bool:
        """True when an operator has to fix the store, False when retrying may help."""
        return self.kind is not StoreErrorKind.UNKNOWN

    @property
    def hint(self) -> str | None:
        return _HINTS.get(self.kind)

    def user_message(self) -> str:
        message = f"Error uploading file: {self.detail}"
        if self.hint:
            message += "\n\n" + self.hint
        return message


class PlaybackAcquisitionError(SoundLibraryError):
    """A media handle failed to start."""

    def __init__(self, track_id, cause: Exception):
        self.track_id = track_id
        self.cause = cause
        super().__init__(f"Could not play track {track_id}: {cause}")


def classify_store_error(message: str) -> StoreErrorKind:
    """Map a storage/database backend message to a StoreErrorKind."""
    lowered = message.lower()
    if "bucket not found" in lowered:
        return StoreErrorKind.BUCKET_MISSING
    # Table check first: its message also contains "security policy"
    if 'security policy for table "tracks"' in lowered or "readonly database" in lowered:
        return StoreErrorKind.TABLE_POLICY_DENIED
    if "security policy" in lowered or "permission denied" in lowered:
        return StoreErrorKind.STORAGE_POLICY_DENIED
    return StoreErrorKind.UNKNOWN
