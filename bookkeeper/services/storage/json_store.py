"""
JSON File Storage Implementation

DESIGN DECISION: One JSON file per user because:
1. A user's whole data set is small and always needed together
2. Users can back up or inspect their own file
3. No database setup is required for a desktop application

TRADEOFFS:
- Every mutation rewrites the whole file
- One reader/writer lock guards the whole store, not each file, so a save
  for one user blocks loads for every other user in the same process
- No cross-file transactions (multi-document updates are sequential writes)
"""

from pathlib import Path
from typing import Optional
from urllib.parse import quote

import structlog

from bookkeeper.config import StorageSettings
from bookkeeper.models.ledger import UserData, UserProfile
from bookkeeper.services.storage.codec import (
    decode_profile,
    dumps_document,
    loads_document,
    parse_document_text,
)
from bookkeeper.services.storage.interface import (
    DocumentFormatError,
    UserStorageInterface,
)
from bookkeeper.services.storage.rwlock import ReadWriteLock


logger = structlog.get_logger(__name__)


class JsonUserStore(UserStorageInterface):
    """
    File-backed implementation of per-user storage.

    Each document lives at <data_dir>/<encoded user id><extension>.
    Saves and removals take the write side of the store lock; loads and
    profile listings take the read side.
    """

    def __init__(self, data_dir: Path, file_extension: str = ".json"):
        self._data_dir = Path(data_dir)
        self._extension = file_extension
        self._lock = ReadWriteLock()
        self._data_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "JsonUserStore":
        return cls(settings.resolved_data_dir, settings.file_extension)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def lock(self) -> ReadWriteLock:
        return self._lock

    def user_file_path(self, user_id: str) -> Path:
        """Path of a user's document; the id is percent-encoded to stay filesystem-safe."""
        return self._data_dir / f"{quote(user_id, safe='')}{self._extension}"

    def save_user(self, data: UserData) -> bool:
        """Truncate and rewrite the user's file under the write lock."""
        user_id = data.profile.id
        path = self.user_file_path(user_id)
        payload = dumps_document(data).encode("utf-8")

        with self._lock.write_locked():
            try:
                with open(path, "wb") as fh:
                    written = fh.write(payload)
                    fh.flush()
            except OSError as e:
                logger.error(
                    "user_save_failed",
                    user_id=user_id,
                    path=str(path),
                    error=str(e),
                )
                return False

        if written != len(payload):
            logger.error(
                "user_save_failed",
                user_id=user_id,
                path=str(path),
                error=f"short write: {written} of {len(payload)} bytes",
            )
            return False

        logger.debug("user_saved", user_id=user_id, size=len(payload))
        return True

    def load_user(self, user_id: str) -> Optional[UserData]:
        path = self.user_file_path(user_id)

        with self._lock.read_locked():
            try:
                text = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                logger.debug("user_load_failed", user_id=user_id, reason="missing")
                return None
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(
                    "user_load_failed",
                    user_id=user_id,
                    reason="unreadable",
                    error=str(e),
                )
                return None

        try:
            return loads_document(text)
        except DocumentFormatError as e:
            logger.warning(
                "user_load_failed",
                user_id=user_id,
                reason="unparseable",
                error=str(e),
            )
            return None

    def list_profiles(self) -> list[UserProfile]:
        """Profiles of all readable documents, in directory enumeration order."""
        profiles = []
        with self._lock.read_locked():
            for path in self._data_dir.glob(f"*{self._extension}"):
                try:
                    obj = parse_document_text(path.read_text(encoding="utf-8"))
                except (OSError, UnicodeDecodeError, DocumentFormatError) as e:
                    logger.debug("profile_skipped", path=str(path), error=str(e))
                    continue
                profiles.append(decode_profile(obj.get("profile")))
        return profiles

    def remove_user(self, user_id: str) -> bool:
        path = self.user_file_path(user_id)
        with self._lock.write_locked():
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                logger.error(
                    "user_remove_failed",
                    user_id=user_id,
                    path=str(path),
                    error=str(e),
                )
                return False
        logger.info("user_removed", user_id=user_id)
        return True
