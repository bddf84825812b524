"""On-disk cache for the most recently minted credential pair.

Minting a token costs three GitHub API round trips and counts against the
app's rate limit, so the last pair is kept in a single JSON file and reused
until it gets close to GitHub's expiry.

Staleness is judged purely on the file's modification time. A missing file
and a file older than MAX_TOKEN_AGE are both a clean cache miss, never an
error.

There is no locking: two helper processes can race on read-then-write.
git invokes the helper synchronously, so this is accepted.
"""

import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import ValidationError

from ghapp_creds.core.errors import CredentialHelperError
from ghapp_creds.credentials.types import CredentialPair

logger = logging.getLogger(__name__)

# GitHub installation tokens expire after 60 minutes. Stop trusting a cached
# one at 45 so it can't expire in the middle of a long fetch or push.
MAX_TOKEN_AGE = timedelta(minutes=45)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class CacheError(CredentialHelperError):
    """Raised when the cache file can't be inspected or updated.

    Carries the path involved and the underlying cause.
    """

    action = "access"

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to {self.action} cache file at {str(path)!r}: {cause}")


class CacheStatError(CacheError):
    """Base for failures while determining the cache file's age."""


class StatFailedError(CacheStatError):
    action = "stat"


class ModifiedTimeError(CacheStatError):
    action = "get modification time for"


class ElapsedTimeError(CacheStatError):
    action = "calculate age of"


class CacheReadError(CacheError):
    """Base for failures while loading a fresh cache file."""


class ReadFailedError(CacheReadError):
    action = "read"


class DeserializeFailedError(CacheReadError):
    action = "deserialize credentials from"


class CacheWriteError(CacheError):
    """Base for failures while persisting a credential pair."""


class CreateDirFailedError(CacheWriteError):
    action = "create directory for"


class WriteFailedError(CacheWriteError):
    action = "write"


class CacheDeleteError(CacheError):
    action = "delete"


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


class CredentialCache:
    """A single credential pair persisted at a fixed path."""

    def __init__(self, path: Path, max_age: timedelta = MAX_TOKEN_AGE):
        self.path = Path(path)
        self.max_age = max_age

    def __repr__(self) -> str:
        return f"CredentialCache(path={str(self.path)!r}, max_age={self.max_age})"

    def age(self) -> timedelta | None:
        """Return how long ago the cache file was written, or None if absent.

        Raises:
            CacheStatError: If the file exists but its age can't be determined.
        """
        if not self.path.is_file():
            return None
        try:
            mtime = self.path.stat().st_mtime
        except OSError as exc:
            raise StatFailedError(self.path, exc) from exc
        try:
            modified = datetime.fromtimestamp(mtime, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ModifiedTimeError(self.path, exc) from exc
        age = datetime.now(timezone.utc) - modified
        if age < timedelta(0):
            raise ElapsedTimeError(
                self.path,
                ValueError(f"modification time {modified.isoformat()} is in the future"),
            )
        return age

    def is_stale(self) -> bool:
        """True if the cached pair must not be used (absent or too old)."""
        logger.info("Checking creds file at %s", self.path)
        age = self.age()
        if age is None:
            logger.info("No creds file currently exists")
            return True
        logger.info("Current creds file is %d minutes old", age.total_seconds() // 60)
        return age >= self.max_age

    def read(self) -> CredentialPair | None:
        """Return the cached pair, or None on a clean miss.

        Raises:
            CacheStatError: If the file's age can't be determined.
            CacheReadError: If a fresh file can't be read or parsed.
        """
        if self.is_stale():
            return None
        logger.info("Reading creds file at %s", self.path)
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise ReadFailedError(self.path, exc) from exc
        try:
            return CredentialPair.model_validate_json(raw)
        except ValidationError as exc:
            raise DeserializeFailedError(self.path, exc) from exc

    def write(self, creds: CredentialPair) -> None:
        """Replace the cache file with `creds`.

        The JSON is written to a private temp file next to the target and
        renamed over it, so readers never observe a half-written file.

        Raises:
            CacheWriteError: If the directory or file can't be written.
        """
        logger.info("Updating creds file at %s", self.path)
        directory = self.path.parent
        try:
            directory.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as exc:
            raise CreateDirFailedError(directory, exc) from exc

        payload = creds.model_dump_json().encode("utf-8")
        tmp_name = None
        try:
            # mkstemp creates the file with 0600 permissions.
            fd, tmp_name = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteFailedError(self.path, exc) from exc

    def delete(self) -> None:
        """Remove the cache file. Succeeds if it is already gone.

        Raises:
            CacheDeleteError: If an existing file can't be removed.
        """
        logger.info("Deleting creds file at %s", self.path)
        if not self.path.is_file():
            return
        try:
            self.path.unlink()
        except OSError as exc:
            raise CacheDeleteError(self.path, exc) from exc
