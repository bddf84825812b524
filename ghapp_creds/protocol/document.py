"""git credential-helper input/output records.

git talks to helpers with newline-separated `key=value` attributes:
https://git-scm.com/docs/git-credential#IOFMT

The same record shape is used in both directions. git sends whatever it
knows about the remote (protocol, host, maybe path or url, and for
`store`/`erase` the username and password), and the helper answers `get`
with the same record plus the credentials and `quit=true`.

Documents are immutable. `with_credentials()` and `with_quit()` return a
new Document so the request that was matched against the target host is
exactly the one that gets echoed back.
"""

import logging
import re
import sys
from dataclasses import dataclass, fields, replace
from typing import IO, Iterable, Optional

from ghapp_creds.core.errors import CredentialHelperError
from ghapp_creds.credentials.types import CredentialPair

logger = logging.getLogger(__name__)

# Output order is fixed; git doesn't care, but tests and humans do.
FIELD_ORDER = ("protocol", "host", "path", "username", "password", "url", "quit")

# Values git's config parser accepts for booleans.
_TRUE_VALUES = frozenset({"true", "yes", "on", "1"})
_FALSE_VALUES = frozenset({"false", "no", "off", "0", ""})


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class DocumentReadError(CredentialHelperError):
    """Raised when the input record can't be read or parsed."""


class InputReadFailedError(DocumentReadError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Failed to read line from input: {cause}")


class DelimiterMissingError(DocumentReadError):
    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Input line missing `=` delimiter: {line!r}")


class KeyInvalidError(DocumentReadError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Input line has an invalid key: {key!r}")


class ValueInvalidError(DocumentReadError):
    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value
        super().__init__(f"Input line has an invalid value for {key!r}: {value!r}")


class DocumentWriteError(CredentialHelperError):
    """Raised when the output record can't be delivered to git."""

    prefix = "Failed to write output"

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"{self.prefix}: {cause}")


class OutputWriteFailedError(DocumentWriteError):
    prefix = "Failed to write output"


class FlushFailedError(DocumentWriteError):
    prefix = "Failed to flush output"


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueInvalidError(key, value)


def _split_url(url: str) -> Optional[tuple[str, str]]:
    """Split `scheme://[user@]host[:port][/path][?query][#frag]` into (scheme, host[:port])."""
    if "://" not in url:
        return None
    protocol, rest = url.split("://", 1)
    authority = re.split(r"[/?#]", rest, maxsplit=1)[0]
    host = authority.rsplit("@", 1)[-1]
    return protocol, host


@dataclass(frozen=True)
class Document:
    """One credential-helper record. Unset fields are None and never emitted."""

    protocol: Optional[str] = None
    host: Optional[str] = None
    path: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    url: Optional[str] = None
    quit: Optional[bool] = None

    def __repr__(self) -> str:
        shown = []
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if f.name == "password":
                value = "***"
            shown.append(f"{f.name}={value!r}")
        return f"Document({', '.join(shown)})"

    # -- reading -------------------------------------------------------------

    @classmethod
    def parse(cls, lines: Iterable[str]) -> "Document":
        """Build a Document from `key=value` lines.

        Blank lines are skipped. A later occurrence of a key overrides an
        earlier one. Any malformed line aborts the whole parse.

        Raises:
            DocumentReadError: On a missing `=`, unknown key or bad value.
        """
        values: dict = {}
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            if "=" not in line:
                raise DelimiterMissingError(line)
            key, value = line.split("=", 1)
            if key not in FIELD_ORDER:
                raise KeyInvalidError(key)
            values[key] = _parse_bool(key, value) if key == "quit" else value
        return cls(**values)

    @classmethod
    def read(cls, stream: Optional[IO[str]] = None) -> "Document":
        """Read lines from `stream` (stdin by default) until EOF and parse them."""
        stream = stream if stream is not None else sys.stdin
        try:
            lines = stream.readlines()
        except (OSError, UnicodeDecodeError) as exc:
            raise InputReadFailedError(exc) from exc
        doc = cls.parse(lines)
        logger.info("Parsed input: %r", doc)
        return doc

    # -- queries -------------------------------------------------------------

    def protocol_host_pair(self) -> Optional[tuple[str, str]]:
        """Effective (protocol, host); `url` takes precedence when set."""
        if self.url is not None:
            return _split_url(self.url)
        if self.protocol is None or self.host is None:
            return None
        return self.protocol, self.host

    def matches_host(self, protocol: str, host: str) -> bool:
        return self.protocol_host_pair() == (protocol, host)

    def credentials(self) -> Optional[CredentialPair]:
        """The username/password pair, if both are present."""
        if self.username is None or self.password is None:
            return None
        return CredentialPair(username=self.username, password=self.password)

    def matches_credentials(self, creds: CredentialPair) -> bool:
        """Exact comparison; no case folding or trimming."""
        return self.username == creds.username and self.password == creds.password

    # -- functional updates --------------------------------------------------

    def with_credentials(self, creds: CredentialPair) -> "Document":
        return replace(self, username=creds.username, password=creds.password)

    def with_quit(self, quit: bool) -> "Document":
        return replace(self, quit=quit)

    # -- writing -------------------------------------------------------------

    def serialize(self) -> str:
        out = []
        for name in FIELD_ORDER:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            out.append(f"{name}={value}\n")
        return "".join(out)

    def write(self, stream: Optional[IO[str]] = None) -> None:
        """Serialize to `stream` (stdout by default) and flush.

        Raises:
            DocumentWriteError: OutputWriteFailedError or FlushFailedError.
        """
        stream = stream if stream is not None else sys.stdout
        buf = self.serialize()
        try:
            stream.write(buf)
        except OSError as exc:
            raise OutputWriteFailedError(exc) from exc
        try:
            stream.flush()
        except OSError as exc:
            raise FlushFailedError(exc) from exc
