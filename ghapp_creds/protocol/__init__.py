"""git credential-helper protocol records.

Public API:
    Document.read(stream) / Document.parse(lines) -> Document
    Document.write(stream)
"""

from ghapp_creds.protocol.document import (
    DelimiterMissingError,
    Document,
    DocumentReadError,
    DocumentWriteError,
    FlushFailedError,
    InputReadFailedError,
    KeyInvalidError,
    OutputWriteFailedError,
    ValueInvalidError,
)

__all__ = [
    "DelimiterMissingError",
    "Document",
    "DocumentReadError",
    "DocumentWriteError",
    "FlushFailedError",
    "InputReadFailedError",
    "KeyInvalidError",
    "OutputWriteFailedError",
    "ValueInvalidError",
]
