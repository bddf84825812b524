"""git credential helper that authenticates as a GitHub App.

Public API:
    CredentialHelper: dispatches the get / store / erase verbs
    CredentialCache, CredentialPair, Document
"""

from ghapp_creds.credentials import CredentialCache, CredentialPair
from ghapp_creds.helper import CredentialHelper
from ghapp_creds.protocol import Document

__version__ = "0.1.0"

__all__ = ["CredentialCache", "CredentialHelper", "CredentialPair", "Document"]
