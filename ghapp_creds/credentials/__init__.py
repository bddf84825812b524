"""Credential pair model and its on-disk cache.

Public API:
    CredentialPair: immutable username/password pair
    CredentialCache(path): read / write / delete with a staleness rule
"""

from ghapp_creds.credentials.cache import MAX_TOKEN_AGE, CredentialCache
from ghapp_creds.credentials.types import CredentialPair

__all__ = ["MAX_TOKEN_AGE", "CredentialCache", "CredentialPair"]
