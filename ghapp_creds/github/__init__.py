"""GitHub App token acquisition.

Public API:
    GitHubAppTokenSource(settings).acquire() -> CredentialPair
    TokenSource: protocol the credential helper depends on
    find_installation(http, app_jwt, owner) -> Installation
"""

from ghapp_creds.github.installations import InstallationNotFoundError, find_installation
from ghapp_creds.github.service import GitHubAppTokenSource, TokenAcquisitionError, TokenSource

__all__ = [
    "GitHubAppTokenSource",
    "InstallationNotFoundError",
    "TokenAcquisitionError",
    "TokenSource",
    "find_installation",
]
