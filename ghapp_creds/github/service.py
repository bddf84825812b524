"""GitHub App token source.

Turns the app's long-lived private key into a short-lived credential pair:

Steps:
1. Load the app identity (GITHUB_APP_ID / GITHUB_APP_KEY)
2. Sign an app JWT
3. Find the installation owned by the configured account
4. Request an installation access token for it

Each step depends on the previous one and nothing is retried. A failure
anywhere is reported as a single TokenAcquisitionError that names the
step and chains the original error.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol, runtime_checkable

import httpx

from ghapp_creds.core.config import Settings
from ghapp_creds.core.errors import CredentialHelperError
from ghapp_creds.credentials.types import CredentialPair
from ghapp_creds.github.auth import AppIdentity, create_app_jwt
from ghapp_creds.github.client import create_http_client, create_installation_token
from ghapp_creds.github.installations import find_installation

logger = logging.getLogger(__name__)


@runtime_checkable
class TokenSource(Protocol):
    """Anything that can mint a fresh credential pair.

    The credential helper only depends on this interface, which keeps
    network access out of its tests.
    """

    async def acquire(self) -> CredentialPair:
        """Mint a new credential pair.

        Raises:
            TokenAcquisitionError: If any step of the exchange fails.
        """
        ...  # noqa: PLR6301


class TokenAcquisitionError(CredentialHelperError):
    """Raised when a new installation token can't be obtained.

    `cause` is the component error (ConfigError, GitHubAPIError,
    InstallationNotFoundError) so callers can still tell them apart.
    """

    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(f"Failed to acquire installation token ({step}): {cause}")


class GitHubAppTokenSource:
    """Mints installation tokens for the configured GitHub App."""

    def __init__(self, settings: Settings, http: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http = http

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http is not None:
            yield self._http
            return
        async with create_http_client(self.settings) as http:
            yield http

    async def acquire(self) -> CredentialPair:
        owner = self.settings.github_app_owner

        step = "load app identity"
        try:
            identity = AppIdentity.from_settings(self.settings)
            step = "sign app JWT"
            app_jwt = create_app_jwt(identity)
            async with self._client() as http:
                step = f"find installation for {owner}"
                installation = await find_installation(http, app_jwt, owner)
                step = f"request token for installation {installation.id}"
                token = await create_installation_token(http, app_jwt, installation.id)
        except CredentialHelperError as exc:
            raise TokenAcquisitionError(step, exc) from exc

        logger.info("Minted installation token for app %d", identity.app_id)
        return CredentialPair(username=str(identity.app_id), password=token)
