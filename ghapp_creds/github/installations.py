"""Find the app installation that belongs to a given account."""

import logging

import httpx

from ghapp_creds.core.errors import CredentialHelperError
from ghapp_creds.github.client import list_installations
from ghapp_creds.github.schemas import Installation

logger = logging.getLogger(__name__)


class InstallationNotFoundError(CredentialHelperError):
    """Raised when no installation of the app is owned by `owner`."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"Failed to find installation for owner {owner!r}")


async def find_installation(
    http: httpx.AsyncClient,
    app_jwt: str,
    owner: str,
) -> Installation:
    """Walk the installation listing until `owner`'s installation turns up.

    The login comparison is exact (case-sensitive) and the first match
    wins; later pages are not fetched. The page ceiling is read from the
    first page's Link header once, so a server that keeps advertising
    more pages can't keep the loop going.

    Raises:
        InstallationNotFoundError: If no page contains the owner.
        GitHubAPIError: If any listing request fails.
    """
    page_index = 0
    page_count = None
    while True:
        page = await list_installations(http, app_jwt, page_index)
        logger.info("Current page of installations: %d", page_index)
        for installation in page.installations:
            if installation.owner_login == owner:
                logger.info(
                    "Found installation %d for owner %s", installation.id, owner
                )
                return installation

        page_index += 1
        if page_count is None:
            page_count = page.number_of_pages or page_index
            logger.info("Total pages of installations: %d", page_count)
        if page_index >= page_count:
            raise InstallationNotFoundError(owner)
