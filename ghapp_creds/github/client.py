"""GitHub REST calls made while acting as the app.

Uses httpx for async HTTP calls. Every function takes the shared
`httpx.AsyncClient` (see `create_http_client`) plus the app JWT, so one
connection pool serves the whole acquisition and tests can swap in a
mock transport.

Only two endpoints are needed:
1. GET  /app/installations                     (paginated)
2. POST /app/installations/{id}/access_tokens
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ghapp_creds.core.config import Settings
from ghapp_creds.core.errors import CredentialHelperError
from ghapp_creds.github.schemas import Installation, InstallationPage, InstallationToken

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "git-credential-github-app"

# GitHub's maximum page size for the installation listing.
INSTALLATIONS_PER_PAGE = 100


class GitHubAPIError(CredentialHelperError):
    """Raised on any transport, HTTP status or payload failure from GitHub.

    Carries the operation being attempted and the original error.
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation}: {cause}")


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Client rooted at the configured API base with GitHub's JSON headers."""
    return httpx.AsyncClient(
        base_url=settings.github_api_url,
        headers={
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": USER_AGENT,
        },
    )


async def list_installations(
    http: httpx.AsyncClient,
    app_jwt: str,
    page_index: int,
    per_page: int = INSTALLATIONS_PER_PAGE,
) -> InstallationPage:
    """Fetch one page of the app's installations.

    `page_index` is 0-based; GitHub's `page` parameter is 1-based.
    """
    operation = "get list of installations"
    try:
        response = await http.get(
            "/app/installations",
            headers=_auth_headers(app_jwt),
            params={"per_page": per_page, "page": page_index + 1},
        )
        response.raise_for_status()
        items = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise GitHubAPIError(operation, exc) from exc

    if not isinstance(items, list):
        raise GitHubAPIError(operation, ValueError("expected a JSON array of installations"))
    try:
        installations = [Installation.model_validate(item) for item in items]
    except ValidationError as exc:
        raise GitHubAPIError(operation, exc) from exc

    return InstallationPage(
        installations=installations,
        number_of_pages=_number_of_pages(response),
    )


async def create_installation_token(
    http: httpx.AsyncClient,
    app_jwt: str,
    installation_id: int,
) -> str:
    """Exchange the app JWT for an installation access token.

    Installation tokens are scoped to the repos the owner granted the
    app access to and expire after 1 hour.
    """
    operation = f"request access token for installation {installation_id}"
    try:
        response = await http.post(
            f"/app/installations/{installation_id}/access_tokens",
            headers=_auth_headers(app_jwt),
        )
        response.raise_for_status()
        token = InstallationToken.model_validate_json(response.content)
    except (httpx.HTTPError, ValidationError) as exc:
        raise GitHubAPIError(operation, exc) from exc

    if token.expires_at is not None:
        logger.info("Installation token expires at %s", token.expires_at.isoformat())
    return token.token


def _number_of_pages(response: httpx.Response) -> Optional[int]:
    last = response.links.get("last", {}).get("url")
    if not last:
        return None
    page = httpx.URL(last).params.get("page")
    try:
        return int(page) if page is not None else None
    except ValueError:
        return None


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
