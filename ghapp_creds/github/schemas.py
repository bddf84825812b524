"""Pydantic models for the GitHub API payloads we read.

Only the fields the helper uses are declared; everything else GitHub
returns is ignored.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class InstallationAccount(BaseModel):
    login: str


class Installation(BaseModel):
    """One entry of GET /app/installations."""

    id: int
    account: InstallationAccount

    @property
    def owner_login(self) -> str:
        return self.account.login


class InstallationToken(BaseModel):
    """Response of POST /app/installations/{id}/access_tokens."""

    token: str
    expires_at: Optional[datetime] = None


@dataclass
class InstallationPage:
    """One page of the installation listing.

    number_of_pages comes from the `rel="last"` Link header and is None
    when GitHub omits it (single page, or this is the last page).
    """

    installations: list[Installation]
    number_of_pages: Optional[int] = None
