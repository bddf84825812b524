"""Shared test fixtures for the credential helper test suite.

GitHub is replaced by an in-process `httpx.MockTransport` (see GitHubStub),
so no test touches the network. Cache files live under pytest's tmp_path.
"""

import json
import logging
from typing import Optional

import httpx
import pytest
import structlog
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ghapp_creds.core.config import Settings
from ghapp_creds.credentials.cache import CredentialCache
from ghapp_creds.credentials.types import CredentialPair

TEST_APP_ID = "12345"
TEST_OWNER = "BrainiumLLC"
TEST_TOKEN = "ghs_testinstallationtoken"


def _generate_test_private_key() -> str:
    """Generate a valid RSA private key for testing."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )
    return pem.decode()


TEST_PRIVATE_KEY = _generate_test_private_key()


def make_settings(**overrides) -> Settings:
    """Settings that ignore any .env file in the working directory."""
    values = {
        "github_app_id": TEST_APP_ID,
        "github_app_key": TEST_PRIVATE_KEY,
        "github_app_owner": TEST_OWNER,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def installation(installation_id: int, login: str) -> dict:
    return {"id": installation_id, "account": {"login": login, "id": installation_id * 10}}


class GitHubStub:
    """Minimal fake of the two GitHub endpoints the helper calls.

    `pages` is the list of installation pages served for page=1..N. When
    `advertise_last` is True, each page but the last carries a
    `Link: <...page=N>; rel="last"` header like the real API.
    """

    def __init__(
        self,
        pages: Optional[list[list[dict]]] = None,
        token: str = TEST_TOKEN,
        advertise_last: bool = True,
        list_status: int = 200,
        token_status: int = 201,
    ):
        self.pages = pages if pages is not None else [[installation(1, TEST_OWNER)]]
        self.token = token
        self.advertise_last = advertise_last
        self.list_status = list_status
        self.token_status = token_status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/app/installations":
            return self._list(request)
        if request.method == "POST" and path.startswith("/app/installations/"):
            if self.token_status >= 400:
                return httpx.Response(self.token_status, json={"message": "Bad credentials"})
            return httpx.Response(
                self.token_status,
                json={"token": self.token, "expires_at": "2030-01-01T00:00:00Z"},
            )
        return httpx.Response(404, json={"message": "Not Found"})

    def _list(self, request: httpx.Request) -> httpx.Response:
        if self.list_status >= 400:
            return httpx.Response(self.list_status, json={"message": "Server Error"})
        page = int(request.url.params.get("page", "1"))
        items = self.pages[page - 1] if page <= len(self.pages) else []
        headers = {}
        if self.advertise_last and page < len(self.pages):
            last = request.url.copy_set_param("page", str(len(self.pages)))
            headers["Link"] = f'<{last}>; rel="last"'
        return httpx.Response(200, content=json.dumps(items), headers=headers)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url="https://api.github.com",
            transport=httpx.MockTransport(self.handler),
        )

    @property
    def list_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]


class FakeTokenSource:
    """TokenSource that hands out a fixed pair and counts calls."""

    def __init__(self, creds: Optional[CredentialPair] = None, error: Optional[Exception] = None):
        self.creds = creds or CredentialPair(username=TEST_APP_ID, password=TEST_TOKEN)
        self.error = error
        self.calls = 0

    async def acquire(self) -> CredentialPair:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.creds


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(cache_file=tmp_path / "cache" / "creds.json")


@pytest.fixture
def cache(tmp_path) -> CredentialCache:
    return CredentialCache(tmp_path / "cache" / "creds.json")


@pytest.fixture
def token_source() -> FakeTokenSource:
    return FakeTokenSource()


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo configure_structlog() so handlers never outlive a test's captured streams."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()
