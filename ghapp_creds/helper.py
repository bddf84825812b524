"""Credential-helper verbs.

git runs `<helper> get|store|erase` with a credential record on stdin:

  get: answer with username/password and `quit=true` so git stops
    asking other helpers
  store: git confirms the credentials worked; remember them
  erase: git reports the credentials were rejected; forget them if they
    are the ones we handed out

Requests for any remote other than the configured target are ignored
without error so this helper can sit alongside others in git config.
"""

import enum
import logging
from typing import IO, Optional

from ghapp_creds.core.config import TARGET_HOST, TARGET_PROTOCOL
from ghapp_creds.core.errors import CredentialHelperError
from ghapp_creds.credentials.cache import CredentialCache
from ghapp_creds.credentials.types import CredentialPair
from ghapp_creds.github.service import TokenSource
from ghapp_creds.protocol.document import Document

logger = logging.getLogger(__name__)


class Verb(str, enum.Enum):
    GET = "get"
    STORE = "store"
    ERASE = "erase"


class MissingCredentialsError(CredentialHelperError):
    """Raised when `store` is called without both username and password."""

    def __init__(self) -> None:
        super().__init__("`store` requires both username and password in the input")


class CredentialHelper:
    """Wires a protocol Document to the cache and the token source."""

    def __init__(
        self,
        cache: CredentialCache,
        token_source: TokenSource,
        protocol: str = TARGET_PROTOCOL,
        host: str = TARGET_HOST,
    ):
        self.cache = cache
        self.token_source = token_source
        self.protocol = protocol
        self.host = host

    async def generate(self) -> CredentialPair:
        """Cached pair if still fresh, otherwise a newly minted (and cached) one."""
        creds = self.cache.read()
        if creds is not None:
            logger.info("Current creds are still valid")
            return creds
        logger.info("New creds must be generated")
        creds = await self.token_source.acquire()
        self.cache.write(creds)
        return creds

    async def get(self, document: Document, output: Optional[IO[str]] = None) -> None:
        creds = await self.generate()
        document.with_credentials(creds).with_quit(True).write(output)

    def store(self, document: Document) -> None:
        creds = document.credentials()
        if creds is None:
            raise MissingCredentialsError()
        self.cache.write(creds)

    def erase(self, document: Document) -> None:
        cached = self.cache.read()
        if cached is not None and document.matches_credentials(cached):
            self.cache.delete()
        else:
            logger.info("Presented creds don't match the cache; nothing to erase")

    async def handle(
        self,
        verb: Verb,
        document: Document,
        output: Optional[IO[str]] = None,
    ) -> None:
        """Run `verb` for `document`, or do nothing if it targets another host."""
        if not document.matches_host(self.protocol, self.host):
            logger.info(
                "Ignoring request that doesn't target %s://%s", self.protocol, self.host
            )
            return

        verb = Verb(verb)
        if verb is Verb.GET:
            await self.get(document, output)
        elif verb is Verb.STORE:
            self.store(document)
        elif verb is Verb.ERASE:
            self.erase(document)
