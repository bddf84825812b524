"""Command-line entry point: `git-credential-github-app get|store|erase`.

Configure git with:

    [credential "https://github.com"]
        helper = github-app

Exit status is 0 on success (including requests for other hosts, which
are ignored) and 1 on any error, with the message on stderr.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import IO, Optional, Sequence

import structlog
from pydantic import ValidationError

from ghapp_creds import __version__
from ghapp_creds.core.config import Settings, get_settings
from ghapp_creds.core.errors import CredentialHelperError
from ghapp_creds.core.logging import configure_structlog, set_verb
from ghapp_creds.credentials.cache import CredentialCache
from ghapp_creds.github.service import GitHubAppTokenSource
from ghapp_creds.helper import CredentialHelper, Verb
from ghapp_creds.protocol.document import Document

PROG = "git-credential-github-app"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="git credential helper that authenticates as a GitHub App installation.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="log debug output to stderr",
    )
    parser.add_argument(
        "--cache-file",
        type=Path,
        default=None,
        help="override the credential cache location",
    )
    parser.add_argument(
        "verb",
        choices=[v.value for v in Verb],
        help="credential-helper operation requested by git",
    )
    return parser


async def run(
    verb: Verb,
    settings: Settings,
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
) -> None:
    """Read the request, then let the helper act on it."""
    document = Document.read(stdin)
    helper = CredentialHelper(
        cache=CredentialCache(settings.cache_file),
        token_source=GitHubAppTokenSource(settings),
    )
    await helper.handle(verb, document, stdout)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"{PROG}: invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)
    if args.cache_file is not None:
        settings.cache_file = args.cache_file

    configure_structlog(debug=settings.debug or args.verbose, level=settings.log_level)
    verb = Verb(args.verb)
    set_verb(verb.value)
    logger = structlog.get_logger(PROG)
    logger.debug("handling request", cache_file=str(settings.cache_file))

    try:
        asyncio.run(run(verb, settings))
    except CredentialHelperError as exc:
        logger.debug("credential helper failed", error_type=type(exc).__name__, exc_info=True)
        print(f"{PROG}: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
