"""Structured logging via structlog.

Configures structlog once per process from `main()`. Module code logs
through `logging.getLogger(__name__)`; the stdlib bridge routes those
records (and httpx's) to the same stream and level.

Everything is written to stderr: stdout belongs to the credential
protocol and git parses every line printed there.

Renderer selection:
  debug=True: `ConsoleRenderer` with colours for local troubleshooting.
  debug=False: `JSONRenderer` for machine-parseable logs (CI runners).

ContextVar injection:
  The `verb` field (get / store / erase) is injected into every structlog
  event from `_verb_var`, which `main()` sets before dispatching.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog

_verb_var: ContextVar[str] = ContextVar("verb", default="")


def set_verb(verb: str) -> None:
    """Bind the credential verb being handled to the current context."""
    _verb_var.set(verb)


def get_verb() -> str:
    """Return the current verb, or empty string if not set."""
    return _verb_var.get()


def _inject_context_vars(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject the verb from its ContextVar."""
    verb = get_verb()
    if verb:
        event_dict["verb"] = verb
    return event_dict


def configure_structlog(debug: bool = False, level: str = "WARNING") -> None:
    """Configure structlog for the process lifetime.

    `debug` forces DEBUG level regardless of `level`. Unknown level names
    fall back to WARNING. Calling multiple times is safe.
    """
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName(level.upper())
        if not isinstance(log_level, int):
            log_level = logging.WARNING

    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_context_vars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Bridge stdlib logging → same stream and level so module loggers and
    # httpx follow the helper's verbosity.
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )
