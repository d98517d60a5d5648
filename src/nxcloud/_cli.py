"""Single-shot entry point: parse, configure logging, dispatch, exit code."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from rich.logging import RichHandler

from nxcloud._commands import parse
from nxcloud._config import ClientConfig
from nxcloud._credential_store import CredentialChain
from nxcloud._dispatcher import Dispatcher, make_console
from nxcloud._errors import CommandParseError, NxCloudError
from nxcloud._session import Session

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

log = logging.getLogger(__name__)

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def configure_logging(verbose: int) -> None:
    """Route ``nxcloud`` logs to stderr; each ``-v`` lowers the threshold."""
    logger = logging.getLogger("nxcloud")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=make_console(stderr=True), show_time=False, show_path=False))
    logger.setLevel(_LEVELS.get(verbose, logging.DEBUG))
    logger.propagate = False
    log.info("Logger has been initialized")


def main(argv: Sequence[str] | None = None, *, environ: Mapping[str, str] | None = None) -> int:
    """Run one command and return the process exit code."""
    args = sys.argv[1:] if argv is None else list(argv)
    out = make_console()
    err = make_console(stderr=True)

    try:
        invocation = parse(args)
    except CommandParseError as exc:
        if exc.usage:
            err.print(exc.usage.rstrip(), soft_wrap=True)
        if str(exc):
            err.print(str(exc), soft_wrap=True)
        return exc.status

    configure_logging(invocation.verbose)
    try:
        config = ClientConfig.from_env(environ)
    except ValueError as exc:
        err.print(f"Error: {exc}", soft_wrap=True)
        return 1

    dispatcher = Dispatcher(config, CredentialChain.from_config(config), console=out, error_console=err)
    try:
        dispatcher.dispatch(invocation.command, Session())
    except NxCloudError as exc:
        err.print(f"Error: {exc}", soft_wrap=True)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0
