"""Interactive shell — a REPL that carries the working directory between lines."""

from __future__ import annotations

import logging
import readline
from typing import TYPE_CHECKING, Callable

from nxcloud._commands import parse, split_line
from nxcloud._errors import CommandParseError, NxCloudError

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

    from nxcloud._dispatcher import Dispatcher
    from nxcloud._session import Session

log = logging.getLogger(__name__)


class History:
    """Line history kept by ``readline`` and persisted to a file.

    :param path: History file; created on first save.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> None:
        try:
            readline.read_history_file(str(self._path))
        except FileNotFoundError:
            return
        except OSError as exc:
            log.warning("Could not load history from %s: %s", self._path, exc)
            return
        log.info("Loaded prompt history")

    def add(self, line: str) -> None:
        readline.add_history(line)

    def save(self) -> None:
        """Write the history file. Failures are logged, never raised."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            readline.write_history_file(str(self._path))
        except OSError as exc:
            log.warning("Could not save history to %s: %s", self._path, exc)


class InteractiveShell:
    """Read-parse-dispatch loop.

    Each line is parsed as a complete command invocation, so nothing but the
    session's working directory survives from one line to the next. Errors
    are printed and the loop continues; ``exit``, end of input or Ctrl-C end
    it.

    :param dispatcher: Runs the parsed commands.
    :param session: Working directory state carried across lines.
    :param history: Optional persisted line history.
    :param input_func: Reads one line given a prompt.
    :param error_console: Where errors are printed; defaults to the
        dispatcher's console.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        session: Session,
        *,
        history: History | None = None,
        input_func: Callable[[str], str] = input,
        error_console: Console | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._session = session
        self._history = history
        self._input = input_func
        self._errors = error_console or dispatcher.console

    @property
    def session(self) -> Session:
        return self._session

    def run(self) -> Session:
        """Loop until ``exit``, EOF or interrupt; return the final session."""
        if self._history is not None:
            self._history.load()
        try:
            while True:
                try:
                    line = self._input(self._session.prompt)
                except (EOFError, KeyboardInterrupt):
                    self._dispatcher.console.print()
                    break
                stripped = line.strip()
                if not stripped:
                    continue
                if stripped.lower() == "exit":
                    break
                if self._history is not None:
                    self._history.add(stripped)
                self.run_line(stripped)
        finally:
            if self._history is not None:
                self._history.save()
        return self._session

    def run_line(self, line: str) -> None:
        """Parse and dispatch one line, printing any error."""
        try:
            invocation = parse(split_line(line))
            self._dispatcher.dispatch(invocation.command, self._session, in_shell=True)
        except CommandParseError as exc:
            if exc.usage:
                self._errors.print(exc.usage.rstrip(), soft_wrap=True)
            if str(exc):
                self._errors.print(str(exc), soft_wrap=True)
        except NxCloudError as exc:
            self._errors.print(f"Error: {exc}", soft_wrap=True)
