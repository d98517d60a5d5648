"""Session — the working directory carried between commands."""

from __future__ import annotations

import logging

from nxcloud._path import RemotePath

log = logging.getLogger(__name__)


class Session:
    """Holds the current remote working directory.

    Commands resolve their path arguments through :meth:`resolve`, which
    never changes the session; only :meth:`change_directory` does.

    :param current_directory: Starting directory, the root by default.
    """

    def __init__(self, current_directory: RemotePath | None = None) -> None:
        self._current = (current_directory or RemotePath()).as_directory()

    def __repr__(self) -> str:
        return f"Session(current_directory={self._current.as_posix()!r})"

    @property
    def current_directory(self) -> RemotePath:
        return self._current

    @property
    def prompt(self) -> str:
        return f"[/{self._current}] >> "

    def resolve(self, fragment: str | None) -> RemotePath:
        """Resolve ``fragment`` against the working directory without persisting it."""
        if fragment is None:
            return self._current
        return self._current.join(fragment)

    def change_directory(self, fragment: str) -> RemotePath:
        """Move the working directory and return the new value.

        The result is stored directory-shaped whatever the fragment's shape.
        """
        self._current = self.resolve(fragment).as_directory()
        log.debug("Working directory is now %s", self._current.as_posix())
        return self._current
