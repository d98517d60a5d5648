"""Normalized error hierarchy for nxcloud."""

from __future__ import annotations

from typing import Optional


class NxCloudError(Exception):
    """Base class for all nxcloud errors.

    ``str()`` gives the message followed by whichever of ``path`` and
    ``server`` are set, e.g. ``Not found | path='/a.txt'``.

    :param message: Human-readable error description.
    :param path: The remote or local path involved, if any.
    :param server: The server URL involved, if any.
    """

    def __init__(self, message: str = "", *, path: Optional[str] = None, server: Optional[str] = None) -> None:
        self.path = path
        self.server = server
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""

    def _context(self) -> list[tuple[str, object]]:
        """Extra ``(name, value)`` pairs shown after the message; unset ones are skipped."""
        return [(name, value) for name, value in (("path", self.path), ("server", self.server)) if value is not None]

    def __str__(self) -> str:
        return " | ".join([self.message, *(f"{name}={value!r}" for name, value in self._context())])

    def __repr__(self) -> str:
        fields = [repr(self.message), *(f"{name}={value!r}" for name, value in self._context())]
        return f"{type(self).__name__}({', '.join(fields)})"


class NotLoggedIn(NxCloudError):
    """Raised when no usable credentials are found in any store."""


class InvalidUrl(NxCloudError):
    """Raised when a server argument cannot be parsed as an https URL."""


class InvalidCredentials(NxCloudError):
    """Raised when login arguments are unusable, such as a blank username."""


class InvalidPath(NxCloudError):
    """Raised for remote paths that can never be sent to the server."""


class SourceIsDirectory(NxCloudError):
    """Raised when a transfer source is directory-shaped."""


class NoFileName(NxCloudError):
    """Raised when no file name can be extracted from a transfer source."""


class RemoteOperationFailed(NxCloudError):
    """Raised for non-2xx responses and transport errors.

    :param status: The HTTP status code, or ``None`` for transport errors.
    """

    def __init__(
        self,
        message: str = "",
        *,
        path: Optional[str] = None,
        server: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        self.status = status
        super().__init__(message, path=path, server=server)

    def _context(self) -> list[tuple[str, object]]:
        context = super()._context()
        if self.status is not None:
            context.append(("status", self.status))
        return context


class RootDeletionRefused(NxCloudError):
    """Raised when asked to delete the remote root."""


class PersistenceFailure(NxCloudError):
    """Raised when a credential store cannot be written, read back or cleared."""


class LocalFileError(NxCloudError):
    """Raised when a local file cannot be read or written."""


class CommandParseError(NxCloudError):
    """Raised when a command line cannot be parsed.

    :param usage: Usage text of the parser that rejected the input.
    :param status: Exit status a single-shot invocation should use.
    """

    def __init__(self, message: str = "", *, usage: str = "", status: int = 2) -> None:
        self.usage = usage
        self.status = status
        super().__init__(message)
