"""Transport abstract base class — the contract the dispatcher talks to."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType

    from nxcloud._models import ListingEntry
    from nxcloud._path import RemotePath


class Transport(abc.ABC):
    """Abstract base class for file-storage transports.

    Every transport must implement all abstract methods. Native exceptions
    must never leak. They are mapped to ``nxcloud`` errors, usually
    :class:`~nxcloud.RemoteOperationFailed`.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Identifier for this transport type (e.g. ``'webdav'``, ``'local'``)."""

    @abc.abstractmethod
    def list_entries(self, path: RemotePath) -> list[ListingEntry]:
        """List the children of a directory, or the file itself for a file.

        :raises RemoteOperationFailed: If ``path`` does not exist.
        """

    @abc.abstractmethod
    def fetch(self, path: RemotePath) -> bytes:
        """Download a file.

        :raises RemoteOperationFailed: If the file does not exist.
        """

    @abc.abstractmethod
    def store(self, path: RemotePath, data: bytes) -> None:
        """Upload ``data`` to ``path``, replacing an existing file.

        :raises RemoteOperationFailed: If the parent directory is missing.
        """

    @abc.abstractmethod
    def mkcol(self, path: RemotePath) -> None:
        """Create a directory.

        :raises RemoteOperationFailed: If it exists or its parent is missing.
        """

    @abc.abstractmethod
    def delete(self, path: RemotePath) -> None:
        """Delete a file, or a directory recursively.

        :raises RemoteOperationFailed: If ``path`` does not exist.
        """

    @abc.abstractmethod
    def verify_identity(self) -> None:
        """Check that the configured account can reach the server.

        :raises RemoteOperationFailed: If the server rejects the account.
        """

    def close(self) -> None:  # noqa: B027
        """Release resources. Default is a no-op."""

    def __enter__(self) -> Transport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
