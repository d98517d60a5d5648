"""Local directory transport — stdlib-only reference implementation."""

from __future__ import annotations

import logging
import shutil
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from nxcloud._errors import InvalidPath, NxCloudError, RemoteOperationFailed
from nxcloud._models import ListingEntry
from nxcloud._transport import Transport

if TYPE_CHECKING:
    from collections.abc import Iterator

    from nxcloud._path import RemotePath

log = logging.getLogger(__name__)


class LocalTransport(Transport):
    """Transport over a local directory, using only the standard library.

    Failures map to the status codes a WebDAV server would answer with.

    :param root: Directory that plays the role of the remote root.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return f"LocalTransport(root={str(self._root)!r})"

    @property
    def name(self) -> str:
        return "local"

    # region: path safety
    def _resolve(self, path: RemotePath) -> Path:
        """Map a remote path into the root directory.

        :raises InvalidPath: If a symlink leads outside the root.
        """
        resolved = (self._root / str(path)).resolve()
        try:
            resolved.relative_to(self._root)
        except ValueError:
            raise InvalidPath(f"Path escapes root directory: {path}", path=path.as_posix()) from None
        return resolved

    # endregion

    # region: error mapping
    @contextmanager
    def _errors(self, path: RemotePath) -> Iterator[None]:
        """Map filesystem exceptions to ``RemoteOperationFailed``."""
        p = path.as_posix()
        try:
            yield
        except NxCloudError:
            raise
        except FileNotFoundError:
            raise RemoteOperationFailed(f"Not found: {p}", path=p, status=404) from None
        except (FileExistsError, IsADirectoryError, NotADirectoryError):
            raise RemoteOperationFailed(f"Not allowed: {p}", path=p, status=405) from None
        except PermissionError:
            raise RemoteOperationFailed(f"Permission denied: {p}", path=p, status=403) from None
        except OSError as exc:
            raise RemoteOperationFailed(f"{exc.strerror or exc}: {p}", path=p) from None

    @staticmethod
    def _entry(full: Path) -> ListingEntry:
        st = full.stat()
        is_dir = full.is_dir()
        return ListingEntry(
            name=full.name,
            is_dir=is_dir,
            size=None if is_dir else st.st_size,
            modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    # endregion

    def list_entries(self, path: RemotePath) -> list[ListingEntry]:
        full = self._resolve(path)
        with self._errors(path):
            if not full.exists():
                raise FileNotFoundError(str(full))
            if not full.is_dir():
                return [self._entry(full)]
            return [self._entry(item) for item in sorted(full.iterdir())]

    def fetch(self, path: RemotePath) -> bytes:
        full = self._resolve(path)
        with self._errors(path):
            if full.is_dir():
                raise IsADirectoryError(str(full))
            return full.read_bytes()

    def store(self, path: RemotePath, data: bytes) -> None:
        full = self._resolve(path)
        p = path.as_posix()
        if path.is_root or full.is_dir():
            raise RemoteOperationFailed(f"Cannot overwrite a directory: {p}", path=p, status=405)
        if not full.parent.is_dir():
            raise RemoteOperationFailed(f"Parent directory missing: {p}", path=p, status=409)
        with self._errors(path):
            full.write_bytes(data)
        log.debug("Stored %d bytes at %s", len(data), full)

    def mkcol(self, path: RemotePath) -> None:
        full = self._resolve(path)
        p = path.as_posix()
        if full.exists():
            raise RemoteOperationFailed(f"Already exists: {p}", path=p, status=405)
        if not full.parent.is_dir():
            raise RemoteOperationFailed(f"Parent directory missing: {p}", path=p, status=409)
        with self._errors(path):
            full.mkdir()

    def delete(self, path: RemotePath) -> None:
        full = self._resolve(path)
        p = path.as_posix()
        if path.is_root:
            raise RemoteOperationFailed("Cannot delete the root", path=p, status=403)
        with self._errors(path):
            if full.is_dir() and not full.is_symlink():
                shutil.rmtree(full)
            else:
                full.unlink()

    def verify_identity(self) -> None:
        if not self._root.is_dir():
            raise RemoteOperationFailed(f"Root directory missing: {self._root}", status=404)
