"""Credential stores — OS secret store first, encoded file as fallback."""

from __future__ import annotations

import abc
import logging
import os
from typing import TYPE_CHECKING

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from nxcloud._credentials import Credentials
from nxcloud._errors import PersistenceFailure

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from nxcloud._config import ClientConfig

log = logging.getLogger(__name__)

KEYRING_ACCOUNT = "username"


class CredentialStore(abc.ABC):
    """A single place credentials can be kept."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Short identifier used in log messages."""

    @abc.abstractmethod
    def load(self) -> Credentials | None:
        """Return stored credentials, or ``None`` if there are none.

        :raises PersistenceFailure: If the store cannot be read.
        """

    @abc.abstractmethod
    def save(self, credentials: Credentials) -> None:
        """Persist ``credentials``, replacing any previous value.

        :raises PersistenceFailure: If the store cannot be written.
        """

    @abc.abstractmethod
    def delete(self) -> bool:
        """Remove stored credentials. Returns ``False`` if nothing was stored.

        :raises PersistenceFailure: If the store cannot be cleared.
        """


class KeyringStore(CredentialStore):
    """Credentials in the OS secret store via ``keyring``.

    :param service: Keyring service name.
    """

    def __init__(self, service: str) -> None:
        self._service = service

    @property
    def name(self) -> str:
        return "keyring"

    def load(self) -> Credentials | None:
        try:
            content = keyring.get_password(self._service, KEYRING_ACCOUNT)
        except KeyringError as exc:
            raise PersistenceFailure(f"Keyring read failed: {exc}") from None
        if content is None:
            return None
        return Credentials.decode(content)

    def save(self, credentials: Credentials) -> None:
        try:
            keyring.set_password(self._service, KEYRING_ACCOUNT, credentials.encode())
        except KeyringError as exc:
            raise PersistenceFailure(f"Keyring write failed: {exc}") from None

    def delete(self) -> bool:
        try:
            keyring.delete_password(self._service, KEYRING_ACCOUNT)
        except PasswordDeleteError:
            return False
        except KeyringError as exc:
            raise PersistenceFailure(f"Keyring delete failed: {exc}") from None
        return True


class FileStore(CredentialStore):
    """Credentials in a base64-encoded file.

    :param path: Location of the credentials file.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def name(self) -> str:
        return "file"

    def load(self) -> Credentials | None:
        try:
            content = self._path.read_text(encoding="ascii")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceFailure(f"Cannot read credentials file: {exc}", path=str(self._path)) from None
        return Credentials.decode(content)

    def save(self, credentials: Credentials) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="ascii") as fh:
                # os.open keeps the mode of an existing file
                self._path.chmod(0o600)
                fh.write(credentials.encode())
        except OSError as exc:
            raise PersistenceFailure(f"Cannot write credentials file: {exc}", path=str(self._path)) from None

    def delete(self) -> bool:
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise PersistenceFailure(f"Cannot remove credentials file: {exc}", path=str(self._path)) from None
        return True


class CredentialChain:
    """Ordered credential stores: read from the first that has a value,
    write to the first that accepts it.

    :param stores: Stores in priority order.
    """

    def __init__(self, stores: Sequence[CredentialStore]) -> None:
        if not stores:
            raise ValueError("CredentialChain needs at least one store")
        self._stores = tuple(stores)

    def __repr__(self) -> str:
        return f"CredentialChain(stores={[s.name for s in self._stores]!r})"

    @classmethod
    def from_config(cls, config: ClientConfig) -> CredentialChain:
        """Keyring then file, or file only when the keyring is disabled."""
        stores: list[CredentialStore] = []
        if config.use_keyring:
            stores.append(KeyringStore(config.keyring_service))
        stores.append(FileStore(config.credentials_path))
        return cls(stores)

    def load(self) -> Credentials | None:
        """Return the first stored credentials. Unreadable stores count as empty."""
        for store in self._stores:
            try:
                credentials = store.load()
            except PersistenceFailure as exc:
                log.info("Skipping %s credential store: %s", store.name, exc)
                continue
            if credentials is not None:
                log.debug("Loaded credentials from %s store", store.name)
                return credentials
        return None

    def save(self, credentials: Credentials) -> None:
        """Write to the first store that accepts the credentials.

        :raises PersistenceFailure: If every store fails.
        """
        errors: list[str] = []
        for store in self._stores:
            try:
                store.save(credentials)
            except PersistenceFailure as exc:
                log.warning("Could not save credentials to %s store: %s", store.name, exc)
                errors.append(f"{store.name}: {exc}")
                continue
            log.info("Saved credentials to %s store", store.name)
            return
        raise PersistenceFailure(f"Could not save credentials ({'; '.join(errors)})")

    def delete(self) -> None:
        """Remove credentials from every store.

        :raises PersistenceFailure: If no store held credentials to remove.
        """
        deleted = False
        for store in self._stores:
            try:
                if store.delete():
                    log.info("Removed credentials from %s store", store.name)
                    deleted = True
            except PersistenceFailure as exc:
                log.warning("Could not clear %s store: %s", store.name, exc)
        if not deleted:
            raise PersistenceFailure("No stored credentials could be removed")
