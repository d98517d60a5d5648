"""Dispatcher — resolves paths and drives transports and credential stores."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from rich.console import Console
from rich.prompt import Confirm
from rich.text import Text

from nxcloud._commands import Cd, Login, Logout, Ls, Mkdir, Pull, Push, Rm, Shell, Status
from nxcloud._credentials import Credentials
from nxcloud._errors import LocalFileError, NotLoggedIn, RootDeletionRefused
from nxcloud._path import RemotePath
from nxcloud._resolver import format_destination_pull, format_destination_push, format_source_pull, source_file_name
from nxcloud.transports import WebDAVTransport

if TYPE_CHECKING:
    from nxcloud._commands import Command
    from nxcloud._config import ClientConfig
    from nxcloud._credential_store import CredentialChain
    from nxcloud._session import Session
    from nxcloud._transport import Transport

log = logging.getLogger(__name__)

TransportFactory = Callable[[Credentials], "Transport"]
ConfirmFunc = Callable[[str], bool]


def make_console(*, stderr: bool = False) -> Console:
    """Plain console: no markup, highlighting or emoji substitution."""
    return Console(stderr=stderr, markup=False, highlight=False, emoji=False)


def _quote(name: str) -> str:
    return f"'{name}'" if " " in name else name


class Dispatcher:
    """Runs parsed commands against a session.

    Path arguments are resolved against the session's working directory and
    validated before any transport is created.

    :param config: Client configuration.
    :param credentials: Credential stores used by ``login``, ``logout`` and
        every command that talks to the server.
    :param transport_factory: Builds a transport from credentials; defaults
        to :class:`~nxcloud.transports.WebDAVTransport`.
    :param console: Where command output is printed.
    :param confirm: Asks a yes/no question; defaults to a rich prompt.
    :param error_console: Where the shell prints errors; defaults to ``console``.
    """

    def __init__(
        self,
        config: ClientConfig,
        credentials: CredentialChain,
        *,
        transport_factory: TransportFactory | None = None,
        console: Console | None = None,
        confirm: ConfirmFunc | None = None,
        error_console: Console | None = None,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._transport_factory = transport_factory or self._webdav_factory
        self._console = console or make_console()
        self._confirm = confirm or self._ask
        self._error_console = error_console or self._console
        self._handlers: dict[type, Callable[..., None]] = {
            Status: self._status,
            Login: self._login,
            Logout: self._logout,
            Push: self._push,
            Pull: self._pull,
            Ls: self._ls,
            Mkdir: self._mkdir,
            Rm: self._rm,
            Cd: self._cd,
            Shell: self._shell,
        }

    @property
    def console(self) -> Console:
        return self._console

    def dispatch(self, command: Command, session: Session, *, in_shell: bool = False) -> None:
        """Run ``command``; only ``cd`` changes ``session``.

        :raises NxCloudError: If the command fails.
        """
        log.debug("Dispatching %r from %s", command, session.current_directory.as_posix())
        self._handlers[type(command)](command, session, in_shell)

    # region: helpers
    def _webdav_factory(self, credentials: Credentials) -> Transport:
        return WebDAVTransport.from_credentials(credentials, timeout=self._config.timeout)

    def _ask(self, question: str) -> bool:
        try:
            return Confirm.ask(Text(question), console=self._console)
        except EOFError:
            # closed stdin counts as "no"
            self._console.line()
            return False

    def _print(self, message: str) -> None:
        self._console.print(message, soft_wrap=True)

    def _open_transport(self) -> Transport:
        credentials = self._credentials.load()
        if credentials is None:
            raise NotLoggedIn("Not logged in, run 'nxcloud login' first")
        return self._transport_factory(credentials)

    # endregion

    # region: account commands
    def _status(self, command: Status, session: Session, in_shell: bool) -> None:
        credentials = self._credentials.load()
        if credentials is None:
            self._print("Not logged in")
            return
        self._print(f"Logged in to Server: '{credentials.server}' as User: '{credentials.username}'")

    def _login(self, command: Login, session: Session, in_shell: bool) -> None:
        credentials = Credentials.parse(command.username, command.password, command.server)
        with self._transport_factory(credentials) as transport:
            transport.verify_identity()
        self._credentials.save(credentials)
        self._print("Login successful")

    def _logout(self, command: Logout, session: Session, in_shell: bool) -> None:
        self._credentials.delete()
        self._print("Logout successful")

    # endregion

    # region: transfers
    def _push(self, command: Push, session: Session, in_shell: bool) -> None:
        source_file_name(command.source)
        resolved = session.resolve(command.destination)
        target = RemotePath(format_destination_push(command.source, resolved.as_posix()))
        try:
            data = Path(command.source).read_bytes()
        except IsADirectoryError:
            raise LocalFileError("Must specify a file", path=command.source) from None
        except OSError as exc:
            raise LocalFileError(f"Cannot read local file: {exc.strerror or exc}", path=command.source) from None
        with self._open_transport() as transport:
            transport.store(target, data)
        self._print(f"Pushed {command.source} -> {target.as_posix()}")

    def _pull(self, command: Pull, session: Session, in_shell: bool) -> None:
        resolved = session.resolve(command.source)
        remote = RemotePath(format_source_pull(resolved.as_posix()))
        local = format_destination_pull(remote.as_posix(), command.destination)
        if local.is_dir():
            local = local / remote.name
        if local.exists():
            raise LocalFileError("Destination already exists", path=str(local))
        with self._open_transport() as transport:
            data = transport.fetch(remote)
        try:
            with local.open("xb") as fh:
                fh.write(data)
        except OSError as exc:
            raise LocalFileError(f"Cannot write local file: {exc.strerror or exc}", path=str(local)) from None
        self._print(f"Pulled {remote.as_posix()} -> {local}")

    # endregion

    # region: directory commands
    def _ls(self, command: Ls, session: Session, in_shell: bool) -> None:
        target = session.resolve(command.path)
        with self._open_transport() as transport:
            entries = transport.list_entries(target)
        names = [
            entry.display_name
            for entry in sorted(entries, key=lambda e: e.name)
            if command.show_all or not entry.is_hidden
        ]
        if not names:
            return
        if command.one_per_line:
            self._print("\n".join(names))
        else:
            self._print("  ".join(_quote(name) for name in names))

    def _mkdir(self, command: Mkdir, session: Session, in_shell: bool) -> None:
        target = session.resolve(command.path)
        with self._open_transport() as transport:
            transport.mkcol(target)
        log.info("Created %s", target.as_posix())

    def _rm(self, command: Rm, session: Session, in_shell: bool) -> None:
        target = session.resolve(command.path)
        if target.is_root:
            raise RootDeletionRefused("Deleting the root is not supported", path=target.as_posix())
        with self._open_transport() as transport:
            if not command.force:
                log.warning("DIRECTORIES DELETE ALL FILES AND DIRECTORIES RECURSIVELY")
                if not self._confirm(f"Are you sure you want to delete '{target.as_posix()}'?"):
                    self._print("Aborted")
                    return
            transport.delete(target)
        self._print(f"Removed {target.as_posix()}")

    def _cd(self, command: Cd, session: Session, in_shell: bool) -> None:
        session.change_directory(command.path)
        if not in_shell:
            log.warning("cd only has a lasting effect inside 'nxcloud shell'")

    def _shell(self, command: Shell, session: Session, in_shell: bool) -> None:
        if in_shell:
            self._print("Already in a shell")
            return
        from nxcloud._shell import History, InteractiveShell

        InteractiveShell(
            self,
            session,
            history=History(self._config.history_path),
            error_console=self._error_console,
        ).run()

    # endregion
