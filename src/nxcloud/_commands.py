"""Command model and the parser shared by the CLI and the shell."""

from __future__ import annotations

import argparse
import dataclasses
import shlex
from typing import TYPE_CHECKING, NoReturn, Union

from nxcloud._errors import CommandParseError

if TYPE_CHECKING:
    from collections.abc import Sequence

PROG = "nxcloud"


@dataclasses.dataclass(frozen=True)
class Status:
    """Show the logged-in account."""


@dataclasses.dataclass(frozen=True)
class Login:
    server: str
    username: str
    password: str = dataclasses.field(repr=False)


@dataclasses.dataclass(frozen=True)
class Logout:
    pass


@dataclasses.dataclass(frozen=True)
class Push:
    """Upload local ``source`` to remote ``destination``."""

    source: str
    destination: str


@dataclasses.dataclass(frozen=True)
class Pull:
    """Download remote ``source`` to local ``destination``."""

    source: str
    destination: str


@dataclasses.dataclass(frozen=True)
class Ls:
    path: str | None = None
    one_per_line: bool = False
    show_all: bool = False


@dataclasses.dataclass(frozen=True)
class Mkdir:
    path: str


@dataclasses.dataclass(frozen=True)
class Rm:
    path: str
    force: bool = False


@dataclasses.dataclass(frozen=True)
class Cd:
    path: str


@dataclasses.dataclass(frozen=True)
class Shell:
    pass


Command = Union[Status, Login, Logout, Push, Pull, Ls, Mkdir, Rm, Cd, Shell]  # noqa: UP007


@dataclasses.dataclass(frozen=True)
class Invocation:
    """A parsed command line.

    :param command: The subcommand to run.
    :param verbose: Number of ``-v`` flags given.
    """

    command: Command
    verbose: int = 0


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting the process."""

    def error(self, message: str) -> NoReturn:
        raise CommandParseError(f"{self.prog}: error: {message}", usage=self.format_usage())

    def exit(self, status: int = 0, message: str | None = None) -> NoReturn:
        raise CommandParseError((message or "").strip(), status=status)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog=PROG,
        description="A command line client for interacting with your Nextcloud server.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Verbose mode (-v, -vv).")
    sub = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    sub.add_parser("status", help="Display the account status.")

    login = sub.add_parser("login", help="Log in to your Nextcloud server with an app password.")
    login.add_argument("server", help="The server url, e.g. https://cloud.example.com.")
    login.add_argument("username", help="Your Nextcloud username.")
    login.add_argument("password", help="A Nextcloud app password, not your account password.")

    sub.add_parser("logout", help="Log out of your Nextcloud server.")

    push = sub.add_parser("push", help="Push a file from your machine to the server.")
    push.add_argument("source", help="Path to the local source file.")
    push.add_argument("destination", help="Remote destination file or directory.")

    pull = sub.add_parser("pull", help="Pull a file from the server to your machine.")
    pull.add_argument("source", help="Path to the remote source file.")
    pull.add_argument("destination", help="Local destination file or directory.")

    ls = sub.add_parser("ls", help="List files and directories.")
    ls.add_argument("path", nargs="?", default=None, help="Remote directory, the working directory by default.")
    ls.add_argument("-l", "--list", dest="one_per_line", action="store_true", help="One entry per line.")
    ls.add_argument("-a", "--all", dest="show_all", action="store_true", help="Include dotfiles.")

    mkdir = sub.add_parser("mkdir", help="Make a directory.")
    mkdir.add_argument("path", help="Remote directory to create.")

    rm = sub.add_parser("rm", help="Remove a file or directory. Directories are deleted recursively.")
    rm.add_argument("path", help="Remote file or directory to remove.")
    rm.add_argument("-f", "--force", action="store_true", help="Do not ask for confirmation.")

    sub.add_parser("shell", help="Enter an interactive prompt.")

    cd = sub.add_parser("cd", help="Change the remote working directory (shell only).")
    cd.add_argument("path", help="Directory to change to.")

    return parser


def _to_command(ns: argparse.Namespace) -> Command:
    name = ns.command
    if name == "status":
        return Status()
    if name == "login":
        return Login(server=ns.server, username=ns.username, password=ns.password)
    if name == "logout":
        return Logout()
    if name == "push":
        return Push(source=ns.source, destination=ns.destination)
    if name == "pull":
        return Pull(source=ns.source, destination=ns.destination)
    if name == "ls":
        return Ls(path=ns.path, one_per_line=ns.one_per_line, show_all=ns.show_all)
    if name == "mkdir":
        return Mkdir(path=ns.path)
    if name == "rm":
        return Rm(path=ns.path, force=ns.force)
    if name == "shell":
        return Shell()
    if name == "cd":
        return Cd(path=ns.path)
    raise CommandParseError(f"{PROG}: error: unknown command {name!r}")  # pragma: no cover


def parse(tokens: Sequence[str]) -> Invocation:
    """Parse command-line tokens (without the program name).

    :raises CommandParseError: On invalid input, or with ``status=0`` after
        ``--help`` has printed its text.
    """
    ns = build_parser().parse_args(list(tokens))
    return Invocation(command=_to_command(ns), verbose=ns.verbose)


def split_line(line: str) -> list[str]:
    """Tokenize a shell line; a leading program name is optional.

    :raises CommandParseError: On unbalanced quotes.
    """
    try:
        tokens = shlex.split(line)
    except ValueError as exc:
        raise CommandParseError(f"{PROG}: error: {exc}") from None
    if tokens and tokens[0] == PROG:
        return tokens[1:]
    return tokens
