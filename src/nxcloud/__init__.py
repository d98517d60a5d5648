"""Command-line client for Nextcloud-style WebDAV file storage."""

from nxcloud._cli import main
from nxcloud._commands import Invocation, parse, split_line
from nxcloud._config import ClientConfig
from nxcloud._credential_store import CredentialChain, CredentialStore, FileStore, KeyringStore
from nxcloud._credentials import Credentials, parse_server
from nxcloud._dispatcher import Dispatcher
from nxcloud._errors import (
    CommandParseError,
    InvalidCredentials,
    InvalidPath,
    InvalidUrl,
    LocalFileError,
    NoFileName,
    NotLoggedIn,
    NxCloudError,
    PersistenceFailure,
    RemoteOperationFailed,
    RootDeletionRefused,
    SourceIsDirectory,
)
from nxcloud._models import ListingEntry
from nxcloud._path import RemotePath
from nxcloud._resolver import (
    format_destination_pull,
    format_destination_push,
    format_source_pull,
    join,
    normalize,
)
from nxcloud._session import Session
from nxcloud._shell import History, InteractiveShell
from nxcloud._transport import Transport

__version__ = "0.4.0"

__all__ = [
    # Core
    "RemotePath",
    "Session",
    "Dispatcher",
    "InteractiveShell",
    "History",
    "main",
    # Resolution
    "normalize",
    "join",
    "format_destination_push",
    "format_destination_pull",
    "format_source_pull",
    # Parsing
    "Invocation",
    "parse",
    "split_line",
    # Collaborators
    "Transport",
    "ListingEntry",
    "Credentials",
    "parse_server",
    "CredentialStore",
    "CredentialChain",
    "KeyringStore",
    "FileStore",
    # Config
    "ClientConfig",
    # Errors
    "NxCloudError",
    "NotLoggedIn",
    "InvalidUrl",
    "InvalidCredentials",
    "InvalidPath",
    "SourceIsDirectory",
    "NoFileName",
    "RemoteOperationFailed",
    "RootDeletionRefused",
    "PersistenceFailure",
    "LocalFileError",
    "CommandParseError",
    # Version
    "__version__",
]
