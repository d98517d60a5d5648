"""Path resolution — joining, and push/pull name derivation."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from nxcloud._errors import NoFileName, SourceIsDirectory
from nxcloud._path import SEP, RemotePath, dedot

_DIRECTORY_SUFFIXES = (".", SEP, "*")
_PREFIX_TOKENS = frozenset({"", ".", ".."})


def normalize(value: Union[str, RemotePath]) -> RemotePath:  # noqa: UP007
    """Normalize a raw path. Normalizing a ``RemotePath`` returns an equal value."""
    if isinstance(value, RemotePath):
        return RemotePath(value.as_posix())
    return RemotePath(value)


def join(base: RemotePath, fragment: str) -> RemotePath:
    """Resolve ``fragment`` against ``base``; see :meth:`RemotePath.join`."""
    return base.join(fragment)


def is_file_shaped(raw: str) -> bool:
    """A path names a file unless it ends in ``.``, ``/`` or ``*``.

    Wildcards are not supported, so ``*`` counts as a directory and gets
    rejected as a transfer source.
    """
    return not raw.endswith(_DIRECTORY_SUFFIXES)


def source_file_name(source: str) -> str:
    """Extract the file name of a transfer source.

    :raises SourceIsDirectory: If ``source`` is directory-shaped.
    :raises NoFileName: If ``source`` has no final component.
    """
    if not is_file_shaped(source):
        raise SourceIsDirectory("Source is a directory", path=source)
    name = source.rsplit(SEP, 1)[-1]
    if not name:
        raise NoFileName("Source has no file name", path=source)
    return name


def strip_prefix(raw: str) -> str:
    """Drop any leading run of ``/``, ``.`` and ``..`` components."""
    components = raw.split(SEP)
    start = 0
    while start < len(components) - 1 and components[start] in _PREFIX_TOKENS:
        start += 1
    rest = components[start:]
    if len(rest) == 1 and rest[0] in _PREFIX_TOKENS:
        return ""
    return SEP.join(rest)


def _clean(raw: str) -> str:
    return SEP.join(dedot((), strip_prefix(raw).split(SEP)))


def _append_file_name(directory: str, file_name: str) -> str:
    trimmed = directory.rstrip(SEP)
    if not trimmed:
        return file_name
    return f"{trimmed}{SEP}{file_name}"


def format_destination_push(source: str, destination: str) -> str:
    """Compute the remote path a push of ``source`` writes to.

    A file-shaped ``destination`` is used as the target name; a
    directory-shaped one gets the source's file name appended. The result is
    relative to the remote root with dots removed.

    :raises SourceIsDirectory: If ``source`` is directory-shaped.
    :raises NoFileName: If ``source`` has no file name.
    """
    file_name = source_file_name(source)
    target = destination if is_file_shaped(destination) else _append_file_name(destination, file_name)
    return _clean(target)


def format_destination_pull(source: str, destination: str) -> Path:
    """Compute the local path a pull of ``source`` writes to.

    The destination is a local filesystem path and is not dedotted.

    :raises SourceIsDirectory: If ``source`` is directory-shaped.
    :raises NoFileName: If ``source`` has no file name.
    """
    file_name = source_file_name(source)
    if is_file_shaped(destination):
        return Path(destination)
    return Path(destination) / file_name


def format_source_pull(source: str) -> str:
    """Clean a remote pull source into a root-relative path.

    :raises SourceIsDirectory: If ``source`` is directory-shaped.
    :raises NoFileName: If ``source`` has no file name.
    """
    source_file_name(source)
    return _clean(source)
