"""RemotePath — immutable, normalized path within the remote tree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from nxcloud._errors import InvalidPath

if TYPE_CHECKING:
    from collections.abc import Iterable

SEP: Final = "/"
_DOT_TOKENS: Final = frozenset({".", ".."})


def _check(raw: str) -> None:
    if "\0" in raw:
        raise InvalidPath("Path contains null byte", path=raw)


def dedot(segments: Iterable[str], components: Iterable[str]) -> tuple[str, ...]:
    """Dedot ``components`` on top of ``segments``; ``..`` is clamped at the root."""
    stack = list(segments)
    for component in components:
        if component == "" or component == ".":
            continue
        if component == "..":
            if stack:
                stack.pop()
            continue
        stack.append(component)
    return tuple(stack)


def is_directory_shaped(raw: str) -> bool:
    """Return ``True`` if ``raw`` ends in a separator or a ``.``/``..`` component."""
    if not raw or raw.endswith(SEP):
        return True
    return raw.rsplit(SEP, 1)[-1] in _DOT_TOKENS


class RemotePath:
    """An immutable, normalized path in the remote tree.

    Relative and absolute input are both resolved against the virtual root.
    ``is_file`` records whether the raw input named a leaf (``a/b``) or a
    location (``a/b/``, ``a/.``). The root is never a file.

    :param raw: The raw path string to normalize.
    :raises InvalidPath: If the path contains a null byte.
    """

    __slots__ = ("_is_file", "_segments")
    _segments: Final[tuple[str, ...]]  # type: ignore[misc]
    _is_file: Final[bool]  # type: ignore[misc]

    def __init__(self, raw: str = SEP) -> None:
        _check(raw)
        segments = dedot((), raw.split(SEP))
        object.__setattr__(self, "_segments", segments)
        object.__setattr__(self, "_is_file", bool(segments) and not is_directory_shaped(raw))

    @classmethod
    def _from_segments(cls, segments: Iterable[str], is_file: bool) -> RemotePath:
        p = object.__new__(cls)
        segs = tuple(segments)
        object.__setattr__(p, "_segments", segs)
        object.__setattr__(p, "_is_file", bool(segs) and is_file)
        return p

    @property
    def segments(self) -> tuple[str, ...]:
        """Normalized path components; empty for the root."""
        return self._segments

    @property
    def parts(self) -> tuple[str, ...]:
        return self._segments

    @property
    def is_file(self) -> bool:
        return self._is_file

    @property
    def is_root(self) -> bool:
        return not self._segments

    @property
    def name(self) -> str:
        """Final component of the path, or ``""`` for the root."""
        return self._segments[-1] if self._segments else ""

    @property
    def parent(self) -> RemotePath:
        """Directory containing this path. The parent of the root is the root."""
        return RemotePath._from_segments(self._segments[:-1], False)

    def join(self, fragment: str) -> RemotePath:
        """Resolve ``fragment`` against this path.

        An absolute fragment re-roots. ``..`` may walk back through this
        path's segments but never past the root. Except for a bare ``.``,
        the result's ``is_file`` comes from the fragment's shape alone.
        """
        _check(fragment)
        if fragment == "" or fragment == ".":
            return self
        if fragment == "..":
            return self.parent
        if fragment.startswith(SEP):
            return RemotePath(fragment)
        segments = dedot(self._segments, fragment.split(SEP))
        return RemotePath._from_segments(segments, not is_directory_shaped(fragment))

    def with_file_name(self, name: str) -> RemotePath:
        """Return a file path named ``name``.

        A file path has its trailing segment replaced; a directory path gets
        ``name`` appended.

        :raises InvalidPath: If ``name`` is not a single path component.
        """
        _check(name)
        if not name or SEP in name or name in _DOT_TOKENS:
            raise InvalidPath(f"Not a valid file name: {name!r}", path=self.as_posix())
        base = self._segments[:-1] if self._is_file else self._segments
        return RemotePath._from_segments((*base, name), True)

    def as_directory(self) -> RemotePath:
        """Same location, directory-shaped."""
        if not self._is_file:
            return self
        return RemotePath._from_segments(self._segments, False)

    def as_posix(self) -> str:
        """Absolute form that keeps the shape: ``/``, ``/a/b`` or ``/a/b/``."""
        if not self._segments:
            return SEP
        joined = SEP + SEP.join(self._segments)
        return joined if self._is_file else joined + SEP

    def __truediv__(self, other: str) -> RemotePath:
        return self.join(other)

    def __str__(self) -> str:
        return SEP.join(self._segments)

    def __repr__(self) -> str:
        return f"RemotePath({self.as_posix()!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RemotePath):
            return self._segments == other._segments and self._is_file == other._is_file
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._segments, self._is_file))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"RemotePath is immutable: cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"RemotePath is immutable: cannot delete '{name}'")
