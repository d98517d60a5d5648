"""Immutable listing models."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclasses.dataclass(frozen=True)
class ListingEntry:
    """One child of a listed remote directory.

    :param name: Entry name (final path component, unquoted).
    :param is_dir: ``True`` for collections.
    :param size: Size in bytes, if the server reported one.
    :param modified_at: Last modification time, if known.
    """

    name: str
    is_dir: bool = False
    size: int | None = None
    modified_at: datetime | None = None

    @property
    def display_name(self) -> str:
        """Name as ``ls`` shows it; directories carry a trailing ``/``."""
        return f"{self.name}/" if self.is_dir else self.name

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".")
