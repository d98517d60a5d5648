"""Credentials model and its reversible on-disk encoding."""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json
from urllib.parse import urlsplit, urlunsplit

from nxcloud._errors import InvalidCredentials, InvalidUrl, PersistenceFailure

_SCHEMES = ("http://", "https://")


def parse_server(raw: str) -> str:
    """Parse a server argument into an ``https`` URL ending with ``/``.

    The scheme defaults to ``https`` when omitted, and plain ``http`` is
    upgraded.

    :raises InvalidUrl: If no host can be parsed.
    """
    text = raw.strip()
    if not text:
        raise InvalidUrl("Server URL is empty", server=raw)
    if "://" in text and not text.lower().startswith(_SCHEMES):
        raise InvalidUrl("Server URL must use http or https", server=raw)
    if not text.lower().startswith(_SCHEMES):
        text = f"https://{text}"
    try:
        parts = urlsplit(text)
        parts.port  # noqa: B018 -- raises ValueError on a malformed port
    except ValueError as exc:
        raise InvalidUrl(f"Invalid server URL: {exc}", server=raw) from None
    if not parts.hostname:
        raise InvalidUrl("Server URL has no host", server=raw)
    path = parts.path if parts.path.endswith("/") else f"{parts.path}/"
    return urlunsplit(("https", parts.netloc, path, "", ""))


@dataclasses.dataclass(frozen=True)
class Credentials:
    """A login: username, app password and server URL.

    :param username: Account name.
    :param password: App password; hidden from ``repr``.
    :param server: Absolute ``https`` URL of the server, ending with ``/``.
    """

    username: str
    password: str = dataclasses.field(repr=False)
    server: str

    @classmethod
    def parse(cls, username: str, password: str, server: str) -> Credentials:
        """Build credentials from raw CLI arguments.

        :raises InvalidUrl: If ``server`` is not a usable URL.
        :raises InvalidCredentials: If ``username`` is blank.
        """
        if not username.strip():
            raise InvalidCredentials("Username must not be empty", server=server)
        return cls(username=username, password=password, server=parse_server(server))

    def encode(self) -> str:
        """Base64 of the JSON form. Reversible, not encryption."""
        payload = json.dumps(dataclasses.asdict(self), separators=(",", ":"))
        return base64.b64encode(payload.encode("utf-8")).decode("ascii")

    @classmethod
    def decode(cls, content: str) -> Credentials:
        """Decode :meth:`encode` output, or the older ``user pass server`` form.

        :raises PersistenceFailure: If the content cannot be decoded.
        """
        try:
            text = base64.b64decode(content.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise PersistenceFailure("Stored credentials are not valid base64") from None
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            fields = text.split(" ")
            if len(fields) != 3:
                raise PersistenceFailure("Stored credentials have an unexpected format") from None
            return cls(username=fields[0], password=fields[1], server=fields[2])
        if not isinstance(data, dict) or not {"username", "password", "server"} <= data.keys():
            raise PersistenceFailure("Stored credentials have an unexpected format")
        return cls(username=str(data["username"]), password=str(data["password"]), server=str(data["server"]))
