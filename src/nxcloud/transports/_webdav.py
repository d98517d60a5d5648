"""WebDAV transport for Nextcloud-style servers using requests."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ElementTree
from contextlib import contextmanager
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, unquote, urljoin, urlsplit

import requests

from nxcloud._config import DEFAULT_TIMEOUT
from nxcloud._errors import NxCloudError, RemoteOperationFailed
from nxcloud._models import ListingEntry
from nxcloud._transport import Transport

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from nxcloud._credentials import Credentials
    from nxcloud._path import RemotePath

log = logging.getLogger(__name__)

_DAV = "{DAV:}"
_PROPFIND_BODY = (
    b'<?xml version="1.0" encoding="utf-8"?>\n'
    b'<d:propfind xmlns:d="DAV:"><d:prop>'
    b"<d:resourcetype/><d:getcontentlength/><d:getlastmodified/>"
    b"</d:prop></d:propfind>"
)
# OCS v1 answers HTTP 200 and reports failures in <meta><statuscode>.
_OCS_OK = frozenset({"100", "200"})


def _parse_size(text: str | None) -> int | None:
    if text is None or not text.strip().isdigit():
        return None
    return int(text.strip())


def _parse_modified(text: str | None) -> datetime | None:
    if not text:
        return None
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None


class WebDAVTransport(Transport):
    """Transport speaking WebDAV to a Nextcloud-style server.

    Files live under ``<server>remote.php/dav/files/<username>/`` and the
    identity check uses the OCS user endpoint.

    :param server: Server base URL; a trailing ``/`` is added if missing.
    :param username: Account name, used for basic auth and the files root.
    :param password: App password.
    :param timeout: Per-request timeout in seconds.
    :param session: Optional ``requests.Session`` to reuse. Sessions created
        here are closed by :meth:`close`.
    """

    def __init__(
        self,
        server: str,
        username: str,
        password: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        if not server or not server.strip():
            raise ValueError("server must be a non-empty URL")
        if not username:
            raise ValueError("username must be a non-empty string")
        self._server = server if server.endswith("/") else f"{server}/"
        self._username = username
        self._auth = (username, password)
        self._timeout = timeout
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()
        self._files_root = urljoin(self._server, f"remote.php/dav/files/{quote(username, safe='')}/")
        self._user_url = urljoin(self._server, f"ocs/v1.php/cloud/users/{quote(username, safe='')}")

    @classmethod
    def from_credentials(cls, credentials: Credentials, *, timeout: float = DEFAULT_TIMEOUT) -> WebDAVTransport:
        return cls(credentials.server, credentials.username, credentials.password, timeout=timeout)

    def __repr__(self) -> str:
        return f"WebDAVTransport(server={self._server!r}, username={self._username!r})"

    @property
    def name(self) -> str:
        return "webdav"

    # region: requests plumbing
    def _url(self, path: RemotePath) -> str:
        return self._files_root + quote(str(path))

    @contextmanager
    def _errors(self, path: str | None) -> Iterator[None]:
        """Map requests exceptions to ``RemoteOperationFailed``."""
        try:
            yield
        except NxCloudError:
            raise
        except requests.RequestException as exc:
            raise RemoteOperationFailed(f"Request failed: {exc}", path=path, server=self._server) from None

    def _request(
        self,
        method: str,
        url: str,
        *,
        path: str | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        log.debug("%s %s", method, url)
        with self._errors(path):
            response = self._session.request(method, url, auth=self._auth, timeout=self._timeout, **kwargs)
        if not 200 <= response.status_code < 300:
            target = path or url
            raise RemoteOperationFailed(
                f"{method} {target} failed: {response.status_code} {response.reason}",
                path=path,
                server=self._server,
                status=response.status_code,
            )
        return response

    # endregion

    # region: listing
    def _parse_multistatus(self, content: bytes, path: RemotePath) -> list[ListingEntry]:
        try:
            root = ElementTree.fromstring(content)
        except ElementTree.ParseError:
            raise RemoteOperationFailed(
                "Failed to parse listing response", path=path.as_posix(), server=self._server
            ) from None
        listed = unquote(urlsplit(self._url(path)).path).rstrip("/")
        entries: list[ListingEntry] = []
        itself: ListingEntry | None = None
        for response in root.iter(f"{_DAV}response"):
            href = response.findtext(f"{_DAV}href")
            if not href:
                continue
            href_path = unquote(urlsplit(href).path).rstrip("/")
            prop = None
            for propstat in response.findall(f"{_DAV}propstat"):
                status = propstat.findtext(f"{_DAV}status") or ""
                if not status or " 200 " in f"{status} ":
                    prop = propstat.find(f"{_DAV}prop")
                    break
            is_dir = prop is not None and prop.find(f"{_DAV}resourcetype/{_DAV}collection") is not None
            entry = ListingEntry(
                name=href_path.rsplit("/", 1)[-1],
                is_dir=is_dir,
                size=None if prop is None else _parse_size(prop.findtext(f"{_DAV}getcontentlength")),
                modified_at=None if prop is None else _parse_modified(prop.findtext(f"{_DAV}getlastmodified")),
            )
            if href_path == listed:
                itself = entry
                continue
            entries.append(entry)
        if not entries and itself is not None and not itself.is_dir:
            return [itself]
        return entries

    def list_entries(self, path: RemotePath) -> list[ListingEntry]:
        response = self._request(
            "PROPFIND",
            self._url(path),
            path=path.as_posix(),
            headers={"Depth": "1", "Content-Type": "application/xml; charset=utf-8"},
            data=_PROPFIND_BODY,
        )
        return self._parse_multistatus(response.content, path)

    # endregion

    def fetch(self, path: RemotePath) -> bytes:
        return self._request("GET", self._url(path), path=path.as_posix()).content

    def store(self, path: RemotePath, data: bytes) -> None:
        self._request("PUT", self._url(path), path=path.as_posix(), data=data)
        log.debug("Stored %d bytes at %s", len(data), path.as_posix())

    def mkcol(self, path: RemotePath) -> None:
        self._request("MKCOL", self._url(path), path=path.as_posix())

    def delete(self, path: RemotePath) -> None:
        self._request("DELETE", self._url(path), path=path.as_posix())

    def verify_identity(self) -> None:
        response = self._request("GET", self._user_url, headers={"OCS-APIRequest": "true"})
        try:
            root = ElementTree.fromstring(response.content)
        except ElementTree.ParseError:
            log.debug("User endpoint returned no XML; trusting the HTTP status")
            return
        code = (root.findtext("meta/statuscode") or "").strip()
        if code and code not in _OCS_OK:
            message = root.findtext("meta/message") or "identity check failed"
            raise RemoteOperationFailed(
                f"{message} (OCS status {code})",
                server=self._server,
                status=int(code) if code.isdigit() else None,
            )
        log.info("Verified identity of %s", self._username)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()
