"""In-process WebDAV server for testing, backed by a local temp directory.

Serves the Nextcloud URL layout (``remote.php/dav/files/<user>/`` plus the
OCS user endpoint) from a ``ThreadingHTTPServer`` in a background thread.
Only one account is accepted; everything else gets 401.
"""

from __future__ import annotations

import base64
import contextlib
import shutil
import threading
from email.utils import formatdate
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from urllib.parse import quote, unquote, urlsplit
from xml.sax.saxutils import escape

USERNAME = "testuser"
PASSWORD = "testpass"

_FILES_PREFIX = f"/remote.php/dav/files/{USERNAME}"
_OCS_PREFIX = "/ocs/v1.php/cloud/users/"

# ---------------------------------------------------------------------------
# Response bodies
# ---------------------------------------------------------------------------


def _propstat(href: str, full: Path) -> str:
    st = full.stat()
    modified = formatdate(st.st_mtime, usegmt=True)
    if full.is_dir():
        props = "<d:resourcetype><d:collection/></d:resourcetype>"
    else:
        props = f"<d:resourcetype/><d:getcontentlength>{st.st_size}</d:getcontentlength>"
    return (
        f"<d:response><d:href>{escape(href)}</d:href><d:propstat><d:prop>"
        f"{props}<d:getlastmodified>{modified}</d:getlastmodified>"
        "</d:prop><d:status>HTTP/1.1 200 OK</d:status></d:propstat></d:response>"
    )


def _ocs(statuscode: int, message: str, user_id: str = "") -> bytes:
    data = f"<data><id>{escape(user_id)}</id></data>" if user_id else "<data/>"
    return (
        '<?xml version="1.0"?>\n<ocs><meta>'
        f"<status>{'ok' if statuscode == 100 else 'failure'}</status>"
        f"<statuscode>{statuscode}</statuscode><message>{escape(message)}</message>"
        f"</meta>{data}</ocs>"
    ).encode()


# ---------------------------------------------------------------------------
# Request handler -- maps WebDAV methods to the local filesystem
# ---------------------------------------------------------------------------


class StubDAVHandler(BaseHTTPRequestHandler):
    """WebDAV handler backed by a local directory tree."""

    protocol_version = "HTTP/1.1"
    ROOT: Path = Path()  # set by start_webdav_server before serving
    _body_bytes: bytes = b""

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        pass

    # region: plumbing
    def _body(self) -> bytes:
        length = int(self.headers.get("Content-Length") or 0)
        return self.rfile.read(length) if length else b""

    def _reply(self, status: int, body: bytes = b"", content_type: str = "text/plain") -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if body and self.command != "HEAD":
            self.wfile.write(body)

    def _authorized(self) -> bool:
        expected = base64.b64encode(f"{USERNAME}:{PASSWORD}".encode()).decode()
        if self.headers.get("Authorization") == f"Basic {expected}":
            return True
        self._reply(401)
        return False

    def _target(self) -> tuple[str, Path] | None:
        """Return the unquoted request path and its local counterpart, or reply 404."""
        path = unquote(urlsplit(self.path).path)
        if not path.startswith(_FILES_PREFIX):
            self._reply(404)
            return None
        rel = path[len(_FILES_PREFIX) :].strip("/")
        return rel, (self.ROOT / rel) if rel else self.ROOT

    def _begin(self) -> tuple[str, Path] | None:
        self._body_bytes = self._body()
        if not self._authorized():
            return None
        return self._target()

    # endregion

    def do_GET(self) -> None:  # noqa: N802
        self._body_bytes = self._body()
        if not self._authorized():
            return
        path = urlsplit(self.path).path
        if path.startswith(_OCS_PREFIX):
            if self.headers.get("OCS-APIRequest") != "true":
                self._reply(400)
                return
            user = unquote(path[len(_OCS_PREFIX) :])
            if user == USERNAME:
                self._reply(200, _ocs(100, "OK", user), "text/xml")
            else:
                self._reply(200, _ocs(997, "Current user is not logged in"), "text/xml")
            return
        target = self._target()
        if target is None:
            return
        _, full = target
        if not full.exists():
            self._reply(404)
        elif full.is_dir():
            self._reply(405)
        else:
            self._reply(200, full.read_bytes(), "application/octet-stream")

    def do_PUT(self) -> None:  # noqa: N802
        target = self._begin()
        if target is None:
            return
        rel, full = target
        if not rel or full.is_dir():
            self._reply(405)
        elif not full.parent.is_dir():
            self._reply(409)
        else:
            existed = full.exists()
            full.write_bytes(self._body_bytes)
            self._reply(204 if existed else 201)

    def do_MKCOL(self) -> None:  # noqa: N802
        target = self._begin()
        if target is None:
            return
        _, full = target
        if full.exists():
            self._reply(405)
        elif not full.parent.is_dir():
            self._reply(409)
        else:
            full.mkdir()
            self._reply(201)

    def do_DELETE(self) -> None:  # noqa: N802
        target = self._begin()
        if target is None:
            return
        rel, full = target
        if not rel:
            self._reply(403)
        elif not full.exists():
            self._reply(404)
        else:
            if full.is_dir():
                shutil.rmtree(full)
            else:
                full.unlink()
            self._reply(204)

    def do_PROPFIND(self) -> None:  # noqa: N802
        target = self._begin()
        if target is None:
            return
        rel, full = target
        if not full.exists():
            self._reply(404)
            return
        base = quote(f"{_FILES_PREFIX}/{rel}" if rel else f"{_FILES_PREFIX}/")
        if full.is_dir() and not base.endswith("/"):
            base += "/"
        responses = [_propstat(base, full)]
        if full.is_dir() and self.headers.get("Depth", "1") != "0":
            for child in sorted(full.iterdir()):
                href = base + quote(child.name) + ("/" if child.is_dir() else "")
                responses.append(_propstat(href, child))
        body = (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            + '<d:multistatus xmlns:d="DAV:">'
            + "".join(responses)
            + "</d:multistatus>"
        ).encode()
        self._reply(207, body, 'application/xml; charset="utf-8"')


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------


def start_webdav_server(
    root: str,
    host: str = "127.0.0.1",
    port: int = 0,
) -> tuple[threading.Thread, ThreadingHTTPServer]:
    """Start an in-process WebDAV server in a background thread.

    :param root: Local directory to serve as the files root.
    :param host: Bind address.
    :param port: Bind port; 0 picks a free one.
    :returns: ``(thread, server)``; the base URL is ``http://host:server.server_port/``.
    """
    StubDAVHandler.ROOT = Path(root)
    server = ThreadingHTTPServer((host, port), StubDAVHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, kwargs={"poll_interval": 0.1}, daemon=True)
    thread.start()
    return thread, server


def stop_webdav_server(thread: threading.Thread, server: ThreadingHTTPServer) -> None:
    """Stop the server thread and release the socket."""
    server.shutdown()
    with contextlib.suppress(OSError):
        server.server_close()
    thread.join(timeout=5)
