"""Transport test fixtures -- parameterized for conformance testing."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import requests

from nxcloud.transports import LocalTransport, WebDAVTransport

if TYPE_CHECKING:
    from collections.abc import Iterator

    from nxcloud._transport import Transport


@pytest.fixture(scope="session")
def webdav_server() -> Iterator[tuple[str, Path]]:
    """Start an in-process WebDAV server for the test session."""
    from tests.transports.webdav_server import start_webdav_server, stop_webdav_server

    tmpdir = tempfile.mkdtemp(prefix="webdav_test_")
    thread, server = start_webdav_server(root=tmpdir)

    yield f"http://127.0.0.1:{server.server_port}/", Path(tmpdir)

    stop_webdav_server(thread, server)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def webdav_root(webdav_server: tuple[str, Path]) -> Iterator[Path]:
    """The served directory, emptied after each test."""
    _, root = webdav_server
    yield root
    for child in root.iterdir():
        if child.is_dir():
            shutil.rmtree(child)
        else:
            child.unlink()


@pytest.fixture
def webdav_transport(webdav_server: tuple[str, Path], webdav_root: Path) -> Iterator[WebDAVTransport]:
    from tests.transports.webdav_server import PASSWORD, USERNAME

    url, _ = webdav_server
    session = requests.Session()
    session.trust_env = False
    t = WebDAVTransport(url, USERNAME, PASSWORD, timeout=5.0, session=session)
    yield t
    t.close()
    session.close()


@pytest.fixture(params=["local", "webdav"])
def transport(request: pytest.FixtureRequest) -> Iterator[Transport]:
    """Parameterized transport fixture. Add new transports here."""
    if request.param == "local":
        with tempfile.TemporaryDirectory() as tmp:
            yield LocalTransport(root=tmp)
    elif request.param == "webdav":
        yield request.getfixturevalue("webdav_transport")
    else:
        pytest.skip(f"Unknown transport: {request.param}")
