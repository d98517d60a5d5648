"""Transport implementations."""

from nxcloud.transports._local import LocalTransport
from nxcloud.transports._webdav import WebDAVTransport

__all__ = ["LocalTransport", "WebDAVTransport"]
