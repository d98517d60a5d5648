"""Configuration model — computed once at startup and passed explicitly."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_TIMEOUT = 10.0
KEYRING_SERVICE = "nextcloud_client_cli"

_TRUTHY = frozenset({"1", "true", "yes"})


def _default_cache_dir(environ: Mapping[str, str]) -> Path:
    if override := environ.get("NXCLOUD_CACHE_DIR"):
        return Path(override).expanduser()
    if xdg := environ.get("XDG_CACHE_HOME"):
        return Path(xdg).expanduser() / "nxcloud"
    return Path("~/.cache").expanduser() / "nxcloud"


@dataclasses.dataclass(frozen=True)
class ClientConfig:
    """Locations and limits used by the stores, transports and the shell.

    :param cache_dir: Directory holding the credentials fallback file and history.
    :param keyring_service: Service name used for the OS secret store.
    :param use_keyring: Try the OS secret store before the file fallback.
    :param timeout: Per-request network timeout in seconds.
    """

    cache_dir: Path
    keyring_service: str = KEYRING_SERVICE
    use_keyring: bool = True
    timeout: float = DEFAULT_TIMEOUT

    @property
    def credentials_path(self) -> Path:
        return self.cache_dir / "credentials"

    @property
    def history_path(self) -> Path:
        return self.cache_dir / "history"

    def validate(self) -> None:
        """Validate the configuration.

        :raises ValueError: If the timeout is not positive.
        """
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Build the configuration from environment variables.

        Reads ``NXCLOUD_CACHE_DIR`` (falling back to ``$XDG_CACHE_HOME/nxcloud``
        and ``~/.cache/nxcloud``), ``NXCLOUD_TIMEOUT`` and ``NXCLOUD_NO_KEYRING``.

        :raises ValueError: If ``NXCLOUD_TIMEOUT`` is not a positive number.
        """
        env = os.environ if environ is None else environ
        raw_timeout = env.get("NXCLOUD_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ValueError(f"NXCLOUD_TIMEOUT must be a number, got {raw_timeout!r}") from None
        config = cls(
            cache_dir=_default_cache_dir(env),
            use_keyring=env.get("NXCLOUD_NO_KEYRING", "").strip().lower() not in _TRUTHY,
            timeout=timeout,
        )
        config.validate()
        return config
