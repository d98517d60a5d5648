"""Tests for ClientConfig."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest

from nxcloud._config import DEFAULT_TIMEOUT, KEYRING_SERVICE, ClientConfig


class TestClientConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        cfg = ClientConfig(cache_dir=tmp_path)
        assert cfg.keyring_service == KEYRING_SERVICE == "nextcloud_client_cli"
        assert cfg.use_keyring is True
        assert cfg.timeout == DEFAULT_TIMEOUT == 10.0

    def test_derived_paths(self, tmp_path: Path) -> None:
        cfg = ClientConfig(cache_dir=tmp_path)
        assert cfg.credentials_path == tmp_path / "credentials"
        assert cfg.history_path == tmp_path / "history"

    def test_frozen(self, tmp_path: Path) -> None:
        cfg = ClientConfig(cache_dir=tmp_path)
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.timeout = 1.0  # type: ignore[misc]

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_validate_rejects_timeout(self, tmp_path: Path, timeout: float) -> None:
        with pytest.raises(ValueError, match="timeout"):
            ClientConfig(cache_dir=tmp_path, timeout=timeout).validate()


class TestFromEnv:
    def test_cache_dir_override(self, tmp_path: Path) -> None:
        cfg = ClientConfig.from_env({"NXCLOUD_CACHE_DIR": str(tmp_path)})
        assert cfg.cache_dir == tmp_path

    def test_xdg_cache_home(self, tmp_path: Path) -> None:
        cfg = ClientConfig.from_env({"XDG_CACHE_HOME": str(tmp_path)})
        assert cfg.cache_dir == tmp_path / "nxcloud"

    def test_home_fallback(self) -> None:
        cfg = ClientConfig.from_env({})
        assert cfg.cache_dir == Path("~/.cache/nxcloud").expanduser()

    def test_timeout(self, tmp_path: Path) -> None:
        cfg = ClientConfig.from_env({"NXCLOUD_CACHE_DIR": str(tmp_path), "NXCLOUD_TIMEOUT": "2.5"})
        assert cfg.timeout == 2.5

    def test_timeout_not_a_number(self) -> None:
        with pytest.raises(ValueError, match="NXCLOUD_TIMEOUT must be a number"):
            ClientConfig.from_env({"NXCLOUD_TIMEOUT": "soon"})

    def test_timeout_not_positive(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            ClientConfig.from_env({"NXCLOUD_TIMEOUT": "0"})

    @pytest.mark.parametrize("value", ["1", "true", "YES"])
    def test_keyring_disabled(self, value: str) -> None:
        assert ClientConfig.from_env({"NXCLOUD_NO_KEYRING": value}).use_keyring is False

    def test_keyring_enabled_by_default(self) -> None:
        assert ClientConfig.from_env({"NXCLOUD_NO_KEYRING": "0"}).use_keyring is True
