"""Tests for Credentials parsing and the stored encoding."""

from __future__ import annotations

import base64
import dataclasses
import json

import pytest

from nxcloud._credentials import Credentials, parse_server
from nxcloud._errors import InvalidCredentials, InvalidUrl, PersistenceFailure


class TestParseServer:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("https://cloud.example.com", "https://cloud.example.com/"),
            ("https://cloud.example.com/", "https://cloud.example.com/"),
            ("cloud.example.com", "https://cloud.example.com/"),
            ("http://cloud.example.com", "https://cloud.example.com/"),
            ("https://example.com/nextcloud", "https://example.com/nextcloud/"),
            ("https://cloud.example.com:8443", "https://cloud.example.com:8443/"),
            ("  https://cloud.example.com  ", "https://cloud.example.com/"),
        ],
    )
    def test_normalized(self, raw: str, expected: str) -> None:
        assert parse_server(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "ftp://cloud.example.com", "https://", "https://host:notaport"])
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(InvalidUrl):
            parse_server(raw)

    def test_error_carries_server(self) -> None:
        with pytest.raises(InvalidUrl) as exc_info:
            parse_server("ftp://x")
        assert exc_info.value.server == "ftp://x"


class TestCredentials:
    def test_parse_normalizes_server(self) -> None:
        creds = Credentials.parse("alice", "secret", "cloud.example.com")
        assert creds == Credentials(username="alice", password="secret", server="https://cloud.example.com/")

    def test_parse_rejects_bad_server(self) -> None:
        with pytest.raises(InvalidUrl):
            Credentials.parse("alice", "secret", "")

    @pytest.mark.parametrize("username", ["", "   "])
    def test_parse_rejects_blank_username(self, username: str) -> None:
        with pytest.raises(InvalidCredentials, match="Username must not be empty"):
            Credentials.parse(username, "secret", "cloud.example.com")

    def test_password_hidden_from_repr(self) -> None:
        creds = Credentials(username="alice", password="hunter2", server="https://s/")
        assert "hunter2" not in repr(creds)

    def test_frozen(self) -> None:
        creds = Credentials(username="alice", password="p", server="https://s/")
        with pytest.raises(dataclasses.FrozenInstanceError):
            creds.username = "bob"  # type: ignore[misc]


class TestEncoding:
    def test_encode_is_base64_json(self) -> None:
        creds = Credentials(username="alice", password="p w", server="https://s/")
        decoded = json.loads(base64.b64decode(creds.encode()))
        assert decoded == {"username": "alice", "password": "p w", "server": "https://s/"}

    def test_decode_reverses_encode(self) -> None:
        creds = Credentials(username="user2", password="pass2", server="https://cloud.example.com/")
        assert Credentials.decode(creds.encode()) == creds

    def test_decode_tolerates_whitespace(self) -> None:
        creds = Credentials(username="u", password="p", server="https://s/")
        assert Credentials.decode(f"{creds.encode()}\n") == creds

    def test_decode_legacy_form(self) -> None:
        content = base64.b64encode(b"user pass https://cloud.example.com/").decode()
        assert Credentials.decode(content) == Credentials(
            username="user", password="pass", server="https://cloud.example.com/"
        )

    def test_decode_not_base64(self) -> None:
        with pytest.raises(PersistenceFailure, match="base64"):
            Credentials.decode("not base64!!")

    def test_decode_wrong_field_count(self) -> None:
        content = base64.b64encode(b"only two").decode()
        with pytest.raises(PersistenceFailure, match="unexpected format"):
            Credentials.decode(content)

    def test_decode_json_missing_keys(self) -> None:
        content = base64.b64encode(b'{"username": "u"}').decode()
        with pytest.raises(PersistenceFailure):
            Credentials.decode(content)
