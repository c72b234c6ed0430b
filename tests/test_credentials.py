# Tests for credentials.py
# Created: 2026-10-18

import json
import time

import pytest

from spotsession.credentials import Credentials
from spotsession.errors import DecodeFailure


class TestFromTokenResponse:
    def test_fields(self):
        creds = Credentials.from_token_response(
            {
                "access_token": "a",
                "refresh_token": "r",
                "token_type": "Bearer",
                "expires_in": 3600,
                "scope": "user-read-email user-library-read",
            },
            requested_scopes=["user-read-email"],
            now=1000.0,
        )
        assert creds.access_token == "a"
        assert creds.refresh_token == "r"
        assert creds.expires_at == 4600.0
        assert creds.scopes == ["user-read-email", "user-library-read"]
        assert creds.requested_scopes == ["user-read-email"]

    def test_missing_scope_and_refresh_token(self):
        creds = Credentials.from_token_response({"access_token": "a", "expires_in": 60})
        assert creds.scopes == []
        assert creds.refresh_token is None


class TestIsAuthorized:
    def test_empty(self):
        assert Credentials().is_authorized() is False

    def test_access_token_without_requested_scopes(self):
        assert Credentials(access_token="a").is_authorized() is True

    def test_all_requested_scopes_granted(self):
        creds = Credentials(access_token="a", scopes=["x", "y"], requested_scopes=["x"])
        assert creds.is_authorized() is True

    def test_requested_scope_missing(self):
        creds = Credentials(access_token="a", scopes=["x"], requested_scopes=["x", "y"])
        assert creds.is_authorized() is False


class TestIsExpired:
    def test_no_expiry(self):
        assert Credentials(access_token="a").is_expired() is False

    def test_future(self):
        assert Credentials(access_token="a", expires_at=time.time() + 3600).is_expired() is False

    def test_within_skew(self):
        assert Credentials(access_token="a", expires_at=time.time() + 30).is_expired() is True


class TestSerialization:
    def test_bytes_roundtrip(self):
        creds = Credentials(
            access_token="a",
            refresh_token="r",
            expires_at=123.0,
            scopes=["s"],
            requested_scopes=["s"],
        )
        assert Credentials.from_bytes(creds.to_bytes()) == creds

    def test_not_json(self):
        with pytest.raises(DecodeFailure):
            Credentials.from_bytes(b"\xff\xfenot json")

    def test_not_an_object(self):
        with pytest.raises(DecodeFailure):
            Credentials.from_bytes(json.dumps([1, 2]).encode())

    def test_unknown_fields(self):
        with pytest.raises(DecodeFailure):
            Credentials.from_bytes(json.dumps({"password": "x"}).encode())

    def test_wrong_field_types(self):
        blob = b'{"access_token": "a", "refresh_token": "r", "expires_at": "soon"}'
        with pytest.raises(DecodeFailure, match="Invalid credentials fields"):
            Credentials.from_bytes(blob)

    def test_wrong_scopes_type(self):
        with pytest.raises(DecodeFailure):
            Credentials.from_bytes(json.dumps({"access_token": "a", "scopes": [1, 2]}).encode())

    def test_empty_object_is_unauthorized(self):
        assert Credentials.from_bytes(b"{}").is_authorized() is False

    def test_repr_hides_tokens(self):
        text = repr(Credentials(access_token="secret-access", refresh_token="secret-refresh"))
        assert "secret-access" not in text
        assert "secret-refresh" not in text
