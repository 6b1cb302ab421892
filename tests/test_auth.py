"""Tests for JWT helpers and Google token verification."""

from unittest.mock import patch

from sincewhen.auth.jwt import create_access_token, get_user_id_from_token
from sincewhen.auth.google_oauth import verify_google_token


def test_token_round_trips_user_id():
    assert get_user_id_from_token(create_access_token(42)) == 42


def test_garbage_token_rejected():
    assert get_user_id_from_token("not-a-token") is None


def test_verify_google_token_returns_verified_email():
    idinfo = {"iss": "https://accounts.google.com", "email": "a@example.com", "email_verified": True}
    with patch("sincewhen.auth.google_oauth.id_token.verify_oauth2_token", return_value=idinfo):
        assert verify_google_token("token") == "a@example.com"


def test_verify_google_token_rejects_unverified_email():
    idinfo = {"iss": "accounts.google.com", "email": "a@example.com", "email_verified": False}
    with patch("sincewhen.auth.google_oauth.id_token.verify_oauth2_token", return_value=idinfo):
        assert verify_google_token("token") is None


def test_verify_google_token_rejects_foreign_issuer():
    idinfo = {"iss": "evil.example.com", "email": "a@example.com", "email_verified": True}
    with patch("sincewhen.auth.google_oauth.id_token.verify_oauth2_token", return_value=idinfo):
        assert verify_google_token("token") is None


def test_verify_google_token_invalid():
    with patch("sincewhen.auth.google_oauth.id_token.verify_oauth2_token", side_effect=ValueError("bad")):
        assert verify_google_token("token") is None
