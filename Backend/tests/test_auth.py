import requests

import auth
import config
from user_resolver import Anonymous, Authenticated


class _Resp:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def _configure(monkeypatch, response=None, error=None):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append({"url": url, "headers": headers, "timeout": timeout})
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(config, "SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setattr(config, "SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setattr(auth.requests, "get", fake_get)
    return calls


def test_bearer_token_parsing():
    assert auth.bearer_token("Bearer abc.def") == "abc.def"
    assert auth.bearer_token("bearer   xyz") == "xyz"
    assert auth.bearer_token("Basic abc") is None
    assert auth.bearer_token("Bearer ") is None
    assert auth.bearer_token(None) is None


def test_verified_email_is_authenticated(monkeypatch):
    calls = _configure(monkeypatch, _Resp(200, {"email": "Writer@Example.com", "email_confirmed_at": "2026-01-01"}))

    identity = auth.identity_for_token("token-1")

    assert identity == Authenticated(email="writer@example.com")
    assert calls[0]["url"] == "https://project.supabase.co/auth/v1/user"
    assert calls[0]["headers"] == {"Authorization": "Bearer token-1", "apikey": "anon-key"}
    assert calls[0]["timeout"] == config.AUTH_TIMEOUT_SECONDS


def test_unverified_email_is_anonymous(monkeypatch):
    _configure(monkeypatch, _Resp(200, {"email": "writer@example.com", "email_confirmed_at": None}))

    assert auth.identity_for_token("token-1") == Anonymous()


def test_non_object_body_is_anonymous(monkeypatch):
    _configure(monkeypatch, _Resp(200, ["x"]))

    assert auth.identity_for_token("token-1") == Anonymous()


def test_rejected_token_is_anonymous(monkeypatch):
    _configure(monkeypatch, _Resp(401, {"msg": "invalid JWT"}))

    assert auth.identity_for_token("expired") == Anonymous()


def test_unreachable_provider_is_anonymous(monkeypatch):
    _configure(monkeypatch, error=requests.exceptions.ConnectTimeout("timed out"))

    assert auth.identity_for_token("token-1") == Anonymous()


def test_no_token_skips_provider(monkeypatch):
    calls = _configure(monkeypatch, _Resp(200, {}))

    assert auth.get_identity(None) == Anonymous()
    assert calls == []
