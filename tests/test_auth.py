from unittest.mock import Mock

import pytest

from ideaspot import auth
from ideaspot.errors import Unauthenticated


def _request(headers=None):
    return Mock(headers=headers or {})


def test_missing_header_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        auth.authenticate(_request())


def test_non_bearer_header_is_unauthenticated():
    with pytest.raises(Unauthenticated):
        auth.authenticate(_request({"Authorization": "Basic abc"}))


def test_invalid_token_is_unauthenticated(monkeypatch):
    def reject(token, req, audience=None):
        raise ValueError("Token expired")

    monkeypatch.setenv("FIREBASE_PROJECT_ID", "ideaspot-app")
    monkeypatch.setattr(auth.id_token, "verify_firebase_token", reject)
    with pytest.raises(Unauthenticated):
        auth.authenticate(_request({"Authorization": "Bearer stale"}))


def test_valid_token_returns_claims_with_uid(monkeypatch):
    seen = {}

    def verify(token, req, audience=None):
        seen.update(token=token, audience=audience)
        return {"user_id": "u-42", "sub": "u-42"}

    monkeypatch.setenv("FIREBASE_PROJECT_ID", "ideaspot-app")
    monkeypatch.setattr(auth.id_token, "verify_firebase_token", verify)
    claims = auth.authenticate(_request({"Authorization": "Bearer good"}))

    assert claims["uid"] == "u-42"
    assert seen == {"token": "good", "audience": "ideaspot-app"}


def test_auth_can_be_disabled(monkeypatch):
    monkeypatch.setenv("IDEASPOT_REQUIRE_AUTH", "false")
    assert auth.authenticate(_request()) == {"uid": "anonymous"}


def _verifier_for(claims, calls):
    # Mirrors google-auth: the aud claim must match the requested audience.
    def verify(token, req, audience=None):
        calls.append(audience)
        if audience is not None and claims["aud"] != audience:
            raise ValueError(f"Token has wrong audience {claims['aud']}, expected {audience}")
        return dict(claims)

    return verify


def test_token_for_another_project_is_rejected(monkeypatch):
    calls = []
    monkeypatch.setenv("FIREBASE_PROJECT_ID", "ideaspot-app")
    monkeypatch.setattr(
        auth.id_token,
        "verify_firebase_token",
        _verifier_for({"aud": "attacker-project", "sub": "evil"}, calls),
    )
    with pytest.raises(Unauthenticated):
        auth.authenticate(_request({"Authorization": "Bearer minted-elsewhere"}))
    assert calls == ["ideaspot-app"]


def test_google_cloud_project_is_used_when_firebase_project_unset(monkeypatch):
    calls = []
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "ideaspot-app")
    monkeypatch.setattr(
        auth.id_token,
        "verify_firebase_token",
        _verifier_for({"aud": "ideaspot-app", "sub": "u-7"}, calls),
    )
    claims = auth.authenticate(_request({"Authorization": "Bearer good"}))
    assert claims["uid"] == "u-7"
    assert calls == ["ideaspot-app"]


def test_no_project_configured_rejects_every_token(monkeypatch):
    calls = []
    monkeypatch.setattr(
        auth.id_token,
        "verify_firebase_token",
        _verifier_for({"aud": "attacker-project", "sub": "evil"}, calls),
    )
    with pytest.raises(Unauthenticated):
        auth.authenticate(_request({"Authorization": "Bearer minted-elsewhere"}))
    assert calls == []
