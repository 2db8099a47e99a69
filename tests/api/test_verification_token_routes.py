from tests.fakes import FakeErroredStore
from passwordless.presentation.dependencies import get_credential_store


def test_create_verification_token_returns_plain_token(client, app_and_deps):
    _, store, _, _ = app_and_deps

    r = client.post("/v1/auth/verification-token", json={"identifier": "a@b.com"})

    assert r.status_code == 200, r.text
    body = r.json()
    assert set(body) == {"token", "expiresAt"}
    assert body["expiresAt"].startswith("2026-01-01T12:15:00")
    (row,) = store.rows
    assert row.secret_hash == "hashed-" + body["token"]


def test_create_verification_token_rejects_bad_email(client, app_and_deps):
    _, store, _, _ = app_and_deps

    r = client.post("/v1/auth/verification-token", json={"identifier": "nope"})

    assert r.status_code == 400
    assert store.calls == []


def test_create_verification_token_rejects_missing_body(client):
    r = client.post("/v1/auth/verification-token", json={})
    assert r.status_code == 400


def test_use_verification_token_once(client):
    token = client.post(
        "/v1/auth/verification-token", json={"identifier": "a@b.com"}
    ).json()["token"]

    r1 = client.post(
        "/v1/auth/verification-token/use",
        json={"identifier": "a@b.com", "token": token},
    )
    assert r1.status_code == 200
    assert r1.json() == {"identifier": "a@b.com"}

    r2 = client.post(
        "/v1/auth/verification-token/use",
        json={"identifier": "a@b.com", "token": token},
    )
    assert r2.status_code == 404
    assert r2.json()["detail"] == "Verification token not found"


def test_use_verification_token_expired_is_404(client, app_and_deps):
    _, store, _, clock = app_and_deps
    token = client.post(
        "/v1/auth/verification-token", json={"identifier": "a@b.com"}
    ).json()["token"]

    clock.advance(minutes=16)
    r = client.post(
        "/v1/auth/verification-token/use",
        json={"identifier": "a@b.com", "token": token},
    )
    assert r.status_code == 404
    assert r.json()["detail"] == "Verification token not found"
    assert store.rows == []


def test_use_verification_token_empty_token_is_400(client):
    r = client.post(
        "/v1/auth/verification-token/use",
        json={"identifier": "a@b.com", "token": ""},
    )
    assert r.status_code == 400


def test_store_failure_is_500(client, app_and_deps):
    app, _, _, _ = app_and_deps
    app.dependency_overrides[get_credential_store] = lambda: FakeErroredStore("create")

    r = client.post("/v1/auth/verification-token", json={"identifier": "a@b.com"})

    assert r.status_code == 500
    assert "Postgres" not in r.text
