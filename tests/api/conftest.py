import pytest
from fastapi.testclient import TestClient

from passwordless.main import create_app
from passwordless.presentation.dependencies import (
    get_clock,
    get_code_delivery,
    get_credential_store,
    get_credential_ttl_seconds,
    get_hash_secret,
    get_verify_secret,
)
from passwordless.settings import get_settings
from tests.fakes import (
    FakeClock,
    FakeCredentialStore,
    FakeDeliveryOK,
    hash_secret_stub,
    verify_secret_stub,
)


@pytest.fixture()
def app_and_deps():
    app = create_app()
    store = FakeCredentialStore()
    delivery = FakeDeliveryOK()
    clock = FakeClock()

    app.dependency_overrides[get_credential_store] = lambda: store
    app.dependency_overrides[get_code_delivery] = lambda: delivery
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_hash_secret] = lambda: hash_secret_stub
    app.dependency_overrides[get_verify_secret] = lambda: verify_secret_stub
    app.dependency_overrides[get_credential_ttl_seconds] = lambda: 900

    try:
        yield app, store, delivery, clock
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _, _, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def api_key(monkeypatch):
    """Require X-API-Key: test-key for the duration of a test."""
    monkeypatch.setenv("API_KEY", "test-key")
    get_settings.cache_clear()
    yield "test-key"
    monkeypatch.delenv("API_KEY", raising=False)
    get_settings.cache_clear()
