from functools import partial

import pytest

from passwordless.infrastructure.security.hashing import hash_secret, verify_secret
from tests.fakes import (
    FakeClock,
    FakeCredentialStore,
    FakeDeliveryFailing,
    FakeDeliveryOK,
    FakeErroredStore,
)


@pytest.fixture()
def store():
    return FakeCredentialStore()


@pytest.fixture()
def errored_store():
    return FakeErroredStore(fail_on="create")


@pytest.fixture()
def delivery():
    return FakeDeliveryOK()


@pytest.fixture()
def failing_delivery():
    return FakeDeliveryFailing()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def bcrypt_hash():
    """Real bcrypt at the minimum cost so tests stay fast."""
    return partial(hash_secret, rounds=4)


@pytest.fixture()
def bcrypt_verify():
    return verify_secret


@pytest.fixture(autouse=True)
def patch_code(monkeypatch):
    """
    Make the 6-digit code deterministic in all tests.
    You can override in a specific test by re-monkeypatching.
    """
    from passwordless.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_numeric_code", lambda: "123456")
    yield
