import pytest
from fastapi import FastAPI

from passwordless import main
from passwordless.infrastructure.email.http_smtp_adapter import HttpSmtpCodeDelivery
from passwordless.settings import Settings


@pytest.mark.asyncio
async def test_lifespan_delivery_owns_and_closes_its_client(monkeypatch):
    # Redis clients connect lazily, so no server is needed here.
    monkeypatch.setattr(
        main,
        "settings",
        Settings(credential_store="redis", credential_ttl_seconds=30),
    )
    app = FastAPI()

    async with main.lifespan(app):
        delivery = app.state.code_delivery
        assert isinstance(delivery, HttpSmtpCodeDelivery)
        assert delivery._owns_client  # type: ignore[attr-defined]
        assert "expire in 1 minute." in delivery._body("000000")
        assert delivery._client.is_closed is False  # type: ignore[attr-defined]

    assert delivery._client.is_closed  # type: ignore[attr-defined]
