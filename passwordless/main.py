from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from passwordless.infrastructure.db.pool import close_pool, open_pool
from passwordless.infrastructure.email.http_smtp_adapter import HttpSmtpCodeDelivery
from passwordless.infrastructure.redis_cache.pool import close_redis, get_redis
from passwordless.logging import setup_logging
from passwordless.presentation.api import api
from passwordless.settings import get_settings

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    if settings.credential_store == "redis":
        get_redis()
    else:
        await open_pool()

    # ONE delivery adapter; it owns its httpx client
    code_delivery = HttpSmtpCodeDelivery(
        base_url=settings.smtp_base_url,
        ttl_seconds=settings.credential_ttl_seconds,
    )
    app.state.code_delivery = code_delivery  # expose to dependencies

    try:
        yield
    finally:
        # shutdown
        await code_delivery.aclose()
        if settings.credential_store == "redis":
            await close_redis()
        else:
            await close_pool()


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Malformed bodies are client errors like any other validation failure.
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "validation failed", "errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # drop "input"/"ctx": the rejected value may be a secret
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


def create_app() -> FastAPI:
    setup_logging(settings.log_level)
    app = FastAPI(title="Passwordless Verification API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(api)
    return app


app = create_app()
