from datetime import datetime
from typing import Annotated, Callable

from fastapi import APIRouter, Depends, HTTPException, status

from passwordless.application.issue_credential import (
    issue_link_token,
    issue_numeric_code,
)
from passwordless.application.verify_credential import (
    verify_link_token,
    verify_numeric_code,
)
from passwordless.domain.errors import (
    DeliveryFailure,
    InvalidOrExpired,
    StoreFailure,
    ValidationError,
)
from passwordless.domain.ports.code_delivery import CodeDeliveryPort
from passwordless.domain.ports.credential_store import CredentialStorePort
from passwordless.presentation.dependencies import (
    get_clock,
    get_code_delivery,
    get_credential_store,
    get_credential_ttl_seconds,
    get_hash_secret,
    get_verify_secret,
    require_api_key,
)
from passwordless.schemas.requests import (
    IssueCredentialIn,
    UseVerificationTokenIn,
    VerifyCodeIn,
)
from passwordless.schemas.responses import IssuedCodeOut, IssuedTokenOut, VerifiedOut

router = APIRouter(
    prefix="/auth",
    tags=["Verification"],
    dependencies=[Depends(require_api_key)],
)

Store = Annotated[CredentialStorePort, Depends(get_credential_store)]
Clock = Annotated[Callable[[], datetime], Depends(get_clock)]


def _internal_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="an unexpected error occurred",
    )


@router.post("/verification-token", response_model=IssuedTokenOut)
async def post_create_verification_token(
    body: IssueCredentialIn,
    store: Store,
    clock: Clock,
    hash_secret: Annotated[Callable[[str], str], Depends(get_hash_secret)],
    ttl_seconds: Annotated[int, Depends(get_credential_ttl_seconds)],
):
    try:
        issued = await issue_link_token(
            store=store,
            identifier=body.identifier,
            hash_secret=hash_secret,
            clock=clock,
            ttl_seconds=ttl_seconds,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreFailure:
        raise _internal_error()
    return IssuedTokenOut(token=issued.token, expires_at=issued.expires_at)


@router.post("/verification-token/use", response_model=VerifiedOut)
async def post_use_verification_token(
    body: UseVerificationTokenIn,
    store: Store,
    clock: Clock,
    verify_secret: Annotated[Callable[[str, str], bool], Depends(get_verify_secret)],
):
    try:
        verified = await verify_link_token(
            store=store,
            identifier=body.identifier,
            token=body.token,
            verify_secret=verify_secret,
            clock=clock,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidOrExpired:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Verification token not found",
        )
    except StoreFailure:
        raise _internal_error()
    return VerifiedOut(identifier=verified.identifier)


@router.post("/verification-code", response_model=IssuedCodeOut)
async def post_create_verification_code(
    body: IssueCredentialIn,
    store: Store,
    clock: Clock,
    delivery: Annotated[CodeDeliveryPort, Depends(get_code_delivery)],
    hash_secret: Annotated[Callable[[str], str], Depends(get_hash_secret)],
    ttl_seconds: Annotated[int, Depends(get_credential_ttl_seconds)],
):
    try:
        issued = await issue_numeric_code(
            store=store,
            delivery=delivery,
            identifier=body.identifier,
            hash_secret=hash_secret,
            clock=clock,
            ttl_seconds=ttl_seconds,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (StoreFailure, DeliveryFailure):
        raise _internal_error()
    return IssuedCodeOut(message=issued.message, expires_at=issued.expires_at)


@router.post("/verification-code/verify", response_model=VerifiedOut)
async def post_verify_code(
    body: VerifyCodeIn,
    store: Store,
    clock: Clock,
    verify_secret: Annotated[Callable[[str, str], bool], Depends(get_verify_secret)],
):
    try:
        verified = await verify_numeric_code(
            store=store,
            identifier=body.identifier,
            code=body.code,
            verify_secret=verify_secret,
            clock=clock,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidOrExpired:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Verification code not found",
        )
    except StoreFailure:
        raise _internal_error()
    return VerifiedOut(identifier=verified.identifier)
