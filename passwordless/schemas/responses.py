from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IssuedTokenOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., description="Plain token to embed in the magic link")
    expires_at: datetime = Field(..., alias="expiresAt")


class IssuedCodeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    expires_at: datetime = Field(..., alias="expiresAt")


class VerifiedOut(BaseModel):
    identifier: str
