from pydantic import BaseModel, EmailStr, Field


class IssueCredentialIn(BaseModel):
    identifier: EmailStr = Field(
        ..., description="Email address the credential is issued for", max_length=255
    )


class UseVerificationTokenIn(BaseModel):
    identifier: EmailStr = Field(..., max_length=255)
    token: str = Field(..., description="Plain magic-link token", min_length=1)


class VerifyCodeIn(BaseModel):
    identifier: EmailStr = Field(..., max_length=255)
    code: str = Field(..., description="6-digit code", pattern=r"^[0-9]{6}$")
