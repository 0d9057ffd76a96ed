"""Auth schemas"""
from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    """Schema for registering a new identity"""

    id: str = Field(..., min_length=1, max_length=255, description="Email address or E.164 phone number")
    password: str = Field(..., min_length=6, description="Password, at least 6 characters")


class SigninRequest(BaseModel):
    """Schema for signing in"""

    id: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class RefreshRequest(BaseModel):
    """Schema for exchanging a refresh token"""

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)

    class Config:
        populate_by_name = True


class TokenPairData(BaseModel):
    """Issued token pair - the refresh token is only ever shown here"""

    token: str = Field(..., description="Access token (JWT)")
    refresh_token: str = Field(..., alias="refreshToken", description="Refresh token - save securely!")

    class Config:
        populate_by_name = True


class AccessTokenData(BaseModel):
    token: str


class UserInfo(BaseModel):
    id: str
