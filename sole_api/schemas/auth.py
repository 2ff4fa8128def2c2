"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from sole_api.domain.users import User
from sole_api.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    email: str = Field(..., max_length=255, description="Account e-mail address.")
    username: str = Field(
        ...,
        description="3-30 characters: letters, numbers, hyphens and underscores.",
    )
    password: str = Field(..., description="At least 8 characters.")
    wallet_address: str | None = Field(
        default=None,
        description="Optional Ethereum address (0x followed by 40 hex characters).",
    )


class LoginRequest(CamelModel):
    email: str
    password: str = Field(..., min_length=1)


class LinkWalletRequest(CamelModel):
    wallet_address: str = Field(..., description="Ethereum address to bind to the account.")


class UserResponse(CamelModel):
    id: str
    email: str
    username: str
    wallet_address: str | None = None
    created_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email.value,
            username=user.username.value,
            wallet_address=user.wallet_address.value if user.wallet_address else None,
            created_at=user.created_at,
        )


class LoginData(CamelModel):
    token: str
    user: UserResponse


class UserEnvelope(CamelModel):
    data: UserResponse
    message: str


class LoginEnvelope(CamelModel):
    data: LoginData
    message: str
