from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from sole_api.api.dependencies import get_auth_service
from sole_api.core.auth import get_current_user_id
from sole_api.schemas.auth import (
    LinkWalletRequest,
    LoginData,
    LoginEnvelope,
    LoginRequest,
    RegisterRequest,
    UserEnvelope,
    UserResponse,
)
from sole_api.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CurrentUserId = Annotated[str, Depends(get_current_user_id)]


@router.post(
    "/register",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def register(body: RegisterRequest, service: AuthServiceDep) -> UserEnvelope:
    """Register a new user.

    Returns 409 when the e-mail or username is already in use and 400 when a
    field fails validation.
    """
    user = service.register(
        email=body.email,
        username=body.username,
        password=body.password,
        wallet_address=body.wallet_address,
    )
    return UserEnvelope(
        data=UserResponse.from_domain(user),
        message="User registered successfully",
    )


@router.post("/login", response_model=LoginEnvelope)
def login(body: LoginRequest, service: AuthServiceDep) -> LoginEnvelope:
    """Exchange credentials for a bearer token (401 on bad credentials)."""
    result = service.login(email=body.email, password=body.password)
    return LoginEnvelope(
        data=LoginData(token=result.token, user=UserResponse.from_domain(result.user)),
        message="Login successful",
    )


@router.get("/me", response_model=UserResponse)
def current_user(user_id: CurrentUserId, service: AuthServiceDep) -> UserResponse:
    return UserResponse.from_domain(service.get_user(user_id))


@router.put("/me/wallet", response_model=UserEnvelope)
def link_wallet(
    body: LinkWalletRequest,
    user_id: CurrentUserId,
    service: AuthServiceDep,
) -> UserEnvelope:
    user = service.link_wallet(user_id, body.wallet_address)
    return UserEnvelope(data=UserResponse.from_domain(user), message="Wallet linked successfully")
