"""User registration, login and wallet linking.

The service works on domain value objects and raises ``AppError`` subclasses;
HTTP concerns stay in the route layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sole_api.adapters.repositories.base import AbstractUserRepository
from sole_api.core.errors import AuthenticationAppError, ConflictAppError, NotFoundAppError
from sole_api.core.logging import hash_identifier
from sole_api.core.security import create_access_token, hash_password, verify_password
from sole_api.domain.users import (
    Email,
    PasswordHash,
    User,
    Username,
    WalletAddress,
    validate_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


class AuthService:
    def __init__(self, users: AbstractUserRepository) -> None:
        self._users = users

    def register(
        self,
        email: str,
        username: str,
        password: str,
        wallet_address: str | None = None,
    ) -> User:
        """Create a new account.

        Raises:
            ValidationAppError: If any field violates its format rules.
            ConflictAppError: If the e-mail or username is already in use.
        """
        email_vo = Email.parse(email)
        username_vo = Username.parse(username)
        validate_password(password)
        wallet_vo = WalletAddress.parse(wallet_address) if wallet_address else None

        if self._users.email_exists(email_vo):
            raise ConflictAppError(code="email_taken", message="Email already registered")
        if self._users.username_exists(username_vo):
            raise ConflictAppError(code="username_taken", message="Username already taken")

        user = User.create(
            email=email_vo,
            username=username_vo,
            password_hash=PasswordHash(hash_password(password)),
            wallet_address=wallet_vo,
        )
        self._users.save(user)

        logger.info(
            "auth.registered",
            extra={"user_id": user.id, "email_hash": hash_identifier(email_vo.value)},
        )
        return user

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue an access token.

        Unknown e-mails and wrong passwords produce the same error so callers
        cannot probe which accounts exist.
        """
        email_vo = Email.parse(email)
        user = self._users.find_by_email(email_vo)

        if user is None or not verify_password(password, user.password_hash.value):
            logger.warning(
                "auth.login_failed",
                extra={"email_hash": hash_identifier(email_vo.value), "user_found": user is not None},
            )
            raise AuthenticationAppError(
                code="invalid_credentials", message=INVALID_CREDENTIALS_MESSAGE
            )

        token = create_access_token(user.id, user.email.value)
        logger.info("auth.login_succeeded", extra={"user_id": user.id})
        return LoginResult(token=token, user=user)

    def get_user(self, user_id: str) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundAppError(code="user_not_found", message="User not found")
        return user

    def link_wallet(self, user_id: str, wallet_address: str) -> User:
        updated = self.get_user(user_id).link_wallet(WalletAddress.parse(wallet_address))
        self._users.save(updated)
        logger.info("auth.wallet_linked", extra={"user_id": user_id})
        return updated
