"""User-management value objects and entity.

Value objects validate on construction and raise ``ValidationAppError`` so
invalid state never reaches services or persistence.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from sole_api.core.errors import ValidationAppError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
WALLET_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

EMAIL_MAX_LENGTH = 255
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 8
# bcrypt only accepts up to 72 bytes of input
PASSWORD_MAX_BYTES = 72


@dataclass(frozen=True)
class Email:
    """Normalised (trimmed, lower-case) e-mail address."""

    value: str

    @classmethod
    def parse(cls, raw: str | None) -> "Email":
        if not raw or not raw.strip():
            raise ValidationAppError(code="email_empty", message="Email cannot be empty")

        trimmed = raw.strip()
        if not EMAIL_PATTERN.match(trimmed):
            raise ValidationAppError(
                code="email_invalid",
                message=f"Invalid email format: {trimmed}",
                details={"field": "email"},
            )

        normalized = trimmed.lower()
        if len(normalized) > EMAIL_MAX_LENGTH:
            raise ValidationAppError(
                code="email_too_long",
                message=f"Email is too long (max {EMAIL_MAX_LENGTH} characters)",
                details={"field": "email", "max_value": EMAIL_MAX_LENGTH},
            )
        return cls(normalized)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Username:
    value: str

    @classmethod
    def parse(cls, raw: str | None) -> "Username":
        if not raw or not raw.strip():
            raise ValidationAppError(code="username_empty", message="Username cannot be empty")

        trimmed = raw.strip()
        if len(trimmed) < USERNAME_MIN_LENGTH:
            raise ValidationAppError(
                code="username_too_short",
                message=f"Username must be at least {USERNAME_MIN_LENGTH} characters",
                details={"field": "username", "min_value": USERNAME_MIN_LENGTH},
            )
        if len(trimmed) > USERNAME_MAX_LENGTH:
            raise ValidationAppError(
                code="username_too_long",
                message=f"Username must be at most {USERNAME_MAX_LENGTH} characters",
                details={"field": "username", "max_value": USERNAME_MAX_LENGTH},
            )
        if not USERNAME_PATTERN.match(trimmed):
            raise ValidationAppError(
                code="username_invalid",
                message="Username can only contain letters, numbers, hyphens and underscores",
                details={"field": "username"},
            )
        return cls(trimmed)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WalletAddress:
    """Ethereum account address, stored lower-case."""

    value: str

    @classmethod
    def parse(cls, raw: str | None) -> "WalletAddress":
        if not raw or not raw.strip():
            raise ValidationAppError(
                code="wallet_empty", message="Wallet address cannot be empty"
            )
        trimmed = raw.strip()
        if not WALLET_PATTERN.match(trimmed):
            raise ValidationAppError(
                code="wallet_invalid",
                message="Invalid Ethereum wallet address format",
                details={"field": "walletAddress"},
            )
        return cls(trimmed.lower())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PasswordHash:
    """Opaque bcrypt hash. Rendering never exposes the hash itself."""

    value: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValidationAppError(
                code="password_hash_empty", message="Password hash cannot be empty"
            )

    def __str__(self) -> str:
        return "[PasswordHash]"


def validate_password(password: str | None) -> str:
    """Enforce the password length policy and return the password unchanged."""
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationAppError(
            code="password_too_short",
            message=f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
            details={"field": "password", "min_value": PASSWORD_MIN_LENGTH},
        )
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationAppError(
            code="password_too_long",
            message=f"Password must be at most {PASSWORD_MAX_BYTES} bytes",
            details={"field": "password", "max_value": PASSWORD_MAX_BYTES},
        )
    return password


@dataclass(frozen=True)
class User:
    id: str
    email: Email
    username: Username
    password_hash: PasswordHash
    wallet_address: WalletAddress | None
    created_at: datetime

    @classmethod
    def create(
        cls,
        email: Email,
        username: Username,
        password_hash: PasswordHash,
        wallet_address: WalletAddress | None = None,
    ) -> "User":
        return cls(
            id=str(uuid.uuid4()),
            email=email,
            username=username,
            password_hash=password_hash,
            wallet_address=wallet_address,
            created_at=datetime.now(timezone.utc),
        )

    def link_wallet(self, wallet_address: WalletAddress) -> "User":
        """Return a copy of this user bound to ``wallet_address``."""
        return replace(self, wallet_address=wallet_address)
