"""Tests for user value objects and entity."""

import pytest

from sole_api.core.errors import ValidationAppError
from sole_api.domain.users import (
    Email,
    PasswordHash,
    User,
    Username,
    WalletAddress,
    validate_password,
)

WALLET = "0x" + "aB" * 20


class TestEmail:
    def test_normalizes_case_and_whitespace(self):
        assert Email.parse("  Runner@Example.COM ").value == "runner@example.com"

    @pytest.mark.parametrize(
        ("raw", "code"),
        [
            ("", "email_empty"),
            ("   ", "email_empty"),
            ("not-an-email", "email_invalid"),
            ("a@b", "email_invalid"),
            ("two words@example.com", "email_invalid"),
            ("a" * 250 + "@example.com", "email_too_long"),
        ],
    )
    def test_rejects_invalid(self, raw, code):
        with pytest.raises(ValidationAppError) as exc_info:
            Email.parse(raw)
        assert exc_info.value.code == code


class TestUsername:
    def test_trims(self):
        assert Username.parse("  sole_maker-1 ").value == "sole_maker-1"

    @pytest.mark.parametrize(
        ("raw", "code"),
        [
            ("", "username_empty"),
            ("ab", "username_too_short"),
            ("a" * 31, "username_too_long"),
            ("bad name", "username_invalid"),
            ("emoji!", "username_invalid"),
        ],
    )
    def test_rejects_invalid(self, raw, code):
        with pytest.raises(ValidationAppError) as exc_info:
            Username.parse(raw)
        assert exc_info.value.code == code


class TestWalletAddress:
    def test_lowercases(self):
        assert WalletAddress.parse(WALLET).value == WALLET.lower()

    @pytest.mark.parametrize("raw", ["0x123", "ab" * 21, "0x" + "g" * 40])
    def test_rejects_invalid(self, raw):
        with pytest.raises(ValidationAppError) as exc_info:
            WalletAddress.parse(raw)
        assert exc_info.value.code == "wallet_invalid"

    def test_rejects_empty(self):
        with pytest.raises(ValidationAppError) as exc_info:
            WalletAddress.parse("")
        assert exc_info.value.code == "wallet_empty"


class TestPasswordHash:
    def test_never_renders_hash(self):
        hashed = PasswordHash("$2b$10$abcdefghijklmnopqrstuv")

        assert "$2b$" not in str(hashed)
        assert "$2b$" not in repr(hashed)

    def test_rejects_empty(self):
        with pytest.raises(ValidationAppError):
            PasswordHash("")


def test_validate_password_enforces_minimum_length():
    assert validate_password("12345678") == "12345678"
    with pytest.raises(ValidationAppError) as exc_info:
        validate_password("short")
    assert exc_info.value.code == "password_too_short"


def test_user_link_wallet_returns_updated_copy():
    user = User.create(
        email=Email.parse("runner@example.com"),
        username=Username.parse("runner"),
        password_hash=PasswordHash("hash"),
    )

    linked = user.link_wallet(WalletAddress.parse(WALLET))

    assert user.wallet_address is None
    assert linked.wallet_address.value == WALLET.lower()
    assert linked.id == user.id


def test_validate_password_rejects_more_than_72_bytes():
    assert validate_password("a" * 72) == "a" * 72
    with pytest.raises(ValidationAppError) as exc_info:
        validate_password("a" * 73)
    assert exc_info.value.code == "password_too_long"


def test_validate_password_counts_utf8_bytes():
    # 36 two-byte characters fit, 37 don't
    assert validate_password("é" * 36) == "é" * 36
    with pytest.raises(ValidationAppError):
        validate_password("é" * 37)
