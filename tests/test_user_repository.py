"""Tests for the SQLAlchemy user repository against in-memory SQLite."""

from __future__ import annotations

from typing import Iterator

import pytest
from sqlalchemy.orm import Session

from sole_api.adapters.repositories.sqlalchemy_store import SqlAlchemyUserRepository
from sole_api.core.config import DatabaseSettings
from sole_api.core.database import Database
from sole_api.core.errors import ConflictAppError
from sole_api.domain.users import Email, PasswordHash, User, Username


def _user(email: str, username: str) -> User:
    return User.create(
        email=Email.parse(email),
        username=Username.parse(username),
        password_hash=PasswordHash("hash"),
    )


@pytest.fixture
def session() -> Iterator[Session]:
    database = Database(DatabaseSettings(url="sqlite://"))
    database.create_all()
    session = database.session_factory()
    try:
        yield session
    finally:
        session.close()
        database.dispose()


def test_save_and_find_by_email(session: Session):
    repo = SqlAlchemyUserRepository(session)
    user = _user("runner@example.com", "runner")

    repo.save(user)

    found = repo.find_by_email(Email.parse("runner@example.com"))
    assert found.id == user.id
    assert found.created_at.tzinfo is not None


@pytest.mark.parametrize(
    ("email", "username"),
    [
        ("runner@example.com", "someone-else"),
        ("other@example.com", "runner"),
    ],
)
def test_duplicate_insert_that_slipped_past_checks_is_conflict(session: Session, email: str, username: str):
    repo = SqlAlchemyUserRepository(session)
    first = _user("runner@example.com", "runner")
    repo.save(first)
    session.commit()

    with pytest.raises(ConflictAppError) as exc_info:
        repo.save(_user(email, username))

    assert exc_info.value.code == "account_exists"
    assert repo.find_by_id(first.id) is not None
